# domain/formatting.py
"""pt-PT display helpers (currency, dates, durations, file-safe names)."""

import datetime
import re
from typing import Optional

MONTHS_PT = ["janeiro", "fevereiro", "março", "abril", "maio", "junho", "julho",
             "agosto", "setembro", "outubro", "novembro", "dezembro"]

_UNITS_PT = {
    "second": ("segundo", "segundos"),
    "minute": ("minuto", "minutos"),
    "hour": ("hora", "horas"),
    "day": ("dia", "dias"),
    "month": ("mês", "meses"),
    "year": ("ano", "anos"),
}

MINUTES_IN_DAY = 1440
MINUTES_IN_MONTH = 43200
MINUTES_IN_YEAR = 525600


def format_amount(value: float) -> str:
    """1234.5 -> '1 234,50' (pt-PT grouping, two decimals)."""
    text = f"{value:,.2f}"
    return text.replace(",", " ").replace(".", ",")


def format_eur(value: float) -> str:
    return f"{format_amount(value)} €"


def parse_iso(value: Optional[str]) -> Optional[datetime.datetime]:
    """Parse an ISO-8601 timestamp or date. Returns None when empty or malformed."""
    if not value:
        return None
    try:
        parsed = datetime.datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


def format_date_long(value: Optional[str]) -> str:
    """'2024-03-05' -> '05 MARÇO 2024'."""
    parsed = parse_iso(value)
    if parsed is None:
        return ""
    return f"{parsed.day:02d} {MONTHS_PT[parsed.month - 1]} {parsed.year}".upper()


def format_date_short(value: Optional[str]) -> str:
    """'2024-03-05' -> '05 MAR 2024' (dashboard column)."""
    parsed = parse_iso(value)
    if parsed is None:
        return ""
    return f"{parsed.day:02d} {MONTHS_PT[parsed.month - 1][:3]} {parsed.year}".upper()


def format_timestamp(value: Optional[str]) -> str:
    """'2024-03-05T14:30:00Z' -> '05/03 14:30' (local time)."""
    parsed = parse_iso(value)
    if parsed is None:
        return ""
    return parsed.astimezone().strftime("%d/%m %H:%M")


def format_duration(delta: datetime.timedelta) -> str:
    """Strict single-unit duration in Portuguese: '45 segundos', '3 horas', '1 mês'."""
    seconds = abs(delta.total_seconds())
    minutes = seconds / 60
    if seconds < 60:
        unit, amount = "second", seconds
    elif minutes < 60:
        unit, amount = "minute", minutes
    elif minutes < MINUTES_IN_DAY:
        unit, amount = "hour", minutes / 60
    elif minutes < MINUTES_IN_MONTH:
        unit, amount = "day", minutes / MINUTES_IN_DAY
    elif minutes < MINUTES_IN_YEAR:
        unit, amount = "month", minutes / MINUTES_IN_MONTH
    else:
        unit, amount = "year", minutes / MINUTES_IN_YEAR
    count = int(amount + 0.5)
    singular, plural = _UNITS_PT[unit]
    return f"{count} {singular if count == 1 else plural}"


def safe_client_name(client: Optional[str], default: str = "CLIENTE") -> str:
    """Uppercased client name without punctuation, whitespace runs as '_'."""
    name = re.sub(r"[^\w\s]", "", client or default, flags=re.ASCII)
    name = re.sub(r"\s+", "_", name).upper()
    return name or default
