# domain/reports.py
"""Read-only views over the quote list: dashboard, workflow report, material report."""

import datetime
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .calculator import Calculator
from .formatting import parse_iso
from .material import to_amount
from .quote import Quote, QuoteStatus
from .rates import DEFAULT_RATES, RateSchedule

_EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)

STEP_LABELS = ["Criação", "Validação", "Aprovação", "Enviado"]
STEP_FIELDS = ["created_at", "sent_for_approval_at", "approved_at", "sent_to_sales_at"]

_ACTIVE_INDEX = {
    QuoteStatus.PENDING_APPROVAL: 1,
    QuoteStatus.APPROVED: 2,
    QuoteStatus.SENT: 3,
}


def _sort_key(value: Optional[str]) -> datetime.datetime:
    return parse_iso(value) or _EPOCH


def _matches(term: str, *fields: Optional[str]) -> bool:
    term = (term or "").lower()
    return any(term in (f or "").lower() for f in fields)


# =========================
# Dashboard
# =========================

def quote_total(quote: Quote, rates: RateSchedule = DEFAULT_RATES) -> float:
    return Calculator.calculate(quote, rates).grand_total


def client_suggestions(quotes: Iterable[Quote]) -> List[str]:
    return sorted({q.client for q in quotes if q.client})


def supplier_suggestions(quotes: Iterable[Quote]) -> List[str]:
    return sorted({m.supplier for q in quotes for m in q.materials if m.supplier})


# =========================
# Workflow report
# =========================

@dataclass
class WorkflowStep:
    label: str
    timestamp: Optional[str]
    completed: bool
    elapsed: Optional[datetime.timedelta]  # depuis l'étape précédente


def active_step_index(quote: Quote) -> int:
    return _ACTIVE_INDEX.get(quote.status, 0)


def elapsed_between(start: Optional[str], end: Optional[str]) -> Optional[datetime.timedelta]:
    start_dt, end_dt = parse_iso(start), parse_iso(end)
    if start_dt is None or end_dt is None:
        return None
    return end_dt - start_dt


def workflow_steps(quote: Quote) -> List[WorkflowStep]:
    active = active_step_index(quote)
    stamps = [getattr(quote, f) for f in STEP_FIELDS]
    steps = []
    for idx, label in enumerate(STEP_LABELS):
        elapsed = elapsed_between(stamps[idx - 1], stamps[idx]) if idx > 0 else None
        steps.append(WorkflowStep(label=label, timestamp=stamps[idx], completed=idx <= active, elapsed=elapsed))
    return steps


def lead_time(quote: Quote) -> Optional[datetime.timedelta]:
    """Creation to hand-over to sales; None while the quote is still in progress."""
    if not quote.sent_to_sales_at:
        return None
    return elapsed_between(quote.created_at, quote.sent_to_sales_at)


def filter_quotes(quotes: Iterable[Quote], term: str = "") -> List[Quote]:
    found = [q for q in quotes if _matches(term, q.client, q.commercial, q.quote_number)]
    return sorted(found, key=lambda q: _sort_key(q.created_at), reverse=True)


def count_open(quotes: Iterable[Quote]) -> int:
    return sum(1 for q in quotes if q.status != QuoteStatus.SENT)


def count_completed(quotes: Iterable[Quote]) -> int:
    return sum(1 for q in quotes if q.status == QuoteStatus.SENT)


# =========================
# Material report
# =========================

@dataclass
class MaterialRow:
    quote_id: str
    quote_number: str
    quote_date: str
    client: str
    commercial: str
    supplier: str
    description: str
    value: float
    value_with_margin: float


@dataclass
class MaterialTotals:
    base: float
    with_margin: float


def material_rows(quotes: Iterable[Quote]) -> List[MaterialRow]:
    rows = [
        MaterialRow(
            quote_id=q.id,
            quote_number=q.quote_number,
            quote_date=q.date,
            client=q.client,
            commercial=q.commercial,
            supplier=m.supplier,
            description=m.description,
            value=to_amount(m.value),
            value_with_margin=to_amount(m.value_with_margin),
        )
        for q in quotes
        for m in q.materials
    ]
    # sorted() est stable : l'ordre des lignes d'un même devis est conservé
    return sorted(rows, key=lambda r: _sort_key(r.quote_date), reverse=True)


def filter_material_rows(rows: Iterable[MaterialRow], term: str = "") -> List[MaterialRow]:
    return [r for r in rows if _matches(term, r.supplier, r.client, r.description, r.quote_number)]


def material_totals(rows: Iterable[MaterialRow]) -> MaterialTotals:
    rows = list(rows)
    return MaterialTotals(
        base=sum(r.value for r in rows),
        with_margin=sum(r.value_with_margin for r in rows),
    )
