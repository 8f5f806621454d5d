# domain/rates.py
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .errors import UnknownHeadcountError


def _freeze(rates: Mapping) -> Mapping[int, float]:
    return MappingProxyType({int(k): float(v) for k, v in rates.items()})


@dataclass(frozen=True)
class RateSchedule:
    """Labor rates per headcount (hourly and daily), immutable once built."""
    hourly: Mapping[int, float] = field(default_factory=dict)
    daily: Mapping[int, float] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "hourly", _freeze(self.hourly))
        object.__setattr__(self, "daily", _freeze(self.daily))

    def hourly_rate(self, people: int) -> float:
        return self._lookup(self.hourly, people)

    def daily_rate(self, people: int) -> float:
        return self._lookup(self.daily, people)

    @staticmethod
    def _lookup(table: Mapping[int, float], people: int) -> float:
        try:
            return table[int(people)]
        except (KeyError, TypeError, ValueError):
            raise UnknownHeadcountError(f"Sem tarifa para {people} pessoa(s)")

    @classmethod
    def from_config(cls, data: Optional[Dict[str, Any]]) -> "RateSchedule":
        """Build a schedule from the `labor_rates` config section (JSON keys are strings)."""
        if not data:
            return DEFAULT_RATES
        return cls(
            hourly=data.get("hourly") or DEFAULT_RATES.hourly,
            daily=data.get("daily") or DEFAULT_RATES.daily,
        )

    def to_config(self) -> Dict[str, Dict[str, float]]:
        return {
            "hourly": {str(k): v for k, v in self.hourly.items()},
            "daily": {str(k): v for k, v in self.daily.items()},
        }


DEFAULT_RATES = RateSchedule(
    hourly={1: 30, 2: 50, 3: 75},
    daily={1: 200, 2: 350, 3: 425},
)
