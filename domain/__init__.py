"""Domain models package.

Exports core domain classes for easier imports:
- `Quote`, `QuoteStatus`, `MaterialLine`, `RateSchedule`, `Calculator`, `PricingBreakdown`, `ApprovalWorkflow`, `Trigger`
"""

from .material import MaterialLine, MARKUP_FACTOR, to_amount
from .quote import Quote, QuoteStatus
from .rates import RateSchedule, DEFAULT_RATES
from .calculator import Calculator, PricingBreakdown
from .workflow import ApprovalWorkflow, Trigger, available_triggers

__all__ = ["MaterialLine", "MARKUP_FACTOR", "to_amount", "Quote", "QuoteStatus", "RateSchedule",
           "DEFAULT_RATES", "Calculator", "PricingBreakdown", "ApprovalWorkflow", "Trigger",
           "available_triggers"]
