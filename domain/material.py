# domain/material.py
import math
import uuid
from dataclasses import dataclass, field
from typing import Any

MARKUP_FACTOR = 1.5  # margem de 50% sobre o custo base
INITIAL_ROWS = 5


def to_amount(value: Any) -> float:
    """Coerce a form value to a float. Anything non-numeric counts as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        result = float(str(value).strip().replace(",", ".")) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return 0.0
    return result if math.isfinite(result) else 0.0


def new_line_id() -> str:
    return str(uuid.uuid4())


@dataclass
class MaterialLine:
    id: str = field(default_factory=new_line_id)
    supplier: str = ""
    description: str = ""
    value: float = 0.0  # custo base
    value_with_margin: float = 0.0  # custo c/ margem

    def set_value(self, raw: Any):
        """Edit the base cost: the marked-up cost is re-derived from it."""
        self.value = to_amount(raw)
        self.value_with_margin = round(self.value * MARKUP_FACTOR, 2)

    def set_value_with_margin(self, raw: Any):
        """Override the marked-up cost; the base cost is left alone."""
        self.value_with_margin = to_amount(raw)

    def set_supplier(self, text: str):
        self.supplier = (text or "").upper()

    def set_description(self, text: str):
        self.description = (text or "").upper()

    def is_blank(self) -> bool:
        """True when the line carries neither a description nor a cost."""
        return not self.description.strip() and to_amount(self.value) <= 0
