# domain/calculator.py
from dataclasses import dataclass
from typing import Tuple

from .material import to_amount
from .quote import Quote
from .rates import DEFAULT_RATES, RateSchedule


@dataclass(frozen=True)
class PricingBreakdown:
    """Detailed breakdown of a quote's price, as shown in the form and the export."""
    material_base: float  # soma dos custos base
    material_marked: float  # soma dos custos c/ margem
    labor_total: float
    travel_total: float
    design_total: float
    calculated_subtotal: float
    grand_total: float
    is_manual_total: bool
    profit: float

    @property
    def direct_costs(self) -> float:
        """Cost of the quote before any margin."""
        return self.material_base + self.labor_total + self.travel_total + self.design_total


class Calculator:
    """Central engine for quote price calculations."""

    @staticmethod
    def calculate(quote: Quote, rates: RateSchedule = DEFAULT_RATES) -> PricingBreakdown:
        # 1. Materials
        material_base = sum(to_amount(m.value) for m in quote.materials)
        material_marked = sum(to_amount(m.value_with_margin) for m in quote.materials)

        # 2. Labor, days take precedence over hours
        labor_total = Calculator.labor_total(quote, rates)

        # 3. Logistics & design
        travel_total = to_amount(quote.distance_km) * to_amount(quote.km_rate)
        design_total = to_amount(quote.design_hours) * to_amount(quote.design_rate)

        calculated_subtotal = material_marked + labor_total + travel_total + design_total

        # 4. Manual override
        rounding = to_amount(quote.rounding)
        is_manual_total = rounding > 0
        grand_total = rounding if is_manual_total else calculated_subtotal

        if is_manual_total:
            profit = rounding - (material_base + labor_total + travel_total + design_total)
        else:
            profit = material_marked - material_base

        return PricingBreakdown(
            material_base=material_base,
            material_marked=material_marked,
            labor_total=labor_total,
            travel_total=travel_total,
            design_total=design_total,
            calculated_subtotal=calculated_subtotal,
            grand_total=grand_total,
            is_manual_total=is_manual_total,
            profit=profit,
        )

    @staticmethod
    def labor_total(quote: Quote, rates: RateSchedule = DEFAULT_RATES) -> float:
        days = to_amount(quote.labor_days)
        if days > 0:
            return rates.daily_rate(quote.labor_people) * days
        return rates.hourly_rate(quote.labor_people) * to_amount(quote.labor_hours)

    @staticmethod
    def labor_rate(quote: Quote, rates: RateSchedule = DEFAULT_RATES) -> Tuple[float, str]:
        """Applicable labor rate and its unit label ("DIA" or "H")."""
        if to_amount(quote.labor_days) > 0:
            return rates.daily_rate(quote.labor_people), "DIA"
        return rates.hourly_rate(quote.labor_people), "H"
