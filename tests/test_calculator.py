# tests/test_calculator.py
"""
Tests du moteur de prix (matériaux, main-d'oeuvre, logistique, design, valeur fixe).
"""

import math

import pytest

from domain.calculator import Calculator
from domain.errors import LastMaterialLineError, UnknownHeadcountError
from domain.material import MaterialLine, to_amount
from domain.quote import Quote
from domain.rates import DEFAULT_RATES, RateSchedule


@pytest.fixture
def quote():
    """One material line (base 100), 1 day for 1 person, 10 km @0.5, 2h design @35."""
    line = MaterialLine()
    line.set_value(100)
    return Quote(
        id="q-1",
        materials=[line],
        labor_days=1,
        labor_people=1,
        distance_km=10,
        km_rate=0.5,
        design_hours=2,
        design_rate=35,
    )


class TestCalculator:

    def test_calculated_total(self, quote):
        b = Calculator.calculate(quote)

        assert b.material_base == 100
        assert b.material_marked == 150
        assert b.labor_total == 200
        assert b.travel_total == 5
        assert b.design_total == 70
        assert b.calculated_subtotal == 425
        assert b.grand_total == 425
        assert b.is_manual_total is False
        assert b.profit == 50

    def test_manual_total_overrides(self, quote):
        quote.rounding = 500
        b = Calculator.calculate(quote)

        assert b.grand_total == 500
        assert b.is_manual_total is True
        assert b.calculated_subtotal == 425
        assert b.profit == 125
        assert b.direct_costs == 375

    def test_negative_margin_with_low_fixed_price(self, quote):
        quote.rounding = 300
        assert Calculator.calculate(quote).profit == -75

    def test_hours_when_no_days(self):
        q = Quote(id="q", materials=[MaterialLine()], labor_hours=3, labor_people=2)
        assert Calculator.labor_total(q) == 150
        assert Calculator.labor_rate(q) == (50, "H")

    def test_days_take_precedence_over_hours(self):
        q = Quote(id="q", materials=[MaterialLine()], labor_hours=8, labor_days=2, labor_people=3)
        assert Calculator.labor_total(q) == 850
        assert Calculator.labor_rate(q) == (425, "DIA")

    def test_unknown_headcount(self, quote):
        quote.labor_people = 4
        with pytest.raises(UnknownHeadcountError):
            Calculator.calculate(quote)

    def test_injected_rate_schedule(self, quote):
        rates = RateSchedule(hourly={1: 40}, daily={1: 300})
        b = Calculator.calculate(quote, rates)
        assert b.labor_total == 300
        assert b.calculated_subtotal == 525

    def test_empty_quote_is_zero(self):
        b = Calculator.calculate(Quote.new())
        assert b.grand_total == 0
        assert b.profit == 0

    def test_margin_override_on_line(self, quote):
        quote.materials[0].set_value_with_margin("180")
        b = Calculator.calculate(quote)
        assert b.material_base == 100
        assert b.material_marked == 180
        assert b.profit == 80

    @pytest.mark.parametrize("people, days, hours, rate, unit, total", [
        (1, 0, 2, 30, "H", 60),
        (2, 0, 2, 50, "H", 100),
        (3, 0, 2, 75, "H", 150),
        (1, 2, 0, 200, "DIA", 400),
        (2, 2, 0, 350, "DIA", 700),
        (3, 2, 0, 425, "DIA", 850),
    ])
    def test_each_headcount_uses_its_table_entry(self, people, days, hours, rate, unit, total):
        q = Quote(id="q", materials=[MaterialLine()], labor_people=people,
                  labor_days=days, labor_hours=hours)
        assert Calculator.labor_rate(q) == (rate, unit)
        assert Calculator.labor_total(q) == total
        assert Calculator.calculate(q).labor_total == total


class TestRateSchedule:

    def test_default_tables(self):
        assert [DEFAULT_RATES.hourly_rate(n) for n in (1, 2, 3)] == [30, 50, 75]
        assert [DEFAULT_RATES.daily_rate(n) for n in (1, 2, 3)] == [200, 350, 425]

    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            DEFAULT_RATES.hourly[1] = 99

    def test_from_config_string_keys(self):
        rates = RateSchedule.from_config({"hourly": {"1": 32, "2": 55}, "daily": {"1": 210}})
        assert rates.hourly_rate(2) == 55
        assert rates.daily_rate(1) == 210
        with pytest.raises(UnknownHeadcountError):
            rates.daily_rate(2)

    def test_from_empty_config(self):
        assert RateSchedule.from_config(None) is DEFAULT_RATES

    def test_config_round_trip(self):
        assert RateSchedule.from_config(DEFAULT_RATES.to_config()) == DEFAULT_RATES


class TestFormInputs:

    @pytest.mark.parametrize("raw, expected", [
        ("12,5", 12.5),
        (" 7 ", 7.0),
        ("abc", 0.0),
        ("", 0.0),
        (None, 0.0),
        (True, 0.0),
        (float("nan"), 0.0),
        ("inf", 0.0),
        (3, 3.0),
    ])
    def test_to_amount(self, raw, expected):
        assert to_amount(raw) == expected

    def test_set_value_derives_margin(self):
        line = MaterialLine()
        line.set_value("12,5")
        assert line.value == 12.5
        assert math.isclose(line.value_with_margin, 18.75)

    def test_invalid_value_counts_as_zero(self):
        line = MaterialLine()
        line.set_value("doze")
        assert line.value == 0
        assert line.value_with_margin == 0
        assert line.is_blank()

    def test_text_is_uppercased(self):
        q = Quote.new()
        q.set_client("câmara municipal")
        q.set_quote_number("2024/045a")
        q.materials[0].set_supplier("vinil lda")
        assert q.client == "CÂMARA MUNICIPAL"
        assert q.quote_number == "2024/045A"
        assert q.materials[0].supplier == "VINIL LDA"

    def test_hours_and_days_are_exclusive(self):
        q = Quote.new()
        q.set_labor_days(2)
        q.set_labor_hours("4")
        assert (q.labor_hours, q.labor_days) == (4, 0)
        q.set_labor_days("1,5")
        assert (q.labor_hours, q.labor_days) == (0, 1.5)

    def test_new_quote_defaults(self):
        q = Quote.new(now="2024-03-05T09:00:00.000Z")
        assert len(q.materials) == 5
        assert q.date == "2024-03-05"
        assert q.created_at == "2024-03-05T09:00:00.000Z"
        assert q.km_rate == 0.5
        assert q.design_rate == 35

    def test_cannot_remove_last_line(self):
        q = Quote(id="q", materials=[MaterialLine(), MaterialLine()])
        q.remove_material(q.materials[0].id)
        assert len(q.materials) == 1
        with pytest.raises(LastMaterialLineError):
            q.remove_material(q.materials[0].id)
