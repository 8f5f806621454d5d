# tests/test_reports.py
"""
Tests des relatórios (prazos, materiais, tableau de bord) et du formatage pt-PT.
"""

import datetime

import pytest

from domain.formatting import (format_amount, format_date_long, format_date_short, format_duration,
                               format_eur, parse_iso, safe_client_name)
from domain.material import MaterialLine
from domain.quote import Quote, QuoteStatus
from domain.reports import (active_step_index, client_suggestions, count_completed, count_open,
                            filter_material_rows, filter_quotes, lead_time, material_rows,
                            material_totals, quote_total, supplier_suggestions, workflow_steps)


def line(supplier, description, value):
    m = MaterialLine(supplier=supplier, description=description)
    m.set_value(value)
    return m


@pytest.fixture
def quotes():
    sent = Quote(
        id="q-sent", client="ACME", commercial="ANA P.", quote_number="2024/045", date="2024-03-01",
        materials=[line("VINIL LDA", "LONA", 100), line("METAL SA", "ESTRUTURA", 50)],
        status=QuoteStatus.SENT,
        created_at="2024-03-01T09:00:00.000Z",
        sent_for_approval_at="2024-03-01T11:00:00.000Z",
        approved_at="2024-03-02T11:00:00.000Z",
        sent_to_sales_at="2024-03-04T11:00:00.000Z",
    )
    draft = Quote(
        id="q-draft", client="BETA", commercial="BRUNO C.", date="2024-03-10",
        materials=[line("VINIL LDA", "AUTOCOLANTE", 20), MaterialLine()],
        created_at="2024-03-10T09:00:00.000Z",
    )
    return [sent, draft]


class TestWorkflowReport:

    def test_steps_of_sent_quote(self, quotes):
        steps = workflow_steps(quotes[0])
        assert [s.label for s in steps] == ["Criação", "Validação", "Aprovação", "Enviado"]
        assert all(s.completed for s in steps)
        assert steps[0].elapsed is None
        assert steps[1].elapsed == datetime.timedelta(hours=2)
        assert steps[2].elapsed == datetime.timedelta(days=1)
        assert steps[3].elapsed == datetime.timedelta(days=2)

    def test_steps_of_draft(self, quotes):
        steps = workflow_steps(quotes[1])
        assert active_step_index(quotes[1]) == 0
        assert [s.completed for s in steps] == [True, False, False, False]
        assert steps[1].timestamp is None
        assert steps[1].elapsed is None

    def test_lead_time(self, quotes):
        assert lead_time(quotes[0]) == datetime.timedelta(days=3, hours=2)
        assert lead_time(quotes[1]) is None

    def test_filter_sorted_by_creation(self, quotes):
        assert [q.id for q in filter_quotes(quotes)] == ["q-draft", "q-sent"]
        assert [q.id for q in filter_quotes(quotes, "acme")] == ["q-sent"]
        assert [q.id for q in filter_quotes(quotes, "bruno")] == ["q-draft"]
        assert [q.id for q in filter_quotes(quotes, "2024/045")] == ["q-sent"]
        assert filter_quotes(quotes, "zzz") == []

    def test_counts(self, quotes):
        assert count_open(quotes) == 1
        assert count_completed(quotes) == 1


class TestMaterialReport:

    def test_rows_flattened_newest_first(self, quotes):
        rows = material_rows(quotes)
        assert [r.quote_id for r in rows] == ["q-draft", "q-draft", "q-sent", "q-sent"]
        # ordre des lignes conservé dans un même orçamento
        assert [r.description for r in rows if r.quote_id == "q-sent"] == ["LONA", "ESTRUTURA"]
        assert rows[2].client == "ACME"
        assert rows[2].quote_number == "2024/045"

    def test_filter_and_totals(self, quotes):
        rows = filter_material_rows(material_rows(quotes), "vinil")
        assert {r.description for r in rows} == {"LONA", "AUTOCOLANTE"}
        totals = material_totals(rows)
        assert totals.base == 120
        assert totals.with_margin == 180

    def test_empty_totals(self):
        totals = material_totals([])
        assert (totals.base, totals.with_margin) == (0, 0)


class TestDashboard:

    def test_suggestions(self, quotes):
        assert client_suggestions(quotes) == ["ACME", "BETA"]
        assert supplier_suggestions(quotes) == ["METAL SA", "VINIL LDA"]

    def test_quote_total(self, quotes):
        assert quote_total(quotes[0]) == 225


class TestFormatting:

    def test_amounts(self):
        assert format_amount(1234.5) == "1 234,50"
        assert format_amount(0) == "0,00"
        assert format_eur(-75) == "-75,00 €"

    def test_dates(self):
        assert format_date_long("2024-03-05") == "05 MARÇO 2024"
        assert format_date_short("2024-12-25T10:00:00.000Z") == "25 DEZ 2024"
        assert format_date_long("") == ""
        assert format_date_short("not a date") == ""

    def test_parse_iso(self):
        parsed = parse_iso("2024-03-05T14:30:00.000Z")
        assert parsed.tzinfo is not None
        assert parsed.hour == 14
        assert parse_iso(None) is None

    @pytest.mark.parametrize("delta, expected", [
        (datetime.timedelta(seconds=45), "45 segundos"),
        (datetime.timedelta(seconds=1), "1 segundo"),
        (datetime.timedelta(minutes=12), "12 minutos"),
        (datetime.timedelta(hours=1), "1 hora"),
        (datetime.timedelta(hours=3, minutes=10), "3 horas"),
        (datetime.timedelta(days=2), "2 dias"),
        (datetime.timedelta(days=31), "1 mês"),
        (datetime.timedelta(days=400), "1 ano"),
    ])
    def test_duration(self, delta, expected):
        assert format_duration(delta) == expected

    @pytest.mark.parametrize("client, expected", [
        ("Acme Lda.", "ACME_LDA"),
        ("Café  O'Neil & Filhos", "CAF_ONEIL_FILHOS"),
        ("", "CLIENTE"),
        (None, "CLIENTE"),
        ("!!!", "CLIENTE"),
    ])
    def test_safe_client_name(self, client, expected):
        assert safe_client_name(client) == expected
