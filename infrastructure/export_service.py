import os
import textwrap
from typing import Callable, Iterable, List, Optional, Tuple

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from PIL import Image, ImageDraw, ImageFont

from domain.calculator import Calculator, PricingBreakdown
from domain.errors import ExportFailedError
from domain.formatting import (format_amount, format_date_long, format_eur,
                               safe_client_name)
from domain.quote import Quote
from domain.rates import DEFAULT_RATES, RateSchedule
from domain.reports import MaterialRow, material_totals
from infrastructure.logging_service import get_module_logger

logger = get_module_logger("ExportService", "export_quote.log")

WIDTH = 1200
PADDING = 60
LINE = 34

WHITE = (255, 255, 255)
INK = (15, 23, 42)
MUTED = (100, 116, 139)
ACCENT = (234, 179, 8)
RULE = (226, 232, 240)

# colonnes du tableau : (x, alignement)
COL_ORIGIN = (PADDING, "left")
COL_SPEC = (PADDING + 200, "left")
COL_COST = (WIDTH - PADDING - 260, "right")
COL_MARKED = (WIDTH - PADDING, "right")

FONT_CANDIDATES = ["DejaVuSans.ttf", "arial.ttf", "Arial.ttf", "LiberationSans-Regular.ttf"]
BOLD_CANDIDATES = ["DejaVuSans-Bold.ttf", "arialbd.ttf", "Arial Bold.ttf", "LiberationSans-Bold.ttf"]


def _load_font(size: int, bold: bool = False):
    for name in (BOLD_CANDIDATES if bold else FONT_CANDIDATES):
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    try:
        return ImageFont.load_default(size=size)
    except TypeError:
        # Pillow < 10.1 : police bitmap sans taille
        return ImageFont.load_default()


class _Sheet:
    """Records drawing commands top to bottom, then paints them on a canvas of the right height."""

    def __init__(self):
        self.y = PADDING
        self.commands = []

    def text(self, x: int, text: str, font, fill=INK, align: str = "left"):
        self.commands.append(("text", x, self.y, text, font, fill, align))

    def rule(self, fill=RULE, width: int = 2):
        self.commands.append(("rule", self.y, fill, width))

    def advance(self, height: int = LINE):
        self.y += height

    def render(self) -> Image.Image:
        img = Image.new("RGB", (WIDTH, self.y + PADDING), WHITE)
        draw = ImageDraw.Draw(img)
        for cmd in self.commands:
            if cmd[0] == "rule":
                _, y, fill, width = cmd
                draw.line([(PADDING, y), (WIDTH - PADDING, y)], fill=fill, width=width)
                continue
            _, x, y, text, font, fill, align = cmd
            if align == "right":
                x -= int(draw.textlength(text, font=font))
            draw.text((x, y), text, font=font, fill=fill)
        return img


class ExportService:
    """
    Exports of a quote:
    - the "VALIDAÇÃO TÉCNICA" sheet as a JPEG (internal, sent to management for approval)
    - the material report as an Excel workbook
    """

    def __init__(self, rates: RateSchedule = DEFAULT_RATES):
        self.rates = rates
        self.font = _load_font(18)
        self.font_small = _load_font(14)
        self.font_bold = _load_font(18, bold=True)
        self.font_title = _load_font(40, bold=True)
        self.font_total = _load_font(34, bold=True)

    # =========================
    # PUBLIC
    # =========================
    def get_default_filename(self, quote: Quote) -> str:
        """VALIDACAO_TECNICA_{number}_{CLIENT}.jpg - 'ORC' while the number is not issued yet."""
        number = (quote.quote_number or "").strip() or "ORC"
        number = number.replace("/", "-").replace("\\", "-")
        return f"VALIDACAO_TECNICA_{number}_{safe_client_name(quote.client)}.jpg"

    def export_image(self, quote: Quote, output_dir: str) -> str:
        """Render the approval sheet of `quote` into `output_dir`. Returns the file path."""
        output_path = os.path.join(output_dir, self.get_default_filename(quote))
        try:
            breakdown = Calculator.calculate(quote, self.rates)
            img = self._build_sheet(quote, breakdown).render()
            os.makedirs(output_dir, exist_ok=True)
            img.save(output_path, "JPEG", quality=95)
        except PermissionError as e:
            msg = f"Impossível gravar '{os.path.basename(output_path)}'. Verifique se o ficheiro não está aberto."
            logger.error(msg)
            raise ExportFailedError(msg) from e
        except ExportFailedError:
            raise
        except Exception as e:
            logger.error("Erro ao exportar imagem", exc_info=True)
            raise ExportFailedError(f"Erro ao gerar imagem: {e}") from e

        logger.info(f"Exportação JPG concluída → {output_path}")
        return output_path

    def as_exporter(self, output_dir: str, on_exported: Optional[Callable[[str], None]] = None):
        """Exporter callable for ApprovalWorkflow.submit_for_approval."""
        def exporter(quote: Quote) -> bool:
            path = self.export_image(quote, output_dir)
            if on_exported:
                on_exported(path)
            return True
        return exporter

    def export_materials_excel(self, rows: Iterable[MaterialRow], output_path: str) -> str:
        rows = list(rows)
        wb = Workbook()
        ws = wb.active
        ws.title = "Materiais"

        headers = ["Data", "Nº Orçamento", "Cliente", "Fornecedor", "Descrição", "Custo (€)", "C/ Margem (€)"]
        ws.append(headers)
        header_fill = PatternFill("solid", fgColor="0F172A")
        for cell in ws[1]:
            cell.font = Font(bold=True, color="FFFFFF")
            cell.fill = header_fill

        for r in rows:
            ws.append([
                r.quote_date,
                r.quote_number or "PENDENTE",
                r.client or "CONSUMIDOR FINAL",
                r.supplier or "STOCK/INTERNO",
                r.description or "-",
                r.value,
                r.value_with_margin,
            ])

        totals = material_totals(rows)
        ws.append(["", "", "", "", "TOTAL", totals.base, totals.with_margin])
        for cell in ws[ws.max_row]:
            cell.font = Font(bold=True)

        for row in ws.iter_rows(min_row=2, min_col=6, max_col=7):
            for cell in row:
                cell.number_format = '#,##0.00 €'

        widths = [12, 16, 30, 22, 50, 14, 16]
        for idx, width in enumerate(widths, start=1):
            ws.column_dimensions[get_column_letter(idx)].width = width

        try:
            os.makedirs(os.path.dirname(os.path.abspath(output_path)), exist_ok=True)
            wb.save(output_path)
        except PermissionError as e:
            msg = f"Impossível gravar '{os.path.basename(output_path)}'. Verifique se não está aberto no Excel."
            logger.error(msg)
            raise ExportFailedError(msg) from e

        logger.info(f"Relatório de materiais ({len(rows)} linhas) → {output_path}")
        return output_path

    # =========================
    # PRIVATE
    # =========================
    def _build_sheet(self, quote: Quote, b: PricingBreakdown) -> _Sheet:
        s = _Sheet()

        # En-tête
        s.text(PADDING, "VALIDAÇÃO TÉCNICA", self.font_title)
        s.text(WIDTH - PADDING, "SOLICITADO POR", self.font_small, MUTED, align="right")
        s.advance(24)
        s.text(WIDTH - PADDING, quote.commercial or "N/A", self.font_bold, align="right")
        s.advance(30)
        s.text(PADDING, f"REF. ORÇAMENTO: {quote.quote_number or 'PENDENTE'}", self.font_bold, MUTED)
        s.text(WIDTH - PADDING, format_date_long(quote.date), self.font_small, MUTED, align="right")
        s.advance(50)
        s.rule(ACCENT, 4)
        s.advance(24)

        s.text(PADDING, "ENTIDADE / CLIENTE FINAL", self.font_small, MUTED)
        s.advance(24)
        s.text(PADDING, quote.client or "CONSUMIDOR FINAL", self.font_bold)
        s.advance(50)

        # Tableau unifié
        s.text(PADDING, "DISCRIMINAÇÃO DE CUSTOS UNIFICADA", self.font_small, MUTED)
        s.advance(30)
        self._row(s, ("ORIGEM", "ESPECIFICAÇÃO TÉCNICA", "CUSTO (€)", "C/ MARGEM (€)"), self.font_small, MUTED)
        s.rule()
        s.advance(10)
        for origin, spec, cost, marked in self._cost_rows(quote, b):
            self._row(s, (origin, spec, f"{format_amount(cost)}€", f"{format_amount(marked)}€"), self.font)
            s.advance(LINE)
        s.rule()
        s.advance(30)

        if quote.notes:
            s.text(PADDING, "OBSERVAÇÕES TÉCNICAS IMPORTANTES", self.font_small, MUTED)
            s.advance(26)
            for line in textwrap.wrap(f'"{quote.notes}"', width=95):
                s.text(PADDING, line, self.font)
                s.advance(LINE - 6)
            s.advance(24)

        # Totaux
        s.text(PADDING, "MARGEM DE FABRICO", self.font_small, MUTED)
        label = "VALOR FINAL ACORDADO" if b.is_manual_total else "PREÇO SUGERIDO (S/ IVA)"
        s.text(WIDTH - PADDING, label, self.font_small, MUTED, align="right")
        s.advance(26)
        s.text(PADDING, format_eur(b.profit), self.font_total, (22, 163, 74) if b.profit >= 0 else (220, 38, 38))
        s.text(WIDTH - PADDING, format_eur(b.grand_total), self.font_total, align="right")
        s.advance(70)
        s.rule()
        s.advance(16)
        s.text(PADDING, "DOCUMENTO INTERNO CONFIDENCIAL PARA USO DA GERÊNCIA DA AORUBRO.", self.font_small, MUTED)
        s.advance(20)
        return s

    def _row(self, s: _Sheet, cells: Tuple[str, str, str, str], font, fill=INK):
        for (x, align), text in zip((COL_ORIGIN, COL_SPEC, COL_COST, COL_MARKED), cells):
            s.text(x, text, font, fill, align=align)

    def _cost_rows(self, quote: Quote, b: PricingBreakdown) -> List[Tuple[str, str, float, float]]:
        rows = []
        for m in quote.materials:
            if m.is_blank():
                continue
            rows.append((_clip(m.supplier or "STOCK", 18), _clip(m.description or "N/A", 48),
                         m.value, m.value_with_margin))
        if quote.labor_hours > 0 or quote.labor_days > 0:
            span = f"{_num(quote.labor_days)} DIAS" if quote.labor_days > 0 else f"{_num(quote.labor_hours)} HORAS"
            rows.append(("MÃO-DE-OBRA", f"EXECUÇÃO TÉCNICA ({quote.labor_people} PERS.) • {span}",
                         b.labor_total, b.labor_total))
        if quote.distance_km > 0:
            rows.append(("LOGÍSTICA", f"DESLOCAÇÃO E TRANSPORTE ({_num(quote.distance_km)} KM)",
                         b.travel_total, b.travel_total))
        if quote.design_hours > 0:
            rows.append(("ARTE FINAL", f"DESIGN E FECHO DE FICHEIRO ({_num(quote.design_hours)}H)",
                         b.design_total, b.design_total))
        return rows


def _clip(text: str, length: int) -> str:
    return text if len(text) <= length else text[:length - 1] + "…"


def _num(value: float) -> str:
    return f"{value:g}"
