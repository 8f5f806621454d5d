# ui/panels/quote_form_panel.py
import threading

import wx

from domain.calculator import Calculator
from domain.errors import (ExportFailedError, GuardViolationError, QuoteError,
                           UnknownHeadcountError)
from domain.formatting import format_eur
from domain.material import to_amount
from domain.quote import Quote, QuoteStatus
from domain.workflow import Trigger, available_triggers
from infrastructure.logging_service import get_module_logger
from ui.components.material_lines_editor import MaterialLinesEditor

logger = get_module_logger("QuoteForm", "quote_form.log")

ACTION_LABELS = {
    Trigger.SUBMIT_FOR_APPROVAL: "Enviar para Validação",
    Trigger.APPROVE: "Aprovar",
    Trigger.SEND_TO_SALES: "Enviar ao Comercial",
}

STATUS_COLOURS = {
    QuoteStatus.DRAFT: wx.Colour(100, 116, 139),
    QuoteStatus.PENDING_APPROVAL: wx.Colour(202, 138, 4),
    QuoteStatus.APPROVED: wx.Colour(22, 163, 74),
    QuoteStatus.REJECTED: wx.Colour(220, 38, 38),
    QuoteStatus.SENT: wx.Colour(37, 99, 235),
}


class QuoteFormPanel(wx.Panel):
    """Edition of one quote: header, materials, labor, logistics, design, totals and workflow action."""

    def __init__(self, parent, services, workflow, client_suggestions=None, supplier_suggestions=None):
        super().__init__(parent)
        self.services = services
        self.workflow = workflow
        self.rates = services.config.get_rate_schedule()
        self.client_suggestions = client_suggestions or []
        self.supplier_suggestions = supplier_suggestions or []
        self.quote = None
        self.on_saved = None  # callback(RepositoryResult)
        self._loading = False
        self._build_ui()

    # =========================
    # UI
    # =========================
    def _build_ui(self):
        main_sizer = wx.BoxSizer(wx.VERTICAL)

        # --- Statut + actions ---
        top = wx.BoxSizer(wx.HORIZONTAL)
        self.status_lbl = wx.StaticText(self, label="")
        self.status_lbl.SetFont(wx.Font(11, wx.FONTFAMILY_DEFAULT, wx.FONTSTYLE_NORMAL, wx.FONTWEIGHT_BOLD))
        top.Add(self.status_lbl, 0, wx.ALL | wx.ALIGN_CENTER_VERTICAL, 5)
        top.AddStretchSpacer()

        self.save_btn = wx.Button(self, label="Guardar")
        self.save_btn.Bind(wx.EVT_BUTTON, self._on_save)
        top.Add(self.save_btn, 0, wx.ALL, 5)

        self.action_btn = wx.Button(self, label="")
        self.action_btn.SetBackgroundColour(wx.Colour(15, 23, 42))
        self.action_btn.SetForegroundColour(wx.WHITE)
        self.action_btn.Bind(wx.EVT_BUTTON, self._on_action)
        top.Add(self.action_btn, 0, wx.ALL, 5)
        main_sizer.Add(top, 0, wx.EXPAND)

        # --- En-tête ---
        grid = wx.FlexGridSizer(cols=4, hgap=10, vgap=8)
        grid.AddGrowableCol(1, 1)
        grid.AddGrowableCol(3, 1)

        grid.Add(wx.StaticText(self, label="Comercial:"), 0, wx.ALIGN_CENTER_VERTICAL)
        self.commercial_ctrl = wx.Choice(self, choices=self.services.config.get_commercials())
        self.commercial_ctrl.Bind(wx.EVT_CHOICE, self._on_commercial)
        grid.Add(self.commercial_ctrl, 1, wx.EXPAND)

        grid.Add(wx.StaticText(self, label="Data (AAAA-MM-DD):"), 0, wx.ALIGN_CENTER_VERTICAL)
        self.date_ctrl = wx.TextCtrl(self)
        self.date_ctrl.Bind(wx.EVT_TEXT, self._on_header_text)
        grid.Add(self.date_ctrl, 1, wx.EXPAND)

        grid.Add(wx.StaticText(self, label="Cliente:"), 0, wx.ALIGN_CENTER_VERTICAL)
        self.client_ctrl = wx.TextCtrl(self)
        self.client_ctrl.AutoComplete(self.client_suggestions)
        self.client_ctrl.Bind(wx.EVT_TEXT, self._on_header_text)
        grid.Add(self.client_ctrl, 1, wx.EXPAND)

        grid.Add(wx.StaticText(self, label="NIF:"), 0, wx.ALIGN_CENTER_VERTICAL)
        self.nif_ctrl = wx.TextCtrl(self)
        self.nif_ctrl.Bind(wx.EVT_TEXT, self._on_header_text)
        grid.Add(self.nif_ctrl, 1, wx.EXPAND)

        grid.Add(wx.StaticText(self, label="Nº Orçamento Software:"), 0, wx.ALIGN_CENTER_VERTICAL)
        self.quote_number_ctrl = wx.TextCtrl(self)
        self.quote_number_ctrl.Bind(wx.EVT_TEXT, self._on_header_text)
        grid.Add(self.quote_number_ctrl, 1, wx.EXPAND)

        grid.Add(wx.StaticText(self, label="Fornecedor:"), 0, wx.ALIGN_CENTER_VERTICAL)
        self.supplier_ctrl = wx.TextCtrl(self)
        self.supplier_ctrl.AutoComplete(self.supplier_suggestions)
        self.supplier_ctrl.Bind(wx.EVT_TEXT, self._on_header_text)
        grid.Add(self.supplier_ctrl, 1, wx.EXPAND)
        main_sizer.Add(grid, 0, wx.EXPAND | wx.ALL, 10)

        # --- Lignes de matériel ---
        self.materials_editor = MaterialLinesEditor(self)
        self.materials_editor.on_changed = self._update_totals
        self.materials_editor.set_supplier_suggestions(self.supplier_suggestions)
        main_sizer.Add(self.materials_editor, 1, wx.EXPAND | wx.LEFT | wx.RIGHT, 5)

        # --- Main-d'oeuvre / logistique / design ---
        services_grid = wx.FlexGridSizer(cols=6, hgap=10, vgap=8)

        services_grid.Add(wx.StaticText(self, label="Horas:"), 0, wx.ALIGN_CENTER_VERTICAL)
        self.hours_ctrl = wx.TextCtrl(self, size=(80, -1))
        self.hours_ctrl.Bind(wx.EVT_TEXT, self._on_hours)
        services_grid.Add(self.hours_ctrl)

        services_grid.Add(wx.StaticText(self, label="Dias:"), 0, wx.ALIGN_CENTER_VERTICAL)
        self.days_ctrl = wx.TextCtrl(self, size=(80, -1))
        self.days_ctrl.Bind(wx.EVT_TEXT, self._on_days)
        services_grid.Add(self.days_ctrl)

        services_grid.Add(wx.StaticText(self, label="Pessoas:"), 0, wx.ALIGN_CENTER_VERTICAL)
        self.people_ctrl = wx.Choice(self, choices=[str(n) for n in sorted(self.rates.hourly)])
        self.people_ctrl.Bind(wx.EVT_CHOICE, self._on_people)
        services_grid.Add(self.people_ctrl)

        services_grid.Add(wx.StaticText(self, label="Distância (km):"), 0, wx.ALIGN_CENTER_VERTICAL)
        self.distance_ctrl = wx.TextCtrl(self, size=(80, -1))
        self.distance_ctrl.Bind(wx.EVT_TEXT, self._on_numbers)
        services_grid.Add(self.distance_ctrl)

        services_grid.Add(wx.StaticText(self, label="€/km:"), 0, wx.ALIGN_CENTER_VERTICAL)
        self.km_rate_ctrl = wx.TextCtrl(self, size=(80, -1))
        self.km_rate_ctrl.Bind(wx.EVT_TEXT, self._on_numbers)
        services_grid.Add(self.km_rate_ctrl)

        services_grid.AddSpacer(0)
        services_grid.AddSpacer(0)

        services_grid.Add(wx.StaticText(self, label="Design (h):"), 0, wx.ALIGN_CENTER_VERTICAL)
        self.design_hours_ctrl = wx.TextCtrl(self, size=(80, -1))
        self.design_hours_ctrl.Bind(wx.EVT_TEXT, self._on_numbers)
        services_grid.Add(self.design_hours_ctrl)

        services_grid.Add(wx.StaticText(self, label="€/h design:"), 0, wx.ALIGN_CENTER_VERTICAL)
        self.design_rate_ctrl = wx.TextCtrl(self, size=(80, -1))
        self.design_rate_ctrl.Bind(wx.EVT_TEXT, self._on_numbers)
        services_grid.Add(self.design_rate_ctrl)

        services_grid.Add(wx.StaticText(self, label="Valor final fixo (€):"), 0, wx.ALIGN_CENTER_VERTICAL)
        self.rounding_ctrl = wx.TextCtrl(self, size=(80, -1))
        self.rounding_ctrl.SetToolTip("0 ou vazio = preço calculado")
        self.rounding_ctrl.Bind(wx.EVT_TEXT, self._on_numbers)
        services_grid.Add(self.rounding_ctrl)

        main_sizer.Add(services_grid, 0, wx.EXPAND | wx.ALL, 10)

        # --- Observations ---
        main_sizer.Add(wx.StaticText(self, label="Observações técnicas:"), 0, wx.LEFT, 10)
        self.notes_ctrl = wx.TextCtrl(self, style=wx.TE_MULTILINE, size=(-1, 60))
        self.notes_ctrl.Bind(wx.EVT_TEXT, self._on_header_text)
        main_sizer.Add(self.notes_ctrl, 0, wx.EXPAND | wx.ALL, 10)

        # --- Totaux ---
        totals = wx.FlexGridSizer(cols=2, hgap=20, vgap=4)
        self.total_labels = {}
        for key, label in [("material_marked", "Materiais (c/ margem)"), ("labor_total", "Mão-de-obra"),
                           ("travel_total", "Logística"), ("design_total", "Design"),
                           ("calculated_subtotal", "Subtotal calculado"), ("profit", "Margem de fabrico"),
                           ("grand_total", "TOTAL")]:
            totals.Add(wx.StaticText(self, label=label + ":"), 0, wx.ALIGN_CENTER_VERTICAL)
            value_lbl = wx.StaticText(self, label=format_eur(0))
            totals.Add(value_lbl, 0, wx.ALIGN_RIGHT)
            self.total_labels[key] = value_lbl
        self.total_labels["grand_total"].SetFont(
            wx.Font(12, wx.FONTFAMILY_DEFAULT, wx.FONTSTYLE_NORMAL, wx.FONTWEIGHT_BOLD))
        self.labor_rate_lbl = wx.StaticText(self, label="")
        main_sizer.Add(self.labor_rate_lbl, 0, wx.LEFT, 10)
        main_sizer.Add(totals, 0, wx.ALIGN_RIGHT | wx.ALL, 10)

        self.SetSizer(main_sizer)

    # =========================
    # Load / refresh
    # =========================
    def load_quote(self, quote: Quote):
        self._loading = True
        try:
            self.quote = quote
            commercials = self.services.config.get_commercials()
            if quote.commercial and quote.commercial not in commercials:
                self.commercial_ctrl.Append(quote.commercial)
            if quote.commercial:
                self.commercial_ctrl.SetStringSelection(quote.commercial)
            else:
                self.commercial_ctrl.SetSelection(wx.NOT_FOUND)
            self.date_ctrl.ChangeValue(quote.date or "")
            self.client_ctrl.ChangeValue(quote.client or "")
            self.nif_ctrl.ChangeValue(quote.nif or "")
            self.supplier_ctrl.ChangeValue(quote.supplier or "")
            self.quote_number_ctrl.ChangeValue(quote.quote_number or "")
            self.notes_ctrl.ChangeValue(quote.notes or "")

            self.hours_ctrl.ChangeValue(self._num(quote.labor_hours))
            self.days_ctrl.ChangeValue(self._num(quote.labor_days))
            if not self.people_ctrl.SetStringSelection(str(quote.labor_people)):
                self.people_ctrl.SetSelection(0)
            self.distance_ctrl.ChangeValue(self._num(quote.distance_km))
            self.km_rate_ctrl.ChangeValue(self._num(quote.km_rate))
            self.design_hours_ctrl.ChangeValue(self._num(quote.design_hours))
            self.design_rate_ctrl.ChangeValue(self._num(quote.design_rate))
            self.rounding_ctrl.ChangeValue(self._num(quote.rounding))

            self.materials_editor.load_quote(quote)
        finally:
            self._loading = False
        self._update_status()
        self._update_totals()

    @staticmethod
    def _num(value: float) -> str:
        return f"{value:g}" if value else ""

    def _update_status(self):
        status = self.quote.status
        self.status_lbl.SetLabel(f"ESTADO: {status.value.upper()}")
        self.status_lbl.SetForegroundColour(STATUS_COLOURS.get(status, wx.BLACK))

        triggers = available_triggers(status)
        if triggers and not self.workflow.is_exporting:
            self.action_btn.SetLabel(ACTION_LABELS[triggers[0]])
            self.action_btn.Show()
            self.action_btn.Enable()
        elif not triggers:
            self.action_btn.Hide()
        self.Layout()

    def _update_totals(self):
        if not self.quote:
            return
        try:
            b = Calculator.calculate(self.quote, self.rates)
            rate, unit = Calculator.labor_rate(self.quote, self.rates)
        except UnknownHeadcountError as e:
            self.labor_rate_lbl.SetLabel(str(e))
            return
        for key, lbl in self.total_labels.items():
            lbl.SetLabel(format_eur(getattr(b, key)))
        self.total_labels["profit"].SetForegroundColour(
            wx.Colour(22, 163, 74) if b.profit >= 0 else wx.Colour(220, 38, 38))
        suffix = " (VALOR FIXO)" if b.is_manual_total else ""
        self.total_labels["grand_total"].SetLabel(format_eur(b.grand_total) + suffix)
        self.labor_rate_lbl.SetLabel(f"Tarifa mão-de-obra: {format_eur(rate)}/{unit} "
                                     f"({self.quote.labor_people} pess.)")
        self.Layout()

    # =========================
    # Field events
    # =========================
    @staticmethod
    def _uppercase(ctrl: wx.TextCtrl) -> str:
        value = ctrl.GetValue()
        if value != value.upper():
            pos = ctrl.GetInsertionPoint()
            ctrl.ChangeValue(value.upper())
            ctrl.SetInsertionPoint(pos)
        return ctrl.GetValue()

    def _on_commercial(self, event):
        if self.quote:
            self.quote.commercial = self.commercial_ctrl.GetStringSelection()

    def _on_header_text(self, event):
        if self._loading or not self.quote:
            return
        ctrl = event.GetEventObject()
        if ctrl is self.client_ctrl:
            self.quote.set_client(self._uppercase(ctrl))
        elif ctrl is self.quote_number_ctrl:
            self.quote.set_quote_number(self._uppercase(ctrl))
        elif ctrl is self.notes_ctrl:
            self.quote.set_notes(self._uppercase(ctrl))
        elif ctrl is self.supplier_ctrl:
            self.quote.supplier = self._uppercase(ctrl)
        elif ctrl is self.nif_ctrl:
            self.quote.nif = ctrl.GetValue().strip()
        elif ctrl is self.date_ctrl:
            self.quote.date = ctrl.GetValue().strip()

    def _on_hours(self, event):
        if self._loading or not self.quote:
            return
        self.quote.set_labor_hours(self.hours_ctrl.GetValue())
        if self.quote.labor_hours:
            self.days_ctrl.ChangeValue("")
        self._update_totals()

    def _on_days(self, event):
        if self._loading or not self.quote:
            return
        self.quote.set_labor_days(self.days_ctrl.GetValue())
        if self.quote.labor_days:
            self.hours_ctrl.ChangeValue("")
        self._update_totals()

    def _on_people(self, event):
        if self.quote:
            self.quote.set_labor_people(int(self.people_ctrl.GetStringSelection()))
            self._update_totals()

    def _on_numbers(self, event):
        if self._loading or not self.quote:
            return
        self.quote.distance_km = to_amount(self.distance_ctrl.GetValue())
        self.quote.km_rate = to_amount(self.km_rate_ctrl.GetValue())
        self.quote.design_hours = to_amount(self.design_hours_ctrl.GetValue())
        self.quote.design_rate = to_amount(self.design_rate_ctrl.GetValue())
        self.quote.rounding = to_amount(self.rounding_ctrl.GetValue())
        self._update_totals()

    # =========================
    # Actions
    # =========================
    def _on_save(self, event):
        if not self.quote:
            return
        try:
            self.workflow.save(self.quote.copy())
        except QuoteError as e:
            wx.MessageBox(f"Erro ao guardar: {e}", "Erro", wx.OK | wx.ICON_ERROR)
            return
        self._notify_saved()

    def _on_action(self, event):
        if not self.quote:
            return
        triggers = available_triggers(self.quote.status)
        if not triggers:
            return
        trigger = triggers[0]

        if trigger is Trigger.SUBMIT_FOR_APPROVAL:
            self._submit_in_background()
            return

        if trigger is Trigger.APPROVE:
            if wx.MessageBox("Confirmar a aprovação técnica deste orçamento?", "Aprovação",
                             wx.YES_NO | wx.ICON_QUESTION) != wx.YES:
                return
        try:
            updated = self.workflow.fire(self.quote, trigger)
        except GuardViolationError as e:
            wx.MessageBox(str(e), "Bloqueio", wx.OK | wx.ICON_WARNING)
            if e.field == "quote_number":
                self.quote_number_ctrl.SetFocus()
            return
        except QuoteError as e:
            wx.MessageBox(str(e), "Erro", wx.OK | wx.ICON_ERROR)
            return
        self._on_transition_done(updated)

    def _submit_in_background(self):
        """The JPEG export runs on a worker thread; the whole form stays disabled until it returns."""
        self.Disable()
        self.action_btn.SetLabel("A exportar...")
        snapshot = self.quote.copy()
        output_dir = self.services.config.get_export_folder()
        exporter = self.services.exporter.as_exporter(output_dir)

        def worker():
            try:
                updated = self.workflow.submit_for_approval(snapshot, exporter)
            except QuoteError as e:
                wx.CallAfter(self._on_submit_failed, e)
                return
            except Exception as e:
                logger.exception(f"Erro inesperado na submissão: {e}")
                wx.CallAfter(self._on_submit_failed, e)
                return
            wx.CallAfter(self._on_transition_done, updated, output_dir)

        threading.Thread(target=worker, daemon=True).start()

    def _on_submit_failed(self, error: Exception):
        logger.warning(f"Submissão falhou: {error}")
        self.Enable()
        self._update_status()
        if isinstance(error, ExportFailedError):
            wx.MessageBox(f"{error}\n\nO orçamento continua em Rascunho. Tente novamente.",
                          "Erro na exportação", wx.OK | wx.ICON_ERROR)
        else:
            wx.MessageBox(str(error), "Erro", wx.OK | wx.ICON_ERROR)

    def _on_transition_done(self, updated: Quote, output_dir: str = None):
        self.Enable()
        self.load_quote(updated)
        self._notify_saved()
        if output_dir:
            wx.MessageBox(f"Imagem de validação exportada para:\n{output_dir}", "Validação técnica",
                          wx.OK | wx.ICON_INFORMATION)

    def _notify_saved(self):
        result = self.workflow.last_result
        if result is not None and not getattr(result, "ok", True):
            wx.MessageBox(result.message, "Aviso", wx.OK | wx.ICON_WARNING)
        if self.on_saved:
            self.on_saved(result)
