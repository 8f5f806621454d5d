# ui/panels/status_report_panel.py
import wx

from domain.formatting import format_duration, format_timestamp
from domain.reports import STEP_LABELS, filter_quotes, lead_time, workflow_steps


class StatusReportPanel(wx.Panel):
    """Lead-time report: one row per quote, one column per workflow step."""

    def __init__(self, parent):
        super().__init__(parent)
        self.quotes = []
        self._build_ui()

    def _build_ui(self):
        vbox = wx.BoxSizer(wx.VERTICAL)

        top = wx.BoxSizer(wx.HORIZONTAL)
        title = wx.StaticText(self, label="Prazos do fluxo de validação")
        title.SetFont(wx.Font(11, wx.FONTFAMILY_DEFAULT, wx.FONTSTYLE_NORMAL, wx.FONTWEIGHT_BOLD))
        top.Add(title, 0, wx.ALL | wx.ALIGN_CENTER_VERTICAL, 10)
        top.AddStretchSpacer()
        self.search_ctrl = wx.SearchCtrl(self, size=(240, -1))
        self.search_ctrl.SetDescriptiveText("Filtrar...")
        self.search_ctrl.Bind(wx.EVT_TEXT, lambda e: self.refresh_list())
        top.Add(self.search_ctrl, 0, wx.ALL | wx.ALIGN_CENTER_VERTICAL, 5)
        vbox.Add(top, 0, wx.EXPAND)

        self.list_ctrl = wx.ListCtrl(self, style=wx.LC_REPORT | wx.BORDER_SUNKEN)
        self.list_ctrl.InsertColumn(0, "Nº Orçamento", width=110)
        self.list_ctrl.InsertColumn(1, "Cliente", width=180)
        self.list_ctrl.InsertColumn(2, "Estado", width=140)
        for i, label in enumerate(STEP_LABELS):
            self.list_ctrl.InsertColumn(3 + i, label, width=150)
        self.list_ctrl.InsertColumn(3 + len(STEP_LABELS), "Lead time", width=110)
        vbox.Add(self.list_ctrl, 1, wx.EXPAND | wx.ALL, 5)

        self.SetSizer(vbox)

    def load_quotes(self, quotes):
        self.quotes = list(quotes)
        self.refresh_list()

    def refresh_list(self):
        self.list_ctrl.DeleteAllItems()
        for i, q in enumerate(filter_quotes(self.quotes, self.search_ctrl.GetValue())):
            idx = self.list_ctrl.InsertItem(i, q.quote_number or "PENDENTE")
            self.list_ctrl.SetItem(idx, 1, q.client or "CONSUMIDOR FINAL")
            self.list_ctrl.SetItem(idx, 2, q.status.value)
            for col, step in enumerate(workflow_steps(q), start=3):
                self.list_ctrl.SetItem(idx, col, self._step_text(step))
            total = lead_time(q)
            self.list_ctrl.SetItem(idx, 3 + len(STEP_LABELS), format_duration(total) if total is not None else "EM CURSO")

    @staticmethod
    def _step_text(step) -> str:
        if not step.timestamp:
            return "-"
        text = format_timestamp(step.timestamp)
        if step.elapsed is not None:
            text += f" (+{format_duration(step.elapsed)})"
        return text
