# ui/panels/material_report_panel.py
import os

import wx

from domain.errors import ExportFailedError
from domain.formatting import format_date_short, format_eur
from domain.reports import filter_material_rows, material_rows, material_totals


class MaterialReportPanel(wx.Panel):
    """Material report: every material line of every quote, with totals and Excel export."""

    def __init__(self, parent, services):
        super().__init__(parent)
        self.services = services
        self.rows = []
        self.visible = []
        self._build_ui()

    def _build_ui(self):
        vbox = wx.BoxSizer(wx.VERTICAL)

        top = wx.BoxSizer(wx.HORIZONTAL)
        title = wx.StaticText(self, label="Relatório de materiais")
        title.SetFont(wx.Font(11, wx.FONTFAMILY_DEFAULT, wx.FONTSTYLE_NORMAL, wx.FONTWEIGHT_BOLD))
        top.Add(title, 0, wx.ALL | wx.ALIGN_CENTER_VERTICAL, 10)
        top.AddStretchSpacer()
        self.search_ctrl = wx.SearchCtrl(self, size=(240, -1))
        self.search_ctrl.SetDescriptiveText("Fornecedor, cliente, descrição...")
        self.search_ctrl.Bind(wx.EVT_TEXT, lambda e: self.refresh_list())
        top.Add(self.search_ctrl, 0, wx.ALL | wx.ALIGN_CENTER_VERTICAL, 5)
        export_btn = wx.Button(self, label="Exportar Excel...")
        export_btn.Bind(wx.EVT_BUTTON, self._on_export_excel)
        top.Add(export_btn, 0, wx.ALL, 5)
        vbox.Add(top, 0, wx.EXPAND)

        self.list_ctrl = wx.ListCtrl(self, style=wx.LC_REPORT | wx.BORDER_SUNKEN)
        self.list_ctrl.InsertColumn(0, "Data", width=100)
        self.list_ctrl.InsertColumn(1, "Nº Orçamento", width=110)
        self.list_ctrl.InsertColumn(2, "Cliente", width=170)
        self.list_ctrl.InsertColumn(3, "Fornecedor", width=140)
        self.list_ctrl.InsertColumn(4, "Descrição", width=260)
        self.list_ctrl.InsertColumn(5, "Custo", width=100, format=wx.LIST_FORMAT_RIGHT)
        self.list_ctrl.InsertColumn(6, "C/ Margem", width=100, format=wx.LIST_FORMAT_RIGHT)
        vbox.Add(self.list_ctrl, 1, wx.EXPAND | wx.ALL, 5)

        self.totals_lbl = wx.StaticText(self, label="")
        self.totals_lbl.SetFont(wx.Font(10, wx.FONTFAMILY_DEFAULT, wx.FONTSTYLE_NORMAL, wx.FONTWEIGHT_BOLD))
        vbox.Add(self.totals_lbl, 0, wx.ALL | wx.ALIGN_RIGHT, 10)

        self.SetSizer(vbox)

    def load_quotes(self, quotes):
        # lignes vides ignorées : rien à reporter
        self.rows = [r for r in material_rows(quotes) if r.supplier or r.description or r.value]
        self.refresh_list()

    def refresh_list(self):
        self.visible = filter_material_rows(self.rows, self.search_ctrl.GetValue())
        self.list_ctrl.DeleteAllItems()
        for i, r in enumerate(self.visible):
            idx = self.list_ctrl.InsertItem(i, format_date_short(r.quote_date))
            self.list_ctrl.SetItem(idx, 1, r.quote_number or "PENDENTE")
            self.list_ctrl.SetItem(idx, 2, r.client or "CONSUMIDOR FINAL")
            self.list_ctrl.SetItem(idx, 3, r.supplier or "STOCK/INTERNO")
            self.list_ctrl.SetItem(idx, 4, r.description or "-")
            self.list_ctrl.SetItem(idx, 5, format_eur(r.value))
            self.list_ctrl.SetItem(idx, 6, format_eur(r.value_with_margin))
        totals = material_totals(self.visible)
        self.totals_lbl.SetLabel(f"Total custo: {format_eur(totals.base)}    "
                                 f"Total c/ margem: {format_eur(totals.with_margin)}")
        self.Layout()

    def _on_export_excel(self, event):
        if not self.visible:
            wx.MessageBox("Nada para exportar.", "Informação", wx.OK | wx.ICON_INFORMATION)
            return
        with wx.FileDialog(self, "Exportar relatório de materiais",
                           defaultDir=self.services.config.get_export_folder(),
                           defaultFile="RELATORIO_MATERIAIS.xlsx",
                           wildcard="Excel (*.xlsx)|*.xlsx",
                           style=wx.FD_SAVE | wx.FD_OVERWRITE_PROMPT) as dlg:
            if dlg.ShowModal() == wx.ID_CANCEL:
                return
            path = dlg.GetPath()

        try:
            self.services.exporter.export_materials_excel(self.visible, path)
        except ExportFailedError as e:
            wx.MessageBox(str(e), "Erro", wx.OK | wx.ICON_ERROR)
            return
        wx.MessageBox(f"Relatório exportado:\n{os.path.basename(path)}", "Sucesso", wx.OK | wx.ICON_INFORMATION)
