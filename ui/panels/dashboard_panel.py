# ui/panels/dashboard_panel.py
import wx

from domain.formatting import format_date_short, format_eur
from domain.reports import count_completed, count_open, filter_quotes, quote_total


class DashboardPanel(wx.Panel):
    """Quote list with search; the frame handles the new/edit/delete callbacks."""

    def __init__(self, parent, rates):
        super().__init__(parent)
        self.rates = rates
        self.quotes = []
        self.visible = []
        self.on_new = None
        self.on_edit = None  # callback(quote)
        self.on_delete = None  # callback(quote)
        self.on_refresh = None
        self._build_ui()

    def _build_ui(self):
        vbox = wx.BoxSizer(wx.VERTICAL)

        top_bar = wx.BoxSizer(wx.HORIZONTAL)
        new_btn = wx.Button(self, label="Novo Orçamento")
        new_btn.SetBackgroundColour(wx.Colour(234, 179, 8))
        new_btn.Bind(wx.EVT_BUTTON, lambda e: self.on_new and self.on_new())
        top_bar.Add(new_btn, 0, wx.ALL | wx.ALIGN_CENTER_VERTICAL, 5)

        top_bar.Add(wx.StaticLine(self, style=wx.LI_VERTICAL), 0, wx.EXPAND | wx.ALL, 5)

        self.search_ctrl = wx.SearchCtrl(self, size=(260, -1))
        self.search_ctrl.ShowCancelButton(True)
        self.search_ctrl.SetDescriptiveText("Cliente, comercial ou nº...")
        self.search_ctrl.Bind(wx.EVT_TEXT, lambda e: self.refresh_list())
        self.search_ctrl.Bind(wx.EVT_SEARCHCTRL_CANCEL_BTN, self._on_clear_search)
        top_bar.Add(self.search_ctrl, 0, wx.ALL | wx.ALIGN_CENTER_VERTICAL, 5)

        top_bar.AddStretchSpacer()
        self.counts_lbl = wx.StaticText(self, label="")
        top_bar.Add(self.counts_lbl, 0, wx.ALL | wx.ALIGN_CENTER_VERTICAL, 5)

        refresh_btn = wx.Button(self, label="Atualizar")
        refresh_btn.Bind(wx.EVT_BUTTON, lambda e: self.on_refresh and self.on_refresh())
        top_bar.Add(refresh_btn, 0, wx.ALL, 5)
        vbox.Add(top_bar, 0, wx.EXPAND)

        self.list_ctrl = wx.ListCtrl(self, style=wx.LC_REPORT | wx.LC_SINGLE_SEL | wx.BORDER_SUNKEN)
        self.list_ctrl.InsertColumn(0, "Data", width=100)
        self.list_ctrl.InsertColumn(1, "Nº Orçamento", width=120)
        self.list_ctrl.InsertColumn(2, "Cliente", width=220)
        self.list_ctrl.InsertColumn(3, "Comercial", width=120)
        self.list_ctrl.InsertColumn(4, "Estado", width=150)
        self.list_ctrl.InsertColumn(5, "Total", width=110, format=wx.LIST_FORMAT_RIGHT)
        self.list_ctrl.Bind(wx.EVT_LIST_ITEM_ACTIVATED, self._on_item_activated)
        self.list_ctrl.Bind(wx.EVT_LIST_ITEM_RIGHT_CLICK, self._on_right_click)
        vbox.Add(self.list_ctrl, 1, wx.EXPAND | wx.ALL, 5)

        self.SetSizer(vbox)

    def load_quotes(self, quotes):
        self.quotes = list(quotes)
        self.refresh_list()

    def refresh_list(self):
        self.visible = filter_quotes(self.quotes, self.search_ctrl.GetValue())
        self.list_ctrl.DeleteAllItems()
        for i, q in enumerate(self.visible):
            idx = self.list_ctrl.InsertItem(i, format_date_short(q.date))
            self.list_ctrl.SetItem(idx, 1, q.quote_number or "PENDENTE")
            self.list_ctrl.SetItem(idx, 2, q.client or "CONSUMIDOR FINAL")
            self.list_ctrl.SetItem(idx, 3, q.commercial or "")
            self.list_ctrl.SetItem(idx, 4, q.status.value)
            self.list_ctrl.SetItem(idx, 5, format_eur(quote_total(q, self.rates)))
        self.counts_lbl.SetLabel(f"Em curso: {count_open(self.quotes)}   Concluídos: {count_completed(self.quotes)}")
        self.Layout()

    def selected_quote(self):
        idx = self.list_ctrl.GetFirstSelected()
        if idx < 0:
            return None
        return self.visible[idx]

    def _on_clear_search(self, event):
        self.search_ctrl.SetValue("")

    def _on_item_activated(self, event):
        if self.on_edit:
            self.on_edit(self.visible[event.GetIndex()])

    def _on_right_click(self, event):
        quote = self.selected_quote()
        if quote is None:
            return
        menu = wx.Menu()
        edit_item = menu.Append(wx.ID_ANY, "Abrir")
        delete_item = menu.Append(wx.ID_ANY, "Eliminar")
        self.Bind(wx.EVT_MENU, lambda e: self.on_edit and self.on_edit(quote), edit_item)
        self.Bind(wx.EVT_MENU, lambda e: self.on_delete and self.on_delete(quote), delete_item)
        self.PopupMenu(menu)
        menu.Destroy()
