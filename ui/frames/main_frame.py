# ui/frames/main_frame.py
import threading

import wx

from core.app_icon import apply_frame_icon
from domain.errors import QuoteError
from domain.quote import Quote
from domain.reports import client_suggestions, supplier_suggestions
from infrastructure.logging_service import clear_logs_directory, get_module_logger
from ui.frames.quote_frame import QuoteFrame
from ui.panels.dashboard_panel import DashboardPanel
from ui.panels.material_report_panel import MaterialReportPanel
from ui.panels.status_report_panel import StatusReportPanel

logger = get_module_logger("MainFrame", "main_frame.log")


class MainFrame(wx.Frame):
    """Fenêtre principale : tableau de bord et rapports."""

    def __init__(self, services, clear_logs=False):
        super().__init__(None, title="RubroQuote - AoRubro", size=(1200, 800))
        apply_frame_icon(self)

        if clear_logs:
            clear_logs_directory()

        self.services = services
        self.quotes = []

        self._build_ui()
        self._create_menu_bar()
        self.CreateStatusBar()
        self._connect_events()

        self.reload_quotes()
        self.Centre()
        self.Show()

    def _create_menu_bar(self):
        menu_bar = wx.MenuBar()

        file_menu = wx.Menu()
        new_item = file_menu.Append(wx.ID_NEW, "&Novo orçamento\tCtrl+N")
        refresh_item = file_menu.Append(wx.ID_REFRESH, "&Atualizar\tF5")
        file_menu.AppendSeparator()
        folder_item = file_menu.Append(wx.ID_ANY, "Pasta de exportação...")
        file_menu.AppendSeparator()
        exit_item = file_menu.Append(wx.ID_EXIT, "&Sair\tAlt+F4")
        menu_bar.Append(file_menu, "&Ficheiro")
        self.SetMenuBar(menu_bar)

        self.Bind(wx.EVT_MENU, lambda e: self._on_new(), new_item)
        self.Bind(wx.EVT_MENU, lambda e: self.reload_quotes(), refresh_item)
        self.Bind(wx.EVT_MENU, self._on_export_folder, folder_item)
        self.Bind(wx.EVT_MENU, lambda e: self.Close(), exit_item)

    def _build_ui(self):
        main_panel = wx.Panel(self)
        main_sizer = wx.BoxSizer(wx.VERTICAL)

        rates = self.services.config.get_rate_schedule()
        self.notebook = wx.Notebook(main_panel)

        self.dashboard = DashboardPanel(self.notebook, rates)
        self.notebook.AddPage(self.dashboard, "Orçamentos")

        self.status_report = StatusReportPanel(self.notebook)
        self.notebook.AddPage(self.status_report, "Prazos")

        self.material_report = MaterialReportPanel(self.notebook, self.services)
        self.notebook.AddPage(self.material_report, "Materiais")

        main_sizer.Add(self.notebook, 1, wx.EXPAND | wx.ALL, 5)
        main_panel.SetSizer(main_sizer)

    def _connect_events(self):
        self.dashboard.on_new = self._on_new
        self.dashboard.on_edit = self._open_quote
        self.dashboard.on_delete = self._on_delete
        self.dashboard.on_refresh = self.reload_quotes

    # =========================
    # Data
    # =========================
    def reload_quotes(self):
        """The cloud call runs on a worker thread; the result comes back through CallAfter."""
        self.SetStatusText("A carregar orçamentos...")

        def worker():
            result = self.services.repository.list()
            wx.CallAfter(self._apply_result, result)

        threading.Thread(target=worker, daemon=True).start()

    def _apply_result(self, result, warn=False):
        self.quotes = result.quotes
        self.dashboard.load_quotes(self.quotes)
        self.status_report.load_quotes(self.quotes)
        self.material_report.load_quotes(self.quotes)

        if result.ok:
            self.SetStatusText(f"{len(self.quotes)} orçamentos")
        else:
            self.SetStatusText(f"⚠ {result.message}")
            if warn:
                wx.MessageBox(result.message, "Aviso", wx.OK | wx.ICON_WARNING)

    # =========================
    # Actions
    # =========================
    def _on_new(self):
        config = self.services.config
        quote = Quote.new(km_rate=config.get_default_km_rate(), design_rate=config.get_default_design_rate())
        self._open_quote(quote)

    def _open_quote(self, quote: Quote):
        QuoteFrame(self, self.services, quote.copy(),
                   client_suggestions=client_suggestions(self.quotes),
                   supplier_suggestions=supplier_suggestions(self.quotes),
                   on_saved=self._on_quote_saved)

    def _on_quote_saved(self, result):
        # la fenêtre d'édition a déjà affiché l'avertissement éventuel
        if result is not None:
            self._apply_result(result)

    def _on_delete(self, quote: Quote):
        label = quote.quote_number or quote.client or "sem número"
        if wx.MessageBox(f"Tem a certeza que deseja eliminar o orçamento '{label}'?",
                         "Confirmação", wx.YES_NO | wx.ICON_QUESTION) != wx.YES:
            return
        try:
            result = self.services.repository.delete(quote.id)
        except QuoteError as e:
            wx.MessageBox(f"Erro ao eliminar: {e}", "Erro", wx.OK | wx.ICON_ERROR)
            return
        logger.info(f"Orçamento {quote.id} eliminado (nuvem ok: {result.ok})")
        self._apply_result(result, warn=True)

    def _on_export_folder(self, event):
        with wx.DirDialog(self, "Pasta para as imagens de validação e relatórios",
                          defaultPath=self.services.config.get_export_folder(),
                          style=wx.DD_DEFAULT_STYLE | wx.DD_DIR_MUST_EXIST) as dlg:
            if dlg.ShowModal() == wx.ID_CANCEL:
                return
            folder = dlg.GetPath()
        try:
            self.services.config.set_export_folder(folder)
        except OSError as e:
            wx.MessageBox(f"Erro ao gravar a configuração : {e}", "Erro", wx.OK | wx.ICON_ERROR)
            return
        self.SetStatusText(f"Pasta de exportação : {folder}")
