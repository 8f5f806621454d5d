# ui/frames/quote_frame.py
import wx

from core.app_icon import apply_frame_icon
from domain.quote import Quote
from ui.panels.quote_form_panel import QuoteFormPanel


class QuoteFrame(wx.Frame):
    """Fenêtre d'édition d'un devis."""

    def __init__(self, parent, services, quote: Quote, client_suggestions=None, supplier_suggestions=None,
                 on_saved=None):
        title = f"Orçamento {quote.quote_number or 'PENDENTE'} - {quote.client or 'NOVO'}"
        super().__init__(parent, title=title, size=(1000, 860))
        apply_frame_icon(self)

        self.workflow = services.new_workflow()
        self.form = QuoteFormPanel(self, services, self.workflow,
                                   client_suggestions=client_suggestions,
                                   supplier_suggestions=supplier_suggestions)
        self.form.on_saved = on_saved
        self.form.load_quote(quote)

        self.Bind(wx.EVT_CLOSE, self._on_close)
        self.CreateStatusBar()
        self.SetStatusText(f"Criado: {quote.created_at or '-'}")
        self.Centre()
        self.Show()

    def _on_close(self, event):
        if self.workflow.is_exporting and event.CanVeto():
            wx.MessageBox("Exportação em curso. Aguarde o fim antes de fechar.", "Informação",
                          wx.OK | wx.ICON_INFORMATION)
            event.Veto()
            return
        event.Skip()
