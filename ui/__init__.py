"""Interface wxPython de RubroQuote (fenêtres dans `ui.frames`, onglets dans `ui.panels`)."""

from . import panels

__all__ = ["panels"]
