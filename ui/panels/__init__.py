"""Onglets et formulaire de l'application (tableau de bord, devis, délais, matériel)."""

from .dashboard_panel import DashboardPanel
from .quote_form_panel import QuoteFormPanel
from .status_report_panel import StatusReportPanel
from .material_report_panel import MaterialReportPanel

__all__ = ["DashboardPanel", "QuoteFormPanel", "StatusReportPanel", "MaterialReportPanel"]
