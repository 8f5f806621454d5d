import sys
import os
from dataclasses import dataclass

from domain.workflow import ApprovalWorkflow
from infrastructure.configuration import ConfigurationService
from infrastructure.export_service import ExportService
from infrastructure.logging_service import enable_logging, get_module_logger
from infrastructure.repository import QuoteRepository, create_repository

logger = get_module_logger("AppInitializer", "app.log")


@dataclass
class AppServices:
    """Services partagés par les fenêtres."""
    config: ConfigurationService
    repository: QuoteRepository
    exporter: ExportService

    def new_workflow(self) -> ApprovalWorkflow:
        """One workflow per open form: its export lock guards that form's submissions."""
        return ApprovalWorkflow(persist=self.repository.upsert)


def initialize_app():
    """Initialise les composants communs de l'application (logging, paths, etc.)"""
    # Ajoute le répertoire courant au path pour les imports
    app_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    if app_root not in sys.path:
        sys.path.insert(0, app_root)

    # Active les logs
    enable_logging()


def build_services(config: ConfigurationService = None) -> AppServices:
    """Configuration -> repository + export, prêts pour l'UI."""
    config = config or ConfigurationService.get_instance()
    services = AppServices(
        config=config,
        repository=create_repository(config),
        exporter=ExportService(config.get_rate_schedule()),
    )
    logger.info(f"Serviços iniciados (nuvem: {'sim' if config.is_cloud_configured() else 'não'})")
    return services
