# infrastructure/configuration.py
import json
import os
from typing import List, Optional

from dotenv import load_dotenv

from domain.quote import DEFAULT_DESIGN_RATE, DEFAULT_KM_RATE
from domain.rates import DEFAULT_RATES, RateSchedule
from infrastructure.logging_service import get_module_logger

logger = get_module_logger("Configuration", "configuration.log")

APP_NAME = "RubroQuote"


def get_app_data_dir() -> str:
    app_data = os.environ.get('LOCALAPPDATA', os.path.expanduser('~/.local/share'))
    return os.path.join(app_data, APP_NAME)


class ConfigurationService:
    """Service to load and manage application configuration."""

    _instance = None  # Singleton instance

    @classmethod
    def get_instance(cls) -> 'ConfigurationService':
        """Get singleton instance."""
        if cls._instance is None:
            cls._instance = ConfigurationService()
        return cls._instance

    def __init__(self, config_path: str = None, env_file: Optional[str] = None):
        if config_path is None:
            app_dir = get_app_data_dir()
            os.makedirs(app_dir, exist_ok=True)
            config_path = os.path.join(app_dir, "app_config.json")

        # Identifiants Supabase : le .env (ou l'environnement) prime sur le fichier
        load_dotenv(env_file)

        self.config_path = config_path
        self.config = self._load_config()

    @staticmethod
    def defaults() -> dict:
        return {
            "supabase_url": "",
            "supabase_anon_key": "",
            "supabase_table": "quotes",
            "commercials": ["VÂNIA S.", "ROBERTO O.", "BRUNO C."],
            "labor_rates": DEFAULT_RATES.to_config(),
            "default_km_rate": DEFAULT_KM_RATE,
            "default_design_rate": DEFAULT_DESIGN_RATE,
            "export_folder": None,
            "local_db_path": None,
        }

    def _load_config(self) -> dict:
        defaults = self.defaults()
        if not os.path.exists(self.config_path):
            return defaults
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Configuração ilegível ({self.config_path}): {e}. A usar valores por defeito.")
            return defaults
        for key, value in defaults.items():
            loaded.setdefault(key, value)
        return loaded

    def save(self):
        """Save configuration to file."""
        try:
            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(self.config, f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.error(f"Error saving config: {e}")
            raise

    def get_supabase_url(self) -> str:
        return (os.environ.get("SUPABASE_URL") or self.config.get("supabase_url") or "").rstrip("/")

    def get_supabase_key(self) -> str:
        return os.environ.get("SUPABASE_ANON_KEY") or self.config.get("supabase_anon_key") or ""

    def get_supabase_table(self) -> str:
        return self.config.get("supabase_table") or "quotes"

    def is_cloud_configured(self) -> bool:
        return bool(self.get_supabase_url() and self.get_supabase_key())

    def get_commercials(self) -> List[str]:
        return self.config.get("commercials", [])

    def get_rate_schedule(self) -> RateSchedule:
        try:
            return RateSchedule.from_config(self.config.get("labor_rates"))
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Tabela de tarifas inválida na configuração ({e}), a usar a tabela por defeito.")
            return DEFAULT_RATES

    def get_default_km_rate(self) -> float:
        return float(self.config.get("default_km_rate", DEFAULT_KM_RATE))

    def get_default_design_rate(self) -> float:
        return float(self.config.get("default_design_rate", DEFAULT_DESIGN_RATE))

    def get_export_folder(self) -> str:
        """Folder for exported JPG/XLSX files. Defaults to AppData/RubroQuote/Exports."""
        folder = self.config.get("export_folder")
        if not folder:
            folder = os.path.join(get_app_data_dir(), "Exports")
        os.makedirs(folder, exist_ok=True)
        return folder

    def set_export_folder(self, folder: str):
        self.config["export_folder"] = folder
        self.save()

    def get_local_db_path(self) -> str:
        path = self.config.get("local_db_path")
        if not path:
            path = os.path.join(get_app_data_dir(), "rubroquote_local.db")
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
        return path
