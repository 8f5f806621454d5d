# tests/test_configuration.py
"""
Tests de la configuration (fichier JSON + variables d'environnement / .env).
"""

import json

import pytest

from domain.rates import DEFAULT_RATES
from infrastructure.configuration import ConfigurationService


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # setenv puis delenv : monkeypatch restaure l'état initial même si le .env recharge les clés
    for key in ("SUPABASE_URL", "SUPABASE_ANON_KEY"):
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)


@pytest.fixture
def make_config(tmp_path):
    def factory(values=None, env_text=None):
        config_path = tmp_path / "app_config.json"
        if values is not None:
            config_path.write_text(json.dumps(values), encoding="utf-8")
        env_file = tmp_path / ".env"
        if env_text is not None:
            env_file.write_text(env_text, encoding="utf-8")
        return ConfigurationService(config_path=str(config_path), env_file=str(env_file))
    return factory


class TestConfigurationService:

    def test_defaults_without_file(self, make_config):
        config = make_config()
        assert config.get_supabase_table() == "quotes"
        assert config.get_rate_schedule() == DEFAULT_RATES
        assert config.get_default_km_rate() == 0.5
        assert config.get_default_design_rate() == 35
        assert config.get_commercials()
        assert not config.is_cloud_configured()

    def test_file_values_merged_with_defaults(self, make_config):
        config = make_config({"commercials": ["ANA P."], "default_km_rate": 0.6})
        assert config.get_commercials() == ["ANA P."]
        assert config.get_default_km_rate() == 0.6
        assert config.get_default_design_rate() == 35

    def test_unreadable_file_uses_defaults(self, tmp_path):
        path = tmp_path / "app_config.json"
        path.write_text("{broken", encoding="utf-8")
        config = ConfigurationService(config_path=str(path), env_file=str(tmp_path / "none.env"))
        assert config.config == ConfigurationService.defaults()

    def test_cloud_from_file(self, make_config):
        config = make_config({"supabase_url": "https://demo.supabase.co/", "supabase_anon_key": "k"})
        assert config.get_supabase_url() == "https://demo.supabase.co"
        assert config.is_cloud_configured()

    def test_env_file_overrides_file(self, make_config):
        config = make_config(
            {"supabase_url": "https://file.supabase.co", "supabase_anon_key": "file-key"},
            env_text="SUPABASE_URL=https://env.supabase.co\nSUPABASE_ANON_KEY=env-key\n",
        )
        assert config.get_supabase_url() == "https://env.supabase.co"
        assert config.get_supabase_key() == "env-key"

    def test_rate_schedule_from_file(self, make_config):
        config = make_config({"labor_rates": {"hourly": {"1": 35, "2": 60, "3": 80}, "daily": {"1": 220}}})
        rates = config.get_rate_schedule()
        assert rates.hourly_rate(3) == 80
        assert rates.daily_rate(1) == 220

    def test_invalid_rate_schedule_falls_back(self, make_config):
        config = make_config({"labor_rates": {"hourly": {"um": 30}}})
        assert config.get_rate_schedule() == DEFAULT_RATES

    def test_save_and_reload(self, make_config, tmp_path):
        config = make_config()
        config.set_export_folder(str(tmp_path / "exports"))
        reloaded = ConfigurationService(config_path=config.config_path, env_file=str(tmp_path / "none.env"))
        assert reloaded.get_export_folder() == str(tmp_path / "exports")
        assert (tmp_path / "exports").is_dir()

    def test_local_db_path(self, make_config, tmp_path):
        config = make_config({"local_db_path": str(tmp_path / "db" / "local.db")})
        assert config.get_local_db_path() == str(tmp_path / "db" / "local.db")
        assert (tmp_path / "db").is_dir()
