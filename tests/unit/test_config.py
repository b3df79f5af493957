"""Unit tests for settings loading."""

from decimal import Decimal

import pytest

from rentarium.services.config import Settings, get_settings, reset_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    reset_settings()
    yield
    reset_settings()


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DEFAULT_ELECTRICITY_RATE", raising=False)
        monkeypatch.delenv("DEFAULT_WATER_RATE", raising=False)

        settings = Settings(_env_file=None)

        assert settings.default_electricity_rate == Decimal("11.50")
        assert settings.default_water_rate == Decimal("25.00")
        assert settings.log_file == "logs/rentarium.log"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_ELECTRICITY_RATE", "12.75")
        monkeypatch.setenv("LOCALE", "en_US")

        settings = get_settings()

        assert settings.default_electricity_rate == Decimal("12.75")
        assert settings.locale == "en_US"

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_reset_rereads_environment(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        assert get_settings().log_level == "WARNING"

        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        reset_settings()
        assert get_settings().log_level == "DEBUG"

    def test_env_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("DATABASE_URL=sqlite:///./other.db\n")

        assert Settings(_env_file=env_file).database_url == "sqlite:///./other.db"
