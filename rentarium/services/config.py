"""Application configuration from environment variables and .env file."""

import logging
from decimal import Decimal
from typing import Optional

from pydantic import ConfigDict
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Ledger configuration loaded from environment variables.

    Pydantic automatically loads values from:
    1. OS environment variables (at instantiation time)
    2. .env file (if present)
    """

    model_config = ConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Allow extra fields in .env file
    )

    database_url: str = "sqlite:///./rentarium.db"
    log_level: str = "INFO"
    log_file: str = "logs/rentarium.log"
    locale: str = "en_PH"

    # Seed values for the utility rate table (used only when no rates row exists)
    default_electricity_rate: Decimal = Decimal("11.50")
    default_water_rate: Decimal = Decimal("25.00")


_settings_instance: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the settings instance.

    Lazy so that environment variables loaded by the entry point (load_dotenv)
    are visible at instantiation time.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
        logger.debug("Settings loaded: database=%s", _settings_instance.database_url)
    return _settings_instance


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    global _settings_instance
    _settings_instance = None


__all__ = ["Settings", "get_settings", "reset_settings"]
