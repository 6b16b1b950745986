"""Application configuration using Pydantic BaseSettings.

Loads from ``RECON_*`` environment variables and a ``.env`` file if present.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    log_level: str = "WARNING"

    # JSON document store used by the CLI
    data_dir: str = "data"

    # Order creation screens pre-fill a 10% tax rate
    default_tax_rate: Decimal = Field(default=Decimal("10"), ge=0)

    # Re-read and re-validate this many times on a version conflict
    max_commit_retries: int = Field(default=3, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="RECON_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the Settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings_for_test(**kwargs) -> Settings:
    """For testing only: replace the Settings instance with new values."""
    global _settings
    _settings = Settings(**kwargs)
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None
