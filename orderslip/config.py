from __future__ import annotations

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    """Environment configuration for OrderSlip.

    Values come from ``ORDERSLIP_*`` environment variables or a ``.env`` file.
    Presentation settings that the user edits from the UI are stored in the
    database instead (see ``settings_repository``).
    """

    app_env: str = "local"
    log_level: str = "INFO"

    # Storage directory; defaults to %LOCALAPPDATA%/OrderSlip or ~/OrderSlip
    data_dir: Optional[str] = None

    # External endpoints
    catalog_url: Optional[str] = None
    sync_url: Optional[str] = None
    request_timeout: float = 10.0

    # Email draft generation
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash"

    model_config = SettingsConfigDict(
        env_prefix="ORDERSLIP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    global _config
    if _config is None:
        _config = AppConfig()
    return _config


def set_config_for_test(**kwargs) -> AppConfig:
    """For testing only: replace the cached config with explicit values."""
    global _config
    _config = AppConfig(**kwargs)
    return _config
