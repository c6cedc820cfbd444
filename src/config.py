"""Application configuration loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """All configuration is loaded from environment variables (or .env file).

    Variables are prefixed with ``AMANAH_``, e.g. ``AMANAH_LOG_LEVEL=DEBUG``.
    """

    # --- App ---
    app_name: str = "MyAmanah"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    environment: str = "development"  # development | staging | production

    # --- Core engines ---
    config_path: str = ""  # AMANAH_CONFIG_PATH; empty = bundled amanah_config.yaml

    model_config = SettingsConfigDict(
        env_prefix="AMANAH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
