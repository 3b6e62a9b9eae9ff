"""Centralized settings management for the local events service."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings powered by pydantic-settings.

    Loads configuration from environment variables and a .env file located
    at the project root.
    """

    # -------------------------------------------------------------------------
    # ENVIRONMENT
    # -------------------------------------------------------------------------
    ENV: str = "development"
    DEBUG: bool = True

    # -------------------------------------------------------------------------
    # LOGGING
    # -------------------------------------------------------------------------
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # -------------------------------------------------------------------------
    # SOURCE API KEYS
    # -------------------------------------------------------------------------
    TICKETMASTER_API_KEY: SecretStr | None = None
    YELP_API_KEY: SecretStr | None = None

    # -------------------------------------------------------------------------
    # SEARCH
    # -------------------------------------------------------------------------
    REQUEST_TIMEOUT_SECONDS: float = Field(10.0, gt=0)
    DEFAULT_RADIUS_MILES: float = Field(20.0, gt=0)

    # -------------------------------------------------------------------------
    # PATHS
    # -------------------------------------------------------------------------
    # BASE_DIR points to the project root
    BASE_DIR: Path = Path(__file__).resolve().parents[2]

    INGESTION_CONFIG_PATH: Path = BASE_DIR / "src" / "configs" / "ingestion.yaml"

    # -------------------------------------------------------------------------
    # CONFIGURATION
    # -------------------------------------------------------------------------
    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[2] / ".env"),
        env_file_encoding="utf-8",
        # Allow extra fields in .env but ignore them in the model
        extra="ignore",
    )

    def api_key(self, source_id: str) -> str | None:
        """
        Plain-text API key for a source, if configured.

        Parameters
        ----------
        source_id : str
            Source name as used in ingestion.yaml (e.g. "ticketmaster").

        Returns
        -------
        str | None
            The key, or None when unset or blank.
        """
        secret = getattr(self, f"{source_id.upper()}_API_KEY", None)
        if secret is None:
            return None
        return secret.get_secret_value() or None


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns
    -------
    Settings
        The singleton settings instance.
    """
    return Settings()
