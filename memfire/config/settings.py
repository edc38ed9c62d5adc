"""Store settings using Pydantic Settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """memfire configuration from environment variables.

    Every setting has a default, so an in-memory store can be created without
    any environment. Variables use the ``MEMFIRE_`` prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="MEMFIRE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Document ids
    # -------------------------------------------------------------------------
    AUTO_ID_LENGTH: int = Field(20, ge=20)
    """자동 생성 문서 ID 길이"""

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    LOG_JSON: bool = False
    LOG_LEVEL: str = "INFO"


# Singleton instance (lazy initialization)
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the store settings (singleton)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
