from __future__ import annotations

from typing import Any

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

from snyk_sync.errors import ConfigError

PROJECT_ROOT = Path(__file__).parent.parent.parent


class Settings(BaseSettings):
    """
    Central configuration.

    - Values loaded from the environment (``BATON_`` prefix) or `.env`
    - Comma-separated lists for multi-value settings like ORG_IDS
    """

    # ----------------------------
    # Service
    # ----------------------------
    SERVICE_NAME: str = "snyk-sync"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # ----------------------------
    # Snyk
    # ----------------------------
    API_TOKEN: str = ""
    GROUP_ID: str = ""
    BASE_URL: str = "https://api.snyk.io/v1"
    REQUEST_TIMEOUT: float = 30.0
    PAGE_SIZE: int = 50

    # store as raw string list from env; normalized by org_id_list()
    ORG_IDS: Any = Field(default_factory=list)

    # Pydantic settings config (v2 style)
    model_config = SettingsConfigDict(
        env_prefix="BATON_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def org_id_list(self) -> list[str]:
        raw = self.ORG_IDS
        if isinstance(raw, str):
            return [o.strip() for o in raw.split(",") if o.strip()]
        if isinstance(raw, (list, tuple, set)):
            return [str(o).strip() for o in raw if str(o).strip()]
        return []


def validate_settings(settings: Settings) -> None:
    if not settings.API_TOKEN:
        raise ConfigError("api-token is required (BATON_API_TOKEN)")
    if not settings.GROUP_ID:
        raise ConfigError("group-id is required (BATON_GROUP_ID)")


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
