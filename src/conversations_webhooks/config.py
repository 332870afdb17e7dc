from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _default_database_url() -> str:
    return os.getenv(
        "STATE_DATABASE_URL",
        f"sqlite:///{PROJECT_ROOT / 'conversations_webhooks.db'}",
    )


class Settings(BaseModel):
    # Project root (repo root in local dev)
    project_root: Path = PROJECT_ROOT

    # State database URL:
    # - Default: sqlite file in the project root (conversations_webhooks.db)
    # - Override with the STATE_DATABASE_URL env var
    # Env vars are read per instance so get_settings.cache_clear() picks up changes.
    state_database_url: str = Field(default_factory=_default_database_url)

    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    # --- Twilio credentials ---
    twilio_account_sid: str | None = Field(default_factory=lambda: os.getenv("TWILIO_ACCOUNT_SID"))
    twilio_auth_token: str | None = Field(default_factory=lambda: os.getenv("TWILIO_AUTH_TOKEN"))


@lru_cache
def get_settings() -> Settings:
    return Settings()
