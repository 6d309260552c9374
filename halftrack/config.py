"""Application configuration with environment-specific profiles.

Supports dev, staging, and production environments via APP_ENV.
All values can be overridden by environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache


@dataclass(frozen=True)
class Settings:
    """Immutable application settings resolved from environment."""

    database_url: str
    app_env: str = "dev"
    log_level: str = "INFO"
    state_key: str = "halftrack_v2"

    # Completions older than this many days need explicit confirmation
    stale_completion_days: int = 7

    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    request_id_header_name: str = "X-Request-ID"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


# -- Environment profiles --

_ENV_PROFILES: dict[str, dict] = {
    "dev": {
        "log_level": "DEBUG",
        "stale_completion_days": 7,
    },
    "staging": {
        "log_level": "INFO",
        "stale_completion_days": 7,
    },
    "production": {
        "log_level": "WARNING",
        "stale_completion_days": 7,
    },
}


def get_database_url() -> str:
    """Resolve database URL from env var, falling back to a local SQLite file."""
    env_url = os.getenv("DATABASE_URL")
    if env_url:
        return env_url
    return "sqlite:///halftrack.db"


def _split_csv(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build Settings by merging environment profile with env-var overrides."""
    app_env = os.getenv("APP_ENV", "dev")
    profile = _ENV_PROFILES.get(app_env, _ENV_PROFILES["dev"])

    return Settings(
        database_url=get_database_url(),
        app_env=app_env,
        log_level=os.getenv("LOG_LEVEL", profile.get("log_level", "INFO")),
        state_key=os.getenv("STATE_KEY", "halftrack_v2"),
        stale_completion_days=int(
            os.getenv("STALE_COMPLETION_DAYS", str(profile.get("stale_completion_days", 7)))
        ),
        cors_origins=_split_csv(os.getenv("CORS_ORIGINS", "*")) or ["*"],
        request_id_header_name=os.getenv("REQUEST_ID_HEADER", "X-Request-ID"),
    )
