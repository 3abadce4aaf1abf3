"""Application configuration with environment-specific profiles.

Supports dev, test, and production environments via APP_ENV.
All values can be overridden by environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional

DEFAULT_DATABASE_URL = "sqlite:///./tracker.db"


@dataclass(frozen=True)
class Settings:
    """Immutable application settings resolved from environment."""

    database_url: str
    app_env: str = "dev"
    log_level: str = "INFO"

    # IANA zone used to turn activity timestamps into calendar days; None = system local
    timezone: Optional[str] = None

    # Run analysis
    anthropic_api_key: Optional[str] = None
    analysis_model: str = "claude-sonnet-4-20250514"
    analysis_max_tokens: int = 1024
    analysis_recent_limit: int = 10

    # Webhook shared secret; when unset the endpoint accepts any caller
    webhook_token: Optional[str] = None

    # Pagination
    default_page_size: int = 50
    max_page_size: int = 200

    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:3000"])

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def analysis_enabled(self) -> bool:
        return bool(self.anthropic_api_key)


# -- Environment profiles --

_ENV_PROFILES: dict[str, dict] = {
    "dev": {
        "log_level": "DEBUG",
    },
    "test": {
        "log_level": "WARNING",
        "database_url": "sqlite:///:memory:",
    },
    "production": {
        "log_level": "WARNING",
        "max_page_size": 100,
    },
}


def get_database_url(profile: Optional[dict] = None) -> str:
    """Resolve database URL from env var, then profile, then the local default."""
    env_url = os.getenv("DATABASE_URL")
    if env_url:
        return env_url
    if profile and profile.get("database_url"):
        return profile["database_url"]
    return DEFAULT_DATABASE_URL


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build Settings by merging environment profile with env-var overrides."""
    app_env = os.getenv("APP_ENV", "dev")
    profile = _ENV_PROFILES.get(app_env, _ENV_PROFILES["dev"])

    return Settings(
        database_url=get_database_url(profile),
        app_env=app_env,
        log_level=os.getenv("LOG_LEVEL", profile.get("log_level", "INFO")),
        timezone=os.getenv("TRACKER_TIMEZONE") or None,
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or None,
        analysis_model=os.getenv("ANALYSIS_MODEL", "claude-sonnet-4-20250514"),
        analysis_max_tokens=int(os.getenv("ANALYSIS_MAX_TOKENS", "1024")),
        analysis_recent_limit=int(os.getenv("ANALYSIS_RECENT_LIMIT", "10")),
        webhook_token=os.getenv("WEBHOOK_TOKEN") or None,
        default_page_size=int(os.getenv("DEFAULT_PAGE_SIZE", "50")),
        max_page_size=int(os.getenv("MAX_PAGE_SIZE", str(profile.get("max_page_size", 200)))),
        cors_origins=_split_csv(os.getenv("CORS_ORIGINS", "http://localhost:3000")),
    )
