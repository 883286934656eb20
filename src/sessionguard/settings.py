"""
sessionguard.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hold the fixed session origin/label used by provisioning and seeding.
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Env-driven configuration (prefix `SG_`), defaults safe for local dev.
    """

    model_config = SettingsConfigDict(env_prefix="SG_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "sessionguard"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Auth
    auth_realm: str = "sessionguard"

    # Sessions opened by provisioning/seeding (not by real clients).
    session_origin: str = "127.0.0.1"
    session_label: str = "Lab"

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./sessionguard.db"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Nothing here is secret: session keys are random per session and only their
# digests are persisted, so there is no signing key to configure.
