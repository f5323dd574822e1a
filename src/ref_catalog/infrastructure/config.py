"""Runtime settings for the catalog — read from REF_CATALOG_* environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration loaded from ``REF_CATALOG_*`` env vars (or ``.env`` file)."""

    model_config = SettingsConfigDict(
        env_prefix="REF_CATALOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    fetch_timeout_seconds: float = Field(default=30.0, gt=0)
    ssh_command: str = "ssh"
    user_agent: str = "git/2.0 (ref-catalog)"
    git_daemon_port: int = Field(default=9418, gt=0, lt=65536)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton application settings (cached after first call)."""
    return Settings()
