from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_sqlite_path() -> Path:
    data_home = os.getenv("XDG_DATA_HOME")
    base = Path(data_home) if data_home else Path.home() / ".local" / "share"
    return base / "worklog" / "worklog.db"


class Settings(BaseSettings):
    """Runtime configuration, read from ``WORKLOG_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="WORKLOG_", env_file=".env", case_sensitive=False)

    sqlite_path: Path = Field(default_factory=_default_sqlite_path)
    log_level: str = "WARNING"
    name_separator: str = "/"

    @field_validator("sqlite_path", mode="after")
    @classmethod
    def _expand_user(cls, value: Path) -> Path:
        return value.expanduser()

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return str(value).strip().upper() or "WARNING"


settings = Settings()
