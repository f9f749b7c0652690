"""Checker settings."""

from __future__ import annotations

from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CheckerSettings(BaseSettings):
    """Type checker settings, read from TINYTS_* environment variables or .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TINYTS_",
        case_sensitive=False,
        extra="ignore",
        env_parse_none_str="null",
    )

    subtyping: bool = Field(default=False)
    recursion_limit: int | None = Field(default=None, ge=100)
    log_filter: str = Field(default="info")


def load_settings(**overrides: Any) -> CheckerSettings:
    """Load settings from the environment with optional explicit overrides."""
    return CheckerSettings(**overrides)
