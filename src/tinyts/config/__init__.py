"""Configuration package."""

from tinyts.config.settings import CheckerSettings, load_settings

__all__ = [
    "CheckerSettings",
    "load_settings",
]
