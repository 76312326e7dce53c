"""Configuration management for sqlcraft.

Usage:
    >>> from sqlcraft.config import get_settings
    >>> settings = get_settings()
    >>> settings.connections["default"].dsn
"""

from sqlcraft.config.settings import (
    ConnectionSettings,
    Settings,
    SettingsError,
    get_settings,
)

__all__ = [
    "ConnectionSettings",
    "Settings",
    "SettingsError",
    "get_settings",
]
