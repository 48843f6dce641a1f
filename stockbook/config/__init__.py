"""Configuration package."""

from stockbook.config.settings import (
    AppSettings,
    GoogleSheetsSettings,
    Settings,
    TwilioSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GoogleSheetsSettings",
    "Settings",
    "TwilioSettings",
    "get_settings",
    "validate_all_settings",
]
