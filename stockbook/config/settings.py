"""
Configuration Management for Stockbook

Every setting comes from environment variables (or .env) through
pydantic-settings. One class per external service, one for the app
itself. Services that are not configured fail only when first used.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Worksheet names within the spreadsheet
    inventory_sheet_name: str = Field(default="inventory")
    sales_sheet_name: str = Field(default="sales")
    purchases_sheet_name: str = Field(default="purchases")
    expenses_sheet_name: str = Field(default="expenses")
    summary_sheet_name: str = Field(default="summary")
    audit_sheet_name: str = Field(
        default="audit_log",
        description="Name of the sheet for audit logs"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """A missing key file only warns; containers often mount it after import."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class TwilioSettings(BaseSettings):
    """
    Twilio WhatsApp sandbox configuration.

    Replies go back as TwiML in the webhook response, so no API call
    needs these credentials. They are read only to report whether
    Twilio is configured, at startup and on GET /health.
    """

    model_config = SettingsConfigDict(
        env_prefix="TWILIO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    account_sid: str = Field(
        ...,
        description="Twilio account SID"
    )
    auth_token: str = Field(
        ...,
        description="Twilio auth token"
    )
    whatsapp_number: Optional[str] = Field(
        default=None,
        description="WhatsApp sender number, e.g. whatsapp:+14155238886"
    )


class AppSettings(BaseSettings):
    """
    Process-wide settings: server, logging and how replies render money and dates.
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1, le=65535)

    # Presentation
    currency: str = Field(
        default="EGP",
        max_length=10,
        description="Currency label appended to money values in replies"
    )
    timezone: str = Field(
        default="Africa/Cairo",
        description="Reference time zone for 'today' and 'this month' profit figures"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown time zone: {v}")
        return v

    @property
    def tzinfo(self) -> ZoneInfo:
        """Get the reference time zone object."""
        return ZoneInfo(self.timezone)


class Settings(BaseSettings):
    """Entry point to every settings group."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Each group is read on access, so a missing Twilio config
    # does not stop the books from working

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def twilio(self) -> TwilioSettings:
        return TwilioSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Shared Settings instance.

    Tests that change the environment call get_settings.cache_clear().
    """
    return Settings()


def validate_all_settings() -> dict:
    """
    Check which settings groups load from the current environment.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the failing ones.
    """
    results = {}

    settings = get_settings()

    for name in ("google_sheets", "twilio", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
