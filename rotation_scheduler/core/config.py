# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Core configuration — all env-driven, zero hardcode.
Single source of truth for every tunable parameter.
"""

import os


class Settings:
    """Application settings loaded from environment variables."""

    SERVICE_NAME: str = os.getenv("SERVICE_NAME", "rotation-service")
    SERVICE_VERSION: str = os.getenv("SERVICE_VERSION", "1.0.0")
    SERVICE_PORT: int = int(os.getenv("SERVICE_PORT", "8005"))

    DATA_FILE: str = os.getenv("DATA_FILE", "")

    CALENDAR_API_URL: str = os.getenv(
        "CALENDAR_API_URL", "https://www.googleapis.com/calendar/v3"
    )
    CALENDAR_ID: str = os.getenv("CALENDAR_ID", "primary")
    CALENDAR_TIMEZONE: str = os.getenv("CALENDAR_TIMEZONE", "America/Los_Angeles")
    CALENDAR_TIMEOUT: float = float(os.getenv("CALENDAR_TIMEOUT", "10.0"))
    CALENDAR_MAX_RETRIES: int = int(os.getenv("CALENDAR_MAX_RETRIES", "3"))
    CALENDAR_BACKOFF_SECONDS: float = float(
        os.getenv("CALENDAR_BACKOFF_SECONDS", "0.5")
    )

    GOOGLE_TOKEN_URL: str = os.getenv(
        "GOOGLE_TOKEN_URL", "https://oauth2.googleapis.com/token"
    )
    GOOGLE_CLIENT_ID: str = os.getenv("GOOGLE_CLIENT_ID", "")
    GOOGLE_CLIENT_SECRET: str = os.getenv("GOOGLE_CLIENT_SECRET", "")

    EVENT_DURATION_MINUTES: int = int(os.getenv("EVENT_DURATION_MINUTES", "60"))
    REMINDER_EMAIL_MINUTES: int = int(os.getenv("REMINDER_EMAIL_MINUTES", "1440"))
    REMINDER_POPUP_MINUTES: int = int(os.getenv("REMINDER_POPUP_MINUTES", "60"))

    DEFAULT_HISTORY_LIMIT: int = int(os.getenv("DEFAULT_HISTORY_LIMIT", "100"))
    MAX_HISTORY_SIZE: int = int(os.getenv("MAX_HISTORY_SIZE", "10000"))
    MAX_SCHEDULE_PERIODS: int = int(os.getenv("MAX_SCHEDULE_PERIODS", "52"))

    CORS_ORIGINS: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
