"""
Application configuration using Pydantic Settings.
Loads from environment variables / .env file.
"""

from dataclasses import dataclass
from datetime import time
from functools import lru_cache

import pytz
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    APP_NAME: str = "PlantCare Reminder Engine"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = True

    # MongoDB
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB_NAME: str = "plantcare"

    # JWT (tokens are issued by the auth service, we only verify them)
    JWT_SECRET_KEY: str = "your-super-secret-key-change-in-production"
    JWT_ALGORITHM: str = "HS256"

    # Urgency & reminders
    SOON_THRESHOLD_DAYS: int = 1
    UPCOMING_WINDOW_DAYS: int = 3  # dashboard "upcoming" list only
    SCHEDULING_LOOKAHEAD_DAYS: int = 30
    DEFAULT_ALERT_LOCAL_TIME: str = "08:00"
    OVERDUE_ALERT_DELAY_SECONDS: int = 5
    URGENT_OVERDUE_DAYS: int = 2

    # Care stats
    STREAK_GRACE_DAYS: int = 1
    REFERENCE_TIMEZONE: str = "UTC"

    # Delivery log
    NOTIFICATION_LOG_DEFAULT_LIMIT: int = 50

    # Push (Pushover)
    PUSHOVER_API_URL: str = "https://api.pushover.net/1/messages.json"

    # Email (SendGrid)
    SENDGRID_API_URL: str = "https://api.sendgrid.com/v3/mail/send"
    EMAIL_FROM_ADDRESS: str = "notifications@plantcare.app"
    EMAIL_FROM_NAME: str = "PlantCare"
    APP_WEB_URL: str = "https://plantcare.app"

    # Outbound HTTP
    HTTP_TIMEOUT_SECONDS: float = 10.0

    # AWS (device push via SNS)
    AWS_REGION: str = "ap-south-1"
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""

    # Celery
    CELERY_BROKER_URL: str = "sqs://"
    CELERY_QUEUE_PREFIX: str = "plantcare-"
    CELERY_VISIBILITY_TIMEOUT: int = 3600
    CELERY_TASK_TIME_LIMIT: int = 0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()


def parse_local_time(value: str) -> time:
    """Parse an "HH:MM" string into a time. Raises ValueError on bad input."""
    hour_str, _, minute_str = (value or "").strip().partition(":")
    hour, minute = int(hour_str), int(minute_str or 0)
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"Invalid local time: {value!r}")
    return time(hour=hour, minute=minute)


@dataclass(frozen=True)
class EngineConfig:
    """
    Knobs for the urgency / reminder / stats engine.

    Kept separate from Settings so the pure parts of the engine can be
    called (and tested) with explicit values.
    """
    soon_threshold_days: int = 1
    upcoming_window_days: int = 3
    lookahead_days: int = 30
    alert_local_time: time = time(8, 0)
    overdue_alert_delay_seconds: int = 5
    urgent_overdue_days: int = 2
    streak_grace_days: int = 1
    timezone: str = "UTC"

    @property
    def tz(self):
        return pytz.timezone(self.timezone)

    @classmethod
    def from_settings(cls, settings: Settings = None) -> "EngineConfig":
        settings = settings or get_settings()
        return cls(
            soon_threshold_days=settings.SOON_THRESHOLD_DAYS,
            upcoming_window_days=settings.UPCOMING_WINDOW_DAYS,
            lookahead_days=settings.SCHEDULING_LOOKAHEAD_DAYS,
            alert_local_time=parse_local_time(settings.DEFAULT_ALERT_LOCAL_TIME),
            overdue_alert_delay_seconds=settings.OVERDUE_ALERT_DELAY_SECONDS,
            urgent_overdue_days=settings.URGENT_OVERDUE_DAYS,
            streak_grace_days=settings.STREAK_GRACE_DAYS,
            timezone=settings.REFERENCE_TIMEZONE,
        )
