"""Core module - config, database, dependencies, exceptions."""

from plantcare.core.config import get_settings, Settings, EngineConfig
from plantcare.core.database import Database
from plantcare.core.dependencies import get_current_user
from plantcare.core.exceptions import (
    AppException,
    NotFoundException,
    UnauthorizedException,
    AlertSchedulingError,
    DeliveryError,
)

__all__ = [
    "get_settings",
    "Settings",
    "EngineConfig",
    "Database",
    "get_current_user",
    "AppException",
    "NotFoundException",
    "UnauthorizedException",
    "AlertSchedulingError",
    "DeliveryError",
]
