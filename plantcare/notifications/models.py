"""Notification models and schemas."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from enum import Enum


class NotificationChannel(str, Enum):
    """Independent delivery channels."""
    PUSH = "push"      # Pushover
    EMAIL = "email"    # SendGrid
    DEVICE = "device"  # APNs / FCM via SNS


class DeviceEndpoint(BaseModel):
    """A registered mobile device (SNS platform endpoint)."""
    endpoint_arn: str
    platform: str = "ios"  # "ios" or "android"


class NotificationSettings(BaseModel):
    """Per-user channel settings. Read-only to the engine."""
    user_id: str
    enabled: bool = True  # master toggle

    push_enabled: bool = True
    push_app_token: Optional[str] = None
    push_user_key: Optional[str] = None

    email_enabled: bool = False
    email_address: Optional[str] = None
    email_api_key: Optional[str] = None

    device_push_enabled: bool = True
    device_endpoints: List[DeviceEndpoint] = Field(default_factory=list)


class NotificationLogEntry(BaseModel):
    """One delivery attempt on one channel. Append-only."""
    id: Optional[str] = None
    user_id: str
    plant_id: Optional[str] = None
    title: str
    message: str
    channel: NotificationChannel
    success: bool
    error: Optional[str] = None
    sent_at: datetime


class NotificationLogResponse(BaseModel):
    """Recent delivery attempts for audit display."""
    entries: List[NotificationLogEntry]
    count: int


class SendTestResponse(BaseModel):
    """Per-channel outcome of a manual test send."""
    results: Dict[str, bool]
    eligible_channels: List[str]


@dataclass(frozen=True)
class OutgoingMessage:
    """Channel-agnostic message handed to every transport."""
    title: str
    message: str
    plant_id: Optional[str] = None
    priority: int = 0  # 1 = urgent
    email_subject: Optional[str] = None
    email_html: Optional[str] = None
    email_text: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)
