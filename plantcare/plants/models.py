"""Plant-related models and schemas."""

from datetime import date, datetime
from typing import Optional, List, Union
from pydantic import BaseModel, Field
from enum import Enum


class ActivityType(str, Enum):
    """Care activity types logged by the CRUD layer."""
    WATERING = "watering"
    FERTILIZING = "fertilizing"
    REPOTTING = "repotting"
    PRUNING = "pruning"
    MISTING = "misting"
    ROTATING = "rotating"
    CHECKED = "checked"  # logged when a reminder is snoozed


class Plant(BaseModel):
    """
    Plant snapshot as seen by the engine.

    Dates are kept loose on purpose: historical records can hold strings or
    garbage, and the classifier falls back instead of failing.
    """
    id: str
    household_id: str
    user_id: str  # owner, receives server-side reminders
    name: str
    location: str = ""
    last_care_date: Optional[Union[datetime, date, str]] = None
    watering_frequency_days: Optional[Union[int, float, str]] = 7  # clamped to >= 1 by the classifier
    snoozed_until: Optional[Union[datetime, date, str]] = None


class CareActivity(BaseModel):
    """Immutable care log row."""
    id: str
    plant_id: str
    user_id: str
    activity_type: str
    performed_at: datetime


class SnoozeRequest(BaseModel):
    """Schema to snooze a plant's reminders."""
    snoozed_until: datetime = Field(..., description="Reminders are suppressed until this instant")


class PlantUrgencyResponse(BaseModel):
    """Response schema for a plant's current urgency."""
    plant_id: str
    name: str
    location: str = ""
    status: str
    days_until: int
    days_overdue: int = 0
    next_due: date
    snoozed_until: Optional[datetime] = None
    status_text: str
    needs_water: bool
    needs_correction: bool = False  # last care date was missing or unreadable


class PlantStatusGroupsResponse(BaseModel):
    """Dashboard buckets."""
    to_water_today: List[PlantUrgencyResponse] = Field(default_factory=list)
    upcoming: List[PlantUrgencyResponse] = Field(default_factory=list)
    snoozed: List[PlantUrgencyResponse] = Field(default_factory=list)
    ok: List[PlantUrgencyResponse] = Field(default_factory=list)
