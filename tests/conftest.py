"""Pytest configuration and in-memory collaborators for engine tests."""
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional

project_dir = Path(__file__).parent.parent
if str(project_dir) not in sys.path:
    sys.path.insert(0, str(project_dir))

import pytest

from plantcare.core.config import EngineConfig
from plantcare.core.exceptions import DeliveryError, NotFoundException
from plantcare.notifications.models import NotificationChannel, NotificationSettings
from plantcare.plants.models import CareActivity, Plant

# Midday, so calendar dates are the same in UTC and nearby zones
NOW = datetime(2024, 1, 8, 12, 0, tzinfo=timezone.utc)


def make_plant(plant_id: str = "p1", **overrides) -> Plant:
    fields = {
        "id": plant_id,
        "household_id": "h1",
        "user_id": "u1",
        "name": f"Plant {plant_id}",
        "location": "Kitchen",
        "last_care_date": datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc),
        "watering_frequency_days": 7,
    }
    fields.update(overrides)
    return Plant(**fields)


def make_activity(activity_id: str, performed_at: datetime, user_id: str = "u1",
                  activity_type: str = "watering", plant_id: str = "p1") -> CareActivity:
    return CareActivity(
        id=activity_id,
        plant_id=plant_id,
        user_id=user_id,
        activity_type=activity_type,
        performed_at=performed_at,
    )


class InMemoryPlantStore:

    def __init__(self, plants: Iterable[Plant] = ()):
        self.plants: Dict[str, Plant] = {p.id: p for p in plants}
        self.list_all_calls = 0

    async def list(self, household_id: str) -> List[Plant]:
        return [p for p in self.plants.values() if p.household_id == household_id]

    async def list_all(self) -> List[Plant]:
        self.list_all_calls += 1
        return list(self.plants.values())

    async def get(self, plant_id: str) -> Plant:
        if plant_id not in self.plants:
            raise NotFoundException("Plant not found")
        return self.plants[plant_id]

    async def set_snooze(self, plant_id: str, until: Optional[datetime]) -> Plant:
        plant = (await self.get(plant_id)).model_copy(update={"snoozed_until": until})
        self.plants[plant_id] = plant
        return plant


class InMemoryActivityLog:

    def __init__(self, by_household: Optional[Dict[str, List[CareActivity]]] = None):
        self.by_household = by_household or {}

    async def list_for_household(self, household_id: str, since: Optional[datetime] = None) -> List[CareActivity]:
        activities = self.by_household.get(household_id, [])
        if since is not None:
            activities = [a for a in activities if a.performed_at >= since]
        return sorted(activities, key=lambda a: a.performed_at, reverse=True)


class InMemoryMemberDirectory:

    def __init__(self, names: Optional[Dict[str, str]] = None):
        self.names = names or {}

    async def usernames(self, user_ids: Iterable[str]) -> Dict[str, str]:
        return {uid: self.names[uid] for uid in set(user_ids) if uid in self.names}


class InMemorySettingsStore:

    def __init__(self, settings: Iterable[NotificationSettings] = ()):
        self.settings = {s.user_id: s for s in settings}
        self.get_calls = 0

    async def get(self, user_id: str) -> Optional[NotificationSettings]:
        self.get_calls += 1
        return self.settings.get(user_id)

    async def list_enabled(self) -> List[NotificationSettings]:
        return [s for s in self.settings.values() if s.enabled]


class InMemoryDeliveryLog:

    def __init__(self):
        self.entries = []

    async def append(self, entry):
        stored = entry.model_copy(update={"id": str(len(self.entries) + 1)})
        self.entries.append(stored)
        return stored

    async def list_recent(self, limit: int = 50, user_id: Optional[str] = None):
        entries = [e for e in self.entries if user_id is None or e.user_id == user_id]
        return sorted(entries, key=lambda e: e.sent_at, reverse=True)[:limit]


class FakeTransport:
    """Records deliveries; raises DeliveryError when `fail` is set."""

    def __init__(self, channel: NotificationChannel, fail: bool = False, configured: bool = True,
                 error: str = "provider said no"):
        self.channel = channel
        self.fail = fail
        self.configured = configured
        self.error = error
        self.delivered = []

    def is_configured(self) -> bool:
        return self.configured

    async def deliver(self, settings, outgoing) -> None:
        self.delivered.append((settings.user_id, outgoing))
        if self.fail:
            raise DeliveryError(self.channel.value, self.error)


def push_settings(user_id: str = "u1", **overrides) -> NotificationSettings:
    """Push-eligible settings; email and device off unless overridden."""
    fields = {
        "user_id": user_id,
        "enabled": True,
        "push_enabled": True,
        "push_app_token": "app-token",
        "push_user_key": "user-key",
        "email_enabled": False,
        "device_push_enabled": False,
    }
    fields.update(overrides)
    return NotificationSettings(**fields)


@pytest.fixture
def config():
    return EngineConfig()


@pytest.fixture
def transports():
    return {channel: FakeTransport(channel) for channel in NotificationChannel}
