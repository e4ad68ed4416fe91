"""
Alert scheduling capability.

ReminderScheduler talks to whatever holds pending alerts (the phone's
notification center, or the per-device plan we store server side) only
through this interface.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Dict, Iterable, List, Optional, Protocol, Set, Union

from pymongo.errors import PyMongoError

from plantcare.core.database import Database
from plantcare.core.exceptions import AlertSchedulingError

logger = logging.getLogger(__name__)

PLANT_ALERT_PREFIX = "plant-"


def plant_alert_id(plant_id: str) -> str:
    """Stable per-plant alert identifier."""
    return f"{PLANT_ALERT_PREFIX}{plant_id}"


@dataclass(frozen=True)
class ImmediateTrigger:
    """Fire once, a few seconds from now."""
    seconds: int = 5
    repeats: bool = False

    def to_dict(self) -> dict:
        return {"type": "immediate", "seconds": self.seconds, "repeats": self.repeats}


@dataclass(frozen=True)
class CalendarTrigger:
    """Fire once at a local wall-clock time on a calendar date."""
    on: date
    at: time
    repeats: bool = False

    def to_dict(self) -> dict:
        return {
            "type": "calendar",
            "date": self.on.isoformat(),
            "time": self.at.strftime("%H:%M"),
            "repeats": self.repeats,
        }


AlertTrigger = Union[ImmediateTrigger, CalendarTrigger]


@dataclass(frozen=True)
class PendingAlert:
    alert_id: str
    title: str
    body: str
    trigger: AlertTrigger
    urgent: bool = False


class AlertScheduler(Protocol):
    async def schedule(self, alert_id: str, title: str, body: str, trigger: AlertTrigger, urgent: bool) -> None:
        ...

    async def cancel(self, alert_ids: Iterable[str]) -> None:
        ...

    async def list_pending(self) -> List[str]:
        ...


class InMemoryAlertScheduler:
    """In-memory alert store. Scheduling an existing id replaces it."""

    def __init__(self, reject: Optional[Set[str]] = None):
        self.alerts: Dict[str, PendingAlert] = {}
        self.reject = set(reject or ())
        self.schedule_calls = 0
        self.cancel_calls = 0

    async def schedule(self, alert_id, title, body, trigger, urgent=False):
        self.schedule_calls += 1
        if alert_id in self.reject:
            raise AlertSchedulingError(f"Alert {alert_id} rejected by platform")
        self.alerts[alert_id] = PendingAlert(alert_id, title, body, trigger, urgent)

    async def cancel(self, alert_ids):
        self.cancel_calls += 1
        for alert_id in alert_ids:
            self.alerts.pop(alert_id, None)

    async def list_pending(self):
        return list(self.alerts)


class MongoAlertScheduler:
    """
    Server-side alert plan for one device of one household.

    The app pulls this plan and mirrors it into the OS notification center,
    so the pending set is the same thing a local scheduler would hold. Every
    query is filtered on household_id, so a device id alone never reaches
    another household's alerts.
    """

    def __init__(self, device_id: str, household_id: str):
        self.device_id = device_id
        self.household_id = household_id

    @staticmethod
    def _get_collection():
        return Database.get_collection("pending_alerts")

    def _scope(self) -> dict:
        return {"household_id": self.household_id, "device_id": self.device_id}

    async def schedule(self, alert_id, title, body, trigger, urgent=False):
        try:
            await self._get_collection().update_one(
                {**self._scope(), "alert_id": alert_id},
                {"$set": {
                    **self._scope(),
                    "alert_id": alert_id,
                    "title": title,
                    "body": body,
                    "trigger": trigger.to_dict(),
                    "urgent": urgent,
                    "updated_at": datetime.utcnow(),
                }},
                upsert=True,
            )
        except PyMongoError as e:
            raise AlertSchedulingError(f"Failed to store alert {alert_id}: {e}") from e

    async def cancel(self, alert_ids):
        ids = list(alert_ids)
        if not ids:
            return
        await self._get_collection().delete_many({**self._scope(), "alert_id": {"$in": ids}})

    async def list_pending(self):
        cursor = self._get_collection().find(self._scope(), {"alert_id": 1})
        return [doc["alert_id"] async for doc in cursor]

    async def list_plan(self) -> List[dict]:
        """Full alert documents for the device to mirror."""
        cursor = self._get_collection().find(self._scope()).sort("alert_id", 1)
        plan = []
        async for doc in cursor:
            plan.append({
                "alert_id": doc["alert_id"],
                "title": doc.get("title", ""),
                "body": doc.get("body", ""),
                "trigger": doc.get("trigger", {}),
                "urgent": doc.get("urgent", False),
            })
        return plan
