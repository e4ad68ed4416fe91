"""
Reminder Scheduler

Derives the complete set of pending watering alerts for a set of plants.

Every run is a full rebuild: cancel every pending per-plant alert, then
classify each plant and schedule again from scratch. Alert volumes are
small (tens), so redundant cancel/schedule calls are fine and there is no
stored alert state that can drift from the plants.

Rules per plant:
- SNOOZED: no alert while the snooze is active
- next due date beyond the lookahead window: skipped (platform pending-alert limit),
  picked up by a later rebuild
- OVERDUE: one urgent alert a few seconds from now, never repeating
- OK / DUE_SOON: one alert at the configured local time on the due date
"""

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Dict, Iterable, Optional

from plantcare.core.config import EngineConfig
from plantcare.notifications.content import AlertContent
from plantcare.plants.urgency import UrgencyStatus, classify_plant, utc_now
from plantcare.reminders.alerts import (
    PLANT_ALERT_PREFIX,
    CalendarTrigger,
    ImmediateTrigger,
    plant_alert_id,
)

logger = logging.getLogger(__name__)


class ReminderScheduler:
    """
    Plans on-device alerts through an injected AlertScheduler.

    Rebuilds are single-flight: a rebuild requested while another is running
    waits for it to finish, so cancel/schedule calls never interleave on the
    same alert store.
    """

    def __init__(self, alerts, config: Optional[EngineConfig] = None):
        self.alerts = alerts
        self.config = config or EngineConfig()
        self._lock = asyncio.Lock()

    @property
    def is_rebuilding(self) -> bool:
        return self._lock.locked()

    async def rebuild(self, plants: Iterable, *, now: Optional[datetime] = None) -> Dict[str, int]:
        """
        Cancel and re-derive all per-plant alerts.

        Returns:
            Dict with counts: cancelled, scheduled, overdue, skipped_snoozed,
            skipped_out_of_window, failed. `overdue` is the badge count.
        """
        # Last occurrence wins so a plant never gets two alerts
        unique_plants = {plant.id: plant for plant in plants}

        async with self._lock:
            now_utc = utc_now(now)
            stats = {
                "cancelled": 0,
                "scheduled": 0,
                "overdue": 0,
                "skipped_snoozed": 0,
                "skipped_out_of_window": 0,
                "failed": 0,
            }

            pending = await self.alerts.list_pending()
            stale = [alert_id for alert_id in pending if alert_id.startswith(PLANT_ALERT_PREFIX)]
            if stale:
                await self.alerts.cancel(stale)
            stats["cancelled"] = len(stale)

            for plant in unique_plants.values():
                outcome = await self._schedule_plant(plant, now_utc)
                stats[outcome] += 1
                if outcome == "overdue":
                    stats["scheduled"] += 1

            logger.info(f"Reminder rebuild complete: {stats}")
            return stats

    async def _schedule_plant(self, plant, now_utc: datetime) -> str:
        state = classify_plant(plant, now=now_utc, config=self.config)

        if state.status is UrgencyStatus.SNOOZED:
            return "skipped_snoozed"

        if state.days_until > self.config.lookahead_days:
            return "skipped_out_of_window"

        title = AlertContent.title(plant.name)
        if state.status is UrgencyStatus.OVERDUE:
            body = AlertContent.overdue_body(plant.name, plant.location, state.days_overdue)
            trigger = ImmediateTrigger(seconds=self.config.overdue_alert_delay_seconds)
            urgent = True
        else:
            body = AlertContent.due_body(plant.name, plant.location)
            trigger = CalendarTrigger(on=state.next_due, at=self.config.alert_local_time)
            urgent = False

        try:
            await self.alerts.schedule(plant_alert_id(plant.id), title, body, trigger, urgent)
        except Exception as e:
            logger.error(f"Failed to schedule reminder for plant {plant.id} ({plant.name}): {e}")
            return "failed"

        return "overdue" if urgent else "scheduled"

    async def remove_plant(self, plant_id: str) -> None:
        """Drop a deleted plant's alert without a full rebuild."""
        async with self._lock:
            await self.alerts.cancel([plant_alert_id(plant_id)])

    async def send_test_alert(self) -> str:
        """Schedule a one-off alert to check permissions. Not tied to any plant."""
        alert_id = str(uuid.uuid4())
        await self.alerts.schedule(
            alert_id,
            AlertContent.TEST_TITLE,
            AlertContent.TEST_BODY,
            ImmediateTrigger(seconds=1),
            False,
        )
        return alert_id
