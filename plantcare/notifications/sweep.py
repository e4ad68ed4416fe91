"""
Dispatch Sweep

One server-side pass that sends watering reminders for every due plant.

- Reads one plant snapshot at the start; a plant watered mid-sweep may still
  get one reminder from the stale snapshot, which is tolerated
- Only users with the master toggle on are visited, and only their own plants
- A user with more than one due plant also gets a summary
- A failure for one plant or one user is logged and never stops the sweep
"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional

from plantcare.core.config import EngineConfig
from plantcare.plants.urgency import classify_plant, needs_water, utc_now

logger = logging.getLogger(__name__)


class DispatchSweep:

    def __init__(self, plant_store, settings_store, sender, config: Optional[EngineConfig] = None):
        self.plant_store = plant_store
        self.settings_store = settings_store
        self.sender = sender
        self.config = config or EngineConfig()

    async def run(self, now: Optional[datetime] = None) -> Dict[str, int]:
        """
        Run a full sweep.

        Returns:
            Dict with counts: users_processed, plants_due, reminders_sent,
            reminders_failed, summaries_sent, users_failed.
        """
        now_utc = utc_now(now)
        stats = {
            "users_processed": 0,
            "plants_due": 0,
            "reminders_sent": 0,
            "reminders_failed": 0,
            "summaries_sent": 0,
            "users_failed": 0,
        }

        enabled = await self.settings_store.list_enabled()
        if not enabled:
            logger.info("No users with notifications enabled. Done.")
            return stats

        # Snapshot taken once, before any delivery
        plants_by_owner = defaultdict(list)
        for plant in await self.plant_store.list_all():
            plants_by_owner[plant.user_id].append(plant)

        for settings in enabled:
            user_id = settings.user_id
            try:
                due = self._due_plants(plants_by_owner.get(user_id, []), now_utc)
                stats["plants_due"] += len(due)
                if due:
                    logger.info(f"User {user_id}: {len(due)} plant(s) need water")

                for plant, state in due:
                    try:
                        entries = await self.sender.send_plant_reminder(user_id, plant, state)
                    except Exception as e:
                        logger.error(f"Error sending reminder for plant {plant.id} of user {user_id}: {e}")
                        stats["reminders_failed"] += 1
                        continue
                    if any(entry.success for entry in entries):
                        stats["reminders_sent"] += 1

                if len(due) > 1:
                    entries = await self.sender.send_summary(user_id, [plant.id for plant, _ in due])
                    if any(entry.success for entry in entries):
                        stats["summaries_sent"] += 1

                stats["users_processed"] += 1
            except Exception as e:
                logger.error(f"Error sending reminders for user {user_id}: {e}")
                stats["users_failed"] += 1

        logger.info(f"Dispatch sweep complete: {stats}")
        return stats

    def _due_plants(self, plants, now_utc: datetime) -> List[tuple]:
        due = []
        for plant in plants:
            state = classify_plant(plant, now=now_utc, config=self.config)
            if needs_water(state):
                due.append((plant, state))
        # Most overdue first
        due.sort(key=lambda pair: (pair[1].days_until, pair[0].name.lower()))
        return due
