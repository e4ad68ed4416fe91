"""
Engine wiring - builds the MongoDB-backed collaborators used by the API
and the worker. Routes receive them through FastAPI dependencies, so tests
can swap in in-memory fakes with `app.dependency_overrides`.
"""

import weakref
from functools import lru_cache
from typing import Tuple

from plantcare.care_stats.service import CareStatsAggregator
from plantcare.core.config import EngineConfig
from plantcare.notifications.delivery_log import DeliveryLog
from plantcare.notifications.sender import NotificationSender
from plantcare.notifications.settings_store import NotificationSettingsStore
from plantcare.notifications.sweep import DispatchSweep
from plantcare.plants.repository import ActivityLog, MemberDirectory, PlantStore
from plantcare.reminders.alerts import MongoAlertScheduler
from plantcare.reminders.scheduler import ReminderScheduler

# One live scheduler per (household, device) so concurrent rebuilds share a lock.
# Entries disappear once no request holds the scheduler.
_device_schedulers: "weakref.WeakValueDictionary[Tuple[str, str], ReminderScheduler]" = weakref.WeakValueDictionary()


@lru_cache
def get_engine_config() -> EngineConfig:
    return EngineConfig.from_settings()


def get_plant_store() -> PlantStore:
    return PlantStore()


def get_delivery_log() -> DeliveryLog:
    return DeliveryLog()


def get_settings_store() -> NotificationSettingsStore:
    return NotificationSettingsStore()


def get_sender() -> NotificationSender:
    return NotificationSender(
        settings_store=get_settings_store(),
        delivery_log=get_delivery_log(),
        config=get_engine_config(),
    )


def get_stats_aggregator() -> CareStatsAggregator:
    return CareStatsAggregator(
        plant_store=get_plant_store(),
        activity_log=ActivityLog(),
        member_directory=MemberDirectory(),
        config=get_engine_config(),
    )


def get_dispatch_sweep() -> DispatchSweep:
    return DispatchSweep(
        plant_store=get_plant_store(),
        settings_store=get_settings_store(),
        sender=get_sender(),
        config=get_engine_config(),
    )


def get_device_scheduler(household_id: str, device_id: str) -> ReminderScheduler:
    key = (household_id, device_id)
    scheduler = _device_schedulers.get(key)
    if scheduler is None:
        scheduler = ReminderScheduler(
            MongoAlertScheduler(device_id, household_id), config=get_engine_config()
        )
        _device_schedulers[key] = scheduler
    return scheduler


def get_scheduler_factory():
    """Dependency returning the (household_id, device_id) -> scheduler lookup."""
    return get_device_scheduler
