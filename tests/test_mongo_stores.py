"""Mongo-backed stores against a small in-memory stand-in for a motor collection."""
import gc
from datetime import date, datetime, time, timezone

import pytest
from bson import ObjectId

from plantcare import engine
from plantcare.core.database import Database
from plantcare.plants.repository import PlantStore, _doc_to_plant
from plantcare.plants.urgency import classify_plant
from plantcare.reminders.alerts import CalendarTrigger, MongoAlertScheduler
from plantcare.reminders.scheduler import ReminderScheduler

from conftest import NOW


def _matches(doc, query):
    for key, expected in query.items():
        if isinstance(expected, dict) and "$in" in expected:
            if doc.get(key) not in expected["$in"]:
                return False
        elif doc.get(key) != expected:
            return False
    return True


class FakeCursor:

    def __init__(self, docs):
        self.docs = docs

    def sort(self, key, direction=1):
        self.docs = sorted(self.docs, key=lambda d: d.get(key), reverse=direction < 0)
        return self

    def __aiter__(self):
        self._iter = iter(self.docs)
        return self

    async def __anext__(self):
        try:
            return next(self._iter)
        except StopIteration:
            raise StopAsyncIteration


class FakeCollection:

    def __init__(self, docs=()):
        self.docs = [dict(d) for d in docs]

    def find(self, query=None, projection=None):
        return FakeCursor([dict(d) for d in self.docs if _matches(d, query or {})])

    async def update_one(self, query, update, upsert=False):
        for doc in self.docs:
            if _matches(doc, query):
                doc.update(update["$set"])
                return
        if upsert:
            self.docs.append({**query, **update["$set"]})

    async def delete_many(self, query):
        self.docs = [d for d in self.docs if not _matches(d, query)]


@pytest.fixture
def collections(monkeypatch):
    store = {}

    def get_collection(name):
        return store.setdefault(name, FakeCollection())

    monkeypatch.setattr(Database, "get_collection", classmethod(lambda cls, name: get_collection(name)))
    return store


def plant_doc(name, **overrides):
    doc = {
        "_id": ObjectId(),
        "household_id": "h1",
        "user_id": "u1",
        "name": name,
        "location": "Hall",
        "last_watered": datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc),
        "watering_frequency": 7,
    }
    doc.update(overrides)
    return doc


@pytest.mark.parametrize("frequency, expected_next_due", [
    ("weekly", date(2024, 1, 2)),
    (7.5, date(2024, 1, 8)),
    ("3", date(2024, 1, 4)),
    (None, date(2024, 1, 2)),
])
def test_malformed_frequency_is_clamped_not_rejected(frequency, expected_next_due):
    plant = _doc_to_plant(plant_doc("Fern", watering_frequency=frequency))

    state = classify_plant(plant, now=NOW)

    assert state.next_due == expected_next_due


async def test_unreadable_plant_documents_are_skipped(collections):
    collections["plants"] = FakeCollection([
        plant_doc("Fern"),
        plant_doc(42),
        plant_doc("Ivy", last_watered={"when": "yesterday"}),
        plant_doc("Palm", watering_frequency="weekly"),
    ])

    household = await PlantStore().list("h1")
    everything = await PlantStore().list_all()

    assert [p.name for p in household] == ["Fern", "Palm"]
    assert [p.name for p in everything] == ["Fern", "Palm"]


async def test_alert_plans_are_scoped_to_the_household(collections):
    first = MongoAlertScheduler("iphone", "h1")
    intruder = MongoAlertScheduler("iphone", "h2")
    trigger = CalendarTrigger(on=date(2024, 1, 9), at=time(8, 0))

    await first.schedule("plant-a", "Time to water Fern", "Fern needs watering today", trigger, False)

    assert await intruder.list_pending() == []
    assert await intruder.list_plan() == []

    # A rebuild from another household only touches its own alerts
    await ReminderScheduler(intruder).rebuild([], now=NOW)
    await intruder.cancel(["plant-a"])

    assert await first.list_pending() == ["plant-a"]
    plan = await first.list_plan()
    assert plan[0]["trigger"] == {"type": "calendar", "date": "2024-01-09", "time": "08:00", "repeats": False}
    assert all(doc["household_id"] == "h1" for doc in collections["pending_alerts"].docs)


def test_device_schedulers_are_shared_while_held_and_dropped_after():
    held = engine.get_device_scheduler("h1", "iphone")

    assert engine.get_device_scheduler("h1", "iphone") is held
    assert engine.get_device_scheduler("h2", "iphone") is not held
    assert held.alerts.household_id == "h1"

    del held
    gc.collect()

    assert ("h1", "iphone") not in engine._device_schedulers
    assert ("h2", "iphone") not in engine._device_schedulers
