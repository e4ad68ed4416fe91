"""Plant, activity and member access for the engine.

The engine never owns plant records: it reads them and only ever writes
`snoozed_until`. Household scoping is done purely by query filters.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from bson import ObjectId
from pydantic import ValidationError

from plantcare.core.database import Database
from plantcare.core.exceptions import NotFoundException
from plantcare.plants.models import CareActivity, Plant

logger = logging.getLogger(__name__)


def _id_query(id_str: str) -> dict:
    """Match ObjectId ids, with a fallback for string ids from imports."""
    if ObjectId.is_valid(id_str):
        return {"_id": ObjectId(id_str)}
    return {"_id": id_str}


def _doc_to_plant(doc: dict) -> Plant:
    return Plant(
        id=str(doc["_id"]),
        household_id=str(doc.get("household_id", "")),
        user_id=str(doc.get("user_id", "")),
        name=doc.get("name") or "Your plant",
        location=doc.get("location") or "",
        last_care_date=doc.get("last_watered"),
        watering_frequency_days=doc.get("watering_frequency") or 1,
        snoozed_until=doc.get("snoozed_until"),
    )


def _docs_to_plants(docs: List[dict]) -> List[Plant]:
    """Convert documents, skipping (and logging) any that cannot be read."""
    plants = []
    for doc in docs:
        try:
            plants.append(_doc_to_plant(doc))
        except ValidationError as e:
            logger.warning(f"Skipping unreadable plant document {doc.get('_id')}: {e}")
    return plants


class PlantStore:
    """MongoDB-backed plant store."""

    @staticmethod
    def _get_collection():
        return Database.get_collection("plants")

    async def list(self, household_id: str) -> List[Plant]:
        cursor = self._get_collection().find({"household_id": household_id})
        return _docs_to_plants([doc async for doc in cursor])

    async def list_all(self) -> List[Plant]:
        """Every plant, used by the dispatch sweep snapshot."""
        cursor = self._get_collection().find({})
        return _docs_to_plants([doc async for doc in cursor])

    async def get(self, plant_id: str) -> Plant:
        doc = await self._get_collection().find_one(_id_query(plant_id))
        if not doc:
            raise NotFoundException("Plant not found")
        return _doc_to_plant(doc)

    async def set_snooze(self, plant_id: str, until: Optional[datetime]) -> Plant:
        """Set or clear the snooze. The only plant field the engine writes."""
        result = await self._get_collection().find_one_and_update(
            _id_query(plant_id),
            {"$set": {"snoozed_until": until}},
            return_document=True,
        )
        if not result:
            raise NotFoundException("Plant not found")
        logger.info(f"Snooze for plant {plant_id} set to {until}")
        return _doc_to_plant(result)


class ActivityLog:
    """Read-only view over the append-only care activity collection."""

    @staticmethod
    def _get_collection():
        return Database.get_collection("care_activities")

    async def list_for_household(
        self,
        household_id: str,
        since: Optional[datetime] = None
    ) -> List[CareActivity]:
        query: dict = {"household_id": household_id}
        if since is not None:
            query["performed_at"] = {"$gte": since}

        cursor = self._get_collection().find(query).sort("performed_at", -1)
        activities = []
        async for doc in cursor:
            activities.append(CareActivity(
                id=str(doc["_id"]),
                plant_id=str(doc.get("plant_id", "")),
                user_id=str(doc.get("user_id", "")),
                activity_type=doc.get("activity_type", "unknown"),
                performed_at=doc["performed_at"],
            ))
        return activities


class MemberDirectory:
    """Username lookup for leaderboard rows."""

    @staticmethod
    def _get_collection():
        return Database.get_collection("users")

    async def usernames(self, user_ids: Iterable[str]) -> Dict[str, str]:
        ids = list(dict.fromkeys(user_ids))
        if not ids:
            return {}
        object_ids = [ObjectId(i) for i in ids if ObjectId.is_valid(i)]
        plain_ids = [i for i in ids if not ObjectId.is_valid(i)]

        cursor = self._get_collection().find(
            {"_id": {"$in": object_ids + plain_ids}},
            {"username": 1, "name": 1},
        )
        names = {}
        async for user in cursor:
            names[str(user["_id"])] = user.get("username") or user.get("name") or "Unknown"
        return names


class PlantRepository:
    """
    Explicit snapshot of one household's plants.

    `plants` only changes when `refresh()` is called, so the scheduler and
    the stats aggregator always work against a fixed, inspectable snapshot.
    """

    def __init__(self, store, household_id: str):
        self._store = store
        self.household_id = household_id
        self._plants: Tuple[Plant, ...] = ()
        self.refreshed_at: Optional[datetime] = None

    @property
    def plants(self) -> Tuple[Plant, ...]:
        return self._plants

    async def refresh(self) -> Tuple[Plant, ...]:
        self._plants = tuple(await self._store.list(self.household_id))
        self.refreshed_at = datetime.utcnow()
        logger.debug(f"Household {self.household_id}: refreshed {len(self._plants)} plants")
        return self._plants

    def get(self, plant_id: str) -> Optional[Plant]:
        for plant in self._plants:
            if plant.id == plant_id:
                return plant
        return None
