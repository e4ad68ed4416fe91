"""Append-only audit log of delivery attempts."""

from typing import List, Optional

from plantcare.core.database import Database
from plantcare.notifications.models import NotificationLogEntry


class DeliveryLog:
    """One document per channel attempt. Nothing here updates or deletes."""

    @staticmethod
    def _get_collection():
        return Database.get_collection("notification_log")

    async def append(self, entry: NotificationLogEntry) -> NotificationLogEntry:
        doc = entry.model_dump(exclude={"id"})
        doc["channel"] = entry.channel.value
        result = await self._get_collection().insert_one(doc)
        return entry.model_copy(update={"id": str(result.inserted_id)})

    async def list_recent(self, limit: int = 50, user_id: Optional[str] = None) -> List[NotificationLogEntry]:
        query = {"user_id": user_id} if user_id else {}
        cursor = self._get_collection().find(query).sort("sent_at", -1).limit(limit)

        entries = []
        async for doc in cursor:
            entries.append(NotificationLogEntry(
                id=str(doc["_id"]),
                user_id=doc["user_id"],
                plant_id=doc.get("plant_id"),
                title=doc["title"],
                message=doc["message"],
                channel=doc["channel"],
                success=doc["success"],
                error=doc.get("error"),
                sent_at=doc["sent_at"],
            ))
        return entries
