"""Read-only access to per-user notification channel settings."""

from typing import List, Optional

from plantcare.core.database import Database
from plantcare.notifications.models import DeviceEndpoint, NotificationSettings


def _doc_to_settings(doc: dict, devices: List[dict]) -> NotificationSettings:
    return NotificationSettings(
        user_id=str(doc["user_id"]),
        enabled=doc.get("enabled", True),
        push_enabled=doc.get("push_enabled", True),
        push_app_token=doc.get("push_app_token"),
        push_user_key=doc.get("push_user_key"),
        email_enabled=doc.get("email_enabled", False),
        email_address=doc.get("email_address"),
        email_api_key=doc.get("email_api_key"),
        device_push_enabled=doc.get("device_push_enabled", True),
        device_endpoints=[
            DeviceEndpoint(endpoint_arn=d["endpoint_arn"], platform=d.get("platform", "ios"))
            for d in devices
            if d.get("endpoint_arn")
        ],
    )


class NotificationSettingsStore:
    """Settings are written by the settings UI; the engine only reads them."""

    @staticmethod
    def _get_collection():
        return Database.get_collection("notification_settings")

    @staticmethod
    def _get_devices_collection():
        return Database.get_collection("device_tokens")

    async def _active_devices(self, user_id: str) -> List[dict]:
        cursor = self._get_devices_collection().find({"user_id": user_id, "is_active": True})
        return [device async for device in cursor]

    async def get(self, user_id: str) -> Optional[NotificationSettings]:
        doc = await self._get_collection().find_one({"user_id": user_id})
        if not doc:
            return None
        return _doc_to_settings(doc, await self._active_devices(user_id))

    async def list_enabled(self) -> List[NotificationSettings]:
        """Every user with the master toggle on (dispatch sweep input)."""
        cursor = self._get_collection().find({"enabled": True})
        result = []
        async for doc in cursor:
            result.append(_doc_to_settings(doc, await self._active_devices(str(doc["user_id"]))))
        return result
