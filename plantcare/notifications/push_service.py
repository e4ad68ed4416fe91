"""Push transport via the Pushover HTTP API."""

import logging

import httpx

from plantcare.core.config import get_settings
from plantcare.core.exceptions import DeliveryError
from plantcare.notifications.models import (
    NotificationChannel,
    NotificationSettings,
    OutgoingMessage,
)

logger = logging.getLogger(__name__)


class PushoverTransport:
    """Push channel. Credentials (app token + user key) come from the user's settings."""

    channel = NotificationChannel.PUSH

    def __init__(self, client: httpx.AsyncClient = None):
        self._client = client

    def is_configured(self) -> bool:
        return True

    async def deliver(self, settings: NotificationSettings, outgoing: OutgoingMessage) -> None:
        config = get_settings()
        payload = {
            "token": settings.push_app_token,
            "user": settings.push_user_key,
            "title": outgoing.title,
            "message": outgoing.message,
            "priority": outgoing.priority,
        }

        logger.info(f"Sending Pushover notification: \"{outgoing.title}\"")
        try:
            if self._client is not None:
                response = await self._client.post(config.PUSHOVER_API_URL, json=payload)
            else:
                async with httpx.AsyncClient(timeout=config.HTTP_TIMEOUT_SECONDS) as client:
                    response = await client.post(config.PUSHOVER_API_URL, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise DeliveryError(self.channel.value, f"HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise DeliveryError(self.channel.value, str(e)) from e

        if data.get("status") != 1:
            raise DeliveryError(self.channel.value, f"Pushover rejected message: {data.get('errors')}")
