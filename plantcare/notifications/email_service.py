"""Email transport via the SendGrid v3 HTTP API."""

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


class SendGridEmailTransport:
    """Email channel. Recipient address and API key come from the user's settings."""

    channel = NotificationChannel.EMAIL

    def __init__(self, client: httpx.AsyncClient = None):
        self._client = client

    def is_configured(self) -> bool:
        return True

    @staticmethod
    def _build_payload(settings: NotificationSettings, outgoing: OutgoingMessage) -> dict:
        config = get_settings()
        content = [{"type": "text/plain", "value": outgoing.email_text or outgoing.message}]
        if outgoing.email_html:
            content.append({"type": "text/html", "value": outgoing.email_html})

        return {
            "personalizations": [{"to": [{"email": settings.email_address}]}],
            "from": {"email": config.EMAIL_FROM_ADDRESS, "name": config.EMAIL_FROM_NAME},
            "subject": outgoing.email_subject or outgoing.title,
            "content": content,
        }

    async def deliver(self, settings: NotificationSettings, outgoing: OutgoingMessage) -> None:
        """
        Send one email.

        Raises:
            DeliveryError: the provider did not accept the message.
        """
        config = get_settings()
        headers = {"Authorization": f"Bearer {settings.email_api_key}"}
        payload = self._build_payload(settings, outgoing)

        logger.info(f"Attempting to send email to {settings.email_address} with subject: {payload['subject']}")
        try:
            if self._client is not None:
                response = await self._client.post(config.SENDGRID_API_URL, json=payload, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=config.HTTP_TIMEOUT_SECONDS) as client:
                    response = await client.post(config.SENDGRID_API_URL, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            # 401: bad API key, 403: unverified sender
            detail = f"HTTP {e.response.status_code} - {e.response.text[:200]}"
            logger.error(f"Failed to send email to {settings.email_address}. Error: {detail}")
            raise DeliveryError(self.channel.value, detail) from e
        except httpx.HTTPError as e:
            logger.error(f"Unexpected error sending email to {settings.email_address}: {e}")
            raise DeliveryError(self.channel.value, str(e)) from e

        logger.info(f"Email sent successfully to {settings.email_address}")
