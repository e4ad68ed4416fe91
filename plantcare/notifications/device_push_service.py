"""
Device Push Transport

Sends push notifications to registered mobile devices via AWS SNS.
Supports both iOS (APNs) and Android (FCM) through SNS platform endpoints.

One call covers all of a user's devices: the channel counts as delivered
when at least one device accepted the message.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

from plantcare.core.config import get_settings
from plantcare.core.exceptions import DeliveryError
from plantcare.notifications.models import (
    NotificationChannel,
    NotificationSettings,
    OutgoingMessage,
)

logger = logging.getLogger(__name__)


class SnsDeviceTransport:
    """Device channel backed by AWS SNS platform endpoints."""

    channel = NotificationChannel.DEVICE

    def __init__(self, sns_client=None):
        self._sns_client = sns_client

    def _get_sns_client(self):
        """
        Get AWS SNS client.

        Returns:
            boto3 SNS client or None if not configured.
        """
        if self._sns_client is not None:
            return self._sns_client

        settings = get_settings()
        if not (settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY):
            return None

        try:
            import boto3

            self._sns_client = boto3.client(
                'sns',
                region_name=settings.AWS_REGION,
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
            )
        except Exception as e:
            logger.error(f"Failed to create SNS client: {e}")
            return None
        return self._sns_client

    def is_configured(self) -> bool:
        return self._get_sns_client() is not None

    async def deliver(self, settings: NotificationSettings, outgoing: OutgoingMessage) -> None:
        sns_client = self._get_sns_client()
        if not sns_client:
            raise DeliveryError(self.channel.value, "SNS client not available")

        sent = 0
        errors = []
        for device in settings.device_endpoints:
            message = self._build_platform_message(
                platform=device.platform,
                title=outgoing.title,
                body=outgoing.message,
                data={**outgoing.data, **({"plantId": outgoing.plant_id} if outgoing.plant_id else {})},
            )
            try:
                # boto3 is blocking; keep the event loop free
                await asyncio.to_thread(
                    sns_client.publish,
                    TargetArn=device.endpoint_arn,
                    Message=json.dumps(message),
                    MessageStructure='json',
                )
                sent += 1
            except Exception as e:
                logger.error(f"Failed to publish to SNS endpoint {device.endpoint_arn}: {e}")
                errors.append(str(e))

        if sent == 0:
            raise DeliveryError(self.channel.value, "; ".join(errors) or "no devices")

        logger.info(f"Device push sent to {sent}/{len(settings.device_endpoints)} devices for user {settings.user_id}")

    @staticmethod
    def _build_platform_message(
        platform: str,
        title: str,
        body: str,
        data: Dict[str, Any],
        badge: Optional[int] = None,
    ) -> Dict[str, str]:
        """
        Build platform-specific push notification message.

        SNS requires different JSON structures for iOS and Android.
        """
        if platform == "ios":
            apns_payload = {
                "aps": {
                    "alert": {
                        "title": title,
                        "body": body
                    },
                    "sound": "default",
                    "thread-id": "watering",
                }
            }

            if badge is not None:
                apns_payload["aps"]["badge"] = badge

            apns_payload.update(data)

            return {
                "APNS": json.dumps(apns_payload),
                "APNS_SANDBOX": json.dumps(apns_payload),  # For development
                "default": body
            }

        fcm_payload = {
            "notification": {
                "title": title,
                "body": body,
            },
            "data": {str(k): str(v) for k, v in data.items()},
        }

        return {
            "GCM": json.dumps(fcm_payload),
            "default": body
        }
