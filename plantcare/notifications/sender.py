"""
Notification Sender

Server-initiated fan-out of one message across every eligible channel.

Key Design Decisions:
- Eligibility is decided per channel from the user's settings
- Channels are independent: each attempt gets its own log row, and one
  channel failing never affects another (no rollback, no retry)
- A failed attempt is terminal and only visible in the delivery log
- The manual test path does not look at plant urgency at all
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from plantcare.core.config import EngineConfig, get_settings
from plantcare.notifications.content import (
    SelfTestContent,
    SummaryContent,
    WateringReminderContent,
)
from plantcare.notifications.device_push_service import SnsDeviceTransport
from plantcare.notifications.email_service import SendGridEmailTransport
from plantcare.notifications.models import (
    NotificationChannel,
    NotificationLogEntry,
    NotificationSettings,
    OutgoingMessage,
)
from plantcare.notifications.push_service import PushoverTransport
from plantcare.plants.urgency import UrgencyState

logger = logging.getLogger(__name__)

SUMMARY_CHANNELS = (NotificationChannel.PUSH, NotificationChannel.DEVICE)


def default_transports() -> Dict[NotificationChannel, object]:
    transports = (PushoverTransport(), SendGridEmailTransport(), SnsDeviceTransport())
    return {t.channel: t for t in transports}


class NotificationSender:
    """
    Fans a message out over push, email and device channels.

    Collaborators are injected: a settings store (`get(user_id)`), a delivery
    log (`append(entry)`) and one transport per channel.
    """

    def __init__(
        self,
        settings_store,
        delivery_log,
        transports: Optional[Dict[NotificationChannel, object]] = None,
        config: Optional[EngineConfig] = None,
    ):
        self.settings_store = settings_store
        self.delivery_log = delivery_log
        self.transports = transports if transports is not None else default_transports()
        self.config = config or EngineConfig()

    # -------------------------------------------------------------------------
    # Eligibility
    # -------------------------------------------------------------------------

    def eligible_channels(self, settings: Optional[NotificationSettings]) -> List[NotificationChannel]:
        """Channels with their toggles on and every required credential present."""
        if settings is None or not settings.enabled:
            return []

        channels = []
        if settings.push_enabled and settings.push_app_token and settings.push_user_key:
            channels.append(NotificationChannel.PUSH)
        if settings.email_enabled and settings.email_address and settings.email_api_key:
            channels.append(NotificationChannel.EMAIL)
        if settings.device_push_enabled and settings.device_endpoints:
            transport = self.transports.get(NotificationChannel.DEVICE)
            if transport is not None and transport.is_configured():
                channels.append(NotificationChannel.DEVICE)

        return [c for c in channels if c in self.transports]

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    async def send_plant_reminder(self, user_id: str, plant, state: UrgencyState) -> List[NotificationLogEntry]:
        """Watering reminder for one plant. Returns the log entries written."""
        days_overdue = state.days_overdue
        urgent = days_overdue > self.config.urgent_overdue_days
        message = WateringReminderContent.message(plant.name, plant.location, days_overdue, urgent)
        app_url = get_settings().APP_WEB_URL

        outgoing = OutgoingMessage(
            title=WateringReminderContent.title(plant.name),
            message=message,
            plant_id=plant.id,
            priority=1 if urgent else 0,
            email_subject=WateringReminderContent.email_subject(plant.name, days_overdue, urgent),
            email_html=WateringReminderContent.email_html(message, app_url),
            email_text=WateringReminderContent.email_text(message, app_url),
            data={"category": "PLANT_WATERING"},
        )
        return await self._dispatch(user_id, outgoing)

    async def send_test(self, user_id: str) -> Dict[str, bool]:
        """
        Manual credentials check. Bypasses urgency entirely.

        Returns:
            {channel: success} for every eligible channel.
        """
        outgoing = OutgoingMessage(
            title=SelfTestContent.TITLE,
            message=SelfTestContent.MESSAGE,
            email_subject=SelfTestContent.EMAIL_SUBJECT,
        )
        entries = await self._dispatch(user_id, outgoing)
        return {entry.channel.value: entry.success for entry in entries}

    async def send_summary(self, user_id: str, plant_ids: Iterable[str]) -> List[NotificationLogEntry]:
        """Daily roll-up when several plants are due. Push and device only."""
        plant_ids = list(plant_ids)
        outgoing = OutgoingMessage(
            title=SummaryContent.TITLE,
            message=SummaryContent.message(len(plant_ids)),
            data={"category": "WATERING_SUMMARY", "plantIds": ",".join(plant_ids)},
        )
        return await self._dispatch(user_id, outgoing, only=SUMMARY_CHANNELS)

    # -------------------------------------------------------------------------
    # Fan-out
    # -------------------------------------------------------------------------

    async def _dispatch(
        self,
        user_id: str,
        outgoing: OutgoingMessage,
        only: Optional[Iterable[NotificationChannel]] = None,
    ) -> List[NotificationLogEntry]:
        settings = await self.settings_store.get(user_id)
        channels = self.eligible_channels(settings)
        if only is not None:
            allowed = set(only)
            channels = [c for c in channels if c in allowed]

        if not channels:
            logger.debug(f"No eligible channels for user {user_id}")
            return []

        entries = []
        for channel in channels:
            entries.append(await self._attempt(channel, user_id, settings, outgoing))
        return entries

    async def _attempt(
        self,
        channel: NotificationChannel,
        user_id: str,
        settings: NotificationSettings,
        outgoing: OutgoingMessage,
    ) -> NotificationLogEntry:
        error = None
        try:
            await self.transports[channel].deliver(settings, outgoing)
            success = True
        except Exception as e:
            success = False
            error = str(e)[:500]
            logger.error(f"Delivery failed on {channel.value} for user {user_id}: {e}")

        entry = NotificationLogEntry(
            user_id=user_id,
            plant_id=outgoing.plant_id,
            title=outgoing.title,
            message=outgoing.message,
            channel=channel,
            success=success,
            error=error,
            sent_at=datetime.utcnow(),
        )
        # A lost audit row must not stop the remaining channels
        try:
            return await self.delivery_log.append(entry)
        except Exception as e:
            logger.error(f"Failed to record {channel.value} delivery for user {user_id}: {e}")
            return entry
