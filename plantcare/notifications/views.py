"""Notifications API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from plantcare.core.config import get_settings
from plantcare.core.dependencies import get_current_user
from plantcare.engine import get_delivery_log, get_sender
from plantcare.notifications.delivery_log import DeliveryLog
from plantcare.notifications.models import NotificationLogResponse, SendTestResponse
from plantcare.notifications.sender import NotificationSender

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.post("/test", response_model=SendTestResponse)
async def send_test_notification(
    current_user: dict = Depends(get_current_user),
    sender: NotificationSender = Depends(get_sender),
):
    """
    Send a test message on every eligible channel.

    Ignores plant urgency so credentials can be checked at any time.
    Every attempt is recorded in the delivery log.
    """
    results = await sender.send_test(current_user["id"])
    # Every eligible channel is attempted exactly once
    return SendTestResponse(results=results, eligible_channels=list(results))


@router.get("/log", response_model=NotificationLogResponse)
async def get_notification_log(
    limit: Optional[int] = Query(default=None, ge=1, le=200),
    current_user: dict = Depends(get_current_user),
    delivery_log: DeliveryLog = Depends(get_delivery_log),
):
    """Recent delivery attempts for the caller, newest first."""
    limit = limit or get_settings().NOTIFICATION_LOG_DEFAULT_LIMIT
    entries = await delivery_log.list_recent(limit=limit, user_id=current_user["id"])
    return NotificationLogResponse(entries=entries, count=len(entries))
