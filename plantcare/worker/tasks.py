"""Celery tasks (sync wrappers around the async engine)."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict

from plantcare.worker.celery_app import celery_app

logger = logging.getLogger(__name__)


def _run_async(coro):
    """Run async function in sync Celery task."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


async def _sweep() -> Dict[str, Any]:
    from plantcare.core.database import Database
    from plantcare.engine import get_dispatch_sweep

    # Motor clients are bound to the loop they were created on
    await Database.connect()
    try:
        return await get_dispatch_sweep().run()
    finally:
        await Database.disconnect()


async def _send_test(user_id: str) -> Dict[str, bool]:
    from plantcare.core.database import Database
    from plantcare.engine import get_sender

    await Database.connect()
    try:
        return await get_sender().send_test(user_id)
    finally:
        await Database.disconnect()


@celery_app.task(name="plantcare.worker.tasks.run_dispatch_sweep", acks_late=True)
def run_dispatch_sweep() -> Dict[str, Any]:
    """
    Send watering reminders for every due plant.

    Scheduled daily by Celery Beat; can also be queued by hand.

    Returns:
        Dict with sweep statistics.
    """
    logger.info("Starting dispatch sweep")

    try:
        stats = _run_async(_sweep())
        logger.info(f"Dispatch sweep complete: {stats}")
        return stats
    except Exception as e:
        logger.error(f"Dispatch sweep failed: {e}")
        raise


@celery_app.task(name="plantcare.worker.tasks.send_test_notification", acks_late=True)
def send_test_notification(user_id: str) -> Dict[str, bool]:
    """
    Send a test message on every eligible channel for a user.

    Args:
        user_id: User's MongoDB ObjectId string.

    Returns:
        {channel: success}
    """
    logger.info(f"Sending test notification to user {user_id}")

    try:
        return _run_async(_send_test(user_id))
    except Exception as e:
        logger.error(f"Failed to send test notification to user {user_id}: {e}")
        raise
