"""Deliver fired reminder notifications."""

from typing import Optional

import httpx

import config as app_config
from logger import logger
from . import config


def deliver_notification(reminder_id: str, title: str, webhook_url: Optional[str] = None) -> bool:
    """Fire a reminder notification.

    This function is called by APScheduler when the reminder time arrives.
    The reminder title is the notification body.

    Args:
        reminder_id: The reminder ID
        title: Reminder title
        webhook_url: Push target (default: NOTEBOOK_WEBHOOK_URL)

    Returns:
        True if the notification was delivered (logging alone counts)
    """
    logger.info(f"Fired reminder {reminder_id}: {config.NOTIFICATION_TITLE} - {title}")

    webhook_url = webhook_url or app_config.NOTEBOOK_WEBHOOK_URL
    if not webhook_url:
        return True

    try:
        response = httpx.post(
            webhook_url,
            json={
                "id": reminder_id,
                "title": config.NOTIFICATION_TITLE,
                "body": title,
            },
            timeout=config.WEBHOOK_TIMEOUT
        )
        response.raise_for_status()
        return True
    except httpx.HTTPError as e:
        logger.error(f"Failed to deliver reminder {reminder_id}: {e}")
        return False
