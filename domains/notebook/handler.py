"""Entry points for the presentation layer's events.

Each handler maps one UI event (voice submit, manual add, attachment edit)
onto ReminderStore operations and returns the text to show the user.
"""

import dataclasses
from datetime import datetime
from typing import Optional

from logger import logger
from . import config
from .media import MediaError
from .models import Reminder
from .store import MutationResult, ReminderStore


def handle_voice_command(store: ReminderStore, text: str) -> str:
    """Interpret a transcript and add the resulting reminder.

    Returns:
        Message for the user ("Komut anlaşılamadı" if not understood)
    """
    draft = store.process_voice_command(text)
    if draft is None:
        return config.MSG_NOT_UNDERSTOOD

    return store.add(draft).message


def handle_text_note(
    store: ReminderStore,
    title: str,
    reminder_at: Optional[datetime] = None,
    image: Optional[bytes] = None
) -> MutationResult:
    """Add a manually typed reminder with an optional image.

    The reminder is validated before the image is stored, so a rejected
    title leaves nothing behind. A failed image store leaves the reminder
    without an attachment.

    Raises:
        ValueError: If the title is empty
    """
    reminder = Reminder(
        title=title.strip(),
        created_at=store.now(),
        reminder_at=reminder_at,
    )

    warnings = []
    if image:
        try:
            reminder.attachment = store.media.store(image)
        except MediaError as e:
            logger.error(f"Failed to store attachment: {e}")
            warnings.append(f"Görsel kaydedilemedi: {e}")

    return store.add(reminder, warnings=warnings)


def handle_attachment_change(
    store: ReminderStore,
    reminder_id: str,
    image: Optional[bytes]
) -> MutationResult:
    """Replace (image given) or remove (None) a reminder's attachment.

    The old image is released only once the replacement is stored.
    """
    reminder = store.get(reminder_id)
    if reminder is None:
        logger.warning(f"Reminder {reminder_id} not found for attachment change")
        return MutationResult(action="update", ok=False, message=config.MSG_NOT_FOUND)

    warnings = []
    attachment = None
    if image:
        try:
            attachment = store.media.store(image)
        except MediaError as e:
            logger.error(f"Failed to store attachment: {e}")
            return MutationResult(
                action="update",
                ok=False,
                reminder=reminder,
                message=config.MSG_NOT_UPDATED,
                warnings=[f"Görsel kaydedilemedi: {e}"],
            )

    if reminder.attachment:
        try:
            store.media.delete(reminder.attachment)
        except MediaError as e:
            logger.error(f"Failed to release attachment {reminder.attachment}: {e}")
            warnings.append(f"Görsel silinemedi: {e}")

    return store.update(dataclasses.replace(reminder, attachment=attachment), warnings=warnings)


def load_attachment(store: ReminderStore, reminder: Reminder) -> Optional[bytes]:
    """Image bytes for display, or None when absent or unreadable."""
    if not reminder.attachment:
        return None
    return store.media.fetch(reminder.attachment)
