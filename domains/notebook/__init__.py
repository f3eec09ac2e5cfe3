"""Reminder notebook domain - voice/text reminders grouped by calendar day.

Commands are parsed into reminders by a small Turkish/English vocabulary,
kept in one in-memory collection, persisted as a single record and
scheduled as local notifications.
"""

from .bucketing import DayGroup, Progress, classify_progress, grouped_by_day, overdue, today
from .handler import handle_attachment_change, handle_text_note, handle_voice_command
from .interpreter import interpret
from .media import FileMediaStore, MediaError
from .models import Reminder
from .notifications import NotificationError, ReminderNotifier
from .persistence import (
    MemoryPersistence,
    Persistence,
    PersistenceError,
    SQLitePersistence,
    SupabasePersistence,
    build_persistence,
)
from .store import MutationResult, ReminderStore


def build_store(start_scheduler: bool = True) -> ReminderStore:
    """Wire a ReminderStore from configuration and restore its notifications."""
    notifier = ReminderNotifier()
    store = ReminderStore(
        persistence=build_persistence(),
        notifier=notifier,
        media=FileMediaStore(),
    )
    if start_scheduler:
        notifier.start()
    store.restore_notifications()
    return store


__all__ = [
    "DayGroup",
    "Progress",
    "classify_progress",
    "grouped_by_day",
    "overdue",
    "today",
    "handle_attachment_change",
    "handle_text_note",
    "handle_voice_command",
    "interpret",
    "FileMediaStore",
    "MediaError",
    "Reminder",
    "NotificationError",
    "ReminderNotifier",
    "MemoryPersistence",
    "Persistence",
    "PersistenceError",
    "SQLitePersistence",
    "SupabasePersistence",
    "build_persistence",
    "MutationResult",
    "ReminderStore",
    "build_store",
]
