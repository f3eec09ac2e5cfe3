"""Reminder store - the single owner of the in-memory reminder collection.

Every mutation runs under one lock, flushes the whole collection to the
persistence collaborator before returning and then dispatches the matching
notification change. Collaborator failures never undo the in-memory change:
they are logged and reported as warnings on the returned MutationResult.
"""

import dataclasses
import threading
from dataclasses import dataclass, field
from datetime import date, datetime, tzinfo
from typing import Callable, Optional

from logger import logger
from . import bucketing, config
from .bucketing import DayGroup
from .interpreter import interpret
from .media import FileMediaStore, MediaError
from .models import Reminder, now_local, to_local
from .notifications import NotificationError, ReminderNotifier
from .persistence import Persistence, PersistenceError


@dataclass
class MutationResult:
    """Outcome of a store mutation, also sent to listeners."""
    action: str
    ok: bool
    reminder: Optional[Reminder] = None
    message: str = ""
    warnings: list[str] = field(default_factory=list)


Listener = Callable[[MutationResult], None]


class ReminderStore:
    """Holds the reminder collection and coordinates its collaborators.

    Usage:
        store = ReminderStore(SQLitePersistence(), ReminderNotifier(), FileMediaStore())
        draft = store.process_voice_command("yarın toplantı var")
        if draft:
            store.add(draft)
        for group in store.grouped_by_day():
            ...
    """

    def __init__(
        self,
        persistence: Persistence,
        notifier: ReminderNotifier,
        media: FileMediaStore,
        interpreter: Callable[..., Optional[Reminder]] = interpret,
        tz: Optional[tzinfo] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """Initialize the store and load the saved collection.

        Args:
            persistence: Whole-collection store
            notifier: Notification scheduler
            media: Attachment image store
            interpreter: Command parser (text, now=..., tz=...) -> Reminder | None
            tz: Calendar zone for day bucketing (default from config)
            clock: Current-time source (default: now in tz)
        """
        self.persistence = persistence
        self.notifier = notifier
        self.media = media
        self.interpreter = interpreter
        self.tz = tz or config.TIMEZONE
        self._clock = clock or (lambda: now_local(self.tz))

        self._lock = threading.RLock()
        self._listeners: list[Listener] = []
        self.error_message = ""
        self.load_warnings: list[str] = []
        self._reminders: list[Reminder] = self._load()

    # ------------------------------------------------------------------
    # Collaborator calls
    # ------------------------------------------------------------------

    def _load(self) -> list[Reminder]:
        try:
            reminders = self.persistence.load()
        except PersistenceError as e:
            logger.error(f"Failed to load reminders: {e}")
            self.load_warnings.append(f"Notlar yüklenemedi: {e}")
            return []

        logger.info(f"ReminderStore loaded {len(reminders)} reminders")
        return reminders

    def _with_retry(self, action: Callable[[], None], description: str) -> list[str]:
        """Run a persistence call with bounded retry. Returns warnings."""
        last_error: Optional[PersistenceError] = None
        for attempt in range(1 + config.PERSIST_MAX_RETRIES):
            try:
                action()
                return []
            except PersistenceError as e:
                last_error = e
                logger.warning(f"{description} attempt {attempt + 1} failed: {e}")

        logger.error(f"{description} failed: {last_error}")
        return [f"Notlar kaydedilemedi: {last_error}"]

    def _persist(self) -> list[str]:
        snapshot = list(self._reminders)
        return self._with_retry(lambda: self.persistence.save(snapshot), "Save")

    def _notify(self, action: Callable[[], object], reminder_id: str) -> list[str]:
        try:
            action()
            return []
        except NotificationError as e:
            logger.error(f"Notification change failed for {reminder_id}: {e}")
            return [f"Bildirim ayarlanamadı: {e}"]

    def _release_attachment(self, reminder: Reminder) -> list[str]:
        if not reminder.attachment:
            return []
        try:
            self.media.delete(reminder.attachment)
            return []
        except MediaError as e:
            logger.error(f"Failed to release attachment {reminder.attachment}: {e}")
            return [f"Görsel silinemedi: {e}"]

    def _index_of(self, reminder_id: str) -> Optional[int]:
        for i, reminder in enumerate(self._reminders):
            if reminder.id == reminder_id:
                return i
        return None

    def _not_found(self, action: str, reminder_id: str) -> MutationResult:
        logger.warning(f"Reminder {reminder_id} not found for {action}")
        return MutationResult(action=action, ok=False, message=config.MSG_NOT_FOUND)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> None:
        """Call listener with every MutationResult."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, result: MutationResult) -> MutationResult:
        for listener in list(self._listeners):
            try:
                listener(result)
            except Exception as e:
                logger.error(f"Store listener failed: {e}", exc_info=True)
        return result

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, reminder: Reminder, warnings: Optional[list[str]] = None) -> MutationResult:
        """Insert at the head, persist, schedule its notification if due.

        The store keeps its own copy; later changes to the passed object do
        not reach the collection. Caller warnings are reported with the result.
        """
        warnings = list(warnings or [])
        with self._lock:
            if self._index_of(reminder.id) is not None:
                logger.warning(f"Reminder with ID {reminder.id} already exists")
                return MutationResult(
                    action="add",
                    ok=False,
                    reminder=reminder,
                    message=config.MSG_DUPLICATE,
                    warnings=warnings,
                )

            reminder = dataclasses.replace(reminder)
            self._reminders.insert(0, reminder)
            warnings += self._persist()
            if reminder.reminder_at is not None:
                warnings += self._notify(lambda: self.notifier.schedule(reminder), reminder.id)

            logger.info(f"Added reminder: {reminder.id} - {reminder.title}")
            result = MutationResult(
                action="add",
                ok=True,
                reminder=dataclasses.replace(reminder),
                message=config.MSG_ADDED.format(title=reminder.title),
                warnings=warnings,
            )
        return self._emit(result)

    def delete(self, reminder_id: str) -> MutationResult:
        """Release the attachment, remove, persist, cancel the notification."""
        with self._lock:
            index = self._index_of(reminder_id)
            if index is None:
                return self._not_found("delete", reminder_id)

            reminder = self._reminders[index]
            warnings = self._release_attachment(reminder)
            del self._reminders[index]
            warnings += self._persist()
            warnings += self._notify(lambda: self.notifier.cancel(reminder_id), reminder_id)

            logger.info(f"Deleted reminder: {reminder_id}")
            result = MutationResult(
                action="delete",
                ok=True,
                reminder=reminder,
                message=config.MSG_DELETED.format(title=reminder.title),
                warnings=warnings,
            )
        return self._emit(result)

    def toggle_done(self, reminder_id: str) -> MutationResult:
        """Flip is_done (setting or clearing completed_at) and persist."""
        with self._lock:
            index = self._index_of(reminder_id)
            if index is None:
                return self._not_found("toggle_done", reminder_id)

            reminder = self._reminders[index]
            done = reminder.toggle_done(self._clock())
            warnings = self._persist()

            template = config.MSG_COMPLETED if done else config.MSG_REOPENED
            logger.info(f"Reminder {reminder_id} {'completed' if done else 'reopened'}")
            result = MutationResult(
                action="toggle_done",
                ok=True,
                reminder=dataclasses.replace(reminder),
                message=template.format(title=reminder.title),
                warnings=warnings,
            )
        return self._emit(result)

    def update(self, reminder: Reminder, warnings: Optional[list[str]] = None) -> MutationResult:
        """Replace a reminder by ID, keeping its stored id and created_at.

        The notification is re-scheduled under the same ID, which supersedes
        the previous one; without a due time it is cancelled. A reminder that
        breaks the completion invariant is rejected and nothing changes.
        """
        warnings = list(warnings or [])
        with self._lock:
            index = self._index_of(reminder.id)
            if index is None:
                return self._not_found("update", reminder.id)

            existing = self._reminders[index]
            try:
                updated = dataclasses.replace(
                    reminder, id=existing.id, created_at=existing.created_at
                )
            except ValueError as e:
                logger.warning(f"Rejected update for {reminder.id}: {e}")
                return MutationResult(
                    action="update",
                    ok=False,
                    reminder=dataclasses.replace(existing),
                    message=config.MSG_NOT_UPDATED,
                    warnings=warnings,
                )

            self._reminders[index] = updated
            warnings += self._persist()
            warnings += self._notify(lambda: self.notifier.schedule(updated), updated.id)

            logger.info(f"Updated reminder: {updated.id}")
            result = MutationResult(
                action="update",
                ok=True,
                reminder=dataclasses.replace(updated),
                message=config.MSG_UPDATED.format(title=updated.title),
                warnings=warnings,
            )
        return self._emit(result)

    def delete_all(self) -> MutationResult:
        """Clear the collection, the stored record and all notifications."""
        with self._lock:
            removed = self._reminders
            self._reminders = []

            warnings = []
            for reminder in removed:
                warnings += self._release_attachment(reminder)
            warnings += self._with_retry(self.persistence.clear, "Clear")
            warnings += self._notify(self.notifier.cancel_all, "*")

            logger.info(f"Deleted all reminders ({len(removed)})")
            result = MutationResult(
                action="delete_all",
                ok=True,
                message=config.MSG_ALL_DELETED,
                warnings=warnings,
            )
        return self._emit(result)

    def restore_notifications(self) -> int:
        """Re-schedule pending notifications for the loaded collection."""
        with self._lock:
            return self.notifier.restore([dataclasses.replace(r) for r in self._reminders])

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def process_voice_command(self, text: str) -> Optional[Reminder]:
        """Parse a command into a draft (not added). None if not understood."""
        draft = self.interpreter(text, now=self._clock(), tz=self.tz)
        if draft is None:
            self.error_message = config.MSG_NOT_UNDERSTOOD
            return None

        self.error_message = ""
        return draft

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def reminders(self) -> list[Reminder]:
        """Copies of the stored reminders, most recently added first."""
        with self._lock:
            return [dataclasses.replace(r) for r in self._reminders]

    def get(self, reminder_id: str) -> Optional[Reminder]:
        """Copy of one reminder; edits go back through update()."""
        with self._lock:
            index = self._index_of(reminder_id)
            if index is None:
                return None
            return dataclasses.replace(self._reminders[index])

    def now(self) -> datetime:
        """Current time from the store clock."""
        return self._clock()

    def _today(self) -> date:
        return to_local(self._clock(), self.tz).date()

    def grouped_by_day(self) -> list[DayGroup]:
        return bucketing.grouped_by_day(self.reminders, tz=self.tz)

    def today(self) -> list[Reminder]:
        return bucketing.today(self.reminders, today=self._today(), tz=self.tz)

    def overdue(self) -> list[Reminder]:
        return bucketing.overdue(self.reminders, today=self._today(), tz=self.tz)

    def reminders_for_day(self, day: date) -> Optional[list[Reminder]]:
        return bucketing.reminders_for_day(self.reminders, day, tz=self.tz)

    @property
    def pending_count(self) -> int:
        return bucketing.pending_count(self.reminders)

    @property
    def completed_count(self) -> int:
        return bucketing.completed_count(self.reminders)
