"""Schedule reminder notifications with APScheduler.

One date-triggered job per reminder, keyed by the reminder ID, so
re-scheduling a reminder replaces its job instead of adding a second one.
"""

from datetime import datetime
from typing import Callable, Iterable, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.date import DateTrigger

from logger import logger
from . import config
from .executor import deliver_notification
from .models import Reminder, now_local, to_local


class NotificationError(Exception):
    """Scheduling or cancelling a notification failed."""


class ReminderNotifier:
    """Owns the notification jobs for reminders.

    Usage:
        notifier = ReminderNotifier()
        notifier.start()
        notifier.schedule(reminder)   # fires deliver(reminder.id, reminder.title)
        notifier.cancel(reminder.id)
    """

    def __init__(
        self,
        scheduler: Optional[BaseScheduler] = None,
        deliver: Callable[[str, str], None] = deliver_notification,
        clock: Callable[[], datetime] = now_local
    ):
        """Initialize notifier.

        Args:
            scheduler: APScheduler instance (default: new BackgroundScheduler)
            deliver: Called with (reminder_id, title) when a reminder fires
            clock: Current-time source, used to skip past due times
        """
        self.scheduler = scheduler or BackgroundScheduler(timezone=config.TIMEZONE)
        self.deliver = deliver
        self.clock = clock
        self._scheduled_ids: set[str] = set()

    def start(self) -> None:
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("Notification scheduler started")

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Notification scheduler stopped")

    def schedule(self, reminder: Reminder) -> bool:
        """Schedule (or re-schedule) the notification for a reminder.

        A reminder without a due time, or with one already in the past, ends
        up with no pending notification.

        Returns:
            True if a job is now pending for the reminder
        """
        self.cancel(reminder.id)

        if reminder.reminder_at is None:
            return False

        run_at = to_local(reminder.reminder_at)
        if run_at <= self.clock():
            logger.warning(f"Skipping past reminder {reminder.id}: was due {run_at}")
            return False

        try:
            self.scheduler.add_job(
                self.deliver,
                trigger=DateTrigger(run_date=run_at),
                args=[reminder.id, reminder.title],
                id=reminder.id,
                name=f"reminder:{reminder.title[:30]}",
                replace_existing=True
            )
        except Exception as e:
            raise NotificationError(f"Cannot schedule reminder {reminder.id}: {e}") from e

        self._scheduled_ids.add(reminder.id)
        logger.info(f"Scheduled notification {reminder.id}: '{reminder.title}' at {run_at}")
        return True

    def cancel(self, reminder_id: str) -> bool:
        """Cancel a pending notification. Unknown IDs are ignored.

        Returns:
            True if a pending job was removed
        """
        self._scheduled_ids.discard(reminder_id)
        try:
            self.scheduler.remove_job(reminder_id)
        except JobLookupError:
            return False
        except Exception as e:
            raise NotificationError(f"Cannot cancel reminder {reminder_id}: {e}") from e

        logger.info(f"Cancelled notification {reminder_id}")
        return True

    def cancel_all(self) -> int:
        """Cancel every notification this notifier scheduled.

        Returns:
            Count of jobs removed
        """
        removed = 0
        for reminder_id in list(self._scheduled_ids):
            if self.cancel(reminder_id):
                removed += 1
        self._scheduled_ids.clear()
        logger.info(f"Cancelled {removed} notifications")
        return removed

    def restore(self, reminders: Iterable[Reminder]) -> int:
        """Re-schedule future reminders, e.g. after a restart.

        Returns:
            Count of notifications scheduled
        """
        loaded = 0
        for reminder in reminders:
            if reminder.reminder_at is None:
                continue
            try:
                if self.schedule(reminder):
                    loaded += 1
            except NotificationError as e:
                logger.error(f"Failed to restore reminder {reminder.id}: {e}")

        logger.info(f"Restored {loaded} pending notifications")
        return loaded

    def pending_ids(self) -> set[str]:
        """IDs of reminders with a pending notification."""
        return {job.id for job in self.scheduler.get_jobs() if job.id in self._scheduled_ids}
