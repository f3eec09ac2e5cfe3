"""Day classification and grouping for reminders.

Pure functions over a snapshot of reminders. Nothing is cached: every call
recomputes from the collection it is given.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta, tzinfo
from enum import Enum
from typing import Iterable, Optional

from . import config
from .models import Reminder, now_local


class Progress(str, Enum):
    """Completion level of a day group."""
    COMPLETE = "complete"        # every reminder done
    IN_PROGRESS = "in_progress"  # at least half done
    STARTING = "starting"        # less than half done


def classify_progress(completed: int, total: int) -> Progress:
    """Three-way completion level; both thresholds are inclusive."""
    if total <= 0:
        return Progress.STARTING
    ratio = completed / total
    if ratio >= config.PROGRESS_COMPLETE:
        return Progress.COMPLETE
    if ratio >= config.PROGRESS_IN_PROGRESS:
        return Progress.IN_PROGRESS
    return Progress.STARTING


@dataclass
class DayGroup:
    """Reminders sharing one bucket day, in source order."""
    day: date
    reminders: list[Reminder] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        return len(self.reminders)

    @property
    def completed_count(self) -> int:
        return sum(1 for r in self.reminders if r.is_done)

    @property
    def completion_ratio(self) -> float:
        if not self.reminders:
            return 0.0
        return self.completed_count / self.total_count

    @property
    def progress(self) -> Progress:
        return classify_progress(self.completed_count, self.total_count)


def _today(today: Optional[date], tz: Optional[tzinfo]) -> date:
    return today if today is not None else now_local(tz).date()


def grouped_by_day(
    reminders: Iterable[Reminder],
    tz: Optional[tzinfo] = None
) -> list[DayGroup]:
    """Group reminders by bucket day, most recent day first.

    Args:
        reminders: Source collection (its order is kept inside each group)
        tz: Calendar zone (default from config)

    Returns:
        One DayGroup per day that has at least one reminder
    """
    groups: dict[date, DayGroup] = {}
    for reminder in reminders:
        day = reminder.bucket_day(tz)
        if day not in groups:
            groups[day] = DayGroup(day=day)
        groups[day].reminders.append(reminder)

    return sorted(groups.values(), key=lambda g: g.day, reverse=True)


def today(
    reminders: Iterable[Reminder],
    today: Optional[date] = None,
    tz: Optional[tzinfo] = None
) -> list[Reminder]:
    """Reminders whose bucket day is today."""
    current = _today(today, tz)
    return [r for r in reminders if r.bucket_day(tz) == current]


def overdue(
    reminders: Iterable[Reminder],
    today: Optional[date] = None,
    tz: Optional[tzinfo] = None
) -> list[Reminder]:
    """Unfinished reminders whose bucket day is before today."""
    current = _today(today, tz)
    return [r for r in reminders if not r.is_done and r.bucket_day(tz) < current]


def reminders_for_day(
    reminders: Iterable[Reminder],
    day: date,
    tz: Optional[tzinfo] = None
) -> Optional[list[Reminder]]:
    """Reminders of the group for a calendar day, or None if that day is empty."""
    for group in grouped_by_day(reminders, tz):
        if group.day == day:
            return group.reminders
    return None


def pending_count(reminders: Iterable[Reminder]) -> int:
    return sum(1 for r in reminders if not r.is_done)


def completed_count(reminders: Iterable[Reminder]) -> int:
    return sum(1 for r in reminders if r.is_done)


def week_days(anchor: date) -> list[date]:
    """The seven days of the Monday-started week containing anchor."""
    start = anchor - timedelta(days=anchor.weekday())
    return [start + timedelta(days=i) for i in range(7)]


def shift_week(week_start: date, weeks: int) -> date:
    """Move a week start forward (or back, for negative weeks)."""
    return week_start + timedelta(days=7 * weeks)
