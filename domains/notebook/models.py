"""Reminder data model.

A reminder is one note in the notebook: a title, a done flag with its
completion timestamp, an optional due time and an optional image handle.
The calendar day a reminder is listed under is derived, never stored.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, tzinfo
from typing import Optional

from dateutil.parser import isoparse

from . import config


def now_local(tz: Optional[tzinfo] = None) -> datetime:
    """Current time as an aware datetime in the notebook zone."""
    return datetime.now(tz or config.TIMEZONE)


def to_local(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Express a datetime in the notebook zone (naive values are taken as local)."""
    tz = tz or config.TIMEZONE
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def local_day(value: datetime, tz: Optional[tzinfo] = None) -> date:
    """Calendar day of a timestamp in the notebook zone."""
    return to_local(value, tz).date()


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    return isoparse(value)


def _format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat()


@dataclass
class Reminder:
    """A single reminder note.

    Invariants:
    - title is never empty
    - completed_at is set exactly when is_done is True
    """
    title: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    is_done: bool = False
    created_at: datetime = field(default_factory=now_local)
    completed_at: Optional[datetime] = None
    reminder_at: Optional[datetime] = None
    attachment: Optional[str] = None  # media store handle

    def __post_init__(self):
        if not self.id:
            raise ValueError("Reminder ID cannot be empty")
        if not self.title or not self.title.strip():
            raise ValueError("Reminder title cannot be empty")
        if not isinstance(self.created_at, datetime):
            raise TypeError("created_at must be datetime")
        if self.is_done != (self.completed_at is not None):
            raise ValueError("completed_at must be set if and only if the reminder is done")

    def bucket_day(self, tz: Optional[tzinfo] = None) -> date:
        """Day this reminder is listed under.

        A finished reminder moves to the day it was completed; an open one
        stays on the day it was created.
        """
        if self.completed_at is not None:
            return local_day(self.completed_at, tz)
        return local_day(self.created_at, tz)

    def mark_done(self, now: Optional[datetime] = None) -> None:
        self.is_done = True
        self.completed_at = now or now_local()

    def reopen(self) -> None:
        self.is_done = False
        self.completed_at = None

    def toggle_done(self, now: Optional[datetime] = None) -> bool:
        """Flip the done flag. Returns the new value."""
        if self.is_done:
            self.reopen()
        else:
            self.mark_done(now)
        return self.is_done

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "id": self.id,
            "title": self.title,
            "is_done": self.is_done,
            "created_at": _format_timestamp(self.created_at),
            "completed_at": _format_timestamp(self.completed_at),
            "reminder_at": _format_timestamp(self.reminder_at),
            "attachment": self.attachment,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Reminder":
        """Create Reminder from dict."""
        return cls(
            id=data["id"],
            title=data["title"],
            is_done=bool(data.get("is_done", False)),
            created_at=isoparse(data["created_at"]),
            completed_at=_parse_timestamp(data.get("completed_at")),
            reminder_at=_parse_timestamp(data.get("reminder_at")),
            attachment=data.get("attachment"),
        )
