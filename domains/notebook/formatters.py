"""Display text for day groups and reminder rows (Turkish locale)."""

from datetime import date, timedelta
from typing import Optional

from .bucketing import DayGroup
from .models import Reminder, now_local, to_local

TURKISH_WEEKDAYS = [
    "Pazartesi", "Salı", "Çarşamba", "Perşembe", "Cuma", "Cumartesi", "Pazar",
]

TURKISH_MONTHS = [
    "Ocak", "Şubat", "Mart", "Nisan", "Mayıs", "Haziran",
    "Temmuz", "Ağustos", "Eylül", "Ekim", "Kasım", "Aralık",
]


def day_title(day: date, today: Optional[date] = None) -> str:
    """Heading for a day group: "Bugün", "Dün" or the weekday name."""
    today = today or now_local().date()
    if day == today:
        return "Bugün"
    if day == today - timedelta(days=1):
        return "Dün"
    return TURKISH_WEEKDAYS[day.weekday()]


def full_date(day: date) -> str:
    """e.g. "19 Ekim 2026"."""
    return f"{day.day} {TURKISH_MONTHS[day.month - 1]} {day.year}"


def progress_badge(group: DayGroup) -> str:
    return f"{group.completed_count}/{group.total_count}"


def format_reminder_line(reminder: Reminder) -> str:
    """One row of a day list: checkbox, title and due time if any."""
    box = "[x]" if reminder.is_done else "[ ]"
    line = f"{box} {reminder.title}"
    if reminder.reminder_at is not None:
        due = to_local(reminder.reminder_at)
        line += f" ({full_date(due.date())} {due.strftime('%H:%M')})"
    if reminder.attachment:
        line += " [görsel]"
    return line


def format_day_group(group: DayGroup, today: Optional[date] = None) -> str:
    """Heading line plus one line per reminder."""
    lines = [
        f"{day_title(group.day, today)} - {full_date(group.day)} ({progress_badge(group)})"
    ]
    lines.extend(f"  {format_reminder_line(r)}" for r in group.reminders)
    return "\n".join(lines)
