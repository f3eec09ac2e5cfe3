"""Turn a typed or spoken command into a reminder draft.

Examples:
- "yarın toplantı var"              -> "toplantı var", tomorrow 09:00
- "salı doktora git"                -> "doktora git", next Tuesday 09:00
- "remind me tomorrow to call mom"  -> "call mom", tomorrow 09:00
- "hatırlat"                        -> None (nothing left to remind about)

Due-time detection and title cleanup are two independent passes over the
same input. Phrases are matched as whole words, longest phrase first, so
"bu gün" wins over "gün" and "cumartesi" is never read as "cuma".
"""

import re
import string
from datetime import date, datetime, time, tzinfo
from typing import Callable, Iterable, Optional

from dateutil.relativedelta import relativedelta, MO, TU, WE, TH, FR, SA, SU

from logger import logger
from . import config
from .models import Reminder, now_local, to_local


# ============================================================================
# VOCABULARY (Turkish / English)
# ============================================================================

TOMORROW_PHRASES = ("yarın", "tomorrow")
TODAY_PHRASES = ("bugün", "bu gün", "today")
NEXT_WEEK_PHRASES = ("gelecek hafta", "önümüzdeki hafta", "next week")

WEEKDAY_PHRASES = (
    (MO, ("pazartesi", "monday")),
    (TU, ("salı", "tuesday")),
    (WE, ("çarşamba", "wednesday")),
    (TH, ("perşembe", "thursday")),
    (FR, ("cuma", "friday")),
    (SA, ("cumartesi", "saturday")),
    (SU, ("pazar", "sunday")),
)

COMMAND_WORDS = (
    "ekle", "görev", "hatırlat", "hatırlatma", "not",
    "add", "task", "remind", "remind me", "reminder", "note",
)
PRIORITY_WORDS = (
    "acil", "önemli", "önemli değil", "hemen", "düşük öncelik", "acele değil",
    "urgent", "important",
)
POLITENESS_WORDS = ("lütfen", "please")

# Dropped only when they open the leftover title ("... to call mom")
LEADING_CONNECTIVES = ("to", "that")

TITLE_STRIP_CHARS = string.whitespace + string.punctuation + "–—…“”‘’«»"


def turkish_lower(text: str) -> str:
    """Lower-case with Turkish dotted/dotless I rules."""
    return text.replace("I", "ı").replace("İ", "i").lower()


def _phrase_regex(phrase: str) -> str:
    parts = []
    for char in phrase:
        if char in "iı":
            # "I" lowers to "ı" under Turkish rules, so accept either form
            parts.append("[iı]")
        elif char == " ":
            parts.append(r"\s+")
        else:
            parts.append(re.escape(char))
    return "".join(parts)


def _compile_phrases(phrases: Iterable[str]) -> re.Pattern:
    ordered = sorted(set(phrases), key=len, reverse=True)
    alternation = "|".join(_phrase_regex(p) for p in ordered)
    return re.compile(rf"(?<!\w)(?:{alternation})(?!\w)")


def _weekday_phrases() -> list[str]:
    return [name for _, names in WEEKDAY_PHRASES for name in names]


STOP_WORDS = (
    COMMAND_WORDS
    + PRIORITY_WORDS
    + POLITENESS_WORDS
    + TOMORROW_PHRASES
    + TODAY_PHRASES
    + NEXT_WEEK_PHRASES
    + tuple(_weekday_phrases())
)

_STOP_PATTERN = _compile_phrases(STOP_WORDS)
_LEADING_CONNECTIVE = re.compile(
    rf"^(?:{'|'.join(LEADING_CONNECTIVES)})\s+", re.IGNORECASE
)


# ============================================================================
# DUE-TIME RULES (first match wins)
# ============================================================================

Resolver = Callable[[date], date]


def _weekday_resolver(weekday) -> Resolver:
    # days=+1 first, so today's weekday rolls a full week forward
    return lambda today: today + relativedelta(days=+1, weekday=weekday)


_RULES: list[tuple[str, re.Pattern, Resolver, int]] = [
    ("tomorrow", _compile_phrases(TOMORROW_PHRASES),
     lambda today: today + relativedelta(days=+1), config.TOMORROW_HOUR),
    ("today", _compile_phrases(TODAY_PHRASES),
     lambda today: today, config.TODAY_HOUR),
    ("next_week", _compile_phrases(NEXT_WEEK_PHRASES),
     lambda today: today + relativedelta(days=+config.NEXT_WEEK_DAYS), config.NEXT_WEEK_HOUR),
] + [
    (f"weekday:{weekday}", _compile_phrases(names),
     _weekday_resolver(weekday), config.WEEKDAY_HOUR)
    for weekday, names in WEEKDAY_PHRASES
]


def _reference_time(now: Optional[datetime], tz: Optional[tzinfo]) -> datetime:
    """Current time in the zone whose calendar the rules count in."""
    if now is None:
        return now_local(tz)
    if tz is None and now.tzinfo is not None:
        return now
    return to_local(now, tz)


def detect_due_time(
    text: str,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None
) -> Optional[datetime]:
    """Find the due time a command asks for.

    Args:
        text: Raw command text
        now: Current time (defaults to now in the notebook zone)
        tz: Calendar zone (defaults to the zone of an aware now, else the
            notebook zone)

    Returns:
        Aware datetime, or None when no temporal phrase is present
    """
    now = _reference_time(now, tz)
    lowered = turkish_lower(text)

    for name, pattern, resolve, hour in _RULES:
        if pattern.search(lowered):
            day = resolve(now.date())
            due = datetime.combine(day, time(hour=hour), tzinfo=now.tzinfo)
            logger.debug(f"Due rule '{name}' matched: {due}")
            return due

    return None


def clean_title(text: str) -> str:
    """Strip command, temporal, priority and politeness words from a command.

    Matching is case-insensitive; the remaining text keeps its original casing.
    """
    lowered = turkish_lower(text)
    # Offsets only line up when lower-casing kept the length
    source = text if len(lowered) == len(text) else lowered

    pieces = []
    last = 0
    for match in _STOP_PATTERN.finditer(lowered):
        pieces.append(source[last:match.start()])
        pieces.append(" ")
        last = match.end()
    pieces.append(source[last:])

    title = re.sub(r"\s+", " ", "".join(pieces))
    title = title.strip(TITLE_STRIP_CHARS)
    title = _LEADING_CONNECTIVE.sub("", title, count=1)
    return title.strip(TITLE_STRIP_CHARS)


def interpret(
    raw_text: str,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None
) -> Optional[Reminder]:
    """Parse a command into a reminder draft.

    Args:
        raw_text: Typed text or speech transcript
        now: Current time (defaults to now in the notebook zone)
        tz: Calendar zone for the due-time rules

    Returns:
        Unsaved Reminder, or None if nothing is left once stop words are removed
    """
    if not raw_text or not raw_text.strip():
        logger.warning("Empty command")
        return None

    now = _reference_time(now, tz)
    reminder_at = detect_due_time(raw_text, now)
    title = clean_title(raw_text)

    if not title:
        logger.warning(f"Command left no title: '{raw_text}'")
        return None

    reminder = Reminder(title=title, created_at=now, reminder_at=reminder_at)
    logger.info(f"Command parsed: '{reminder.title}' (due: {reminder.reminder_at})")
    return reminder
