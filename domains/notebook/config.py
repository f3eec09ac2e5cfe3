"""Configuration constants for the reminder notebook domain."""

from typing import Final
from zoneinfo import ZoneInfo

import config as app_config

# Calendar zone for day bucketing and due-time arithmetic
TIMEZONE: Final[ZoneInfo] = ZoneInfo(app_config.NOTEBOOK_TIMEZONE)

# Due times attached by the command interpreter (hour of day)
TOMORROW_HOUR: Final[int] = 9
TODAY_HOUR: Final[int] = 18
NEXT_WEEK_HOUR: Final[int] = 9
WEEKDAY_HOUR: Final[int] = 9
NEXT_WEEK_DAYS: Final[int] = 7

# Day-group progress thresholds (closed lower bounds)
PROGRESS_COMPLETE: Final[float] = 1.0
PROGRESS_IN_PROGRESS: Final[float] = 0.5

# Persistence
SAVE_KEY: Final[str] = "SavedNotes"
SCHEMA_VERSION: Final[int] = 1
PERSIST_TIMEOUT: Final[float] = 10.0
PERSIST_MAX_RETRIES: Final[int] = 2   # extra attempts after the first write
SUPABASE_TABLE: Final[str] = "notebook_store"

# Notifications
NOTIFICATION_TITLE: Final[str] = "Hatırlatma"
WEBHOOK_TIMEOUT: Final[float] = 10.0

# Media
MEDIA_EXTENSION: Final[str] = ".jpg"

# User-facing messages
MSG_ADDED: Final[str] = "Not eklendi: {title}"
MSG_DELETED: Final[str] = "Not silindi: {title}"
MSG_COMPLETED: Final[str] = "Not tamamlandı: {title}"
MSG_REOPENED: Final[str] = "Not açıldı: {title}"
MSG_UPDATED: Final[str] = "Not güncellendi: {title}"
MSG_ALL_DELETED: Final[str] = "Tüm notlar silindi"
MSG_NOT_FOUND: Final[str] = "Not bulunamadı"
MSG_NOT_UPDATED: Final[str] = "Not güncellenemedi"
MSG_DUPLICATE: Final[str] = "Not zaten kayıtlı"
MSG_NOT_UNDERSTOOD: Final[str] = "Komut anlaşılamadı"
