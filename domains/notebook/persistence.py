"""Whole-collection persistence for reminders.

The notebook is stored as one named record holding every reminder:

    {"version": 1, "reminders": [{"id": ..., "title": ..., ...}, ...]}

Backends:
- SQLitePersistence: local key/value table (default)
- SupabasePersistence: key/value table behind the Supabase REST API
- MemoryPersistence: in-process only
"""

import json
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

import httpx

import config as app_config
from logger import logger
from . import config
from .models import Reminder


class PersistenceError(Exception):
    """Reading or writing the reminder record failed."""


def encode_reminders(reminders: list[Reminder]) -> str:
    """Serialize the collection to the stored JSON payload."""
    try:
        return json.dumps(
            {
                "version": config.SCHEMA_VERSION,
                "reminders": [r.to_dict() for r in reminders],
            },
            ensure_ascii=False,
        )
    except (TypeError, ValueError) as e:
        raise PersistenceError(f"Cannot serialize reminders: {e}") from e


def decode_reminders(payload: Optional[str]) -> list[Reminder]:
    """Parse a stored payload. Invalid entries are skipped, the rest load."""
    if not payload:
        return []

    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise PersistenceError(f"Corrupted reminder record: {e}") from e

    # Legacy payloads are a bare list
    items = data.get("reminders", []) if isinstance(data, dict) else data
    if not isinstance(items, list):
        raise PersistenceError("Reminder record has no reminder list")

    reminders = []
    for item in items:
        try:
            reminders.append(Reminder.from_dict(item))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping invalid reminder: {e}")
    return reminders


class Persistence(ABC):
    """Store for the whole reminder collection."""

    @abstractmethod
    def save(self, reminders: list[Reminder]) -> None:
        """Replace the stored collection."""

    @abstractmethod
    def load(self) -> list[Reminder]:
        """Read the stored collection (empty if nothing stored)."""

    @abstractmethod
    def clear(self) -> None:
        """Remove the stored collection."""


class MemoryPersistence(Persistence):
    """Keeps the encoded record in memory."""

    def __init__(self):
        self._payload: Optional[str] = None

    def save(self, reminders: list[Reminder]) -> None:
        self._payload = encode_reminders(reminders)

    def load(self) -> list[Reminder]:
        return decode_reminders(self._payload)

    def clear(self) -> None:
        self._payload = None


class SQLitePersistence(Persistence):
    """Single-row key/value table in a local SQLite file."""

    def __init__(
        self,
        db_path: Optional[Path] = None,
        key: str = config.SAVE_KEY,
        timeout: float = config.PERSIST_TIMEOUT
    ):
        self.db_path = Path(db_path or app_config.NOTEBOOK_DB)
        self.key = key
        self.timeout = timeout

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._transaction() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
        logger.info(f"Reminder persistence initialized: {self.db_path}")

    @contextmanager
    def _transaction(self):
        """Context manager for database transactions."""
        try:
            conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        except sqlite3.Error as e:
            raise PersistenceError(f"Cannot open {self.db_path}: {e}") from e

        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise PersistenceError(f"SQLite error: {e}") from e
        finally:
            conn.close()

    def save(self, reminders: list[Reminder]) -> None:
        payload = encode_reminders(reminders)
        with self._transaction() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO kv_store (key, value) VALUES (?, ?)",
                (self.key, payload)
            )
        logger.debug(f"Saved {len(reminders)} reminders")

    def load(self) -> list[Reminder]:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT value FROM kv_store WHERE key = ?",
                (self.key,)
            ).fetchone()
        reminders = decode_reminders(row[0] if row else None)
        logger.info(f"Loaded {len(reminders)} reminders")
        return reminders

    def clear(self) -> None:
        with self._transaction() as conn:
            conn.execute("DELETE FROM kv_store WHERE key = ?", (self.key,))
        logger.info("Cleared reminder record")


class SupabasePersistence(Persistence):
    """Key/value row in a Supabase table (columns: key, value)."""

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        key: str = config.SAVE_KEY,
        table: str = config.SUPABASE_TABLE,
        timeout: float = config.PERSIST_TIMEOUT,
        client: Optional[httpx.Client] = None
    ):
        self.url = url or app_config.SUPABASE_URL
        self.api_key = api_key or app_config.SUPABASE_KEY
        if not self.url or not self.api_key:
            raise PersistenceError("Supabase not configured")

        self.key = key
        self.endpoint = f"{self.url}/rest/v1/{table}"
        self.timeout = timeout
        self._client = client or httpx.Client(timeout=timeout)

    def _headers(self, prefer: str = "return=minimal") -> dict:
        """Get headers for Supabase API calls."""
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Prefer": prefer,
        }

    def _request(self, method: str, **kwargs) -> httpx.Response:
        try:
            response = self._client.request(method, self.endpoint, timeout=self.timeout, **kwargs)
            response.raise_for_status()
            return response
        except httpx.HTTPError as e:
            raise PersistenceError(f"Supabase {method} failed: {e}") from e

    def save(self, reminders: list[Reminder]) -> None:
        self._request(
            "POST",
            headers=self._headers("resolution=merge-duplicates,return=minimal"),
            json={"key": self.key, "value": encode_reminders(reminders)},
        )
        logger.debug(f"Saved {len(reminders)} reminders to Supabase")

    def load(self) -> list[Reminder]:
        response = self._request(
            "GET",
            headers=self._headers(),
            params={"key": f"eq.{self.key}", "select": "value"},
        )
        try:
            rows = response.json()
            payload = rows[0]["value"] if rows else None
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise PersistenceError(f"Unexpected Supabase response: {e}") from e
        if payload is not None and not isinstance(payload, str):
            raise PersistenceError("Supabase record value is not text")

        reminders = decode_reminders(payload)
        logger.info(f"Loaded {len(reminders)} reminders from Supabase")
        return reminders

    def clear(self) -> None:
        self._request(
            "DELETE",
            headers=self._headers(),
            params={"key": f"eq.{self.key}"},
        )
        logger.info("Cleared reminder record in Supabase")


def build_persistence(backend: Optional[str] = None) -> Persistence:
    """Persistence backend selected by NOTEBOOK_PERSISTENCE."""
    backend = (backend or app_config.NOTEBOOK_PERSISTENCE).lower()
    if backend == "supabase":
        return SupabasePersistence()
    if backend == "memory":
        return MemoryPersistence()
    return SQLitePersistence()
