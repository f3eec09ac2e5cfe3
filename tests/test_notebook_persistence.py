"""Tests for reminder persistence backends.

Uses pytest fixtures for proper test isolation - each test gets a fresh database.
"""

import json
from datetime import datetime, timedelta
from unittest.mock import Mock
from zoneinfo import ZoneInfo

import httpx
import pytest

from domains.notebook.models import Reminder
from domains.notebook.persistence import (
    MemoryPersistence,
    PersistenceError,
    SQLitePersistence,
    SupabasePersistence,
    build_persistence,
    decode_reminders,
    encode_reminders,
)
from domains.notebook.store import ReminderStore

TZ = ZoneInfo("Europe/Istanbul")
NOW = datetime(2026, 10, 19, 10, 30, tzinfo=TZ)


@pytest.fixture
def temp_db(tmp_path):
    """SQLite persistence in a temp directory."""
    return SQLitePersistence(db_path=tmp_path / "notebook.db")


def sample_reminders():
    return [
        Reminder(title="toplantı var", created_at=NOW, reminder_at=NOW + timedelta(days=1)),
        Reminder(title="süt al", created_at=NOW, is_done=True, completed_at=NOW, attachment="a.jpg"),
    ]


class TestPayload:
    """Stored JSON record."""

    def test_record_layout(self):
        payload = json.loads(encode_reminders(sample_reminders()))
        assert payload["version"] == 1
        assert payload["reminders"][0]["title"] == "toplantı var"
        assert payload["reminders"][1]["is_done"] is True

    def test_invalid_entries_skipped(self):
        good = Reminder(title="ok", created_at=NOW).to_dict()
        payload = json.dumps({"version": 1, "reminders": [good, {"title": "no id"}]})

        reminders = decode_reminders(payload)

        assert [r.title for r in reminders] == ["ok"]

    def test_bare_list_accepted(self):
        payload = json.dumps([Reminder(title="ok", created_at=NOW).to_dict()])
        assert len(decode_reminders(payload)) == 1

    def test_corrupt_payload_raises(self):
        with pytest.raises(PersistenceError):
            decode_reminders("{not json")

    def test_empty_payload(self):
        assert decode_reminders(None) == []


class TestSQLitePersistence:
    """Local key/value table."""

    def test_save_and_load(self, temp_db):
        reminders = sample_reminders()
        temp_db.save(reminders)

        loaded = temp_db.load()

        assert loaded == reminders

    def test_save_replaces_record(self, temp_db):
        temp_db.save(sample_reminders())
        temp_db.save([])
        assert temp_db.load() == []

    def test_clear(self, temp_db):
        temp_db.save(sample_reminders())
        temp_db.clear()
        assert temp_db.load() == []

    def test_survives_new_instance(self, tmp_path):
        SQLitePersistence(db_path=tmp_path / "n.db").save(sample_reminders())
        assert len(SQLitePersistence(db_path=tmp_path / "n.db").load()) == 2

    def test_keys_are_isolated(self, tmp_path):
        first = SQLitePersistence(db_path=tmp_path / "n.db", key="a")
        second = SQLitePersistence(db_path=tmp_path / "n.db", key="b")
        first.save(sample_reminders())
        assert second.load() == []

    def test_unopenable_database_raises(self, tmp_path):
        with pytest.raises(PersistenceError):
            SQLitePersistence(db_path=tmp_path)  # a directory, not a file


class TestSupabasePersistence:
    """Remote key/value row over httpx."""

    def make(self, handler):
        client = httpx.Client(transport=httpx.MockTransport(handler))
        return SupabasePersistence(url="https://example.supabase.co", api_key="key", client=client)

    def test_save_upserts_record(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(201)

        self.make(handler).save(sample_reminders())

        request = requests[0]
        assert request.method == "POST"
        assert request.url.path == "/rest/v1/notebook_store"
        assert "merge-duplicates" in request.headers["Prefer"]
        body = json.loads(request.content)
        assert body["key"] == "SavedNotes"
        assert len(json.loads(body["value"])["reminders"]) == 2

    def test_load(self):
        value = encode_reminders(sample_reminders())

        def handler(request):
            assert request.url.params["key"] == "eq.SavedNotes"
            return httpx.Response(200, json=[{"value": value}])

        assert [r.title for r in self.make(handler).load()] == ["toplantı var", "süt al"]

    def test_load_missing_record(self):
        assert self.make(lambda request: httpx.Response(200, json=[])).load() == []

    @pytest.mark.parametrize("body", [
        b"<html>gateway</html>",
        b'{"value": "x"}',
        b'[{"other": 1}]',
        b'[{"value": {"reminders": []}}]',
    ])
    def test_unexpected_body_raises(self, body):
        persistence = self.make(lambda request: httpx.Response(200, content=body))
        with pytest.raises(PersistenceError):
            persistence.load()

    def test_unexpected_body_does_not_break_store(self):
        persistence = self.make(lambda request: httpx.Response(200, content=b"<html>gateway</html>"))

        store = ReminderStore(persistence, Mock(), Mock(), tz=TZ, clock=lambda: NOW)

        assert store.reminders == []
        assert len(store.load_warnings) == 1

    def test_http_error_raises(self):
        persistence = self.make(lambda request: httpx.Response(500))
        with pytest.raises(PersistenceError):
            persistence.save([])

    def test_requires_configuration(self, monkeypatch):
        import config as app_config
        monkeypatch.setattr(app_config, "SUPABASE_URL", None)
        monkeypatch.setattr(app_config, "SUPABASE_KEY", None)
        with pytest.raises(PersistenceError):
            SupabasePersistence()


def test_build_persistence(monkeypatch, tmp_path):
    import config as app_config
    monkeypatch.setattr(app_config, "NOTEBOOK_DB", tmp_path / "n.db")

    assert isinstance(build_persistence("memory"), MemoryPersistence)
    assert isinstance(build_persistence("sqlite"), SQLitePersistence)
