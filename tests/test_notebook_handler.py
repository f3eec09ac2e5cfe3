"""Tests for the presentation-layer entry points."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from domains.notebook.handler import (
    handle_attachment_change,
    handle_text_note,
    handle_voice_command,
    load_attachment,
)
from domains.notebook.media import FileMediaStore, MediaError
from domains.notebook.models import Reminder

TZ = ZoneInfo("Europe/Istanbul")
NOW = datetime(2026, 10, 19, 10, 30, tzinfo=TZ)


class TestVoiceCommand:
    """Voice submit -> add."""

    def test_adds_parsed_reminder(self, store, mock_notifier):
        message = handle_voice_command(store, "salı doktora git")

        assert message == "Not eklendi: doktora git"
        reminder = store.reminders[0]
        assert reminder.reminder_at == datetime(2026, 10, 20, 9, 0, tzinfo=TZ)
        mock_notifier.schedule.assert_called_once_with(reminder)

    def test_not_understood(self, store):
        assert handle_voice_command(store, "hatırlat") == "Komut anlaşılamadı"
        assert store.reminders == []


class TestTextNote:
    """Manual add with optional image."""

    def test_with_image(self, store, mock_media):
        result = handle_text_note(store, "  fatura öde ", image=b"img")

        assert result.ok
        assert result.reminder.title == "fatura öde"
        assert result.reminder.attachment == "stored.jpg"
        mock_media.store.assert_called_once_with(b"img")

    def test_image_failure_leaves_no_attachment(self, store, mock_media):
        mock_media.store.side_effect = MediaError("disk full")

        result = handle_text_note(store, "fatura öde", image=b"img")

        assert result.ok
        assert result.reminder.attachment is None
        assert len(result.warnings) == 1

    def test_with_due_time(self, store, mock_notifier):
        due = NOW + timedelta(hours=3)
        result = handle_text_note(store, "ara", reminder_at=due)

        assert result.reminder.reminder_at == due
        mock_notifier.schedule.assert_called_once()

    def test_empty_title_rejected(self, store, mock_media):
        with pytest.raises(ValueError):
            handle_text_note(store, "   ", image=b"img")

        mock_media.store.assert_not_called()
        assert store.reminders == []

    def test_empty_title_leaves_no_file(self, store, tmp_path):
        store.media = FileMediaStore(root=tmp_path / "media")

        with pytest.raises(ValueError):
            handle_text_note(store, "   ", image=b"img")

        assert list((tmp_path / "media").iterdir()) == []

    def test_listener_sees_image_warning(self, store, mock_media):
        received = []
        store.subscribe(received.append)
        mock_media.store.side_effect = MediaError("disk full")

        handle_text_note(store, "fatura öde", image=b"img")

        assert len(received) == 1
        assert received[0].warnings == ["Görsel kaydedilemedi: disk full"]


class TestAttachmentChange:
    """Replace or remove an attachment."""

    def test_replace_releases_old(self, store, mock_media):
        reminder = Reminder(title="x", created_at=NOW, attachment="old.jpg")
        store.add(reminder)

        result = handle_attachment_change(store, reminder.id, b"new")

        assert result.ok
        assert store.get(reminder.id).attachment == "stored.jpg"
        mock_media.delete.assert_called_once_with("old.jpg")

    def test_remove(self, store, mock_media):
        reminder = Reminder(title="x", created_at=NOW, attachment="old.jpg")
        store.add(reminder)

        handle_attachment_change(store, reminder.id, None)

        assert store.get(reminder.id).attachment is None
        mock_media.store.assert_not_called()
        mock_media.delete.assert_called_once_with("old.jpg")

    def test_failed_store_keeps_old(self, store, mock_media):
        reminder = Reminder(title="x", created_at=NOW, attachment="old.jpg")
        store.add(reminder)
        mock_media.store.side_effect = MediaError("disk full")

        result = handle_attachment_change(store, reminder.id, b"new")

        assert result.ok is False
        assert store.get(reminder.id).attachment == "old.jpg"
        mock_media.delete.assert_not_called()

    def test_release_failure_reported_to_listeners(self, store, mock_media):
        reminder = Reminder(title="x", created_at=NOW, attachment="old.jpg")
        store.add(reminder)
        received = []
        store.subscribe(received.append)
        mock_media.delete.side_effect = MediaError("locked")

        result = handle_attachment_change(store, reminder.id, b"new")

        assert result.ok
        assert received[0].warnings == ["Görsel silinemedi: locked"]

    def test_unknown_reminder(self, store):
        assert handle_attachment_change(store, "missing", b"new").ok is False


def test_load_attachment(store, mock_media):
    with_image = Reminder(title="x", created_at=NOW, attachment="a.jpg")
    without = Reminder(title="y", created_at=NOW)

    assert load_attachment(store, with_image) == b"image-bytes"
    assert load_attachment(store, without) is None

    mock_media.fetch.return_value = None
    assert load_attachment(store, with_image) is None
