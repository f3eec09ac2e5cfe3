"""Pytest configuration and fixtures."""

import os
import sys
import tempfile
from datetime import datetime
from unittest.mock import Mock
from zoneinfo import ZoneInfo

import pytest

# Keep config side effects (log dir, data dir) out of the working tree
os.environ["NOTEBOOK_DATA_DIR"] = tempfile.mkdtemp(prefix="notebook_test_")
os.environ["NOTEBOOK_TIMEZONE"] = "Europe/Istanbul"
os.environ["NOTEBOOK_PERSISTENCE"] = "sqlite"
os.environ.pop("NOTEBOOK_WEBHOOK_URL", None)

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

TZ = ZoneInfo("Europe/Istanbul")

# Monday 19 October 2026, 10:30 local
NOW = datetime(2026, 10, 19, 10, 30, tzinfo=TZ)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def memory_persistence():
    from domains.notebook.persistence import MemoryPersistence
    return MemoryPersistence()


@pytest.fixture
def mock_notifier():
    """Notifier stand-in recording schedule/cancel calls."""
    from domains.notebook.notifications import ReminderNotifier
    return Mock(spec=ReminderNotifier)


@pytest.fixture
def mock_media():
    """Media store stand-in recording store/fetch/delete calls."""
    from domains.notebook.media import FileMediaStore
    media = Mock(spec=FileMediaStore)
    media.store.return_value = "stored.jpg"
    media.fetch.return_value = b"image-bytes"
    return media


@pytest.fixture
def store(memory_persistence, mock_notifier, mock_media):
    """ReminderStore over in-memory persistence with a fixed clock."""
    from domains.notebook.store import ReminderStore
    return ReminderStore(
        persistence=memory_persistence,
        notifier=mock_notifier,
        media=mock_media,
        tz=TZ,
        clock=lambda: NOW,
    )
