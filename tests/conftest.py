from datetime import datetime, timedelta, timezone

import pytest

from smartnote.backends import MemoryBackend
from smartnote.models import Note
from smartnote.store import NoteStore

BASE_TIME = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


def at(minutes: int) -> datetime:
    """A fixed timestamp, minutes after BASE_TIME."""
    return BASE_TIME + timedelta(minutes=minutes)


def make_note(note_id: str, title: str = "", content: str = "", minutes: int = 0) -> Note:
    return Note(id=note_id, title=title, content=content, updated_at=at(minutes))


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def store(backend):
    return NoteStore(backend)


@pytest.fixture
def smartnote_env(tmp_path, monkeypatch):
    """Point config and data directories at a temp dir."""
    home = tmp_path / "data"
    config_home = tmp_path / "config"
    monkeypatch.setenv("SMARTNOTE_HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.setenv("NO_COLOR", "1")
    return home
