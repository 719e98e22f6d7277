"""
Note store for Smart Note.

The whole collection is one JSON array under one key. Every save rewrites
the full array; there is no per-note storage.
"""

import json
import logging
from typing import Any, Iterable

from smartnote.backends import KeyValueBackend, make_backend
from smartnote.config import STORAGE_KEY, load_config
from smartnote.errors import CorruptStoreError, InvalidRecordError
from smartnote.models import Note, sort_notes

logger = logging.getLogger(__name__)


def encode_notes(notes: Iterable[Note]) -> str:
    """Serialize notes to the stored JSON array."""
    return json.dumps([note.to_json() for note in notes], ensure_ascii=False)


def decode_notes(raw: str | None) -> list[Note]:
    """
    Parse the stored JSON array.

    Absent or empty input is an empty collection. Records that can't become
    a note (not an object, no id) are skipped so the rest still loads.
    Raises CorruptStoreError if the blob itself is unreadable.
    """
    if raw is None or not raw.strip():
        return []

    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CorruptStoreError(f"Stored notes are not valid JSON: {e}") from e

    if not isinstance(decoded, list):
        raise CorruptStoreError(
            f"Stored notes must be a JSON array, got {type(decoded).__name__}"
        )

    notes = []
    for index, record in enumerate(decoded):
        try:
            notes.append(Note.from_json(record))
        except InvalidRecordError as e:
            logger.warning("Skipping stored record %d: %s", index, e)
    return notes


def unique_notes(notes: Iterable[Note]) -> list[Note]:
    """Keep the first note seen for each id."""
    seen = set()
    unique = []
    for note in notes:
        if note.id in seen:
            logger.warning("Skipping duplicate stored note %s", note.id)
            continue
        seen.add(note.id)
        unique.append(note)
    return unique


class NoteStore:
    """Durable whole-collection read/write against a key-value backend."""

    def __init__(self, backend: KeyValueBackend, key: str = STORAGE_KEY):
        self.backend = backend
        self.key = key

    async def load_all(self) -> list[Note]:
        """Load every note, most recently updated first, one per id."""
        raw = await self.backend.get_string(self.key)
        notes = unique_notes(sort_notes(decode_notes(raw)))
        logger.debug("Loaded %d notes from %s", len(notes), self.key)
        return notes

    async def save_all(self, notes: Iterable[Note]) -> None:
        """Replace the stored collection with notes."""
        notes = list(notes)
        await self.backend.set_string(self.key, encode_notes(notes))
        logger.debug("Saved %d notes to %s", len(notes), self.key)


def open_store(config: dict[str, Any] | None = None) -> NoteStore:
    """Build the store described by the [storage] config section."""
    config = config or load_config()
    key = config.get("storage", {}).get("key") or STORAGE_KEY
    return NoteStore(make_backend(config), key=key)
