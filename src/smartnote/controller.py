"""
Note list controller for Smart Note.

Holds the in-memory note list for a session, applies saves and deletes,
keeps the list sorted most-recent-first, writes the whole list back through
the store after every change and notifies subscribers of each new state.
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Callable, Iterable

from smartnote.errors import NotInitializedError
from smartnote.models import Note, sort_notes
from smartnote.store import NoteStore

logger = logging.getLogger(__name__)


def filter_notes(notes: Iterable[Note], keyword: str) -> list[Note]:
    """Notes whose title contains keyword, ignoring case. Blank keyword matches all."""
    query = keyword.strip().lower()
    if not query:
        return list(notes)
    return [note for note in notes if query in note.title.lower()]


@dataclass(frozen=True)
class NoteListState:
    """Snapshot of what the list view shows."""

    is_loading: bool = True
    notes: tuple[Note, ...] = ()
    keyword: str = ""

    @property
    def visible_notes(self) -> list[Note]:
        return filter_notes(self.notes, self.keyword)


Listener = Callable[[NoteListState], None]


class NoteListController:
    """Single source of truth for the note list during a session."""

    def __init__(self, store: NoteStore):
        self.store = store
        self._state = NoteListState()
        self._listeners: list[Listener] = []
        # One mutation (and its save) at a time, so saves land in order
        self._lock = asyncio.Lock()

    @property
    def state(self) -> NoteListState:
        return self._state

    @property
    def notes(self) -> tuple[Note, ...]:
        return self._state.notes

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Call listener with every new state.

        Returns a function that removes the subscription.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        state = self._state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("State listener %r failed", listener)

    def _require_loaded(self) -> None:
        if self._state.is_loading:
            raise NotInitializedError("Note list is still loading; call initialize() first")

    async def initialize(self) -> None:
        """Load all notes from the store and publish them."""
        async with self._lock:
            notes = await self.store.load_all()
            self._state = replace(self._state, is_loading=False, notes=tuple(notes))
            logger.debug("Initialized with %d notes", len(notes))
            self._publish()

    def get(self, note_id: str) -> Note | None:
        """Find a note by exact id."""
        for note in self._state.notes:
            if note.id == note_id:
                return note
        return None

    async def upsert(self, candidate: Note) -> None:
        """
        Insert candidate, or replace the note with the same id.

        The list is re-sorted and saved in full. If the save fails the
        in-memory list keeps the change and StorageError propagates.
        """
        async with self._lock:
            self._require_loaded()
            notes = list(self._state.notes)
            for index, note in enumerate(notes):
                if note.id == candidate.id:
                    notes[index] = candidate
                    logger.debug("Replacing note %s", candidate.id)
                    break
            else:
                notes.append(candidate)
                logger.debug("Adding note %s", candidate.id)

            notes = sort_notes(notes)
            self._state = replace(self._state, notes=tuple(notes))
            try:
                await self.store.save_all(notes)
            finally:
                self._publish()

    async def commit(self, result: Note | None) -> bool:
        """Save an editing session result. None means nothing to save."""
        if result is None:
            return False
        await self.upsert(result)
        return True

    async def delete(self, note_id: str) -> bool:
        """
        Remove the note with note_id and save the list.

        Returns False if no note had that id; the list is saved either way.
        """
        async with self._lock:
            self._require_loaded()
            before = self._state.notes
            notes = tuple(note for note in before if note.id != note_id)
            self._state = replace(self._state, notes=notes)
            logger.debug("Deleting note %s (%d removed)", note_id, len(before) - len(notes))
            self._publish()
            await self.store.save_all(notes)
            return len(notes) != len(before)

    def search(self, keyword: str) -> list[Note]:
        """Notes whose title contains the trimmed keyword, ignoring case."""
        return filter_notes(self._state.notes, keyword)

    def set_keyword(self, keyword: str) -> None:
        """Change the live search keyword shown by the list view."""
        self._state = replace(self._state, keyword=keyword)
        self._publish()
