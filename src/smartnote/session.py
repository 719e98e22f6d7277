"""
Editing session for Smart Note.

Decides, when the user leaves the editor, whether anything should be saved
and which id and timestamp the saved note carries.
"""

from datetime import datetime
from typing import Callable

from smartnote.formatting import DEFAULT_DATE_FORMAT, format_date
from smartnote.models import Note, generate_note_id, now


class EditingSession:
    """
    One pass through the editor for a new or existing note.

    The save decision is made once: leaving the editor twice (e.g. a back
    gesture firing twice) never yields a second note.
    """

    def __init__(
        self,
        initial: Note | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ):
        self.initial = initial
        self.clock = clock or now
        self.id_factory = id_factory or generate_note_id
        self.result: Note | None = None
        self._finished = False

    @property
    def is_new(self) -> bool:
        return self.initial is None

    @property
    def finished(self) -> bool:
        """Whether the save decision has been made."""
        return self._finished

    def finish(self, title: str, content: str) -> Note | None:
        """
        Leave the editor with the given field values.

        Returns the note to save, or None when there is nothing to save:
        a new note with blank title and content, an existing note whose
        trimmed fields are unchanged, or a session that already finished.
        """
        if self._finished:
            return None
        self._finished = True

        title = (title or "").strip()
        content = (content or "").strip()

        if self.initial is None:
            if not title and not content:
                return None
            self.result = Note(
                id=self.id_factory(),
                title=title,
                content=content,
                updated_at=self.clock(),
            )
            return self.result

        if title == self.initial.title.strip() and content == self.initial.content.strip():
            return None

        self.result = self.initial.copy_with(
            title=title,
            content=content,
            updated_at=self.clock(),
        )
        return self.result

    def header_label(self, date_format: str = DEFAULT_DATE_FORMAT) -> str:
        """Editor header: 'New note' or the last update time."""
        if self.initial is None:
            return "New note"
        return f"Updated: {format_date(self.initial.updated_at, date_format)}"
