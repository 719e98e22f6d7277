"""
Note entity for Smart Note.

A note is an immutable value: edits build a new Note with the same id and a
fresh timestamp instead of changing the stored one.
"""

import time
from datetime import datetime
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from smartnote.errors import InvalidRecordError


def now() -> datetime:
    """Current local time, timezone-aware."""
    return datetime.now().astimezone()


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO 8601 timestamp. Returns None if it can't be parsed."""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


_last_id = 0


def generate_note_id() -> str:
    """Generate a unique note ID (Unix timestamp in microseconds)."""
    global _last_id
    candidate = time.time_ns() // 1000
    # Two notes created within the same microsecond must still differ
    if candidate <= _last_id:
        candidate = _last_id + 1
    _last_id = candidate
    return str(candidate)


class Note(BaseModel):
    """A title/content pair with an identity and last-modified time."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(min_length=1, description="Opaque identity, never reassigned")
    title: str = Field(default="", description="Free-form title, may be empty")
    content: str = Field(default="", description="Free-form body, may be empty")
    updated_at: datetime = Field(
        default_factory=now,
        alias="updatedAt",
        description="Time of last modification",
    )

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("title", "content", mode="before")
    @classmethod
    def _default_text(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return ""
        return value

    @field_validator("updated_at", mode="before")
    @classmethod
    def _default_timestamp(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            return parse_timestamp(value) or now()
        return now()

    @field_validator("updated_at")
    @classmethod
    def _make_aware(cls, value: datetime) -> datetime:
        # Naive values are local time; mixing naive and aware breaks sorting
        if value.tzinfo is None:
            return value.astimezone()
        return value

    def copy_with(
        self,
        *,
        title: str | None = None,
        content: str | None = None,
        updated_at: datetime | None = None,
    ) -> "Note":
        """Return a new note with the same id and the given fields replaced."""
        return Note(
            id=self.id,
            title=self.title if title is None else title,
            content=self.content if content is None else content,
            updated_at=self.updated_at if updated_at is None else updated_at,
        )

    def to_json(self) -> dict[str, str]:
        """Serialize to a storage record."""
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_json(cls, record: Any) -> "Note":
        """
        Build a note from a storage record.

        Missing title/content default to "", a missing or unparsable
        updatedAt defaults to now. Only a record without an id is rejected.
        """
        if not isinstance(record, dict):
            raise InvalidRecordError(f"Expected an object, got {type(record).__name__}")
        try:
            return cls.model_validate(record)
        except ValidationError as e:
            raise InvalidRecordError(f"Invalid note record: {e}") from e


def sort_notes(notes: Iterable[Note]) -> list[Note]:
    """Most recently updated first. Equal timestamps keep their prior order."""
    return sorted(notes, key=lambda note: note.updated_at, reverse=True)
