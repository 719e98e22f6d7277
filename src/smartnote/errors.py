"""
Error types for Smart Note.

Failures are local to the user action that triggered them; the CLI and MCP
server turn them into messages, the core only raises.
"""


class SmartNoteError(Exception):
    """Base class for all Smart Note errors."""


class StorageError(SmartNoteError):
    """The persistence backend failed to read or write."""


class CorruptStoreError(StorageError):
    """The stored blob could not be decoded as a list of notes."""


class InvalidRecordError(SmartNoteError):
    """A single persisted record cannot be turned into a note."""


class NotInitializedError(SmartNoteError):
    """A mutation was requested before the note list finished loading."""
