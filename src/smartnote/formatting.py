"""
Text rendering for Smart Note.

Turns notes into the terminal cards and listings shown by the CLI.
"""

import os
from datetime import datetime
from typing import Sequence

from smartnote.models import Note

DEFAULT_DATE_FORMAT = "%d/%m/%Y %H:%M"

UNTITLED = "(Untitled)"
NO_CONTENT = "No content yet."
EMPTY_STATE = "You don't have any notes yet, create one!"
PREVIEW_LINES = 3


# ANSI color codes
class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    BRIGHT_BLACK = "\033[90m"  # Gray
    BRIGHT_CYAN = "\033[96m"

    @classmethod
    def enabled(cls) -> bool:
        """Check if colors should be enabled."""
        if os.environ.get("NO_COLOR"):
            return False
        return True


def c(text: str, *codes: str) -> str:
    """Apply color codes to text if colors are enabled."""
    if not Colors.enabled():
        return text
    return "".join(codes) + text + Colors.RESET


def format_date(value: datetime, date_format: str = DEFAULT_DATE_FORMAT) -> str:
    """Format a timestamp in local time."""
    return value.astimezone().strftime(date_format)


def card_title(note: Note) -> str:
    """Title for display; blank titles show a placeholder."""
    title = note.title.strip()
    return title.splitlines()[0] if title else UNTITLED


def content_preview(note: Note, max_lines: int = PREVIEW_LINES) -> str:
    """First few lines of the content, or a placeholder."""
    content = note.content.strip()
    if not content:
        return NO_CONTENT
    lines = content.splitlines()
    preview = "\n".join(lines[:max_lines])
    if len(lines) > max_lines:
        preview += " ..."
    return preview


def format_note_card(note: Note, date_format: str = DEFAULT_DATE_FORMAT) -> str:
    """One note as it appears in the list."""
    indent = "    "
    preview = "\n".join(indent + line for line in content_preview(note).splitlines())
    return "\n".join([
        f"{c(note.id, Colors.BRIGHT_BLACK)}  {c(card_title(note), Colors.BOLD)}",
        c(preview, Colors.DIM),
        indent + c(format_date(note.updated_at, date_format), Colors.BRIGHT_CYAN),
    ])


def format_note_list(
    notes: Sequence[Note],
    keyword: str = "",
    date_format: str = DEFAULT_DATE_FORMAT,
) -> str:
    """Format the note list, most recent first."""
    if not notes:
        if keyword.strip():
            return f"No notes match '{keyword.strip()}'."
        return EMPTY_STATE

    count = f"{len(notes)} note" + ("" if len(notes) == 1 else "s")
    header = f"Notes matching '{keyword.strip()}' ({count})" if keyword.strip() else f"Notes ({count})"
    lines = [c(header, Colors.BOLD), ""]
    for note in notes:
        lines.append(format_note_card(note, date_format))
        lines.append("")
    return "\n".join(lines).rstrip()


def format_note_detail(note: Note, date_format: str = DEFAULT_DATE_FORMAT) -> str:
    """Full note, as shown in the editor."""
    lines = [
        c(card_title(note), Colors.BOLD),
        c(f"id: {note.id}  updated: {format_date(note.updated_at, date_format)}", Colors.BRIGHT_BLACK),
        "",
        note.content if note.content.strip() else c(NO_CONTENT, Colors.DIM),
    ]
    return "\n".join(lines)
