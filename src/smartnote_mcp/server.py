"""
MCP Server for Smart Note.

Exposes the note list as tools for MCP clients.
"""

import asyncio
import logging

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from smartnote.config import configure_logging, load_config
from smartnote.controller import NoteListController
from smartnote.formatting import card_title, format_date
from smartnote.models import Note
from smartnote.session import EditingSession
from smartnote.store import open_store

logger = logging.getLogger(__name__)

# Create MCP server
server = Server("smartnote")


def format_notes_plain(notes: list[Note], title: str, limit: int = 20) -> str:
    """Format notes as plain text (no colors), one line each."""
    if not notes:
        return f"{title}\n\nNo notes found."

    lines = [title, ""]
    for note in notes[:limit]:
        lines.append(f"{note.id}  {format_date(note.updated_at)}  {card_title(note)[:50]}")

    if len(notes) > limit:
        lines.append(f"\n... and {len(notes) - limit} more")

    return "\n".join(lines)


def text(message: str) -> list[TextContent]:
    return [TextContent(type="text", text=message)]


# Shared by every tool call; its lock orders the saves
_controller: NoteListController | None = None
_controller_lock = asyncio.Lock()


async def get_controller() -> NoteListController:
    """Return the shared controller, loading notes on first use."""
    global _controller
    async with _controller_lock:
        if _controller is None:
            controller = NoteListController(open_store(load_config()))
            await controller.initialize()
            _controller = controller
    return _controller


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="smartnote_list",
            description="List notes, most recently updated first.",
            inputSchema={
                "type": "object",
                "properties": {
                    "limit": {
                        "type": "integer",
                        "description": "Maximum notes to return (default: 20)",
                        "default": 20,
                    },
                },
            },
        ),
        Tool(
            name="smartnote_search",
            description="Search notes by title (case-insensitive substring match).",
            inputSchema={
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Text to look for in note titles (blank matches every note)",
                    },
                    "limit": {
                        "type": "integer",
                        "description": "Maximum results to return (default: 20)",
                        "default": 20,
                    },
                },
            },
        ),
        Tool(
            name="smartnote_show",
            description="Show the full title and content of a note.",
            inputSchema={
                "type": "object",
                "properties": {
                    "note_id": {
                        "type": "string",
                        "description": "The ID of the note",
                    },
                },
                "required": ["note_id"],
            },
        ),
        Tool(
            name="smartnote_save",
            description=(
                "Create a note, or edit one when note_id is given. "
                "Blank new notes and edits that change nothing are not saved."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "note_id": {
                        "type": "string",
                        "description": "ID of the note to edit (omit to create)",
                    },
                    "title": {
                        "type": "string",
                        "description": "Note title",
                    },
                    "content": {
                        "type": "string",
                        "description": "Note content",
                    },
                },
            },
        ),
        Tool(
            name="smartnote_delete",
            description="Delete a note permanently.",
            inputSchema={
                "type": "object",
                "properties": {
                    "note_id": {
                        "type": "string",
                        "description": "The ID of the note to delete",
                    },
                },
                "required": ["note_id"],
            },
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    """Handle tool calls."""
    try:
        if name == "smartnote_list":
            return await tool_list(arguments)
        elif name == "smartnote_search":
            return await tool_search(arguments)
        elif name == "smartnote_show":
            return await tool_show(arguments)
        elif name == "smartnote_save":
            return await tool_save(arguments)
        elif name == "smartnote_delete":
            return await tool_delete(arguments)
        else:
            return text(f"Unknown tool: {name}")
    except Exception as e:
        logger.exception("Tool %s failed", name)
        return text(f"Error: {e}")


async def tool_list(args: dict) -> list[TextContent]:
    """List notes."""
    limit = args.get("limit", 20)
    controller = await get_controller()
    return text(format_notes_plain(list(controller.notes), "Notes:", limit=limit))


async def tool_search(args: dict) -> list[TextContent]:
    """Search notes by title."""
    query = (args.get("query") or "").strip()
    limit = args.get("limit", 20)

    controller = await get_controller()
    notes = controller.search(query)
    title = f"Notes matching '{query}':" if query else "Notes:"
    return text(format_notes_plain(notes, title, limit=limit))


async def tool_show(args: dict) -> list[TextContent]:
    """Show one note."""
    note_id = args.get("note_id", "").strip()
    if not note_id:
        return text("Error: No note_id provided")

    controller = await get_controller()
    note = controller.get(note_id)
    if note is None:
        return text(f"Note not found: {note_id}")

    return text(
        f"{card_title(note)}\n"
        f"id: {note.id}  updated: {format_date(note.updated_at)}\n\n"
        f"{note.content}"
    )


async def tool_save(args: dict) -> list[TextContent]:
    """Create or edit a note."""
    note_id = (args.get("note_id") or "").strip()
    controller = await get_controller()

    if note_id:
        note = controller.get(note_id)
        if note is None:
            return text(f"Note not found: {note_id}")
        session = EditingSession(note)
        result = session.finish(
            args.get("title", note.title),
            args.get("content", note.content),
        )
        if not await controller.commit(result):
            return text(f"No changes: {note_id}")
        return text(f"Saved: {note_id}")

    result = EditingSession().finish(args.get("title", ""), args.get("content", ""))
    if not await controller.commit(result):
        return text("Nothing to save: empty note discarded")
    return text(f"Created: {result.id}")


async def tool_delete(args: dict) -> list[TextContent]:
    """Delete a note."""
    note_id = args.get("note_id", "").strip()
    if not note_id:
        return text("Error: No note_id provided")

    controller = await get_controller()
    if await controller.delete(note_id):
        return text(f"Deleted: {note_id}")
    return text(f"Note not found: {note_id}")


async def main():
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def run() -> None:
    """Console entry point."""
    configure_logging()
    asyncio.run(main())


if __name__ == "__main__":
    run()
