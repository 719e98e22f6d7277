"""
CLI for Smart Note.

Minimal CLI using stdlib argument handling.
Subcommands are imported lazily to keep startup fast.

Usage:
    smartnote                       # List notes
    smartnote new --title "..."     # Create a note
    smartnote --help                # Show help
"""

import asyncio
import sys
from typing import Any


def print_help() -> None:
    """Print help message."""
    print("""smartnote - local note taking

Usage:
    smartnote                          List notes, most recent first

Commands:
    smartnote list                     List notes
    smartnote find <query>             Search notes by title
    smartnote show <id>                Show a note in full
    smartnote new [options]            Create a note (--title, --content)
    smartnote edit <id> [options]      Edit a note (--title, --content)
    smartnote delete <id> [--yes]      Delete a note
    smartnote health                   Show storage status

Options:
    smartnote --help, -h               Show this help
    smartnote --version, -v            Show version

Examples:
    smartnote new --title "Shopping" --content "milk, eggs"
    echo "call the plumber" | smartnote new
    smartnote edit 1718000000000000 --title "Shopping list"
    smartnote find shop

Blank new notes are discarded. Edits that change nothing are not saved.""")


def print_version() -> None:
    """Print version."""
    from smartnote import __version__
    print(f"smartnote {__version__}")


def parse_options(args: list[str], names: dict[str, str]) -> tuple[list[str], dict[str, str]]:
    """
    Split args into positionals and --option values.

    names maps each accepted flag (long or short) to its option key.
    A flag without a following value is treated as a positional.
    """
    positionals: list[str] = []
    options: dict[str, str] = {}

    i = 0
    while i < len(args):
        arg = args[i]
        if arg in names and i + 1 < len(args):
            options[names[arg]] = args[i + 1]
            i += 2
        else:
            positionals.append(arg)
            i += 1

    return positionals, options


EDIT_OPTIONS = {
    "--title": "title",
    "-t": "title",
    "--content": "content",
    "-c": "content",
}


async def open_controller(config: dict[str, Any]):
    """Build a controller over the configured store and load the notes."""
    from smartnote.controller import NoteListController
    from smartnote.store import open_store

    controller = NoteListController(open_store(config))
    await controller.initialize()
    return controller


def date_format(config: dict[str, Any]) -> str:
    from smartnote.formatting import DEFAULT_DATE_FORMAT
    return config.get("display", {}).get("date_format", DEFAULT_DATE_FORMAT)


def cmd_list(config: dict[str, Any]) -> int:
    """List all notes."""
    from smartnote.formatting import format_note_list

    async def run() -> str:
        controller = await open_controller(config)
        return format_note_list(controller.notes, date_format=date_format(config))

    try:
        print(asyncio.run(run()))
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_find(args: list[str], config: dict[str, Any]) -> int:
    """Search notes by title."""
    from smartnote.formatting import format_note_list

    if not args:
        print("Usage: smartnote find <query>", file=sys.stderr)
        return 1

    query = " ".join(args)

    async def run() -> str:
        controller = await open_controller(config)
        controller.set_keyword(query)
        return format_note_list(
            controller.state.visible_notes,
            keyword=query,
            date_format=date_format(config),
        )

    try:
        print(asyncio.run(run()))
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_show(args: list[str], config: dict[str, Any]) -> int:
    """Show one note in full."""
    from smartnote.formatting import format_note_detail

    if not args:
        print("Usage: smartnote show <id>", file=sys.stderr)
        return 1

    note_id = args[0]

    async def run():
        controller = await open_controller(config)
        return controller.get(note_id)

    try:
        note = asyncio.run(run())
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if note is None:
        print(f"Not found: {note_id}", file=sys.stderr)
        return 1

    print(format_note_detail(note, date_format(config)))
    return 0


def cmd_new(args: list[str], config: dict[str, Any]) -> int:
    """Create a note from options or piped input."""
    from smartnote.session import EditingSession

    positionals, options = parse_options(args, EDIT_OPTIONS)
    title = options.get("title", "")
    content = options.get("content")

    # Loose words become the content: smartnote new buy milk
    if content is None:
        content = " ".join(positionals)
    if not content and not sys.stdin.isatty():
        content = sys.stdin.read()

    async def run():
        controller = await open_controller(config)
        result = EditingSession().finish(title, content)
        await controller.commit(result)
        return result

    try:
        note = asyncio.run(run())
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if note is None:
        print("Nothing to save: empty note discarded.")
        return 0

    print(note.id)
    return 0


def cmd_edit(args: list[str], config: dict[str, Any]) -> int:
    """Edit the title and/or content of a note."""
    from smartnote.session import EditingSession

    positionals, options = parse_options(args, EDIT_OPTIONS)
    if not positionals:
        print("Usage: smartnote edit <id> [--title T] [--content C]", file=sys.stderr)
        return 1

    note_id = positionals[0]

    async def run():
        controller = await open_controller(config)
        note = controller.get(note_id)
        if note is None:
            return None, False

        session = EditingSession(note)
        result = session.finish(
            options.get("title", note.title),
            options.get("content", note.content),
        )
        saved = await controller.commit(result)
        return note, saved

    try:
        note, saved = asyncio.run(run())
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if note is None:
        print(f"Not found: {note_id}", file=sys.stderr)
        return 1

    if not saved:
        print(f"No changes: {note_id}")
        return 0

    print(f"Saved: {note_id}")
    return 0


def confirm(prompt: str) -> bool:
    """Ask a yes/no question. Anything but y/yes is no."""
    try:
        answer = input(f"{prompt} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def cmd_delete(args: list[str], config: dict[str, Any]) -> int:
    """Delete a note after confirmation."""
    from smartnote.formatting import card_title

    skip_confirm = any(arg in ("--yes", "-y") for arg in args)
    positionals = [arg for arg in args if arg not in ("--yes", "-y")]
    if not positionals:
        print("Usage: smartnote delete <id> [--yes]", file=sys.stderr)
        return 1

    note_id = positionals[0]

    async def run():
        controller = await open_controller(config)
        note = controller.get(note_id)
        if note is None:
            return "missing"
        if not skip_confirm and not confirm(f"Delete \"{card_title(note)}\"?"):
            return "kept"
        await controller.delete(note_id)
        return "deleted"

    try:
        outcome = asyncio.run(run())
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if outcome == "missing":
        print(f"Not found: {note_id}", file=sys.stderr)
        return 1
    if outcome == "kept":
        print("Cancelled.")
        return 0

    print(f"Deleted: {note_id}")
    return 0


def cmd_health(config: dict[str, Any]) -> int:
    """Show health report."""
    from smartnote.health import format_health_report, run_health_check

    checks = run_health_check(config)
    print(format_health_report(checks))
    return 0 if all(status != "✗" for status, _ in checks.values()) else 1


def main() -> int:
    """Main entry point."""
    from smartnote.config import configure_logging, load_config

    args = sys.argv[1:]

    if args and args[0] in ("--help", "-h", "help"):
        print_help()
        return 0

    if args and args[0] in ("--version", "-v", "version"):
        print_version()
        return 0

    try:
        config = load_config()
    except Exception as e:
        print(f"Error: failed to load config: {e}", file=sys.stderr)
        return 1

    configure_logging(config)

    # No args: piped text becomes a new note, otherwise list
    if not args:
        if not sys.stdin.isatty():
            return cmd_new([], config)
        return cmd_list(config)

    command, rest = args[0], args[1:]

    if command in ("list", "ls"):
        return cmd_list(config)

    if command == "find":
        return cmd_find(rest, config)

    if command == "show":
        return cmd_show(rest, config)

    if command == "new":
        return cmd_new(rest, config)

    if command == "edit":
        return cmd_edit(rest, config)

    if command in ("delete", "rm"):
        return cmd_delete(rest, config)

    if command == "health":
        return cmd_health(config)

    print(f"Unknown command: {command}", file=sys.stderr)
    print("Run 'smartnote --help' for usage.", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
