"""
Health check module for Smart Note.

Reports configuration and storage status.
"""

import asyncio
from typing import Any

from smartnote.backends import make_backend
from smartnote.config import get_config_path, load_config
from smartnote.errors import SmartNoteError
from smartnote.store import open_store


def check_config() -> tuple[str, str]:
    """Check config file status."""
    config_path = get_config_path()
    if not config_path.exists():
        return "-", "Defaults (no config.toml)"

    try:
        load_config()
        return "✓", f"OK ({config_path})"
    except Exception as e:
        return "✗", f"Error: {e}"


def check_backend(config: dict[str, Any]) -> tuple[str, str]:
    """Check that the configured backend can be built."""
    try:
        backend = make_backend(config)
    except ValueError as e:
        return "✗", str(e)
    name = config.get("storage", {}).get("backend", "json")
    return "✓", f"{name} ({backend.describe()})"


def check_notes(config: dict[str, Any]) -> tuple[str, str]:
    """Check that stored notes can be loaded."""
    try:
        store = open_store(config)
        notes = asyncio.run(store.load_all())
    except (SmartNoteError, ValueError) as e:
        return "✗", f"Error: {e}"

    if not notes:
        return "✓", "Empty (no notes yet)"
    return "✓", f"OK ({len(notes)} notes)"


def run_health_check(config: dict[str, Any] | None = None) -> dict[str, tuple[str, str]]:
    """Run all health checks."""
    config = config or load_config()
    return {
        "Config": check_config(),
        "Backend": check_backend(config),
        "Notes": check_notes(config),
    }


def format_health_report(checks: dict[str, tuple[str, str]]) -> str:
    """Format health check results."""
    lines = ["Smart Note Health Check", "-" * 40]

    for name, (status, message) in checks.items():
        lines.append(f"{status} {name}: {message}")

    return "\n".join(lines)
