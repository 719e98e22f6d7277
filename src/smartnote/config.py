"""
Configuration management for Smart Note.

Uses XDG base directories:
- Config: ~/.config/smartnote/config.toml
- Data: ~/.smartnote/ (the note store itself)
"""

from copy import deepcopy
from pathlib import Path
from typing import Any
import logging
import os

# XDG defaults
DEFAULT_CONFIG_HOME = Path.home() / ".config"
DEFAULT_DATA_HOME = Path.home() / ".smartnote"

# Storage key of the note collection (format v1)
STORAGE_KEY = "smart_notes_v1"

BACKENDS = ("json", "sqlite", "memory")


def get_config_dir() -> Path:
    """Get the config directory (XDG_CONFIG_HOME/smartnote)."""
    base = Path(os.environ.get("XDG_CONFIG_HOME", DEFAULT_CONFIG_HOME))
    return base / "smartnote"


def get_smartnote_home() -> Path:
    """Get the data directory (~/.smartnote or SMARTNOTE_HOME)."""
    if env_home := os.environ.get("SMARTNOTE_HOME"):
        return Path(env_home)
    return DEFAULT_DATA_HOME


def get_config_path() -> Path:
    """Get the path to config.toml."""
    return get_config_dir() / "config.toml"


def get_prefs_path() -> Path:
    """Get the path to the JSON preferences file."""
    return get_smartnote_home() / "prefs.json"


def get_db_path() -> Path:
    """Get the path to smartnote.db."""
    return get_smartnote_home() / "smartnote.db"


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into base without mutating either."""
    out = deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = deepcopy(value)
    return out


def load_config() -> dict[str, Any]:
    """
    Load configuration from config.toml.

    Values in the file override the defaults section by section.
    Returns default config if file doesn't exist.
    """
    config_path = get_config_path()

    if not config_path.exists():
        return get_default_config()

    # Lazy import tomli only when needed
    import tomli

    with open(config_path, "rb") as f:
        return _merge(get_default_config(), tomli.load(f))


def get_default_config() -> dict[str, Any]:
    """Return default configuration."""
    return {
        "smartnote": {
            "home": str(get_smartnote_home()),
        },
        "storage": {
            "backend": "json",  # or "sqlite", "memory"
            "key": STORAGE_KEY,
        },
        "display": {
            "date_format": "%d/%m/%Y %H:%M",
        },
        "logging": {
            "level": "WARNING",
        },
    }


def configure_logging(config: dict[str, Any] | None = None) -> None:
    """Configure root logging at the level from the [logging] section."""
    config = config or load_config()
    level_name = str(config.get("logging", {}).get("level", "WARNING")).upper()
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, level_name, logging.WARNING),
    )
