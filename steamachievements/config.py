"""Configuration: API key lookup and the key file."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

DEFAULT_KEY_FILE = Path.home() / ".steamachievements" / "apikey"
API_KEY_ENV = "STEAM_API_KEY"


class ConfigError(Exception):
    """Raised when no usable API key can be found or stored."""


def read_api_key(path: Path | str = DEFAULT_KEY_FILE) -> Optional[str]:
    """Return the key stored in *path*, or ``None`` if there is none."""
    path = Path(path)
    if not path.is_file():
        return None
    try:
        key = path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise ConfigError(f"Cannot read API key file {path}: {exc}") from exc
    return key or None


def write_api_key(key: str, path: Path | str = DEFAULT_KEY_FILE) -> Optional[str]:
    """Store *key* in *path* and return the key it replaced, if any."""
    key = key.strip()
    if not key:
        raise ConfigError("API key must not be empty")
    path = Path(path)
    previous = read_api_key(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(key + "\n", encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot write API key file {path}: {exc}") from exc
    return previous


def resolve_api_key(
    explicit: Optional[str] = None, path: Path | str = DEFAULT_KEY_FILE
) -> str:
    """Return the API key from *explicit*, the environment, or the key file.

    Raises ``ConfigError`` when none of them provides one.
    """
    key = explicit or os.environ.get(API_KEY_ENV, "") or read_api_key(path)
    if not key:
        raise ConfigError(
            f"Steam API key required. Set {API_KEY_ENV}, use --api-key, "
            "or store one with the 'apikey' command."
        )
    return key
