from __future__ import annotations

from pathlib import Path
from typing import Optional
from urllib.parse import unquote

from asearch.server.adapters.files import relative_folder


def location_name(location: str) -> str:
    """Human readable file name for a location (percent-escapes decoded)."""
    return unquote(location.rstrip("/").rsplit("/", 1)[-1])


def location_label(location: str, root: Optional[Path] = None) -> str:
    """Return ``name — folder`` for display in result lists."""
    name = location_name(location)
    folder = relative_folder(location, root)
    return f"{name} — {folder}" if folder else name
