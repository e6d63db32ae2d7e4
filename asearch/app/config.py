from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from asearch.server.adapters.files import DEFAULT_EXCLUDE_PATTERNS

GLOBAL_CONFIG = Path.home() / ".asearch_config.json"

DEFAULT_DEBOUNCE_MS = 250
MAX_DEBOUNCE_MS = 2000
MAX_RECENT_WORKSPACES = 10
DEFAULT_PORT = 8765


def _config_path() -> Path:
    override = os.getenv("ASEARCH_CONFIG")
    return Path(override).expanduser() if override else GLOBAL_CONFIG


def init_settings() -> None:
    _config_path().parent.mkdir(parents=True, exist_ok=True)


def _read_global_config() -> dict:
    """Return the parsed global config, or an empty dict on error/missing."""
    path = _config_path()
    if not path.exists():
        return {}
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        return {}
    return payload if isinstance(payload, dict) else {}


def _update_global_config(updates: dict) -> None:
    """Merge updates into global config file."""
    existing = _read_global_config()
    existing.update(updates)
    path = _config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(existing, indent=2), encoding="utf-8")


def env_flag(var_name: str) -> bool:
    return os.getenv(var_name, "0") not in ("0", "false", "False", "", None)


def load_host() -> str:
    return os.getenv("ASEARCH_HOST", "127.0.0.1")


def load_port() -> int:
    raw = os.getenv("ASEARCH_PORT")
    if not raw:
        return DEFAULT_PORT
    try:
        return max(0, int(raw))
    except ValueError:
        return DEFAULT_PORT


def load_last_workspace() -> Optional[str]:
    last = _read_global_config().get("last_workspace")
    return last if isinstance(last, str) and last else None


def load_recent_workspaces() -> list[str]:
    recent = _read_global_config().get("recent_workspaces", [])
    if not isinstance(recent, list):
        return []
    return [entry for entry in recent if isinstance(entry, str) and entry]


def remember_workspace(path: str) -> None:
    """Record a workspace as last used and move it to the top of the recent list."""
    normalized = str(Path(path))
    recent = [p for p in load_recent_workspaces() if p != normalized]
    recent.insert(0, normalized)
    _update_global_config(
        {"last_workspace": normalized, "recent_workspaces": recent[:MAX_RECENT_WORKSPACES]}
    )


def load_search_debounce_ms() -> int:
    value = _read_global_config().get("search_debounce_ms", DEFAULT_DEBOUNCE_MS)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_DEBOUNCE_MS
    return max(0, min(MAX_DEBOUNCE_MS, int(value)))


def load_exclude_patterns() -> list[str]:
    patterns = _read_global_config().get("exclude_patterns")
    if not isinstance(patterns, list):
        return list(DEFAULT_EXCLUDE_PATTERNS)
    return [p for p in patterns if isinstance(p, str) and p.strip()]


def load_dialog_geometry(dialog_name: str) -> Optional[str]:
    """Load the saved dialog geometry (base64 encoded QByteArray)."""
    geometry = _read_global_config().get("dialog_geometry", {})
    if not isinstance(geometry, dict):
        return None
    value = geometry.get(dialog_name)
    return value if isinstance(value, str) else None


def save_dialog_geometry(dialog_name: str, geometry: str) -> None:
    """Save the dialog geometry (base64 encoded QByteArray)."""
    existing = _read_global_config().get("dialog_geometry", {})
    if not isinstance(existing, dict):
        existing = {}
    existing[dialog_name] = geometry
    _update_global_config({"dialog_geometry": existing})
