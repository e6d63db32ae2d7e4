from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path
from typing import Iterable, List, Sequence
from urllib.parse import urlparse
from urllib.request import url2pathname

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDE_PATTERNS = (".git", ".hg", ".svn", "node_modules", "__pycache__", ".venv")


class FileAccessError(RuntimeError):
    pass


def _is_excluded(name: str, patterns: Sequence[str]) -> bool:
    return any(fnmatch.fnmatch(name, pattern) for pattern in patterns)


def resolve_root(path: str) -> Path:
    if not path or not path.strip():
        raise FileAccessError("Workspace path must not be empty")
    root = Path(path).expanduser().resolve()
    if not root.exists() or not root.is_dir():
        raise FileAccessError(f"Workspace directory does not exist: {root}")
    return root


def enumerate_workspace(root: Path, exclude: Iterable[str] | None = None) -> List[str]:
    """Return a ``file://`` URI for every file under ``root``.

    Directories and files whose name matches one of the ``exclude`` globs are
    skipped. Walk order is sorted so the result is reproducible for an
    unchanged tree. Any directory that cannot be listed, the root included,
    raises ``FileAccessError``; a partial listing is never returned.
    """
    patterns = tuple(DEFAULT_EXCLUDE_PATTERNS if exclude is None else exclude)
    root = Path(root)
    if not root.is_dir():
        raise FileAccessError(f"Workspace directory does not exist: {root}")

    def on_error(exc: OSError) -> None:
        logger.warning("Cannot list directory %s: %s", exc.filename, exc.strerror)
        raise FileAccessError(f"Cannot list {exc.filename or root}: {exc.strerror or exc}") from exc

    locations: List[str] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        dirnames[:] = sorted(d for d in dirnames if not _is_excluded(d, patterns))
        for name in sorted(filenames):
            if _is_excluded(name, patterns):
                continue
            locations.append(Path(dirpath, name).as_uri())
    return locations


def location_to_path(location: str) -> Path:
    """Convert a ``file://`` location back to a local path."""
    parsed = urlparse(location)
    if parsed.scheme and parsed.scheme != "file":
        raise FileAccessError(f"Unsupported location scheme: {parsed.scheme}")
    if not parsed.scheme:
        return Path(location)
    return Path(url2pathname(parsed.path))


def relative_folder(location: str, root: Path | None) -> str:
    """Workspace-relative folder of a location, ``/`` for files at the root."""
    try:
        path = location_to_path(location)
    except FileAccessError:
        return ""
    if root is None:
        return path.parent.as_posix()
    try:
        rel = path.parent.relative_to(root).as_posix()
    except ValueError:
        return path.parent.as_posix()
    return "/" if rel in ("", ".") else f"/{rel}"
