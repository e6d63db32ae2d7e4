from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from threading import RLock
from typing import Callable, Iterable, List, Optional

from asearch.core.index import FileIndex, IndexBuildResult, build_index
from asearch.core.search import search

from .adapters import files

logger = logging.getLogger(__name__)

Enumerator = Callable[[Path], Iterable[str]]


class WorkspaceNotSelected(RuntimeError):
    pass


@dataclass
class WorkspaceState:
    root: Optional[Path] = None
    index: Optional[FileIndex] = None
    count: int = 0


class StateManager:
    """Owns the workspace root and the current file name index.

    Rebuilds enumerate and build off to the side, then swap the finished index
    in under the lock; readers never observe a half-built index. A failed
    rebuild leaves the previous index in place.
    """

    def __init__(self, enumerator: Optional[Enumerator] = None) -> None:
        self._state = WorkspaceState()
        self._lock = RLock()
        self._enumerator = enumerator
        self.exclude_patterns: Optional[List[str]] = None

    def _enumerate(self, root: Path) -> Iterable[str]:
        if self._enumerator is not None:
            return self._enumerator(root)
        return files.enumerate_workspace(root, self.exclude_patterns)

    def set_root(self, path: str) -> Path:
        root_path = files.resolve_root(path)
        with self._lock:
            if root_path != self._state.root:
                self._state = WorkspaceState(root=root_path)
        return root_path

    def get_root(self) -> Path:
        with self._lock:
            if self._state.root is None:
                raise WorkspaceNotSelected("Workspace is not set. Call /api/workspace/select first.")
            return self._state.root

    def rebuild(self) -> IndexBuildResult:
        root = self.get_root()
        locations = list(self._enumerate(root))
        result = build_index(locations)
        with self._lock:
            if self._state.root != root:
                # Workspace switched while enumerating; drop the stale build.
                logger.info("Discarding index for %s after workspace switch", root)
                return result
            self._state.index = result.index
            self._state.count = result.count
        logger.info("%s in %s", result.message, root)
        return result

    def current_index(self) -> Optional[FileIndex]:
        with self._lock:
            return self._state.index

    def search(self, query: str) -> List[str]:
        return search(self.current_index(), query)

    def status(self) -> dict:
        with self._lock:
            state = self._state
            return {
                "root": str(state.root) if state.root else None,
                "indexed": state.index is not None,
                "count": state.count,
                "files": len(state.index) if state.index is not None else 0,
            }

    def reset(self) -> None:
        with self._lock:
            self._state = WorkspaceState()


workspace_state = StateManager()
