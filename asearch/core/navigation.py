"""Keyboard selection over a result list, independent of any widget toolkit."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence


@dataclass
class SelectionCursor:
    """Wrap-around cursor over ``length`` rows."""

    length: int = 0
    position: int = 0

    def reset(self, length: int) -> None:
        self.length = max(0, length)
        self.position = 0

    def move_down(self) -> int:
        if self.length > 0:
            self.position = (self.position + 1) % self.length
        return self.position

    def move_up(self) -> int:
        if self.length > 0:
            self.position = (self.position - 1 + self.length) % self.length
        return self.position

    def select(self, row: int) -> bool:
        if 0 <= row < self.length:
            self.position = row
            return True
        return False

    @property
    def has_selection(self) -> bool:
        return self.length > 0


@dataclass
class QueryState:
    """Per-panel search state: last dispatched query, results and cursor.

    A new result delivery always resets the cursor to the first row, even when
    it answers the same query again.
    """

    last_query: Optional[str] = None
    results: List[str] = field(default_factory=list)
    cursor: SelectionCursor = field(default_factory=SelectionCursor)

    def should_dispatch(self, query: str) -> bool:
        return query != self.last_query

    def mark_dispatched(self, query: str) -> None:
        self.last_query = query

    def deliver(self, results: Sequence[str]) -> None:
        self.results = list(results)
        self.cursor.reset(len(self.results))

    def move_down(self) -> int:
        return self.cursor.move_down()

    def move_up(self) -> int:
        return self.cursor.move_up()

    def select(self, row: int) -> bool:
        return self.cursor.select(row)

    def current(self) -> Optional[str]:
        if not self.cursor.has_selection:
            return None
        return self.results[self.cursor.position]

    def confirm(self) -> Optional[str]:
        """Location to open for the highlighted row, or None with no results."""
        return self.current()
