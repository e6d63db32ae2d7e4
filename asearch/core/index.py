"""In-memory file name index.

The index maps the lower-cased final path segment of every location to the
location itself. It is rebuilt wholesale from a full enumeration; there are no
partial updates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator


def fold_case(text: str) -> str:
    """Case folding shared by index keys and search queries."""
    # Locale-independent on purpose: Turkish "İ" folds to "i" + U+0307 on
    # every machine, so keys and queries always fold identically.
    return text.lower()


def name_for_location(location: str) -> str:
    """Return the index key for a location: its last ``/`` segment, lower-cased."""
    return fold_case(location.rsplit("/", 1)[-1])


@dataclass
class FileIndex:
    """Name -> location table.

    Two locations that share a file name collapse to one entry; the location
    inserted last wins. Iteration follows dict insertion order.
    """

    entries: Dict[str, str] = field(default_factory=dict)

    def add(self, location: str) -> str:
        key = name_for_location(location)
        self.entries[key] = location
        return key

    def items(self) -> Iterator[tuple[str, str]]:
        return iter(self.entries.items())

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class IndexBuildResult:
    index: FileIndex
    # Locations processed, collisions included.
    count: int

    @property
    def message(self) -> str:
        return f"Indexed {self.count} files"


def build_index(locations: Iterable[str]) -> IndexBuildResult:
    """Build a fresh index from an already enumerated sequence of locations."""
    index = FileIndex()
    count = 0
    for location in locations:
        index.add(location)
        count += 1
    return IndexBuildResult(index=index, count=count)
