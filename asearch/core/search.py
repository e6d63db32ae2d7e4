"""Substring search over the file name index."""

from __future__ import annotations

from typing import List, Optional

from .index import FileIndex, fold_case


def search(index: Optional[FileIndex], query: str) -> List[str]:
    """Return locations whose indexed name contains ``query``.

    Matching is a case-insensitive plain substring test. Results follow the
    index's iteration order; there is no ranking. An empty query, or no index
    at all, yields an empty list.
    """
    if not query or index is None:
        return []
    needle = fold_case(query)
    return [location for key, location in index.items() if needle in key]
