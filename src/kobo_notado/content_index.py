"""Lookup table joining bookmarks against book metadata."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, Mapping, Optional

from .models import Content


class ContentIndex(Mapping[str, Content]):
    """Read-only mapping of content id to :class:`Content`.

    Use ``index.get(content_id, Content())`` for lookups that never fail.
    """

    def __init__(self, entries: Optional[Mapping[str, Content]] = None) -> None:
        self._entries: Dict[str, Content] = dict(entries or {})

    def __getitem__(self, key: str) -> Content:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def build_content_index(
    contents: Iterable[Content], logger: Optional[logging.Logger] = None
) -> ContentIndex:
    """Index ``contents`` by id; later entries replace earlier duplicates."""

    log = logger or logging.getLogger(__name__)
    entries: Dict[str, Content] = {}
    for content in contents:
        entries[content.content_id] = content
    log.debug("Built content index with %d entries", len(entries))
    return ContentIndex(entries)
