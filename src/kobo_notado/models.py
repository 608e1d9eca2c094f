"""Data models for Kobo highlight synchronisation."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class Bookmark:
    """A raw highlight or annotation row captured on the device."""

    volume_id: str
    text: str = ""
    annotation: str = ""
    date_created: str = ""
    date_modified: str = ""


@dataclass(frozen=True)
class Content:
    """Metadata for the book a bookmark belongs to."""

    content_id: str = ""
    title: str = ""
    attribution: str = ""


@dataclass(frozen=True)
class Highlight:
    """Represents one note submitted to Notado."""

    content: str
    url: str
    title: str
    created: Optional[str] = None
    tags: tuple[str, ...] = ()
    author: Optional[str] = None

    def to_payload(self) -> Dict[str, object]:
        # Optional fields are omitted rather than sent as null or empty.
        payload: Dict[str, object] = {
            "content": self.content,
            "url": self.url,
            "title": self.title,
        }
        if self.created:
            payload["created"] = self.created
        if self.tags:
            payload["tags"] = list(self.tags)
        if self.author:
            payload["author"] = self.author
        return payload


@dataclass
class Batch:
    """Grouping of highlights sent together."""

    highlights: List[Highlight] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.highlights)
