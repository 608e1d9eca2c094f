"""Read bookmarks and book metadata from a Kobo ``KoboReader.sqlite`` database."""
from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .models import Bookmark, Content

DATABASE_RELATIVE_PATH = Path(".kobo") / "KoboReader.sqlite"
SIDELOADED_PATTERN = "%file:///%"

# ContentType 6 with VolumeIndex -1 identifies the book itself rather than its chapters.
CONTENT_QUERY = (
    "SELECT ContentID, Title, Attribution FROM content "
    "WHERE ContentType = 6 AND VolumeIndex = -1"
)
BOOKMARK_QUERY = "SELECT VolumeID, Text, Annotation, DateCreated, DateModified FROM Bookmark"


def _decode_text(raw: bytes) -> str:
    return raw.decode("utf-8", "replace")


class KoboDatabaseError(RuntimeError):
    """Raised when the Kobo database cannot be read."""


@dataclass(frozen=True)
class HighlightBreakdown:
    """Bookmark counts split by where the book came from."""

    sideloaded: int
    official: int
    total: int


def resolve_database_path(path: Path) -> Path:
    """Map a device mount point to its database, or return a database path as is."""

    path = path.expanduser()
    if path.is_dir():
        return path / DATABASE_RELATIVE_PATH
    return path


class KoboDatabase:
    """Read-only access to the tables holding highlights and book metadata."""

    def __init__(self, path: Path, logger: Optional[logging.Logger] = None) -> None:
        self.path = resolve_database_path(path)
        self._logger = logger or logging.getLogger(__name__)
        self._connection: Optional[sqlite3.Connection] = None

    def __enter__(self) -> "KoboDatabase":
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def open(self) -> sqlite3.Connection:
        if self._connection is not None:
            return self._connection
        if not self.path.is_file():
            raise KoboDatabaseError(f"Kobo database not found at {self.path}")
        try:
            connection = sqlite3.connect(f"{self.path.resolve().as_uri()}?mode=ro", uri=True)
        except sqlite3.Error as exc:
            raise KoboDatabaseError(f"Failed to open Kobo database at {self.path}: {exc}") from exc
        # The device can hold text that is not valid UTF-8.
        connection.text_factory = _decode_text
        self._connection = connection
        self._logger.debug("Opened Kobo database at %s", self.path)
        return connection

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def count_bookmarks(self) -> HighlightBreakdown:
        total = self._scalar("SELECT COUNT(*) FROM Bookmark")
        sideloaded = self._scalar(
            "SELECT COUNT(*) FROM Bookmark WHERE VolumeID LIKE ?", (SIDELOADED_PATTERN,)
        )
        breakdown = HighlightBreakdown(sideloaded=sideloaded, official=total - sideloaded, total=total)
        self._logger.info(
            "Found %d bookmark(s) on device (%d sideloaded, %d official)",
            breakdown.total,
            breakdown.sideloaded,
            breakdown.official,
        )
        return breakdown

    def list_content(self, include_store_bought: bool = False) -> List[Content]:
        query = CONTENT_QUERY
        params: tuple = ()
        if not include_store_bought:
            query += " AND ContentID LIKE ?"
            params = (SIDELOADED_PATTERN,)
        rows = self._fetch(query, params)
        return [
            Content(content_id=row[0] or "", title=row[1] or "", attribution=row[2] or "")
            for row in rows
        ]

    def list_bookmarks(self, include_store_bought: bool = False) -> List[Bookmark]:
        query = BOOKMARK_QUERY
        params: tuple = ()
        if not include_store_bought:
            query += " WHERE VolumeID LIKE ?"
            params = (SIDELOADED_PATTERN,)
        query += " ORDER BY VolumeID, ChapterProgress"
        rows = self._fetch(query, params)
        bookmarks = [
            Bookmark(
                volume_id=row[0] or "",
                text=row[1] or "",
                annotation=row[2] or "",
                date_created=row[3] or "",
                date_modified=row[4] or "",
            )
            for row in rows
        ]
        self._logger.debug("Listed %d bookmark(s)", len(bookmarks))
        return bookmarks

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _fetch(self, query: str, params: tuple = ()) -> list:
        connection = self.open()
        try:
            return connection.execute(query, params).fetchall()
        except sqlite3.Error as exc:
            raise KoboDatabaseError(f"Failed to query Kobo database: {exc}") from exc

    def _scalar(self, query: str, params: tuple = ()) -> int:
        rows = self._fetch(query, params)
        return int(rows[0][0]) if rows else 0
