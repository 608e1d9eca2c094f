"""Resolve a creation timestamp for each bookmark."""
from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Callable, Optional

from .models import Bookmark

# Kobo stores DateCreated as naive UTC with milliseconds and DateModified with a Z suffix.
DATE_CREATED_FORMAT = "%Y-%m-%dT%H:%M:%S.%f"
DATE_MODIFIED_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Exact layouts; strptime alone takes single-digit fields and up to six fractional digits.
DATE_CREATED_SHAPE = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}")
DATE_MODIFIED_SHAPE = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z")


class TimestampParseError(ValueError):
    """Raised when a device timestamp cannot be parsed."""

    def __init__(self, field: str, value: str) -> None:
        super().__init__(f"Failed to parse {field} timestamp {value!r}")
        self.field = field
        self.value = value


def format_timestamp(moment: datetime) -> str:
    """Return ``moment`` as ``YYYY-MM-DDTHH:MM:SS+HH:MM``."""

    return moment.isoformat(timespec="seconds")


def _parse_utc(value: str, pattern: str, shape: re.Pattern[str], field: str) -> datetime:
    if not shape.fullmatch(value):
        raise TimestampParseError(field, value)
    try:
        parsed = datetime.strptime(value, pattern)
    except ValueError as exc:
        raise TimestampParseError(field, value) from exc
    return parsed.replace(tzinfo=timezone.utc)


def _local_now() -> datetime:
    return datetime.now().astimezone()


def resolve_created_at(
    bookmark: Bookmark,
    logger: Optional[logging.Logger] = None,
    now: Callable[[], datetime] = _local_now,
) -> str:
    """Pick the best available timestamp for ``bookmark``.

    The creation date wins, then the modification date, then the current time.
    A malformed date raises :class:`TimestampParseError`.
    """

    log = logger or logging.getLogger(__name__)

    if bookmark.date_created:
        return format_timestamp(
            _parse_utc(bookmark.date_created, DATE_CREATED_FORMAT, DATE_CREATED_SHAPE, "date_created")
        )

    log.warning(
        "No date created for bookmark in %s; falling back to date modified",
        bookmark.volume_id,
    )
    if bookmark.date_modified:
        return format_timestamp(
            _parse_utc(bookmark.date_modified, DATE_MODIFIED_FORMAT, DATE_MODIFIED_SHAPE, "date_modified")
        )

    log.warning("No date modified for bookmark in %s; using current time", bookmark.volume_id)
    return format_timestamp(now())
