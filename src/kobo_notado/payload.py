"""Turn Kobo bookmarks into batches of Notado highlights."""
from __future__ import annotations

import logging
import re
from typing import List, Mapping, Optional, Sequence
from urllib.parse import unquote, urlsplit

from .models import Batch, Bookmark, Content, Highlight
from .text import extract_tags, normalise_text, split_highlight
from .timestamps import TimestampParseError, resolve_created_at

HIGHLIGHT_REQUEST_BATCH_MAX = 2000
MAX_HIGHLIGHT_LEN = 8191
ANNOTATION_PLACEHOLDER = "Placeholder for attached annotation"
EPUB_SUFFIX = ".epub"

BAD_PERCENT_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def _base_name(path: str) -> str:
    # Last path element; "." for an empty path and "/" for a path of only slashes.
    if not path:
        return "."
    path = path.rstrip("/")
    if not path:
        return "/"
    return path.rsplit("/", 1)[-1]


def title_from_volume_id(volume_id: str) -> str:
    """Derive a book title from the file name in ``volume_id``.

    Raises ``ValueError`` when the id cannot be read as a URL, such as ids
    containing control characters or malformed percent escapes.
    """

    if any(ord(char) < 0x20 or ord(char) == 0x7F for char in volume_id):
        raise ValueError(f"invalid control character in volume id {volume_id!r}")
    if BAD_PERCENT_ESCAPE.search(volume_id):
        raise ValueError(f"invalid percent escape in volume id {volume_id!r}")
    path = unquote(urlsplit(volume_id).path)
    filename = _base_name(path)
    if filename.endswith(EPUB_SUFFIX):
        filename = filename[: -len(EPUB_SUFFIX)]
    return filename


def resolve_title(content: Content, volume_id: str, logger: Optional[logging.Logger] = None) -> str:
    """Return the content title, falling back to the file name of ``volume_id``.

    Sideloaded epubs often have no title in the database. If the file name
    cannot be derived the empty title is kept.
    """

    log = logger or logging.getLogger(__name__)
    if content.title:
        return content.title
    try:
        title = title_from_volume_id(volume_id)
    except ValueError as exc:
        log.warning("Failed to derive a title from %r, sending without one: %s", volume_id, exc)
        return content.title
    log.debug("No source title; using file name %r", title)
    return title


def build_payload(
    bookmarks: Sequence[Bookmark],
    content_index: Mapping[str, Content],
    logger: Optional[logging.Logger] = None,
    *,
    batch_max: int = HIGHLIGHT_REQUEST_BATCH_MAX,
    max_highlight_len: int = MAX_HIGHLIGHT_LEN,
) -> List[Batch]:
    """Build the ordered list of batches for ``bookmarks``.

    A new batch is opened every ``batch_max`` bookmarks, counted by input
    position rather than by highlights emitted, so a bookmark split into many
    chunks can push a batch past ``batch_max``. The last batch is always
    returned, even when empty.

    Raises :class:`~kobo_notado.timestamps.TimestampParseError` for a
    malformed device timestamp; nothing built so far is returned.
    """

    log = logger or logging.getLogger(__name__)
    batches: List[Batch] = []
    current = Batch()

    for count, bookmark in enumerate(bookmarks):
        if count > 0 and count % batch_max == 0:
            batches.append(current)
            current = Batch()

        content = content_index.get(bookmark.volume_id) or Content()
        log.debug("Parsing highlight from %r", content.title)

        try:
            created = resolve_created_at(bookmark, logger=log)
        except TimestampParseError as exc:
            log.error("Failed to parse a timestamp for bookmark in %s: %s", bookmark.volume_id, exc)
            raise

        text = normalise_text(bookmark.text)
        if bookmark.annotation and not text:
            text = ANNOTATION_PLACEHOLDER
        if not bookmark.annotation and not text:
            log.warning(
                "Skipping bookmark in %s with neither highlighted text nor an annotation",
                bookmark.volume_id,
            )
            continue

        title = resolve_title(content, bookmark.volume_id, logger=log)
        chunks = split_highlight(text, max_highlight_len)
        tags = tuple(extract_tags(bookmark.annotation))

        for chunk in chunks:
            current.highlights.append(
                Highlight(
                    content=chunk,
                    url=bookmark.volume_id,
                    title=f"{title} - {content.attribution}",
                    created=created,
                    tags=tags,
                    author=content.attribution,
                )
            )
        log.debug("Compiled %d chunk(s) for %r", len(chunks), title)

    batches.append(current)
    log.info(
        "Parsed highlights: %d in final batch across %d batch(es)",
        len(current),
        len(batches),
    )
    return batches
