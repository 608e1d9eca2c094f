"""Run one sync of device highlights to Notado."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .config import SyncConfig
from .content_index import build_content_index
from .kobo import KoboDatabase
from .payload import build_payload
from .uploaders.notado import NotadoClient


class SyncError(RuntimeError):
    """Raised when a sync cannot go ahead."""


@dataclass
class SyncResult:
    """Outcome of a sync run."""

    uploaded: int
    highlights: int
    batches: int
    dry_run: bool = False


def run_sync(
    config: SyncConfig,
    database: KoboDatabase,
    client: NotadoClient,
    logger: Optional[logging.Logger] = None,
) -> SyncResult:
    log = logger or logging.getLogger(__name__)

    if not config.notado_token:
        raise SyncError("No Notado token was configured. Pass --token or set NOTADO_TOKEN.")

    breakdown = database.count_bookmarks()
    if breakdown.total == 0:
        raise SyncError(
            "Your device doesn't seem to have any highlights so there is nothing left to sync."
        )
    include_store_bought = config.upload_store_highlights
    if not include_store_bought and breakdown.sideloaded == 0:
        raise SyncError(
            "You have disabled store-bought syncing but you don't have any sideloaded highlights"
            " either. This combination means there are no highlights left to be synced."
        )

    contents = database.list_content(include_store_bought)
    content_index = build_content_index(contents, logger=log)
    bookmarks = database.list_bookmarks(include_store_bought)
    batches = build_payload(bookmarks, content_index, logger=log)
    highlight_count = sum(len(batch) for batch in batches)

    if config.dry_run:
        log.info("Dry run: skipping upload of %d highlight(s)", highlight_count)
        return SyncResult(uploaded=0, highlights=highlight_count, batches=len(batches), dry_run=True)

    uploaded = client.send_bookmarks(batches, config.notado_token)
    log.info("Uploaded %d highlight(s) to Notado", uploaded)
    return SyncResult(uploaded=uploaded, highlights=highlight_count, batches=len(batches))
