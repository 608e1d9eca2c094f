"""Upload highlights to the Notado GraphQL API."""
from __future__ import annotations

import json
import logging
from typing import Dict, List, Optional, Sequence

import requests

from kobo_notado import __version__
from kobo_notado.models import Batch, Highlight

NOTADO_ENDPOINT = "https://notado.app/graphql"
DEFAULT_TIMEOUT = 60.0
USER_AGENT_FMT = "kobo-notado/{version}"

IMPORT_NOTES_MUTATION = """mutation ImportNotes($notes: [NewImportNote!]!) {
  importNotes(notes: $notes)
}"""


class NotadoError(RuntimeError):
    """Raised when highlights cannot be delivered to Notado."""


class TransportError(NotadoError):
    """Raised when the request cannot be built or the network exchange fails."""


class RemoteRejectionError(NotadoError):
    """Raised when Notado answers with a non-200 status."""

    def __init__(self, status_code: int, body: str = "") -> None:
        super().__init__(f"Received a non-200 status code from Notado: code {status_code}")
        self.status_code = status_code
        self.body = body


class NotadoClient:
    """Send highlights to Notado's ``importNotes`` mutation.

    Parameters
    ----------
    endpoint:
        GraphQL endpoint URL.
    timeout:
        Seconds to wait for the service before giving up. A timeout is
        reported as :class:`TransportError`.
    user_agent:
        Value for the ``User-Agent`` header. Defaults to the package version.
    session:
        Optional ``requests.Session`` instance. Primarily intended for tests so
        that HTTP requests can be mocked.
    logger:
        Logger used for diagnostics.
    """

    def __init__(
        self,
        *,
        endpoint: str = NOTADO_ENDPOINT,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: Optional[str] = None,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._session = session if session is not None else requests.Session()
        self.endpoint = endpoint
        self.timeout = timeout
        self.user_agent = user_agent or USER_AGENT_FMT.format(version=__version__)
        self._logger = logger or logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def send_bookmarks(self, batches: Sequence[Batch], token: str) -> int:
        """Upload every highlight in ``batches`` in one request.

        Returns the number of highlights submitted. Nothing is sent when the
        batches hold no highlights.
        """

        highlights: List[Highlight] = [h for batch in batches for h in batch.highlights]
        if not highlights:
            self._logger.info("No highlights to send to Notado")
            return 0

        body = self._encode(highlights)
        try:
            response = self._session.post(
                self.endpoint,
                data=body,
                headers=self._headers(token),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(f"Failed to send request to Notado: {exc}") from exc

        self._ensure_success(response)
        self._logger.info("Sent %d highlight(s) to Notado", len(highlights))
        return len(highlights)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _encode(self, highlights: Sequence[Highlight]) -> bytes:
        payload = {
            "query": IMPORT_NOTES_MUTATION,
            "variables": {"notes": [h.to_payload() for h in highlights]},
        }
        return json.dumps(payload).encode("utf-8")

    def _headers(self, token: str) -> Dict[str, str]:
        return {
            "X-API-TOKEN": token,
            "Content-Type": "application/json",
            "User-Agent": self.user_agent,
        }

    def _ensure_success(self, response: object) -> None:
        status = getattr(response, "status_code", None)
        if status == 200:
            return
        body = getattr(response, "text", "") or ""
        self._logger.error(
            "Received a non-200 response from Notado (status %s): %s", status, body
        )
        raise RemoteRejectionError(status if status is not None else 0, body)
