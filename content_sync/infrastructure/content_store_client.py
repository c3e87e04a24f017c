"""Content Store Client — PUTs payloads to a draft or live content store over HTTP.

Invariants:
    - Timeouts, connection failures and 5xx responses raise DownstreamTransportError
      naming the store; the caller's work queue owns any retry
    - 409 means the store already holds a newer payload_version. Workers build the
      client with absorb_conflicts=True and log it; everywhere else it raises
      DownstreamRequestError(409) so a synchronous caller sees the rejection
    - Other 4xx responses raise DownstreamRequestError with the store's status
    - Every request carries its own deadline (content_store_timeout_seconds)

Design Decisions:
    - No retries here: the asynchronous path relies on dramatiq's Retries middleware,
      the synchronous path surfaces the failure to the caller
"""

import logging
from urllib.parse import quote

import httpx

from content_sync.core.errors import (
    DownstreamRequestError, DownstreamTransportError, ErrorContext,
)

logger = logging.getLogger(__name__)


class HttpContentStore:
    """One content store endpoint (draft-content-store or content-store)."""

    def __init__(
        self,
        name: str,
        base_url: str,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
        absorb_conflicts: bool = False,
    ):
        self.name = name
        self.absorb_conflicts = absorb_conflicts
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

    async def put_content(self, base_path: str | None, body: dict) -> None:
        url = self._url(base_path, body)
        context = ErrorContext(
            content_id=body.get("content_id"), locale=body.get("locale"),
        )
        try:
            response = await self._client.put(url, json=body)
        except httpx.TimeoutException as e:
            raise DownstreamTransportError(self.name, f"timed out ({e})", context)
        except httpx.TransportError as e:
            raise DownstreamTransportError(self.name, str(e) or type(e).__name__, context)

        if response.status_code == 409 and self.absorb_conflicts:
            logger.info(
                f"{self.name} already holds a newer version of {base_path}",
                extra={"store": self.name, "path": base_path},
            )
            return
        if response.status_code >= 500:
            raise DownstreamTransportError(
                self.name, f"status {response.status_code}", context,
            )
        if response.status_code >= 400:
            raise DownstreamRequestError(
                self.name, response.status_code, _body(response), context,
            )

    def _url(self, base_path: str | None, body: dict) -> str:
        # Pathless formats are addressed by content_id
        if base_path is None:
            return f"{self.base_url}/content-items/{body['content_id']}"
        return f"{self.base_url}/content{quote(base_path)}"

    async def aclose(self) -> None:
        await self._client.aclose()


def _body(response: httpx.Response):
    try:
        return response.json()
    except ValueError:
        return response.text
