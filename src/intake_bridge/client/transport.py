"""Single-request HTTP transport.

One POST per call, fixed ``text/plain`` content type, redirects followed,
no retries. Retry and substitution policy belong to the fallback layer.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol

import httpx

from intake_bridge.constants import REQUEST_CONTENT_TYPE
from intake_bridge.exceptions import HttpStatusError, NetworkError

if TYPE_CHECKING:
    from collections.abc import Mapping

log = logging.getLogger(__name__)


class Transport(Protocol):
    """What the fallback layer needs from a transport."""

    async def send(
        self, url: str, body: str, *, params: Mapping[str, Any] | None = None
    ) -> str: ...

    async def send_blind(self, url: str, body: str) -> None: ...


class HttpTransport:
    """``httpx``-backed transport.

    A fresh ``AsyncClient`` is used per request so concurrent operations share
    no connection state. ``transport`` lets tests inject ``httpx.MockTransport``.
    """

    def __init__(self, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._transport = transport

    def _create_http_client(self) -> httpx.AsyncClient:
        """Create a configured HTTP client - centralized configuration"""
        return httpx.AsyncClient(
            transport=self._transport,
            follow_redirects=True,
            headers={"Content-Type": REQUEST_CONTENT_TYPE},
        )

    async def send(
        self, url: str, body: str, *, params: Mapping[str, Any] | None = None
    ) -> str:
        """POST ``body`` and return the response text.

        Raises:
            NetworkError: The request could not complete.
            HttpStatusError: The final response status is not 2xx.
        """
        try:
            async with self._create_http_client() as client:
                response = await client.post(
                    url, content=body.encode("utf-8"), params=params
                )
        except httpx.RequestError as e:
            raise NetworkError(f"Failed to reach backend: {e}") from e

        if not response.is_success:
            raise HttpStatusError(response.status_code)

        log.debug(
            "POST %s -> %s (%d bytes)", url, response.status_code, len(response.content)
        )
        return response.text

    async def send_blind(self, url: str, body: str) -> None:
        """POST ``body`` and ignore whatever comes back.

        Mirrors an opaque ``no-cors`` send: the status and body are never
        inspected. Only a request that could not leave the client raises.
        """
        try:
            async with self._create_http_client() as client:
                await client.post(url, content=body.encode("utf-8"))
        except httpx.RequestError as e:
            raise NetworkError(f"Blind send failed: {e}") from e
