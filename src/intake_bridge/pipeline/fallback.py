"""Fallback coordination for backend calls.

Every domain operation goes through :class:`FallbackCoordinator`. It sends
the envelope, classifies the answer and, on any failure, either serves the
caller's substitute (flagged ``is_fallback=True`` after a short pause) or
re-raises the original exception object unchanged.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import json
import logging
import time
from typing import TYPE_CHECKING, Any

from intake_bridge.constants import CACHE_BUST_PARAM, FALLBACK_DELAY_SECONDS
from intake_bridge.core.types import DegradedResult, DiagnosticCause
from intake_bridge.exceptions import (
    ApplicationError,
    HttpStatusError,
    NetworkError,
    TransportFailureError,
)
from intake_bridge.response.classifier import decode
from intake_bridge.telemetry import TelemetryContext

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from intake_bridge.client.transport import Transport
    from intake_bridge.core.types import RequestEnvelope
    from intake_bridge.telemetry import TelemetryContextProtocol

logger = logging.getLogger(__name__)

# Failures the coordinator may absorb; anything else is a bug and propagates.
BACKEND_FAILURES: tuple[type[Exception], ...] = (
    NetworkError,
    HttpStatusError,
    TransportFailureError,
    ApplicationError,
)


@dataclass(frozen=True, slots=True)
class DiagnosticRecord:
    """Operator-facing description of one failed backend exchange."""

    action: str
    cause: str
    detail: str
    served_substitute: bool


def diagnose(error: Exception) -> tuple[str, str]:
    """Return ``(cause, detail)`` for a backend failure."""
    if isinstance(error, TransportFailureError):
        return error.cause.value, error.snippet or str(error)
    if isinstance(error, HttpStatusError):
        return DiagnosticCause.HTTP_STATUS.value, str(error)
    if isinstance(error, NetworkError):
        return DiagnosticCause.UNREACHABLE.value, str(error)
    return "application_error", str(error)


class FallbackCoordinator:
    """Sends envelopes and applies the single-substitution fallback policy."""

    def __init__(
        self,
        transport: Transport,
        *,
        delay_seconds: float = FALLBACK_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.time,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        self._transport = transport
        self._delay_seconds = delay_seconds
        self._sleep = sleep
        self._clock = clock
        self._tele = telemetry or TelemetryContext()

    async def execute[T](
        self,
        url: str,
        envelope: RequestEnvelope,
        substitute: dict[str, Any] | None = None,
        *,
        parse: Callable[[dict[str, Any]], T] | None = None,
        cache_bust: bool = False,
    ) -> DegradedResult[Any]:
        """Run one backend exchange.

        Args:
            url: Endpoint URL.
            envelope: The request to send.
            substitute: Response body served in degraded mode. ``None`` means
                the operation has no substitute and failures propagate.
            parse: Turns a response body into the caller's value. Applied to
                live bodies and to the substitute alike; a live body it
                rejects with a backend failure counts as a failed exchange.
            cache_bust: Append a timestamp query parameter.

        Raises:
            NetworkError, HttpStatusError, TransportFailureError, ApplicationError:
                Only when no substitute was given; the original object is re-raised.
        """
        body = json.dumps(envelope.to_dict())
        params = (
            {CACHE_BUST_PARAM: str(int(self._clock() * 1000))} if cache_bust else None
        )

        with self._tele("backend.execute", action=envelope.action.value):
            try:
                raw = await self._transport.send(url, body, params=params)
                data = decode(raw)
                value = parse(data) if parse is not None else data
            except BACKEND_FAILURES as error:
                self._record(envelope, error, served_substitute=substitute is not None)
                if substitute is None:
                    raise
                await self._sleep(self._delay_seconds)
                self._tele.count("backend.fallback", action=envelope.action.value)
                canned = parse(substitute) if parse is not None else substitute
                return DegradedResult(value=canned, is_fallback=True)

        return DegradedResult(value=value, is_fallback=False)

    async def send_blind(self, url: str, envelope: RequestEnvelope) -> None:
        """Fire the envelope without reading a response.

        Raises:
            NetworkError: Nothing could be sent.
        """
        await self._transport.send_blind(url, json.dumps(envelope.to_dict()))

    def _record(
        self, envelope: RequestEnvelope, error: Exception, *, served_substitute: bool
    ) -> DiagnosticRecord:
        cause, detail = diagnose(error)
        record = DiagnosticRecord(
            action=envelope.action.value,
            cause=cause,
            detail=detail,
            served_substitute=served_substitute,
        )
        logger.warning(
            "Backend action '%s' failed (%s): %s%s",
            record.action,
            record.cause,
            record.detail,
            " - serving substitute data" if served_substitute else "",
            extra={"diagnostic": record},
        )
        return record
