"""Classification of raw backend responses.

The Apps Script endpoint answers with the JSON contract when healthy, but a
misdeployed or crashing script answers ``200 OK`` with an HTML page. This
module turns any raw body into exactly one :data:`ClassifiedResponse`
variant, and :func:`unwrap` turns a variant back into data or an exception.

Markers are matched as plain substrings against the raw text; they are only
consulted when the body is not JSON.
"""

from __future__ import annotations

import json
import re
from typing import Any, assert_never

from intake_bridge.constants import (
    DIAGNOSTIC_SNIPPET_CHARS,
    GENERIC_BACKEND_ERROR,
    PERMISSION_PAGE_MARKERS,
    SCRIPT_CRASH_MARKERS,
)
from intake_bridge.core.types import (
    ApplicationFailure,
    ClassifiedResponse,
    DiagnosticCause,
    Success,
    TransportFailure,
)
from intake_bridge.exceptions import ApplicationError, TransportFailureError

_WHITESPACE = re.compile(r"\s+")

_CAUSE_MESSAGES: dict[DiagnosticCause, str] = {
    DiagnosticCause.HTML_PERMISSION_PAGE: (
        "Backend returned a login/permission page instead of JSON. "
        "Check that the script is deployed with access set to 'Anyone'."
    ),
    DiagnosticCause.BACKEND_CRASHED: "Backend script crashed while handling the request.",
    DiagnosticCause.MALFORMED_BODY: "Backend returned a response that is not valid JSON.",
}


def snippet(raw: str, limit: int = DIAGNOSTIC_SNIPPET_CHARS) -> str:
    """Collapse whitespace and truncate ``raw`` for log records."""
    flat = _WHITESPACE.sub(" ", raw).strip()
    return flat if len(flat) <= limit else flat[: limit - 3] + "..."


def _diagnose_unparseable(raw: str) -> DiagnosticCause:
    if any(marker in raw for marker in PERMISSION_PAGE_MARKERS):
        return DiagnosticCause.HTML_PERMISSION_PAGE
    if any(marker in raw for marker in SCRIPT_CRASH_MARKERS):
        return DiagnosticCause.BACKEND_CRASHED
    return DiagnosticCause.MALFORMED_BODY


def classify(raw: str) -> ClassifiedResponse:
    """Classify a raw response body.

    1. Non-JSON (or non-object JSON) -> :class:`TransportFailure` with the
       cause inferred from known page markers.
    2. ``success`` explicitly ``false`` -> :class:`ApplicationFailure`.
    3. Anything else -> :class:`Success`.
    """
    try:
        parsed = json.loads(raw)
    except ValueError:
        return TransportFailure(cause=_diagnose_unparseable(raw), snippet=snippet(raw))

    if not isinstance(parsed, dict):
        return TransportFailure(
            cause=DiagnosticCause.MALFORMED_BODY, snippet=snippet(raw)
        )

    if parsed.get("success") is False:
        message = parsed.get("error")
        if not isinstance(message, str) or not message.strip():
            message = GENERIC_BACKEND_ERROR
        return ApplicationFailure(message=message)

    return Success(data=parsed)


def unwrap(classified: ClassifiedResponse) -> dict[str, Any]:
    """Return the data of a :class:`Success` or raise the matching error.

    Raises:
        ApplicationError: For :class:`ApplicationFailure`, with the backend's
            message verbatim.
        TransportFailureError: For :class:`TransportFailure`.
    """
    match classified:
        case Success(data=data):
            return dict(data)
        case ApplicationFailure(message=message):
            raise ApplicationError(message)
        case TransportFailure(cause=cause, snippet=text):
            raise TransportFailureError(
                cause, _CAUSE_MESSAGES.get(cause, GENERIC_BACKEND_ERROR), text
            )
        case _:
            assert_never(classified)


def decode(raw: str) -> dict[str, Any]:
    """Classify and unwrap in one step.

    An :class:`ApplicationError` is passed through untouched even when its
    message reads like a JSON parse error (``"Unexpected token < in JSON"``):
    only the parse step itself may produce ``MALFORMED_BODY``.
    """
    return unwrap(classify(raw))
