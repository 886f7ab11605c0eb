"""Exception hierarchy for the intake backend integration layer."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from intake_bridge.core.types import DiagnosticCause


class IntakeBridgeError(Exception):
    """Base exception for all intake_bridge errors."""


class ConfigurationError(IntakeBridgeError):
    """Raised when required configuration is missing or invalid."""


class NetworkError(IntakeBridgeError):
    """Raised when the transport cannot complete a request (DNS, TLS, timeout)."""


class HttpStatusError(IntakeBridgeError):
    """Raised when the endpoint answers with a non-2xx status."""

    def __init__(self, status_code: int, message: str | None = None) -> None:
        self.status_code = status_code
        super().__init__(message or f"Backend responded with status: {status_code}")


class TransportFailureError(IntakeBridgeError):
    """Raised when the endpoint answered but not with a usable JSON body."""

    def __init__(self, cause: DiagnosticCause, message: str, snippet: str = "") -> None:
        self.cause = cause
        self.snippet = snippet
        super().__init__(message)


class ApplicationError(IntakeBridgeError):
    """Raised when the backend explicitly reports ``success: false``.

    The message is the backend's own error text, surfaced verbatim.
    """


class ValidationError(IntakeBridgeError):
    """Raised for client-side validation failures, before any network call."""


class DraftGenerationError(IntakeBridgeError):
    """Raised when the generation service fails to produce a notes draft."""


class ConversationBusyError(IntakeBridgeError):
    """Raised when a chat message is sent while another is still streaming."""
