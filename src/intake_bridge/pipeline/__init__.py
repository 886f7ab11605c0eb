"""Best-effort execution with graceful degradation."""

from .fallback import DiagnosticRecord, FallbackCoordinator

__all__ = ["DiagnosticRecord", "FallbackCoordinator"]
