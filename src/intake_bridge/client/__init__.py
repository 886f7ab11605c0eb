"""HTTP transport to the Apps Script endpoint."""

from .transport import HttpTransport, Transport

__all__ = ["HttpTransport", "Transport"]
