"""Attachment encoding for intake submissions."""

from __future__ import annotations

import base64
from collections.abc import Iterable
import logging
import mimetypes
from pathlib import Path

from intake_bridge.constants import (
    DATA_URI_BASE64_MARKER,
    DEFAULT_ATTACHMENT_NAME,
    DEFAULT_ATTACHMENT_TYPE,
    MAX_ATTACHMENT_BYTES,
)
from intake_bridge.core.models import Attachment

log = logging.getLogger(__name__)


def strip_data_uri(data: str) -> str:
    """Drop a ``data:<mime>;base64,`` prefix, leaving bare base64."""
    if DATA_URI_BASE64_MARKER in data:
        return data.split(DATA_URI_BASE64_MARKER, 1)[1]
    return data


def normalize_attachment(attachment: Attachment) -> Attachment:
    """Return the wire form: defaults filled in, data-URI prefix removed."""
    return Attachment(
        name=attachment.name or DEFAULT_ATTACHMENT_NAME,
        type=attachment.mime_type or DEFAULT_ATTACHMENT_TYPE,
        data=strip_data_uri(attachment.data),
    )


def encode_attachment(name: str, mime_type: str | None, content: bytes) -> Attachment:
    return Attachment(
        name=name,
        type=mime_type or DEFAULT_ATTACHMENT_TYPE,
        data=base64.b64encode(content).decode("ascii"),
    )


def collect_attachments(
    files: Iterable[str | Path],
    *,
    max_bytes: int = MAX_ATTACHMENT_BYTES,
) -> list[Attachment]:
    """Encode local files, skipping any larger than ``max_bytes``.

    Oversized files are dropped with a warning and the rest are kept. When
    every file is oversized the result is empty and the submission goes
    ahead without attachments.
    """
    attachments: list[Attachment] = []
    for file in files:
        path = Path(file)
        size = path.stat().st_size
        if size > max_bytes:
            log.warning(
                "Skipping attachment %s: %d bytes exceeds the %d byte limit",
                path.name,
                size,
                max_bytes,
            )
            continue
        mime_type, _ = mimetypes.guess_type(path.name)
        attachments.append(encode_attachment(path.name, mime_type, path.read_bytes()))
    return attachments
