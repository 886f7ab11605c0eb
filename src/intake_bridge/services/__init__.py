"""Domain operations over the intake backend."""

from .attachments import collect_attachments, encode_attachment, strip_data_uri
from .backend import BackendService, build_payload
from .recovery import JSONRecoveryStore, RecoveryStore
from .validation import validate_survey

__all__ = [  # noqa: RUF022
    "BackendService",
    "build_payload",
    "validate_survey",
    "collect_attachments",
    "encode_attachment",
    "strip_data_uri",
    "JSONRecoveryStore",
    "RecoveryStore",
]
