"""Core data types that flow between the UI seam and the backend.

Requests, classified responses and degraded-mode results are immutable
values. Each stage hands the next one a new value instead of mutating a
shared one, which keeps concurrent operations independent of each other.
"""

from __future__ import annotations

import dataclasses
from enum import Enum, StrEnum
from types import MappingProxyType
import typing

if typing.TYPE_CHECKING:
    from intake_bridge.core.models import Attachment

# --- Minimal guard helpers ---


def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = ValueError,
    field_name: str | None = None,
) -> None:
    """Centralized validation with optional field context for clearer errors."""
    if not condition:
        if field_name:
            raise exc(f"{field_name}: {message}")
        raise exc(message)


def _freeze_mapping(
    m: typing.Mapping[str, typing.Any] | None,
) -> typing.Mapping[str, typing.Any] | None:
    if m is None or isinstance(m, MappingProxyType):
        return m
    return MappingProxyType(dict(m))


# --- Request envelope ---


class Action(StrEnum):
    """The closed set of backend actions."""

    GET_COMPANY_DATA = "getCompanyData"
    LOGIN = "login"
    SUBMIT_SURVEY_DATA = "submitSurveyData"
    GET_HISTORY = "getHistory"
    TEST_CHAT = "testChat"


@dataclasses.dataclass(frozen=True, slots=True)
class RequestEnvelope:
    """The ``{action, payload}`` wrapper sent as the request body."""

    action: Action
    payload: typing.Mapping[str, typing.Any] | None = None

    def __post_init__(self) -> None:
        _require(
            condition=isinstance(self.action, Action),
            message=f"must be an Action member, got {self.action!r}",
            field_name="action",
            exc=TypeError,
        )
        object.__setattr__(self, "payload", _freeze_mapping(self.payload))

    def to_dict(self) -> dict[str, typing.Any]:
        body: dict[str, typing.Any] = {"action": self.action.value}
        if self.payload is not None:
            body["payload"] = dict(self.payload)
        return body


# --- Classified responses ---


class DiagnosticCause(StrEnum):
    """Why a backend exchange could not produce usable data."""

    UNREACHABLE = "endpoint_unreachable"
    HTTP_STATUS = "non_2xx_status"
    HTML_PERMISSION_PAGE = "html_permission_page"
    BACKEND_CRASHED = "backend_crashed"
    MALFORMED_BODY = "malformed_json"


@dataclasses.dataclass(frozen=True, slots=True)
class Success:
    """The backend answered with a usable JSON object."""

    data: typing.Mapping[str, typing.Any]


@dataclasses.dataclass(frozen=True, slots=True)
class ApplicationFailure:
    """The backend answered with ``success: false``."""

    message: str


@dataclasses.dataclass(frozen=True, slots=True)
class TransportFailure:
    """The backend answered with something that is not the JSON contract."""

    cause: DiagnosticCause
    snippet: str = ""


type ClassifiedResponse = Success | ApplicationFailure | TransportFailure


# --- Degraded-mode results ---


@dataclasses.dataclass(frozen=True, slots=True)
class DegradedResult[T]:
    """Result of a public operation, flagged when it came from a substitute."""

    value: T
    is_fallback: bool = False


class HeartbeatOutcome(Enum):
    """Tri-state result of a backend health check."""

    CONFIRMED = "confirmed"
    BLIND_SENT = "blind_sent"
    FAILED = "failed"


# --- Form state ---


@dataclasses.dataclass(frozen=True, slots=True)
class SurveyForm:
    """Client-side intake form state, before validation.

    Attachment ``data`` may still carry a data-URI prefix at this point.
    """

    property_id: str = ""
    first_name: str = ""
    last_name: str = ""
    title: str = ""
    phone: str = ""
    email: str = ""
    unit_info: str = ""
    services: tuple[str, ...] = ()
    other_service: str = ""
    timeline: str = ""
    notes: str = ""
    contact_methods: tuple[str, ...] = ()
    attachments: tuple[Attachment, ...] = ()

    def __post_init__(self) -> None:
        # Accept lists from UI code while keeping the value hashable/immutable
        for name in ("services", "contact_methods", "attachments"):
            value = getattr(self, name)
            if not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value))
