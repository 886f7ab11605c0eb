"""Wire models for records exchanged with the Apps Script backend.

The backend is schema-loose: it adds columns, returns numbers where strings
are expected and occasionally omits optional keys. These pydantic models
validate leniently (unknown keys ignored, numbers coerced to strings) and
serialize back to the backend's camelCase keys.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

UserRole = Literal["site_manager", "regional_manager", "executive", "internal_admin"]


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """Dump using the backend's camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")


class Property(_WireModel):
    id: str
    name: str
    address: str = ""


class Company(_WireModel):
    id: str
    name: str
    properties: list[Property] = Field(default_factory=list)


class UserProfile(_WireModel):
    first_name: str = ""
    last_name: str = ""
    title: str = ""
    email: str = ""
    phone: str = ""


class UserSession(_WireModel):
    """An authenticated session.

    An empty ``allowed_property_ids`` grants access to every property of the
    company (executive view).
    """

    company: Company
    role: UserRole = "site_manager"
    allowed_property_ids: list[str] = Field(default_factory=list)
    profile: UserProfile | None = None

    def can_access(self, property_id: str) -> bool:
        return not self.allowed_property_ids or property_id in self.allowed_property_ids


class HistoryEntry(_WireModel):
    timestamp: str
    unit_info: str = ""
    services: str = ""
    photos: list[str] = Field(default_factory=list)

    @field_validator("services", mode="before")
    @classmethod
    def join_services(cls, v: Any) -> Any:
        """The backend stores services as one spreadsheet cell; accept both forms."""
        if isinstance(v, list | tuple):
            return ", ".join(str(item) for item in v)
        return v


class Attachment(_WireModel):
    """A file attached to a submission; ``data`` is base64 text."""

    model_config = ConfigDict(frozen=True)

    name: str
    mime_type: str = Field(alias="type")
    data: str


class SurveyPayload(_WireModel):
    """The submitted intake, exactly as it is sent to the backend."""

    model_config = ConfigDict(frozen=True)

    property_id: str
    property_name: str
    property_address: str
    first_name: str
    last_name: str
    title: str
    phone: str
    email: str
    unit_info: str
    services: list[str]
    other_service: str
    timeline: str
    notes: str
    contact_methods: list[str]
    attachments: list[Attachment] = Field(default_factory=list)
