"""Configuration schema and validation using Pydantic.

This module defines the settings schema that validates and coerces configuration
values from the environment, project files and programmatic overrides into the
correct types with proper defaults.
"""

from pathlib import Path
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from intake_bridge.constants import (
    DEFAULT_BRAND_NAME,
    DEFAULT_COMPANY_NAME,
    DEFAULT_MODEL,
    FALLBACK_DELAY_SECONDS,
    MAX_ATTACHMENT_BYTES,
)

ENV_PREFIX = "INTAKE_"


def default_recovery_path() -> Path:
    return Path.home() / ".local" / "share" / "intake_bridge" / "recovery.json"


class IntakeSettings(BaseSettings):
    """Pydantic settings schema for the intake integration layer.

    Environment variables use the ``INTAKE_`` prefix, e.g. ``INTAKE_API_URL``.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=None,  # Only used when explicitly requested
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Backend endpoint ---

    api_url: str | None = Field(
        default=None,
        description="Deployed Apps Script web app URL",
    )

    # --- Generation service ---

    gemini_api_key: str | None = Field(
        default=None,
        description="Google Gemini API key used for chat and notes drafts",
    )

    model: str = Field(
        default=DEFAULT_MODEL,
        description="Gemini model identifier",
        min_length=1,
    )

    # --- Degraded mode ---

    demo_mode: bool = Field(
        default=False,
        description="Allow the reserved demo access code to log in offline",
    )

    demo_access_code: str = Field(
        default="DEMO",
        description="Reserved access code honoured only when demo_mode is on",
        min_length=1,
    )

    fallback_delay_seconds: float = Field(
        default=FALLBACK_DELAY_SECONDS,
        description="Pause before serving substitute data",
        ge=0,
    )

    # --- Submission ---

    max_attachment_bytes: int = Field(
        default=MAX_ATTACHMENT_BYTES,
        description="Per-file attachment size limit",
        ge=1,
    )

    recovery_path: Path = Field(
        default_factory=default_recovery_path,
        description="File holding the last successful submission",
    )

    # --- Branding ---

    company_name: str = Field(default=DEFAULT_COMPANY_NAME, min_length=1)

    brand_name: str = Field(
        default=DEFAULT_BRAND_NAME,
        description="Full business name used in chat and draft prompts",
        min_length=1,
    )

    # --- Validation Rules ---

    @field_validator("api_url", "gemini_api_key", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Treat empty strings from env files as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("api_url")
    @classmethod
    def check_url_scheme(cls, v: str | None) -> str | None:
        if v is not None and not v.startswith(("http://", "https://")):
            raise ValueError(f"api_url must be an http(s) URL, got {v!r}")
        return v

    @field_validator("demo_access_code")
    @classmethod
    def normalize_demo_code(cls, v: str) -> str:
        return v.strip().upper()

    @model_validator(mode="after")
    def validate_demo_code(self) -> "IntakeSettings":
        if self.demo_mode and not self.demo_access_code:
            raise ValueError("demo_access_code is required when demo_mode=True")
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary suitable for source annotation."""
        return {name: getattr(self, name) for name in type(self).model_fields}
