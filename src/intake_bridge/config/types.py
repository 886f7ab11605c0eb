"""Core configuration data types.

Configuration follows a resolve-once, freeze-then-flow pattern: values are
resolved and audited once, then an immutable ``FrozenConfig`` is handed to
each component at construction.
"""

from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Literal, NamedTuple

from intake_bridge.constants import (
    DEFAULT_BRAND_NAME,
    DEFAULT_COMPANY_NAME,
    DEFAULT_MODEL,
    FALLBACK_DELAY_SECONDS,
    MAX_ATTACHMENT_BYTES,
)

ConfigOrigin = Literal["programmatic", "env", "file", "default"]
SourceMap = Mapping[str, ConfigOrigin]

_SECRET_FIELDS = frozenset({"gemini_api_key"})


class ResolvedConfig(NamedTuple):
    """Configuration after resolution from all sources, before freezing."""

    api_url: str | None
    gemini_api_key: str | None
    model: str
    demo_mode: bool
    demo_access_code: str
    fallback_delay_seconds: float
    max_attachment_bytes: int
    recovery_path: Path
    company_name: str
    brand_name: str

    # Audit metadata - tracks where each field value came from
    origin: SourceMap

    def __str__(self) -> str:
        key_display = "[REDACTED]" if self.gemini_api_key else None
        return (
            f"ResolvedConfig(api_url={self.api_url!r}, gemini_api_key={key_display!r}, "
            f"model={self.model!r}, demo_mode={self.demo_mode!r}, "
            f"origin={dict(self.origin)!r})"
        )

    def __repr__(self) -> str:
        return self.__str__()

    def to_frozen(self) -> "FrozenConfig":
        values = self._asdict()
        values.pop("origin")
        return FrozenConfig(**values)

    def with_overrides(self, **overrides: object) -> "ResolvedConfig":
        """Return a copy with programmatic overrides applied; unknown fields are ignored."""
        new_values = self._asdict()
        new_origin = dict(self.origin)
        for field, value in overrides.items():
            if field in new_values and field != "origin":
                new_values[field] = value
                new_origin[field] = "programmatic"
        new_values["origin"] = new_origin
        return ResolvedConfig(**new_values)

    def audit(self) -> str:
        """Redacted report of each field's value and origin."""
        lines = []
        for field in self._fields:
            if field == "origin" or field not in self.origin:
                continue
            origin = self.origin[field]
            value = getattr(self, field)
            if field in _SECRET_FIELDS:
                display = f"{origin}:None" if value is None else f"{origin}:<redacted>"
            elif origin == "env":
                display = f"env:INTAKE_{field.upper()}={value}"
            else:
                display = f"{origin}:{value}"
            lines.append(f"{field}: {display}")
        return "\n".join(lines)


@dataclass(frozen=True)
class FrozenConfig:
    """Immutable configuration passed explicitly into components."""

    api_url: str | None = None
    gemini_api_key: str | None = None
    model: str = DEFAULT_MODEL
    demo_mode: bool = False
    demo_access_code: str = "DEMO"
    fallback_delay_seconds: float = FALLBACK_DELAY_SECONDS
    max_attachment_bytes: int = MAX_ATTACHMENT_BYTES
    recovery_path: Path | None = None
    company_name: str = DEFAULT_COMPANY_NAME
    brand_name: str = DEFAULT_BRAND_NAME

    def __str__(self) -> str:
        parts = []
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in _SECRET_FIELDS and value:
                value = "[REDACTED]"
            parts.append(f"{f.name}={value!r}")
        return f"FrozenConfig({', '.join(parts)})"

    def __repr__(self) -> str:
        return self.__str__()
