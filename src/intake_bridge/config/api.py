"""Public entry points for configuration resolution."""

from pathlib import Path
from typing import Any

from .resolver import ConfigResolver
from .types import FrozenConfig, ResolvedConfig

_resolver = ConfigResolver()


def resolve_config(
    programmatic: dict[str, Any] | None = None,
    *,
    use_env_file: str | Path | None = None,
    project_root: Path | None = None,
) -> ResolvedConfig:
    """Resolve configuration from all sources with proper precedence.

    Args:
        programmatic: Overrides with the highest precedence. Unknown keys are ignored.
        use_env_file: Optional .env file to load before reading ``INTAKE_*`` variables.
        project_root: Where to start searching for pyproject.toml.

    Returns:
        ResolvedConfig with merged values and per-field origins.

    Example:
        config = resolve_config({"api_url": "https://script.google.com/macros/s/.../exec"})
        service = BackendService(config.to_frozen())
    """
    return _resolver.resolve(
        programmatic=programmatic,
        use_env_file=use_env_file,
        project_root=project_root,
    )


def load_frozen_config(**overrides: Any) -> FrozenConfig:
    """Shortcut: resolve with keyword overrides and freeze."""
    return resolve_config(overrides or None).to_frozen()
