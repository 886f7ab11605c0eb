"""Configuration resolution with precedence handling.

Precedence, highest first: Programmatic > Environment > Project file > Defaults
"""

from pathlib import Path
from typing import Any

from .env_loader import EnvironmentConfigLoader
from .file_loader import FileConfigLoader
from .schema import IntakeSettings
from .types import ConfigOrigin, ResolvedConfig


class ConfigResolver:
    """Merges configuration sources and records the origin of every field."""

    def __init__(self) -> None:
        self.file_loader = FileConfigLoader()
        self.env_loader = EnvironmentConfigLoader()

    def resolve(
        self,
        programmatic: dict[str, Any] | None = None,
        *,
        use_env_file: str | Path | None = None,
        project_root: Path | None = None,
    ) -> ResolvedConfig:
        """Resolve configuration from all sources.

        Raises:
            ValueError: If validation fails or the environment is invalid.
            ConfigFileError: If the project file is malformed.
        """
        origins: dict[str, ConfigOrigin] = {}
        merged: dict[str, Any] = IntakeSettings.model_construct().to_dict()
        for field in merged:
            origins[field] = "default"

        def _apply(values: dict[str, Any], origin: ConfigOrigin) -> None:
            for field, value in values.items():
                if field in merged:  # Only override known fields
                    merged[field] = value
                    origins[field] = origin

        _apply(self.file_loader.load_project_config(project_root), "file")

        try:
            _apply(self.env_loader.load_env_config(env_file=use_env_file), "env")
        except (ValueError, FileNotFoundError) as e:
            raise ValueError(f"Environment configuration error: {e}") from e

        if programmatic:
            _apply(programmatic, "programmatic")

        try:
            final = IntakeSettings(**merged).to_dict()
        except Exception as e:
            raise ValueError(f"Configuration validation failed: {e}") from e

        return ResolvedConfig(**final, origin=origins)
