"""Project file configuration loading from ``[tool.intake_bridge]``."""

import os
from pathlib import Path
import tomllib
from typing import Any

PYPROJECT_PATH_ENV = "INTAKE_BRIDGE_PYPROJECT_PATH"


class ConfigFileError(Exception):
    """Raised when a configuration file exists but cannot be used."""

    def __init__(
        self, file_path: Path, message: str, cause: Exception | None = None
    ) -> None:
        self.file_path = file_path
        self.message = message
        self.cause = cause
        super().__init__(f"Config file error in {file_path}: {message}")


class FileConfigLoader:
    """Loads the ``[tool.intake_bridge]`` table of the nearest pyproject.toml."""

    def load_project_config(self, project_root: Path | None = None) -> dict[str, Any]:
        """Return the project table, or an empty dict when there is none.

        Raises:
            ConfigFileError: If the file exists but cannot be parsed.
        """
        pyproject_path = self._find_pyproject_toml(project_root)
        if pyproject_path is None:
            return {}

        try:
            with pyproject_path.open(mode="rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigFileError(
                pyproject_path, f"Failed to parse TOML: {e}", cause=e
            ) from e

        section = data.get("tool", {}).get("intake_bridge", {})
        if not isinstance(section, dict):
            raise ConfigFileError(pyproject_path, "[tool.intake_bridge] must be a table")
        return dict(section)

    def _find_pyproject_toml(self, start_dir: Path | None = None) -> Path | None:
        override = os.getenv(PYPROJECT_PATH_ENV)
        if override:
            path = Path(override)
            return path if path.exists() else None

        current = Path(start_dir or Path.cwd()).resolve()
        while current != current.parent:
            candidate = current / "pyproject.toml"
            if candidate.exists():
                return candidate
            current = current.parent
        return None
