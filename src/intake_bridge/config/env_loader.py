"""Environment variable configuration loading.

This module handles loading configuration from ``INTAKE_*`` environment
variables, including optional .env file support and type coercion.
"""

import os
from pathlib import Path
from typing import Any

from .schema import ENV_PREFIX, IntakeSettings


def env_var_names() -> dict[str, str]:
    """Map each ``INTAKE_*`` variable name to its settings field."""
    return {f"{ENV_PREFIX}{name.upper()}": name for name in IntakeSettings.model_fields}


class EnvironmentConfigLoader:
    """Loads configuration from environment variables."""

    def load_env_config(self, env_file: str | Path | None = None) -> dict[str, Any]:
        """Load configuration from environment variables.

        Args:
            env_file: Optional path to a .env file whose values are loaded into
                the environment first. Existing variables are not overridden.

        Returns:
            Only the fields that are actually set in the environment, coerced
            to their schema types.

        Raises:
            ValueError: If environment variables contain invalid values.
        """
        if env_file:
            self._load_env_file(env_file)

        names = env_var_names()
        env_values = {
            field: os.environ[var] for var, field in names.items() if var in os.environ
        }
        if not env_values:
            return {}

        try:
            settings = IntakeSettings(**env_values)
        except Exception as e:
            env_var_list = [
                f"{var}={'<redacted>' if 'KEY' in var else os.environ[var]}"
                for var, field in names.items()
                if field in env_values
            ]
            raise ValueError(
                f"Invalid environment variable values: {', '.join(env_var_list)}. "
                f"Error: {e}"
            ) from e

        return {field: getattr(settings, field) for field in env_values}

    def _load_env_file(self, env_file: str | Path) -> None:
        """Export ``KEY=VALUE`` lines; variables already set keep their value."""
        env_path = Path(env_file)
        if not env_path.is_file():
            raise FileNotFoundError(f".env file does not exist: {env_path}")

        try:
            text = env_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ValueError(f"Cannot read {env_path}: {e}") from e

        for number, line in enumerate(text.splitlines(), start=1):
            entry = line.strip()
            if not entry or entry.startswith("#"):
                continue
            name, sep, raw = entry.partition("=")
            if not sep:
                raise ValueError(f"{env_path}:{number}: expected NAME=VALUE, got {entry!r}")
            value = raw.strip()
            if value[:1] in {'"', "'"} and value.endswith(value[0]) and len(value) > 1:
                value = value[1:-1]
            os.environ.setdefault(name.strip(), value)
