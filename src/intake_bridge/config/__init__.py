"""Configuration for the intake integration layer.

Resolve once, freeze, then pass the frozen object explicitly into each
component; nothing reads ambient global configuration at call time.
"""

from .api import load_frozen_config, resolve_config
from .file_loader import ConfigFileError, FileConfigLoader
from .resolver import ConfigResolver
from .schema import IntakeSettings
from .types import ConfigOrigin, FrozenConfig, ResolvedConfig, SourceMap

__all__ = [  # noqa: RUF022
    "resolve_config",
    "load_frozen_config",
    "ResolvedConfig",
    "FrozenConfig",
    "SourceMap",
    "ConfigOrigin",
    "IntakeSettings",
    "ConfigResolver",
    "FileConfigLoader",
    "ConfigFileError",
]
