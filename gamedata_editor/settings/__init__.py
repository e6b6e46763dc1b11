"""
Settings package for the game data editor.

Provides type-safe configuration management using Qt's QSettings for
cross-platform storage.

Usage:
    from gamedata_editor.settings import AppSettings, ValidationResult

    settings = AppSettings()
    result = settings.validate()
"""

from .core import AppSettings
from .types import ConfigVersion, ConfigError, ValidationResult
from .paths import PathSettings
from .logging import LoggingSettings, normalize_level

__all__ = [
    "AppSettings",
    "ConfigVersion",
    "ConfigError",
    "ValidationResult",
    "PathSettings",
    "LoggingSettings",
    "normalize_level",
]
