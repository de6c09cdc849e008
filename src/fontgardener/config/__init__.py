"""Configuration management for fontgardener.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments or defaults.

Key classes:
- ImportConfig: Set conflict policy, component following, workers
- ExportConfig: Export settings
- LoggingConfig: Logging settings
- FontgardenerSettings: Main application settings
"""

from fontgardener.config.settings import (
    ExportConfig,
    FontgardenerSettings,
    ImportConfig,
    LoggingConfig,
    SetConflictPolicy,
    get_default_settings,
)

__all__ = [
    "ExportConfig",
    "FontgardenerSettings",
    "ImportConfig",
    "LoggingConfig",
    "SetConflictPolicy",
    "get_default_settings",
]
