"""Configuration settings for fontgardener."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class SetConflictPolicy(str, Enum):
    """What importing a glyph that belongs to another set does."""

    MOVE = "move"
    REJECT = "reject"


class ImportConfig(BaseModel):
    """Configuration for importing sources."""

    conflict_policy: SetConflictPolicy = Field(
        default=SetConflictPolicy.MOVE,
        description="Move glyphs owned by another set into the target set, or reject the import",
    )
    follow_components: bool = Field(
        default=False,
        description="Also import glyphs used as components by the requested glyphs",
    )
    max_workers: int | None = Field(
        default=None,
        ge=1,
        description="Max worker threads for glyph conversion (None = auto)",
    )


class ExportConfig(BaseModel):
    """Configuration for exporting sources."""

    follow_components: bool = Field(
        default=True,
        description="Also export glyphs used as components by the selected glyphs",
    )
    overwrite: bool = Field(
        default=True,
        description="Replace existing UFOs in the output directory",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class FontgardenerSettings(BaseModel):
    """Main application settings."""

    importing: ImportConfig = Field(default_factory=ImportConfig)
    exporting: ExportConfig = Field(default_factory=ExportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> FontgardenerSettings:
    """Get default application settings."""
    return FontgardenerSettings()
