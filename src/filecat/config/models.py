"""Configuration models describing filecat settings."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class FilecatBaseModel(BaseModel):
    """Shared configuration for filecat Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class StorageSettings(FilecatBaseModel):
    """Location of the metadata document.

    Attributes:
        data_dir: Directory holding the metadata document. Defaults to the
            per-user application-data directory when unset.
        filename: Name of the metadata document inside ``data_dir``.
    """

    data_dir: Optional[str] = None
    filename: str = "metadata.md"


class ShortcutSettings(FilecatBaseModel):
    """Shortcut creation and cleanup options.

    Attributes:
        provider: Shortcut mechanism; ``auto`` picks one for the running platform.
        scan_locations: Directories searched when removing shortcuts. Defaults to
            the desktop and start-menu folders of the current platform.
    """

    provider: Literal["auto", "symlink", "windows"] = "auto"
    scan_locations: Optional[List[str]] = None


class LoggingSettings(FilecatBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        file_enabled: Whether to write a rotating log beside the metadata document.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "WARNING"
    file_enabled: bool = True
    max_size_mb: int = 10
    backup_count: int = 5


class CLIOptions(FilecatBaseModel):
    """CLI behavior defaults.

    Attributes:
        assume_yes: Skip confirmation prompts for destructive commands.
        date_format: ``strftime`` pattern used when listing created times.
    """

    assume_yes: bool = False
    date_format: str = "%Y-%m-%d %H:%M:%S"


class FilecatConfig(FilecatBaseModel):
    """Top-level configuration struct for filecat.

    Attributes:
        storage: Metadata document location.
        shortcuts: Shortcut provider and scan settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    storage: StorageSettings = Field(default_factory=StorageSettings)
    shortcuts: ShortcutSettings = Field(default_factory=ShortcutSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "FilecatBaseModel",
    "StorageSettings",
    "ShortcutSettings",
    "LoggingSettings",
    "CLIOptions",
    "FilecatConfig",
]
