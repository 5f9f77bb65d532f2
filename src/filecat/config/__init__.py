"""Configuration file handling for filecat.

Settings are read from ``~/.filecat/config.yaml`` and may be overridden by
``FILECAT__SECTION__KEY`` environment variables and by dotted CLI keys.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import FilecatConfig
from .resolver import resolve_with_precedence

DEFAULT_CONFIG_PATH = Path("~/.filecat/config.yaml")
ENV_PREFIX = "FILECAT__"
_HEADER_LINES = (
    "# filecat configuration file",
    "# Edit with `filecat config edit`, or change one key with `filecat config set`.",
)


def env_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``FILECAT__`` variables as dotted override keys.

    ``FILECAT__LOGGING__LEVEL=DEBUG`` becomes ``{"logging.level": "DEBUG"}``.
    Values are parsed as YAML so lists and booleans can be expressed; a value
    YAML rejects is kept as a plain string.
    """
    overrides: dict[str, Any] = {}
    for name, raw in env.items():
        if not name.startswith(ENV_PREFIX):
            continue
        key = ".".join(part.lower() for part in name[len(ENV_PREFIX) :].split("__") if part)
        if not key:
            continue
        try:
            overrides[key] = yaml.safe_load(raw)
        except yaml.YAMLError:
            overrides[key] = raw
    return overrides


class ConfigManager:
    """Read, validate, and write the filecat configuration file."""

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = os.environ if env is None else env

    @property
    def config_path(self) -> Path:
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
    ) -> FilecatConfig:
        """Return the effective configuration.

        Args:
            cli_overrides: Dotted-key overrides supplied on the command line.
            include_env: Whether ``FILECAT__`` environment variables apply.
            ensure_file: Write a default file first when none exists.

        Returns:
            FilecatConfig: Validated configuration.

        Raises:
            ConfigError: If the file or any override is invalid.
        """
        if ensure_file:
            self.ensure_exists()
        return resolve_with_precedence(
            defaults=FilecatConfig(),
            file_overrides=self.load_file_overrides(),
            env_overrides=env_overrides(self._env) if include_env else None,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return the mapping stored in the file, or ``{}`` when absent.

        Raises:
            ConfigError: If the file is not a YAML mapping.
        """
        text = self.read_text()
        try:
            data = yaml.safe_load(text) if text else None
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")
        return data

    def save(self, config: FilecatConfig | Mapping[str, Any]) -> None:
        """Write ``config`` to the file under a generated header."""
        data = config.model_dump(mode="python") if isinstance(config, FilecatConfig) else config
        stamp = datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")
        lines = [*_HEADER_LINES, f"# Last updated: {stamp}"]
        body = yaml.safe_dump(dict(data), sort_keys=False)
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        self._config_path.write_text("\n".join(lines) + "\n" + body, encoding="utf-8")

    def ensure_exists(self) -> Path:
        """Write the default configuration unless a file is already present."""
        if not self._config_path.exists():
            self.save(FilecatConfig())
        return self._config_path

    def read_text(self) -> str:
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")


__all__ = [
    "ConfigError",
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "ENV_PREFIX",
    "FilecatConfig",
    "env_overrides",
    "resolve_with_precedence",
]
