"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from filecat.config import ConfigError, ConfigManager, FilecatConfig, resolve_with_precedence


def _fresh_manager(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigManager:
    monkeypatch.setenv("HOME", str(tmp_path))
    return ConfigManager(env={})


def test_ensure_exists_creates_default_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    path = manager.ensure_exists()

    assert path == tmp_path / ".filecat" / "config.yaml"
    text = path.read_text(encoding="utf-8")
    assert "filecat configuration file" in text
    assert "Last updated:" in text
    assert manager.load() == FilecatConfig()


def test_env_overrides_file_and_cli_overrides_env(tmp_path: Path) -> None:
    env = {
        "FILECAT__LOGGING__LEVEL": "DEBUG",
        "FILECAT__SHORTCUTS__SCAN_LOCATIONS": "[/a, /b]",
        "FILECAT__CLI__ASSUME_YES": "true",
        "UNRELATED": "1",
    }
    manager = ConfigManager(tmp_path / "config.yaml", env=env)
    manager.save({"logging": {"level": "INFO", "backup_count": 2}, "cli": {"assume_yes": False}})

    config = manager.load(cli_overrides={"logging.level": "ERROR"})

    assert config.logging.level == "ERROR"
    assert config.logging.backup_count == 2
    assert config.shortcuts.scan_locations == ["/a", "/b"]
    assert config.cli.assume_yes is True


def test_invalid_yaml_raises_config_error(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path / "config.yaml", env={})
    manager.ensure_exists()

    manager.config_path.write_text("- not-a-mapping", encoding="utf-8")

    with pytest.raises(ConfigError):
        manager.load()


def test_unknown_keys_are_rejected() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=FilecatConfig(),
            file_overrides={"storage": {"location": "/tmp"}},
        )


def test_invalid_value_raises() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=FilecatConfig(),
            file_overrides={"shortcuts": {"provider": "carrier-pigeon"}},
        )
