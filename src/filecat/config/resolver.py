"""Merge configuration layers into a validated :class:`FilecatConfig`."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Mapping

from pydantic import ValidationError

from .exceptions import ConfigError
from .models import FilecatConfig


def resolve_with_precedence(
    *,
    defaults: FilecatConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> FilecatConfig:
    """Layer overrides on top of ``defaults``; later layers win.

    Order: defaults, the YAML file, ``FILECAT__`` environment variables, then
    dotted CLI overrides. Keys in any layer may be dotted
    (``"logging.level"``) or nested mappings.

    Raises:
        ConfigError: If a layer is malformed or the result fails validation.
    """
    layers = {"File": file_overrides, "Environment": env_overrides, "CLI": cli_overrides}
    merged: dict[str, Any] = defaults.model_dump(mode="python")
    for label, layer in layers.items():
        if layer is not None:
            merged = _merge(merged, _expand(layer, label))

    try:
        return FilecatConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def _expand(layer: Any, label: str) -> dict[str, Any]:
    """Turn dotted keys into nested dictionaries."""
    if not isinstance(layer, MappingABC):
        raise ConfigError(f"{label} overrides must be a mapping.")

    tree: dict[str, Any] = {}
    for key, value in layer.items():
        if not isinstance(key, str):
            raise ConfigError(f"{label} override keys must be strings.")
        *parents, leaf = key.split(".")
        node = tree
        for segment in parents:
            node = node.setdefault(segment, {})
            if not isinstance(node, dict):
                raise ConfigError(f"{label} override for {key} conflicts with existing value.")
        if isinstance(value, MappingABC):
            current = node.get(leaf)
            base = current if isinstance(current, MappingABC) else {}
            value = _merge(base, _expand(value, label))
        node[leaf] = value
    return tree


def _merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    result = deepcopy(dict(base))
    for key, value in overrides.items():
        current = result.get(key)
        if isinstance(current, MappingABC) and isinstance(value, MappingABC):
            result[key] = _merge(current, value)
        else:
            result[key] = deepcopy(value)
    return result


__all__ = ["resolve_with_precedence"]
