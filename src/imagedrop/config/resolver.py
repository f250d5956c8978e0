"""Merge configuration layers into a validated ImageDrop config."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Mapping

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import ImageDropConfig

ENV_PREFIX = "IMAGEDROP__"


def resolve_with_precedence(
    *,
    defaults: ImageDropConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> ImageDropConfig:
    """Layer file, environment and CLI overrides on top of the defaults.

    Later layers win. Keys may be nested mappings or dotted paths such as
    ``storage.root_folder``.

    Raises:
        ConfigError: If a layer is malformed or the merged values fail validation.
    """
    merged = defaults.model_dump(mode="python")
    layers = (("file", file_overrides), ("environment", env_overrides), ("cli", cli_overrides))
    for label, layer in layers:
        if layer is None:
            continue
        merged = _deep_merge(merged, _expand_dotted(layer, label=label))

    try:
        return ImageDropConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def flatten_for_env(config: ImageDropConfig) -> Dict[str, str]:
    """Render the config as ``IMAGEDROP__SECTION__KEY`` environment assignments."""
    flat: Dict[str, str] = {}
    stack: list[tuple[list[str], Any]] = [([key], value) for key, value in config.model_dump().items()]
    while stack:
        path, value = stack.pop()
        if isinstance(value, dict):
            stack.extend((path + [str(key)], child) for key, child in value.items())
            continue
        if isinstance(value, list):
            rendered = yaml.safe_dump(value, default_flow_style=True).strip()
        elif value is None:
            rendered = "null"
        else:
            rendered = str(value)
        flat[ENV_PREFIX + "__".join(part.upper() for part in path)] = rendered
    return flat


def env_layer(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``IMAGEDROP__SECTION__KEY`` variables as dotted overrides.

    Values are parsed as YAML scalars so ``true`` and ``30`` arrive typed;
    anything YAML rejects is kept as the raw string.
    """
    overrides: dict[str, Any] = {}
    for name, raw in env.items():
        if not name.startswith(ENV_PREFIX) or name == ENV_PREFIX:
            continue
        dotted = name[len(ENV_PREFIX) :].lower().replace("__", ".")
        try:
            overrides[dotted] = yaml.safe_load(raw)
        except yaml.YAMLError:
            overrides[dotted] = raw
    return overrides


def _expand_dotted(layer: Mapping[str, Any], *, label: str) -> dict[str, Any]:
    if not isinstance(layer, MappingABC):
        raise ConfigError(f"{label.capitalize()} overrides must be a mapping.")

    expanded: dict[str, Any] = {}
    for key, value in layer.items():
        if not isinstance(key, str):
            raise ConfigError(f"{label.capitalize()} override keys must be strings.")
        *parents, leaf = key.split(".")
        node = expanded
        for segment in parents:
            child = node.setdefault(segment, {})
            if not isinstance(child, dict):
                raise ConfigError(f"{label.capitalize()} override for {key} conflicts with another value.")
            node = child
        if isinstance(value, MappingABC):
            existing = node.get(leaf)
            if not isinstance(existing, MappingABC):
                existing = {}
            value = _deep_merge(existing, _expand_dotted(value, label=label))
        node[leaf] = value
    return expanded


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = deepcopy(dict(base))
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, MappingABC) and isinstance(current, MappingABC):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = ["ENV_PREFIX", "env_layer", "resolve_with_precedence", "flatten_for_env"]
