"""Merging of configuration sources into a validated ``SortcopyConfig``."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from copy import deepcopy
from typing import Any, Dict

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import SortcopyConfig

ENV_PREFIX = "SORTCOPY__"


def resolve_with_precedence(
    *,
    defaults: SortcopyConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> SortcopyConfig:
    """Merge configuration sources: defaults < file < environment < CLI.

    Override keys may be nested mappings or dotted paths (``run.mode``).

    Raises:
        ConfigError: If a source is malformed or the merged values fail
            validation.
    """
    merged = defaults.model_dump(mode="python")
    for name, source in (
        ("file", file_overrides),
        ("environment", env_overrides),
        ("cli", cli_overrides),
    ):
        if source:
            _merge_into(merged, _expand_dotted(source, name))

    try:
        return SortcopyConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def parse_env_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    """Turn ``SORTCOPY__SECTION__KEY`` variables into a nested override mapping.

    Values are read as YAML scalars so ``true``, ``4`` and ``null`` keep their
    types; anything YAML rejects is kept as the raw string.
    """
    overrides: dict[str, Any] = {}
    for key, raw in env.items():
        if not key.startswith(ENV_PREFIX):
            continue
        path = [segment.lower() for segment in key[len(ENV_PREFIX) :].split("__")]
        if not all(path):
            continue
        try:
            value = yaml.safe_load(raw)
        except yaml.YAMLError:
            value = raw
        node = overrides
        for segment in path[:-1]:
            child = node.get(segment)
            if not isinstance(child, dict):
                child = node[segment] = {}
            node = child
        node[path[-1]] = value
    return overrides


def flatten_for_env(config: SortcopyConfig) -> Dict[str, str]:
    """Render ``config`` as ``SORTCOPY__SECTION__KEY`` environment variables."""
    flat: Dict[str, str] = {}
    for path, value in _leaves(config.model_dump(mode="json")):
        if isinstance(value, bool):
            rendered = "true" if value else "false"
        elif value is None:
            rendered = "null"
        elif isinstance(value, list):
            rendered = yaml.safe_dump(value, default_flow_style=True).strip()
        else:
            rendered = str(value)
        flat[ENV_PREFIX + "__".join(part.upper() for part in path)] = rendered
    return flat


def _leaves(
    data: Mapping[str, Any], prefix: tuple[str, ...] = ()
) -> Iterator[tuple[tuple[str, ...], Any]]:
    for key, value in data.items():
        path = prefix + (str(key),)
        if isinstance(value, Mapping):
            yield from _leaves(value, path)
        else:
            yield path, value


def _expand_dotted(source: Mapping[str, Any], source_name: str) -> dict[str, Any]:
    """Return ``source`` with dotted keys expanded into nested mappings."""
    if not isinstance(source, Mapping):
        raise ConfigError(
            f"{source_name.capitalize()} overrides must be a mapping.", source=source_name
        )

    expanded: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(
                f"{source_name.capitalize()} override keys must be strings.", source=source_name
            )
        if isinstance(value, Mapping):
            value = _expand_dotted(value, source_name)
        *parents, leaf = key.split(".")
        node = expanded
        for segment in parents:
            child = node.setdefault(segment, {})
            if not isinstance(child, dict):
                raise ConfigError(
                    f"{source_name.capitalize()} override for {key} conflicts with existing value.",
                    source=source_name,
                )
            node = child
        node[leaf] = value
    return expanded


def _merge_into(target: dict[str, Any], overrides: Mapping[str, Any]) -> None:
    """Recursively copy ``overrides`` onto ``target`` in place."""
    for key, value in overrides.items():
        current = target.get(key)
        if isinstance(value, Mapping) and isinstance(current, dict):
            _merge_into(current, value)
        else:
            target[key] = deepcopy(value)


__all__ = ["ENV_PREFIX", "flatten_for_env", "parse_env_overrides", "resolve_with_precedence"]
