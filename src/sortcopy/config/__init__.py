"""Configuration loading for sortcopy.

Settings are layered: model defaults, then an optional YAML file, then
``SORTCOPY__SECTION__KEY`` environment variables, then command line
overrides. The tool only reads the file; it never writes it.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import (
    CLIOptions,
    CopyOptions,
    ExecutionOptions,
    LoggingSettings,
    SortcopyConfig,
)
from .resolver import flatten_for_env, parse_env_overrides, resolve_with_precedence

DEFAULT_CONFIG_PATH = Path("~/.sortcopy/config.yaml")


class ConfigManager:
    """Read sortcopy settings from their layered sources.

    Args:
        config_path: YAML file to read; defaults to ``~/.sortcopy/config.yaml``.
        env: Environment consulted for ``SORTCOPY__`` variables; defaults to
            the process environment.
    """

    def __init__(
        self,
        config_path: Path | str | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self.config_path = Path(config_path or DEFAULT_CONFIG_PATH).expanduser()
        self.env: Mapping[str, str] = os.environ if env is None else env

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> SortcopyConfig:
        """Return the validated configuration.

        Args:
            cli_overrides: Dotted-key overrides given on the command line.
            include_env: Whether environment variables are applied.
            env_overrides: Environment used instead of ``self.env``.

        Raises:
            ConfigError: If the file or any override is invalid.
        """
        environment = None
        if include_env:
            environment = parse_env_overrides(self.env if env_overrides is None else env_overrides)
        return resolve_with_precedence(
            defaults=SortcopyConfig(),
            file_overrides=self.read_file(),
            env_overrides=environment,
            cli_overrides=cli_overrides,
        )

    def read_file(self) -> dict[str, Any]:
        """Return the mapping stored in the YAML file, or ``{}`` when there is none."""
        try:
            text = self.config_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise ConfigError(
                f"Cannot read configuration file {self.config_path}: {exc}", source="file"
            ) from exc

        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}", source="file") from exc

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(
                "Configuration file must contain a mapping at the top level.", source="file"
            )
        return data


__all__ = [
    "CLIOptions",
    "ConfigError",
    "ConfigManager",
    "CopyOptions",
    "DEFAULT_CONFIG_PATH",
    "ExecutionOptions",
    "LoggingSettings",
    "SortcopyConfig",
    "flatten_for_env",
    "parse_env_overrides",
    "resolve_with_precedence",
]
