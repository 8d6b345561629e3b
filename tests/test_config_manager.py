"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from sortcopy.classification.models import ClassificationMode
from sortcopy.config import (
    ConfigError,
    ConfigManager,
    SortcopyConfig,
    flatten_for_env,
    resolve_with_precedence,
)


def _fresh_manager(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigManager:
    monkeypatch.setenv("HOME", str(tmp_path))
    return ConfigManager(env={})


def _write_config(manager: ConfigManager, text: str) -> None:
    manager.config_path.parent.mkdir(parents=True, exist_ok=True)
    manager.config_path.write_text(text, encoding="utf-8")


def test_missing_file_yields_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    config = manager.load()

    assert manager.config_path == tmp_path / ".sortcopy" / "config.yaml"
    assert not manager.config_path.exists()
    assert isinstance(config, SortcopyConfig)
    assert config.run.mode is ClassificationMode.BY_METADATA_DATE
    assert config.run.pending is True
    assert config.execution.shutdown_timeout_seconds == pytest.approx(60.0)


def test_resolve_with_precedence_respects_order(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    _write_config(
        manager,
        "run:\n  mode: type\n  rename: true\nexecution:\n  workers: 2\n",
    )

    env = {"SORTCOPY__EXECUTION__WORKERS": "6", "SORTCOPY__RUN__OVERWRITE": "true"}
    cli = {"execution.workers": 3}

    config = manager.load(cli_overrides=cli, env_overrides=env)

    assert config.run.mode is ClassificationMode.BY_TYPE
    assert config.run.rename is True
    assert config.run.overwrite is True
    # CLI overrides take precedence over environment
    assert config.execution.workers == 3


def test_environment_can_be_ignored(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    manager = ConfigManager(env={"SORTCOPY__RUN__MODE": "extension", "OTHER": "x"})

    assert manager.load().run.mode is ClassificationMode.BY_EXTENSION
    assert manager.load(include_env=False).run.mode is ClassificationMode.BY_METADATA_DATE


def test_invalid_yaml_raises_config_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    _write_config(manager, "- not-a-mapping")

    with pytest.raises(ConfigError):
        manager.load()


def test_unknown_keys_are_rejected(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    _write_config(manager, "run:\n  colour: blue\n")

    with pytest.raises(ConfigError):
        manager.load()


def test_flatten_for_env_round_trips_defaults() -> None:
    flat = flatten_for_env(SortcopyConfig())

    assert flat["SORTCOPY__RUN__MODE"] == "metadata-date"
    assert flat["SORTCOPY__RUN__PENDING"] == "true"
    assert flat["SORTCOPY__EXECUTION__WORKERS"] == "null"
    assert flat["SORTCOPY__LOGGING__BACKUP_COUNT"] == "5"


def test_resolve_with_precedence_invalid_value_raises() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=SortcopyConfig(),
            file_overrides={"execution": {"workers": 0}},
        )
