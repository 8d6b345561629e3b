"""CLI tests for the sortcopy entrypoint."""

from __future__ import annotations

import json
import os
from pathlib import Path

from click.testing import CliRunner

from sortcopy.cli import cli


def _env_with_home(tmp_path: Path) -> dict[str, str]:
    """Return environment variables pointing HOME to a temp directory.

    Args:
        tmp_path: Temporary directory provided by pytest.

    Returns:
        dict[str, str]: Environment mapping with HOME set.
    """
    env = {key: value for key, value in os.environ.items() if not key.startswith("SORTCOPY__")}
    env["HOME"] = str(tmp_path / "home")
    return env


def _origin(tmp_path: Path) -> Path:
    origin = tmp_path / "origin"
    (origin / "nested").mkdir(parents=True)
    (origin / "notes.txt").write_text("hello world", encoding="utf-8")
    (origin / "nested" / "archive.zip").write_bytes(b"PK\x05\x06" + b"\x00" * 18)
    return origin


def test_cli_help_displays_commands() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "sortcopy copies a directory tree" in result.output
    for command in ("copy", "types", "config"):
        assert command in result.output


def test_cli_copy_by_type(tmp_path: Path) -> None:
    origin = _origin(tmp_path)
    destination = tmp_path / "dest"
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["copy", str(origin), str(destination), "--mode", "type", "--workers", "2"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0, result.output
    assert (destination / "Documents" / "notes.txt").read_text(encoding="utf-8") == "hello world"
    assert (destination / "Compressed" / "archive.zip").exists()
    assert "Finish: copied=2, skipped=0, errors=0" in result.output


def test_cli_copy_json_payload(tmp_path: Path) -> None:
    origin = _origin(tmp_path)
    destination = tmp_path / "dest"
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    args = ["copy", str(origin), str(destination), "--mode", "extension", "--json"]

    first = runner.invoke(cli, args, env=env)
    second = runner.invoke(cli, args, env=env)

    assert first.exit_code == 0, first.output
    payload = json.loads(first.output)
    assert payload["context"]["mode"] == "extension"
    assert payload["context"]["pending"] is True
    assert payload["summary"]["success"] is True
    assert payload["summary"]["copied"] == 2
    assert payload["log"][-1] == "Finish: copied=2, skipped=0, errors=0"
    assert (destination / "txt" / "notes.txt").exists()
    assert (destination / "zip" / "archive.zip").exists()

    repeat = json.loads(second.output)
    assert repeat["summary"]["copied"] == 0
    assert repeat["summary"]["skipped_identical"] == 2


def test_cli_copy_summary_mode_hides_progress(tmp_path: Path) -> None:
    origin = _origin(tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["copy", str(origin), str(tmp_path / "dest"), "--mode", "type", "--summary"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0, result.output
    assert "Processing:" not in result.output
    assert "Finish:" in result.output


def test_cli_copy_uses_configured_mode(tmp_path: Path) -> None:
    origin = _origin(tmp_path)
    destination = tmp_path / "dest"
    env = _env_with_home(tmp_path)
    env["SORTCOPY__RUN__MODE"] = "type"
    runner = CliRunner()

    result = runner.invoke(cli, ["copy", str(origin), str(destination), "--quiet"], env=env)

    assert result.exit_code == 0, result.output
    assert (destination / "Documents" / "notes.txt").exists()
    assert "Finish:" not in result.output


def test_cli_copy_rejects_conflicting_flags(tmp_path: Path) -> None:
    origin = _origin(tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["copy", str(origin), str(tmp_path / "dest"), "--json", "--quiet"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code != 0
    assert "--json cannot be combined with --quiet." in result.output


def test_cli_copy_missing_origin_fails(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(
        cli,
        ["copy", str(tmp_path / "missing"), str(tmp_path / "dest"), "--mode", "type"],
        env=env,
    )

    assert result.exit_code == 1
    assert "Error: copy did not complete" in result.output
    exception_log = Path(env["HOME"]) / ".sortcopy" / "exceptions.log"
    assert "Exception: builtins.NotADirectoryError" in exception_log.read_text(encoding="utf-8")


def test_cli_types_lists_categories() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["types"])

    assert result.exit_code == 0
    for category in ("Images", "Compressed", "Others"):
        assert category in result.output


def test_cli_config_view_shows_effective_values(tmp_path: Path) -> None:
    env = _env_with_home(tmp_path)
    env["SORTCOPY__EXECUTION__WORKERS"] = "3"
    runner = CliRunner()

    with_env = runner.invoke(cli, ["config", "view"], env=env)
    without_env = runner.invoke(cli, ["config", "view", "--no-env"], env=env)

    assert with_env.exit_code == 0
    assert "workers: 3" in with_env.output
    assert "workers: null" in without_env.output


def test_cli_copy_metadata_mode_keeps_output_clean(tmp_path: Path) -> None:
    origin = tmp_path / "origin"
    origin.mkdir()
    (origin / "a.txt").write_text("plain text", encoding="utf-8")
    (origin / "b.bin").write_bytes(b"\x00\x01\x02\x03 not an image")
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    quiet = runner.invoke(cli, ["copy", str(origin), str(tmp_path / "q"), "--quiet"], env=env)
    summary = runner.invoke(cli, ["copy", str(origin), str(tmp_path / "s"), "--summary"], env=env)

    assert quiet.exit_code == 0, quiet.output
    assert quiet.output == ""
    assert summary.exit_code == 0, summary.output
    assert summary.output.splitlines() == ["Finish: copied=2, skipped=0, errors=0"]
