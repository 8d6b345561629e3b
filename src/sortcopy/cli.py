"""Command line interface for sortcopy."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from sortcopy.classification.file_types import DEFAULT_CATEGORY, categories
from sortcopy.classification.models import ClassificationMode
from sortcopy.config import ConfigError, ConfigManager
from sortcopy.ingestion.detectors import HashComputer
from sortcopy.logs.exception_log import ExceptionLog
from sortcopy.logs.handlers import configure_logging
from sortcopy.logs.sinks import ConsoleLogSink, MemoryLogSink
from sortcopy.organization.models import RunConfig
from sortcopy.organization.pipeline import CopyOrchestrator

console = Console()

_MODE_CHOICES = [mode.value for mode in ClassificationMode]


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        console.print_json(data={"error": {"code": code, "message": message}})
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _cli_overrides(ctx: click.Context, values: dict[str, Any]) -> dict[str, Any]:
    """Return dotted overrides for options explicitly given on the command line."""

    overrides: dict[str, Any] = {}
    for param, key in (
        ("mode", "run.mode"),
        ("rename", "run.rename"),
        ("pending", "run.pending"),
        ("overwrite", "run.overwrite"),
        ("workers", "execution.workers"),
    ):
        if ctx.get_parameter_source(param) == ParameterSource.COMMANDLINE:
            overrides[key] = values[param]
    return overrides


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="sortcopy")
def cli() -> None:
    """sortcopy copies a directory tree into folders by date, extension, or file type."""


@cli.command()
@click.argument("origin", type=click.Path(file_okay=False, path_type=str))
@click.argument("destination", type=click.Path(file_okay=False, path_type=str))
@click.option(
    "--mode",
    type=click.Choice(_MODE_CHOICES),
    default=ClassificationMode.BY_METADATA_DATE.value,
    show_default=True,
    help="Classification rule deciding the destination folder.",
)
@click.option("--rename/--no-rename", default=False, help="Rename copies after their date.")
@click.option(
    "--pending/--no-pending",
    default=True,
    help="Send undated files to 0_Pending instead of skipping them.",
)
@click.option(
    "--overwrite/--no-overwrite",
    default=False,
    help="Replace existing files even when their content is identical.",
)
@click.option("--workers", type=click.IntRange(min=1), help="Worker pool size.")
@click.option("--json", "json_output", is_flag=True, help="Emit the run summary as JSON.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def copy(
    ctx: click.Context,
    origin: str,
    destination: str,
    mode: str,
    rename: bool,
    pending: bool,
    overwrite: bool,
    workers: int | None,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Copy every file under ORIGIN into a classified tree under DESTINATION.

    Args:
        ctx: Click context used for parameter source inspection.
        origin: Directory tree to copy from.
        destination: Root of the classified destination tree.
        mode: Classification mode name.
        rename: Whether to rename copies after their resolved date.
        pending: Whether undated files go to the pending folder.
        overwrite: Whether to replace identical existing files.
        workers: Worker pool size override.
        json_output: If True, emit a JSON summary.
        summary_mode: When True, limit output to summary lines and errors.
        quiet: When True, suppress non-error CLI output entirely.

    Raises:
        click.ClickException: If configuration loading fails or the run fails.
    """

    values = {
        "mode": mode,
        "rename": rename,
        "pending": pending,
        "overwrite": overwrite,
        "workers": workers,
    }
    try:
        config = ConfigManager().load(cli_overrides=_cli_overrides(ctx, values))
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return

    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE
    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
    summary_only = summary_mode if explicit_summary else config.cli.summary_default

    if json_output:
        if explicit_quiet and quiet_enabled:
            raise click.ClickException("--json cannot be combined with --quiet.")
        if explicit_summary and summary_only:
            raise click.ClickException("--json cannot be combined with --summary.")
        quiet_enabled = False
        summary_only = False

    if quiet_enabled and summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )

    configure_logging(config.logging)

    run_config = RunConfig.from_options(
        Path(origin).expanduser(),
        Path(destination).expanduser(),
        config.run,
    )
    memory_sink = MemoryLogSink()
    sink = (
        memory_sink
        if json_output
        else ConsoleLogSink(console, quiet=quiet_enabled, summary_only=summary_only)
    )
    orchestrator = CopyOrchestrator(
        sink,
        exception_sink=ExceptionLog(config.logging.exception_file),
        workers=config.execution.workers,
        shutdown_timeout=config.execution.shutdown_timeout_seconds,
        hasher=HashComputer(config.execution.hash_chunk_bytes),
    )
    summary = orchestrator.run(run_config)

    if json_output:
        payload = {
            "context": {
                "origin": str(run_config.origin),
                "destination": str(run_config.destination),
                "mode": run_config.mode.value,
                "rename": run_config.rename,
                "pending": run_config.pending,
                "overwrite": run_config.overwrite,
                "workers": orchestrator.workers,
            },
            "summary": summary.model_dump(mode="json"),
            "log": memory_sink.messages,
        }
        console.print_json(data=payload)
        if not summary.success:
            raise SystemExit(1)
        return

    if not summary.success:
        raise click.ClickException("Copy run failed; see the log above for details.")


@cli.command()
def types() -> None:
    """List the file-type categories used by ``--mode type``."""

    table = Table(title="File types")
    table.add_column("Category", style="cyan")
    table.add_column("Extensions")
    for category, extensions in categories().items():
        table.add_row(category, ", ".join(extensions))
    table.add_row(DEFAULT_CATEGORY, "(anything else)")
    console.print(table)


@cli.group()
def config() -> None:
    """Inspect sortcopy configuration."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration."""

    manager = ConfigManager()
    try:
        resolved = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    note = "" if manager.config_path.exists() else " (not present)"
    console.print(f"# Source file: {manager.config_path}{note}", markup=False, highlight=False)
    yaml_text = yaml.safe_dump(resolved.model_dump(mode="json"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


def main() -> None:
    """Entry point used by the console script."""

    cli(prog_name="sortcopy")


if __name__ == "__main__":  # pragma: no cover
    main()
