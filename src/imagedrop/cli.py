"""Command line interface for ImageDrop."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any, Iterable

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from imagedrop.capture import (
    CaptureError,
    ClipboardMonitor,
    capture_screen,
    clear_clipboard,
    launch_snipping_tool,
    read_clipboard_image,
)
from imagedrop.classification import build_describer
from imagedrop.config import ConfigError, ConfigManager, ImageDropConfig, resolve_with_precedence
from imagedrop.conversion import PopplerRasterizer, build_converter
from imagedrop.library import (
    LibraryError,
    delete_folder,
    export_folder,
    list_folders,
    read_folder,
    resolve_in_root,
)
from imagedrop.logging_setup import configure_logging
from imagedrop.organization import (
    Artifact,
    BatchSummary,
    DropProcessor,
    OutcomeStatus,
    ProcessingOutcome,
)
from imagedrop.state import FolderIndex, StateError
from imagedrop.watch import InboxBatchResult, InboxWatcher

console = Console()

_STATUS_STYLES = {
    OutcomeStatus.SAVED: "green",
    OutcomeStatus.CONVERTED: "green",
    OutcomeStatus.ORIGINAL_ONLY: "yellow",
    OutcomeStatus.FAILED: "red",
    OutcomeStatus.SKIPPED: "yellow",
}


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Conditionally print CLI output according to quiet/summary settings.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active.
        summary_only: Whether only summary lines should be emitted.
    """

    if quiet and mode != "error":
        return

    important_modes = {"summary", "warning", "error"}
    if summary_only and mode not in important_modes:
        return

    console.print(message)


def _resolve_output_modes(
    ctx: click.Context,
    config: ImageDropConfig,
    *,
    json_output: bool,
    quiet: bool,
    summary_mode: bool,
) -> tuple[bool, bool]:
    """Combine CLI flags with configured defaults into ``(quiet, summary_only)``.

    Raises:
        click.ClickException: If the requested modes conflict.
    """

    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE

    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
    summary_only = summary_mode if explicit_summary else config.cli.summary_default

    if json_output:
        if explicit_quiet and quiet_enabled:
            raise click.ClickException("--json cannot be combined with --quiet.")
        if explicit_summary and summary_only:
            raise click.ClickException("--json cannot be combined with --summary.")
        return False, False

    if quiet_enabled and summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )
    return quiet_enabled, summary_only


def _assign_nested(target: dict[str, Any], path: list[str], value: Any) -> None:
    """Assign a nested value within a dictionary for a dotted path.

    Args:
        target: Mapping to mutate in-place.
        path: Sequence of keys representing the nested location.
        value: Value to assign at the nested location.

    Raises:
        ConfigError: If a non-mapping value is encountered along the path.
    """

    node = target
    for segment in path[:-1]:
        existing = node.get(segment)
        if existing is None:
            existing = {}
            node[segment] = existing
        elif not isinstance(existing, dict):
            raise ConfigError(
                f"Cannot assign into '{segment}' because it is not a mapping in the config file."
            )
        node = existing
    node[path[-1]] = value


def _lookup(config: ImageDropConfig, segments: list[str]) -> Any:
    """Return the value at a dotted path of ``config``.

    Raises:
        ConfigError: If the path does not name a setting.
    """

    node: Any = config.model_dump(mode="python")
    for segment in segments:
        if not isinstance(node, dict) or segment not in node:
            raise ConfigError(f"Unknown setting '{'.'.join(segments)}'.")
        node = node[segment]
    return node


def _load_config(ctx: click.Context) -> ImageDropConfig:
    """Load the effective configuration and configure logging for a command.

    Raises:
        ConfigError: If the configuration is invalid.
    """

    obj = ctx.find_object(dict) or {}
    overrides: dict[str, Any] = {}
    if obj.get("root"):
        overrides["storage.root_folder"] = obj["root"]

    manager = ConfigManager()
    manager.ensure_exists()
    config = manager.load(cli_overrides=overrides or None)
    configure_logging(
        config.logging,
        config.storage.data_path(),
        level_override=obj.get("log_level"),
    )
    return config


def build_processor(config: ImageDropConfig) -> DropProcessor:
    """Wire the drop pipeline with the adapters selected by ``config``."""

    return DropProcessor(
        config,
        index=FolderIndex(config.storage.data_path()),
        rasterizer=PopplerRasterizer(
            config.conversion.pdf_dpi,
            timeout=config.conversion.timeout_seconds,
        ),
        converter=build_converter(config.conversion),
        describer=build_describer(config.llm),
    )


def _outcome_line(outcome: ProcessingOutcome) -> str:
    style = _STATUS_STYLES[outcome.status]
    return f"[{style}]{outcome.status.value.upper():>13}[/{style}] {outcome.artifact}: {outcome.message}"


def _batch_payload(summary: BatchSummary) -> dict[str, Any]:
    return {
        "outcomes": [outcome.model_dump(mode="json") for outcome in summary.outcomes],
        "counts": {
            "processed": summary.processed,
            "skipped": summary.skipped,
            "failed": summary.failed,
        },
    }


def _emit_batch(
    summary: BatchSummary,
    *,
    json_output: bool,
    quiet: bool,
    summary_only: bool,
) -> None:
    """Render the outcomes of a processed batch."""

    if json_output:
        console.print_json(data=_batch_payload(summary))
        return

    for outcome in summary.outcomes:
        mode = "warning" if outcome.status is OutcomeStatus.ORIGINAL_ONLY else "detail"
        if outcome.status is OutcomeStatus.FAILED:
            mode = "error"
        _emit_message(_outcome_line(outcome), mode=mode, quiet=quiet, summary_only=summary_only)

    _emit_message(
        f"[green]{summary.summary_line()}.[/green]",
        mode="summary",
        quiet=quiet,
        summary_only=summary_only,
    )


def _run_batch(
    config: ImageDropConfig,
    artifacts: Iterable[Artifact],
    *,
    json_output: bool,
    quiet: bool,
    summary_only: bool,
) -> BatchSummary:
    artifacts = list(artifacts)
    processor = build_processor(config)
    if json_output or quiet:
        summary = processor.process_batch(artifacts)
    else:
        with console.status(f"Processing {len(artifacts)} item(s)..."):
            summary = processor.process_batch(artifacts)
    _emit_batch(summary, json_output=json_output, quiet=quiet, summary_only=summary_only)
    return summary


def _process_capture(
    ctx: click.Context,
    data: bytes,
    base_name: str,
    *,
    config: ImageDropConfig,
    json_output: bool,
    quiet: bool,
    summary_mode: bool,
) -> None:
    quiet_enabled, summary_only = _resolve_output_modes(
        ctx, config, json_output=json_output, quiet=quiet, summary_mode=summary_mode
    )
    _run_batch(
        config,
        [Artifact.from_capture(data, base_name)],
        json_output=json_output,
        quiet=quiet_enabled,
        summary_only=summary_only,
    )


def _output_options(func):
    """Attach the shared ``--json``/``--summary``/``--quiet`` options."""

    func = click.option("--quiet", is_flag=True, help="Suppress non-error output.")(func)
    func = click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")(
        func
    )
    func = click.option("--json", "json_output", is_flag=True, help="Emit JSON output.")(func)
    return func


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="imagedrop")
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=str),
    help="Root folder for organized folders (overrides storage.root_folder).",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Console log level (overrides logging.level).",
)
@click.pass_context
def cli(ctx: click.Context, root: str | None, log_level: str | None) -> None:
    """ImageDrop organizes dropped images, documents and screenshots into folders."""

    ctx.ensure_object(dict)
    ctx.obj["root"] = root
    ctx.obj["log_level"] = log_level


@cli.command()
@click.argument(
    "paths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@_output_options
@click.pass_context
def drop(
    ctx: click.Context,
    paths: tuple[Path, ...],
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Organize the files at PATHS as if they were dropped on ImageDrop.

    Args:
        ctx: Click context for parameter source inspection.
        paths: Files to organize.
        json_output: When True, emit JSON instead of textual output.
        summary_mode: When True, restrict output to summary lines and warnings.
        quiet: When True, suppress non-error output entirely.
    """

    try:
        config = _load_config(ctx)
        quiet_enabled, summary_only = _resolve_output_modes(
            ctx, config, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        summary = _run_batch(
            config,
            [Artifact.from_path(path) for path in paths],
            json_output=json_output,
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return

    if summary.failed and not summary.processed:
        raise SystemExit(1)


@cli.command()
@_output_options
@click.pass_context
def paste(ctx: click.Context, json_output: bool, summary_mode: bool, quiet: bool) -> None:
    """Organize the image currently on the clipboard."""

    try:
        config = _load_config(ctx)
        data = read_clipboard_image()
        if data is None:
            raise CaptureError("No image found on the clipboard.")
        if config.capture.clear_clipboard:
            clear_clipboard()
        _process_capture(
            ctx,
            data,
            "clipboard",
            config=config,
            json_output=json_output,
            quiet=quiet,
            summary_mode=summary_mode,
        )
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
    except CaptureError as exc:
        _handle_cli_error(str(exc), code="capture_error", json_output=json_output, original=exc)


@cli.command()
@_output_options
@click.pass_context
def capture(ctx: click.Context, json_output: bool, summary_mode: bool, quiet: bool) -> None:
    """Take a screenshot of the primary display and organize it."""

    try:
        config = _load_config(ctx)
        data = capture_screen()
        _process_capture(
            ctx,
            data,
            "screenshot",
            config=config,
            json_output=json_output,
            quiet=quiet,
            summary_mode=summary_mode,
        )
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
    except CaptureError as exc:
        _handle_cli_error(str(exc), code="capture_error", json_output=json_output, original=exc)


@cli.command()
@click.option("--timeout", type=float, help="Seconds to wait for a snip (defaults to configuration).")
@_output_options
@click.pass_context
def snip(
    ctx: click.Context,
    timeout: float | None,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Launch the snipping tool and organize the region it copies to the clipboard.

    Args:
        ctx: Click context for parameter source inspection.
        timeout: Optional override for how long to wait for a new clipboard image.
        json_output: When True, emit JSON instead of textual output.
        summary_mode: When True, restrict output to summary lines and warnings.
        quiet: When True, suppress non-error output entirely.
    """

    if timeout is not None and timeout <= 0:
        raise click.ClickException("--timeout must be greater than zero.")

    try:
        config = _load_config(ctx)
        baseline = read_clipboard_image()
        process = launch_snipping_tool(config.capture.snipping_command)
        if not (json_output or quiet):
            console.print("[cyan]Select a region to snip...[/cyan]")
        monitor = ClipboardMonitor(
            read_clipboard_image,
            poll_interval=config.capture.clipboard_poll_seconds,
            timeout=timeout if timeout is not None else config.capture.clipboard_timeout_seconds,
        )
        try:
            data = monitor.wait_for_new_image(baseline)
        finally:
            _close_process(process)
        if config.capture.clear_clipboard:
            clear_clipboard()
        _process_capture(
            ctx,
            data,
            "snippet-tool",
            config=config,
            json_output=json_output,
            quiet=quiet,
            summary_mode=summary_mode,
        )
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
    except CaptureError as exc:
        _handle_cli_error(str(exc), code="capture_error", json_output=json_output, original=exc)


def _close_process(process: subprocess.Popen) -> None:
    if process.poll() is None:
        process.terminate()


def _emit_inbox_batch(
    batch: InboxBatchResult,
    *,
    json_output: bool,
    quiet: bool,
    summary_only: bool,
) -> None:
    if json_output:
        payload = _batch_payload(batch.summary)
        payload["batch_id"] = batch.batch_id
        payload["consumed"] = [path.as_posix() for path in batch.consumed_paths]
        console.print_json(data=payload)
        return

    _emit_message(
        f"[cyan]Inbox batch {batch.batch_id} picked up {len(batch.triggered_paths)} file(s).[/cyan]",
        mode="detail",
        quiet=quiet,
        summary_only=summary_only,
    )
    _emit_batch(batch.summary, json_output=False, quiet=quiet, summary_only=summary_only)


@cli.command()
@click.argument("inbox", type=click.Path(file_okay=False, path_type=Path))
@click.option("--once", is_flag=True, help="Process current inbox contents once and exit.")
@click.option("--debounce", type=float, help="Override debounce interval in seconds.")
@_output_options
@click.pass_context
def watch(
    ctx: click.Context,
    inbox: Path,
    once: bool,
    debounce: float | None,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Organize files as they are dropped into INBOX.

    Args:
        ctx: Click context for parameter source inspection.
        inbox: Directory to monitor.
        once: When True, process current contents once and exit.
        debounce: Optional debounce override in seconds.
        json_output: When True, emit JSON payloads instead of text.
        summary_mode: When True, restrict output to summary/warning lines.
        quiet: When True, suppress non-error output entirely.
    """

    if debounce is not None and debounce <= 0:
        raise click.ClickException("--debounce must be greater than zero.")

    try:
        config = _load_config(ctx)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return

    quiet_enabled, summary_only = _resolve_output_modes(
        ctx, config, json_output=json_output, quiet=quiet, summary_mode=summary_mode
    )
    watcher = InboxWatcher(config, build_processor(config), inbox, debounce_override=debounce)

    def emit(batch: InboxBatchResult) -> None:
        _emit_inbox_batch(
            batch, json_output=json_output, quiet=quiet_enabled, summary_only=summary_only
        )

    if once:
        batch = watcher.process_once()
        if batch is None:
            if json_output:
                console.print_json(data={"outcomes": [], "counts": {}})
                return
            _emit_message(
                f"[yellow]No files waiting in {watcher.inbox}.[/yellow]",
                mode="warning",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
            return
        emit(batch)
        return

    _emit_message(
        f"[cyan]Watching {watcher.inbox}. Press Ctrl+C to stop.[/cyan]",
        mode="detail",
        quiet=quiet_enabled or json_output,
        summary_only=summary_only,
    )
    try:
        watcher.watch(emit)
    except KeyboardInterrupt:
        watcher.stop()
        if not json_output:
            _emit_message(
                "[yellow]Watch stopped by user request.[/yellow]",
                mode="summary",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
    except RuntimeError as exc:
        _handle_cli_error(
            str(exc), code="watch_runtime_error", json_output=json_output, original=exc
        )


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Emit the folder list as JSON.")
@click.pass_context
def folders(ctx: click.Context, json_output: bool) -> None:
    """List organized folders, newest first."""

    try:
        config = _load_config(ctx)
        summaries = list_folders(config.storage.root_path())
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return
    except OSError as exc:
        _handle_cli_error(str(exc), code="filesystem_error", json_output=json_output, original=exc)
        return

    if json_output:
        console.print_json(data={"folders": [summary.model_dump(mode="json") for summary in summaries]})
        return

    if not summaries:
        console.print(f"[yellow]No folders in {config.storage.root_path()} yet.[/yellow]")
        return

    table = Table(title=str(config.storage.root_path()))
    table.add_column("Folder", style="cyan")
    table.add_column("Images", justify="right")
    table.add_column("Created")
    for summary in summaries:
        table.add_row(
            summary.name,
            str(summary.image_count),
            summary.created.astimezone().strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


@cli.command()
@click.argument("folder")
@click.option("--json", "json_output", is_flag=True, help="Emit folder contents as JSON.")
@click.pass_context
def show(ctx: click.Context, folder: str, json_output: bool) -> None:
    """Show the images and description stored in FOLDER.

    FOLDER is a folder name under the root folder or a path inside it.
    """

    try:
        config = _load_config(ctx)
        target = resolve_in_root(folder, config.storage.root_path())
        contents = read_folder(target)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return
    except LibraryError as exc:
        _handle_cli_error(str(exc), code="folder_error", json_output=json_output, original=exc)
        return

    if json_output:
        payload = contents.model_dump(mode="json")
        payload["folder"] = {"name": target.name, "path": str(target)}
        console.print_json(data=payload)
        return

    console.print(f"[bold]{target.name}[/bold] ({target})")
    if contents.description:
        console.print(contents.description)
    if not contents.images:
        console.print("[yellow]No images in this folder.[/yellow]")
        return
    table = Table()
    table.add_column("Image", style="cyan")
    table.add_column("Created")
    for entry in contents.images:
        table.add_row(entry.name, entry.created.astimezone().strftime("%Y-%m-%d %H:%M:%S"))
    console.print(table)


@cli.command()
@click.argument("folder")
@click.option("--yes", is_flag=True, help="Delete without asking for confirmation.")
@click.pass_context
def delete(ctx: click.Context, folder: str, yes: bool) -> None:
    """Delete FOLDER and everything inside it."""

    try:
        config = _load_config(ctx)
        root = config.storage.root_path()
        target = resolve_in_root(folder, root)
        if not yes:
            click.confirm(f"Delete {target} and all of its files?", abort=True)
        removed = delete_folder(target, root)
        FolderIndex(config.storage.data_path()).remove(removed)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=False, original=exc)
        return
    except LibraryError as exc:
        _handle_cli_error(str(exc), code="folder_error", json_output=False, original=exc)
        return
    except StateError as exc:
        console.print(f"[yellow]Folder deleted but the index could not be updated: {exc}[/yellow]")
        return

    console.print(f"[green]Deleted {removed.name}.[/green]")


@cli.command()
@click.argument("folder")
@click.pass_context
def export(ctx: click.Context, folder: str) -> None:
    """Write an etcim.json description of FOLDER into the root folder."""

    try:
        config = _load_config(ctx)
        destination = export_folder(folder, config.storage.root_path())
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=False, original=exc)
        return
    except LibraryError as exc:
        _handle_cli_error(str(exc), code="folder_error", json_output=False, original=exc)
        return

    console.print(f"[green]Exported to {destination}.[/green]")


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Emit the pointer as JSON.")
@click.pass_context
def last(ctx: click.Context, json_output: bool) -> None:
    """Show the folder and files written by the most recent drop."""

    try:
        config = _load_config(ctx)
        pointer = FolderIndex(config.storage.data_path()).last_processed()
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return
    except StateError as exc:
        _handle_cli_error(str(exc), code="state_error", json_output=json_output, original=exc)
        return

    if json_output:
        console.print_json(data=pointer.model_dump(mode="json", by_alias=True))
        return

    if pointer.last_folder is None:
        console.print("[yellow]Nothing has been processed yet.[/yellow]")
        return

    console.print(f"[bold]{pointer.last_folder_name}[/bold] ({pointer.last_folder})")
    for path in pointer.last_files:
        console.print(f"  - {path}")


@cli.command()
@click.pass_context
def reconcile(ctx: click.Context) -> None:
    """Rebuild the folder index from the folders on disk."""

    try:
        config = _load_config(ctx)
        structure = FolderIndex(config.storage.data_path()).reconcile(config.storage.root_path())
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=False, original=exc)
        return
    except (StateError, OSError) as exc:
        _handle_cli_error(str(exc), code="state_error", json_output=False, original=exc)
        return

    file_count = sum(len(record.files) for record in structure.folders)
    console.print(
        f"[green]Indexed {len(structure.folders)} folder(s) with {file_count} file(s).[/green]"
    )


@cli.group()
def config() -> None:
    """Manage ImageDrop configuration values."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Args:
        no_env: If True, ignore environment-derived overrides.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        config = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(config.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Args:
        key: Dotted path describing the configuration field to update.
        value: YAML-literal value to write into the configuration file.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must specify a dotted path such as 'storage.root_folder'.")

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    file_data = manager.load_file_overrides()

    dotted = ".".join(segments)
    try:
        previous = _lookup(
            resolve_with_precedence(defaults=ImageDropConfig(), file_overrides=file_data), segments
        )
        _assign_nested(file_data, segments, parsed_value)
        updated = _lookup(
            resolve_with_precedence(defaults=ImageDropConfig(), file_overrides=file_data), segments
        )
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    if previous == updated:
        console.print(
            f"[yellow]{dotted} is already {escape(repr(updated))}; nothing changed.[/yellow]"
        )
        return

    manager.save(file_data)
    console.print(f"[green]{dotted}: {escape(repr(previous))} -> {escape(repr(updated))}[/green]")
    if segments[0] == "storage":
        console.print(
            "[dim]Existing folders are not moved; run `imagedrop reconcile` after moving them.[/dim]"
        )


@config.command("edit")
def config_edit() -> None:
    """Open the configuration file in an interactive editor session.

    Raises:
        click.ClickException: If edited content is invalid or cannot be saved.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return

    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc

    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        resolve_with_precedence(defaults=ImageDropConfig(), file_overrides=parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(parsed)
    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
