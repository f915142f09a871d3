"""
DocExport Command Line Interface.

Thin host wrapper: loads a reflector dump, runs the export and writes the
records as JSON. File discovery and source reflection are done elsewhere.
"""

import asyncio
import json
import signal
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from docexport.config import ConfigurationError, DocExportConfig, load_config
from docexport.export import (
    CancellationToken,
    ExportError,
    ExportOrchestrator,
    registry_from_config,
)
from docexport.models.output import ExportRunResult
from docexport.parsing import HashNotationError, HashNotationParser
from docexport.reflection import ReflectionLoadError, read_reflection_dump
from docexport.utils.logging import configure_logging
from docexport.version import __version__

# Summaries go to stderr so JSON on stdout stays parseable
console = Console(stderr=True)


def _load_config(config_path: str | None) -> DocExportConfig:
    try:
        return load_config(config_path)
    except (ConfigurationError, FileNotFoundError) as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)


@contextmanager
def _cancel_on_interrupt(token: CancellationToken) -> Iterator[None]:
    """Cancel ``token`` on the first Ctrl-C instead of aborting the run.

    Files already in progress finish and the rest are skipped. A second
    Ctrl-C goes to the previous handler, which normally aborts.
    """
    if threading.current_thread() is not threading.main_thread():
        # signal handlers can only be installed from the main thread
        yield
        return

    def _interrupt_handler(signum, frame):
        token.cancel()
        signal.signal(signal.SIGINT, old_handler)

    old_handler = signal.signal(signal.SIGINT, _interrupt_handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, old_handler)


@click.group()
@click.version_option(version=__version__, prog_name="docexport")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """DocExport: documentation tree export for reflected source elements."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@main.command()
@click.argument("dump", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--root",
    "-r",
    required=True,
    help="Root path stripped from file paths",
)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to configuration file",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="Write records to this JSON file instead of stdout",
)
@click.option(
    "--concurrent",
    is_flag=True,
    help="Export files concurrently (export.parallel_files at a time)",
)
@click.pass_context
def export(
    ctx: click.Context,
    dump: str,
    root: str,
    config: str | None,
    output: str | None,
    concurrent: bool,
) -> None:
    """Export the reflected files in DUMP.

    DUMP is a JSON or YAML reflector dump. Exits with status 1 when any
    file fails to export. On Ctrl-C the files not yet started are skipped,
    the partial result is written and the exit status is 130.
    """
    verbose = ctx.obj.get("verbose", False) if ctx.obj else False
    cfg = _load_config(config)
    configure_logging(cfg.logging, verbose=verbose or cfg.debug, console=console)

    try:
        files = read_reflection_dump(dump, registry_from_config(cfg))
    except (ReflectionLoadError, FileNotFoundError) as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    orchestrator = ExportOrchestrator(root, config=cfg)
    token = CancellationToken()
    try:
        with _cancel_on_interrupt(token):
            if concurrent:
                result = asyncio.run(orchestrator.export_async(files, cancel_token=token))
            else:
                result = orchestrator.export(files, cancel_token=token)
    except KeyboardInterrupt:
        console.print("[yellow]Export aborted.[/yellow]")
        sys.exit(130)
    except ExportError as e:
        console.print(f"[red]Export failed:[/red] {e}")
        if verbose:
            console.print_exception()
        sys.exit(1)

    payload = result.to_json()
    if output:
        Path(output).write_text(payload + "\n", encoding="utf-8")
    else:
        click.echo(payload)

    _display_summary(result, output)
    if result.cancelled:
        console.print(
            f"[yellow]Export interrupted: {result.skipped_count} files skipped.[/yellow]"
        )
        sys.exit(130)
    if result.failed_count:
        sys.exit(1)


def _display_summary(result: ExportRunResult, output: str | None) -> None:
    """Display per-run counts and the failed files."""
    summary_table = Table(title="Export Summary", show_header=False, box=None)
    summary_table.add_column("Metric", style="cyan")
    summary_table.add_column("Value", style="green")
    summary_table.add_row("Root", result.root)
    summary_table.add_row("Completed", str(result.completed_count))
    failed_style = "red" if result.failed_count else "green"
    summary_table.add_row("Failed", f"[{failed_style}]{result.failed_count}[/{failed_style}]")
    if result.cancelled:
        summary_table.add_row("Skipped", f"[yellow]{result.skipped_count}[/yellow]")
    if output:
        summary_table.add_row("Output", output)
    console.print(summary_table)

    failures = result.failures()
    if failures:
        failure_table = Table(title="Failed Files", show_header=True)
        failure_table.add_column("Path", style="cyan")
        failure_table.add_column("Location")
        failure_table.add_column("Error", style="red")
        for failure in failures:
            failure_table.add_row(failure.path, failure.error_location or "-", failure.error or "")
        console.print(failure_table)


@main.command("parse-hash")
@click.argument("text")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to configuration file",
)
def parse_hash(text: str, config: str | None) -> None:
    """Parse hash-notation TEXT and print the tree as JSON."""
    cfg = _load_config(config)
    parser = HashNotationParser(
        registry_from_config(cfg),
        max_depth=cfg.hash_notation.max_depth,
        shared_index=cfg.hash_notation.shared_index,
    )
    try:
        tree = parser.parse(text)
    except HashNotationError as e:
        console.print(f"[red]Hash notation error:[/red] {e}")
        sys.exit(1)
    click.echo(json.dumps(tree.to_export(), indent=2))


@main.command("config")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to configuration file",
)
def show_config(config: str | None) -> None:
    """Display the effective configuration."""
    cfg = _load_config(config)

    console.print(Panel("[bold blue]DocExport Configuration[/bold blue]", title="Configuration"))
    table = Table(show_header=False, box=None)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Max Depth", str(cfg.hash_notation.max_depth))
    table.add_row("Shared Index", str(cfg.hash_notation.shared_index))
    table.add_row("Fallback To Raw", str(cfg.hash_notation.fallback_to_raw))
    table.add_row("Parallel Files", str(cfg.export.parallel_files))
    table.add_row("Continue On Error", str(cfg.export.continue_on_error))
    table.add_row("Deprecation Functions", ", ".join(cfg.export.deprecation_functions))
    table.add_row("Log Level", cfg.logging.level.value)
    if cfg.extra_tags:
        table.add_row(
            "Extra Tags",
            ", ".join(f"@{name}={kind}" for name, kind in sorted(cfg.extra_tags.items())),
        )
    console.print(table)


if __name__ == "__main__":
    main()
