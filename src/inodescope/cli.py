"""Command line interface for inodescope."""

from __future__ import annotations

import logging
import signal
import threading
from contextlib import contextmanager, nullcontext
from pathlib import Path
from typing import Iterator, List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from inodescope.config import APP_NAME, APP_VERSION, DEFAULT_SAMPLE_SIZE, ScanConfig
from inodescope.models import CheckpointError, ScanError
from inodescope.persistence.checkpoint import load_checkpoint, save_checkpoint
from inodescope.report.export import export_json
from inodescope.report.text import render_report
from inodescope.scan.scanner import ScanResult, Scanner


console = Console()
app = typer.Typer(help="inodescope - census of the inodes in a directory tree")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"{APP_NAME} {APP_VERSION}")
        raise typer.Exit()


@contextmanager
def _interrupt_on_sigint(cancel: threading.Event) -> Iterator[None]:
    """Turn Ctrl-C into a cooperative stop for the duration of the block."""

    def handler(signum, frame) -> None:
        cancel.set()
        console.print("\n[yellow]Interrupt received, finishing current operations...[/yellow]")

    try:
        previous = signal.signal(signal.SIGINT, handler)
        installed = True
    except ValueError:  # pragma: no cover - not running in the main thread
        installed = False
    try:
        yield
    finally:
        if installed:
            signal.signal(signal.SIGINT, previous)


def _export(result: ScanResult, json_path: Path | None) -> None:
    if json_path is None:
        return
    try:
        written = export_json(result, json_path)
    except (OSError, ValueError) as exc:
        console.print(f"[yellow]Could not write JSON report: {escape(str(exc))}[/yellow]")
        return
    console.print(f"JSON: [bold]{escape(str(written))}[/bold]")


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Walk a directory tree and report inode statistics."""


@app.command()
def scan(
    path: Path = typer.Argument(Path("."), help="Directory to scan."),
    path_option: Optional[Path] = typer.Option(
        None, "--path", help="Directory to scan; takes precedence over the argument"
    ),
    samples: int = typer.Option(
        DEFAULT_SAMPLE_SIZE, "--samples", "-n", min=1, help="Entries in the top-k lists"
    ),
    deep: bool = typer.Option(False, "--deep", help="Deep scan (implies duplicate detection)"),
    duplicates: Optional[bool] = typer.Option(
        None, "--duplicates/--no-duplicates", help="Detect files with identical content"
    ),
    symlinks: bool = typer.Option(False, "--symlinks", help="Follow symbolic links"),
    exclude: Optional[List[str]] = typer.Option(
        None, "--exclude", "-e", help="Glob pattern to skip (repeatable)"
    ),
    max_depth: Optional[int] = typer.Option(None, "--max-depth", min=0, help="Depth ceiling"),
    age: Optional[int] = typer.Option(
        None, "--age", min=0, help="Deep scan: only track files modified within N days"
    ),
    workers: int = typer.Option(1, "--workers", "--threads", min=1, help="Parallel scan workers"),
    save_state: Optional[Path] = typer.Option(None, "--save-state", help="Write a checkpoint"),
    load_state: Optional[Path] = typer.Option(
        None, "--load-state", help="Report a saved checkpoint instead of scanning"
    ),
    json_path: Optional[Path] = typer.Option(None, "--json", help="Export the report as JSON"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print the report"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Scan a directory tree and print an inode report."""
    _setup_logging(verbose)

    if load_state is not None:
        try:
            snapshot = load_checkpoint(load_state)
        except CheckpointError as exc:
            console.print(f"[red]{escape(str(exc))}[/red]")
            raise typer.Exit(code=1)
        console.print(
            f"Loaded: [bold]{escape(str(load_state))}[/bold] "
            f"(saved {snapshot.timestamp:%Y-%m-%d %H:%M:%S})"
        )
        result = snapshot.to_result()
        render_report(result, console)
        _export(result, json_path)
        return

    config = ScanConfig(
        sample_size=samples,
        deep=deep,
        find_duplicates=deep if duplicates is None else duplicates,
        follow_symlinks=symlinks,
        exclude=tuple(exclude or ()),
        max_depth=max_depth,
        age_days=age,
        workers=workers,
    )
    cancel = threading.Event()
    scanner = Scanner(config, cancel=cancel)

    if not quiet:
        console.print(f"Mode: [bold]{config.mode.capitalize()}[/bold]")
        if config.find_duplicates:
            console.print("Duplicate Detection: Enabled")
        if config.max_depth:
            console.print(f"Max Depth: {config.max_depth}")

    status = nullcontext() if quiet else console.status("Scanning filesystem...")
    try:
        with _interrupt_on_sigint(cancel), status:
            result = scanner.scan(path_option if path_option is not None else path)
    except ScanError as exc:
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        raise typer.Exit(code=1)

    if save_state is not None:
        try:
            save_checkpoint(result, save_state)
        except CheckpointError as exc:
            console.print(f"[yellow]{escape(str(exc))}[/yellow]")
        else:
            console.print(f"Checkpoint: [bold]{escape(str(save_state))}[/bold]")

    render_report(result, console)
    _export(result, json_path)
