"""Console report rendered with rich."""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from inodescope.models import FileSummary
from inodescope.scan.classifier import AGE_CATEGORIES, SIZE_CATEGORIES
from inodescope.scan.scanner import ScanResult
from inodescope.utils.formatting import display_path, human_count, human_size, percentage


def _text(value: str) -> str:
    return escape(display_path(value))


def _summary_table(result: ScanResult) -> Table:
    stats = result.stats
    table = Table(title="Summary", show_header=False, title_justify="left")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    rows = [
        ("Files", human_count(stats.total_files)),
        ("Directories", human_count(stats.total_dirs)),
        ("Symlinks", human_count(stats.total_symlinks)),
        ("Sockets", human_count(stats.total_sockets)),
        ("FIFOs", human_count(stats.total_fifos)),
        ("Devices", human_count(stats.total_devices)),
        ("Total Inodes", human_count(result.total_inodes)),
        ("Total Size", human_size(result.total_size)),
        ("Empty Files", human_count(stats.empty_files)),
        ("Empty Directories", human_count(stats.empty_dirs)),
        ("Broken Symlinks", human_count(stats.broken_symlinks)),
        ("Permission Denied", human_count(stats.permission_denied)),
    ]
    if result.duration:
        rows.append(("Scan Duration", f"{result.duration:.2f}s"))
    for label, value in rows:
        table.add_row(label, value)
    return table


def _distribution_table(
    title: str,
    label: str,
    counts: Dict[str, int],
    total: int,
    order: Sequence[str] | None = None,
) -> Table:
    table = Table(title=title, header_style="bold magenta", title_justify="left")
    table.add_column(label)
    table.add_column("Count", justify="right")
    table.add_column("Share", justify="right")
    if order is not None:
        ranked = [(key, counts[key]) for key in order if key in counts]
    else:
        ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    for key, count in ranked:
        table.add_row(_text(key), human_count(count), percentage(count, total))
    return table


def _files_table(title: str, files: Iterable[FileSummary]) -> Table:
    table = Table(title=title, header_style="bold magenta", title_justify="left")
    table.add_column("Size", justify="right")
    table.add_column("Modified")
    table.add_column("Owner")
    table.add_column("Mode")
    table.add_column("Path")
    for item in files:
        table.add_row(
            human_size(item.size),
            item.modified,
            _text(f"{item.owner}:{item.group}"),
            item.permissions,
            _text(item.path),
        )
    return table


def _tables(result: ScanResult) -> List[Table]:
    stats = result.stats
    tables = [_summary_table(result)]

    if result.duplicates:
        table = Table(title="Duplicate Files", show_header=False, title_justify="left")
        table.add_column("Metric")
        table.add_column("Value", justify="right")
        table.add_row("Duplicate sets", human_count(len(result.duplicates)))
        table.add_row("Duplicate files", human_count(sum(group.count for group in result.duplicates)))
        table.add_row("Wasted space", human_size(result.wasted_space))
        tables.append(table)

    extensions = {f".{ext}": count for ext, count in stats.extensions.items()}
    for title, label, counts, order in (
        ("Extensions", "Extension", extensions, None),
        ("Owners", "Owner", stats.owners, None),
        ("Groups", "Group", stats.groups, None),
        ("Permissions", "Mode", stats.permissions, None),
        ("Size Distribution", "Size", stats.size_distribution, SIZE_CATEGORIES),
        ("Age Distribution", "Age", stats.age_distribution, AGE_CATEGORIES),
    ):
        if counts:
            tables.append(_distribution_table(title, label, counts, stats.total_files, order))

    for title, files in (
        ("Largest Files", result.largest_files),
        ("Oldest Files", result.oldest_files),
        ("Newest Files", result.newest_files),
    ):
        if files:
            tables.append(_files_table(title, files))

    if result.largest_dirs:
        table = Table(title="Largest Directories", header_style="bold magenta", title_justify="left")
        table.add_column("Size", justify="right")
        table.add_column("Files", justify="right")
        table.add_column("Average", justify="right")
        table.add_column("Largest File")
        table.add_column("Path")
        for item in result.largest_dirs:
            table.add_row(
                human_size(item.size),
                human_count(item.count),
                human_size(int(item.average_size)),
                f"{_text(item.largest_file)} ({human_size(item.largest_size)})",
                _text(item.path),
            )
        tables.append(table)
    return tables


def render_report(result: ScanResult, console: Console) -> None:
    """Print the full report for ``result`` to ``console``."""
    console.rule(f"Inode Analysis Report - {_text(result.root)}")
    console.print(f"Mode: [bold]{result.mode.capitalize()}[/bold]")
    for table in _tables(result):
        console.print()
        console.print(table)
    if result.interrupted:
        console.print()
        console.print("[bold yellow]Scan interrupted - partial results[/bold yellow]")
