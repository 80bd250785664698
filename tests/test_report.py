"""Tests for the console report."""

from __future__ import annotations

import io

from rich.console import Console

from inodescope.models import DuplicateSet, FileSummary
from inodescope.report.text import render_report
from inodescope.scan.aggregator import AggregateStats
from inodescope.scan.scanner import ScanResult


def render(result: ScanResult) -> str:
    console = Console(record=True, width=200)
    render_report(result, console)
    return console.export_text()


class TestRenderReport:
    """Test render_report."""

    def test_summary_and_distributions(self) -> None:
        """Summary and distribution tables are rendered."""
        result = ScanResult(
            root="/data",
            mode="quick",
            stats=AggregateStats(
                total_files=1200,
                total_dirs=3,
                extensions={"txt": 1200},
                owners={"alice": 1200},
                size_distribution={"1 KB - 1 MB": 200, "< 1 KB": 1000},
            ),
        )

        output = render(result)

        assert "Inode Analysis Report" in output
        assert "1,200" in output
        assert ".txt" in output
        assert "alice" in output
        assert output.index("< 1 KB") < output.index("1 KB - 1 MB")
        assert "interrupted" not in output

    def test_duplicates_and_interruption(self) -> None:
        """Duplicates and the interruption banner are rendered."""
        result = ScanResult(
            root="/data",
            mode="deep",
            duplicates=[DuplicateSet(size=1024, checksum="x", files=["/a", "/b", "/c"])],
            interrupted=True,
        )

        output = render(result)

        assert "Duplicate sets" in output
        assert "2.0 KiB" in output
        assert "Scan interrupted - partial results" in output

    def test_paths_with_brackets_are_literal(self) -> None:
        """Bracketed paths are not treated as markup."""
        result = ScanResult(root="/data/[bold]weird", mode="quick")

        output = render(result)

        assert "[bold]weird" in output

    def test_undecodable_names_render_to_utf8_stream(self) -> None:
        """Surrogate-escaped names are shown with a replacement character."""
        stream = io.TextIOWrapper(io.BytesIO(), encoding="utf-8")
        console = Console(file=stream, width=200, force_terminal=False)
        result = ScanResult(
            root="/data/bad\udcffdir",
            mode="quick",
            stats=AggregateStats(total_files=1, extensions={"b\udcff": 1}),
            largest_files=[
                FileSummary(
                    path="/data/bad\udcff.bin", size=1, mtime=0.0, owner="root", group="root", permissions="0644"
                )
            ],
        )

        render_report(result, console)
        stream.flush()

        output = stream.buffer.getvalue().decode("utf-8")
        assert "/data/bad\ufffd.bin" in output
        assert ".b\ufffd" in output
