"""Tests for JSON export."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

from inodescope.models import DirectoryStat, DuplicateSet, FileSummary
from inodescope.report.export import build_export, export_json
from inodescope.scan.aggregator import AggregateStats
from inodescope.scan.scanner import ScanResult


def make_result() -> ScanResult:
    return ScanResult(
        root="/srv/data",
        mode="quick",
        stats=AggregateStats(
            total_files=2,
            total_dirs=1,
            total_sockets=1,
            total_size=2048,
            extensions={"log": 2},
            file_types={"regular": 2, "directory": 1, "socket": 1},
        ),
        largest_files=[
            FileSummary(path="/srv/data/a.log", size=2000, mtime=0.0, owner="root", group="root", permissions="0644")
        ],
        largest_dirs=[DirectoryStat(path="/srv/data", size=2048, count=2, largest_file="a.log", largest_size=2000)],
        duplicates=[DuplicateSet(size=24, checksum="ff", files=["/srv/data/x", "/srv/data/y"])],
        scan_time=datetime(2024, 5, 1, 12, 30, 0),
        interrupted=True,
    )


class TestBuildExport:
    """Test build_export."""

    def test_derived_fields(self) -> None:
        """Derived totals and metadata are present."""
        document = build_export(make_result())

        assert document["total_inodes"] == 4
        assert document["total_size"] == 2048
        assert document["total_size_human"] == "2.0 KiB"
        assert document["scan_time"] == "2024-05-01 12:30:00"
        assert document["interrupted"] is True
        assert document["extensions"] == {"log": 2}

    def test_lists(self) -> None:
        """Report lists carry their derived fields."""
        document = build_export(make_result())

        assert document["largest_files"][0]["path"] == "/srv/data/a.log"
        assert document["largest_dirs"][0]["average_size"] == 1024.0
        duplicate = document["duplicates"][0]
        assert duplicate["count"] == 2
        assert duplicate["wasted_space"] == 24
        assert duplicate["total_size"] == 48


class TestExportJson:
    """Test export_json."""

    def test_writes_file(self, tmp_path: Path) -> None:
        """The document is written as JSON."""
        output = tmp_path / "reports" / "scan.json"

        export_json(make_result(), output)

        data = json.loads(output.read_text())
        assert data["root"] == "/srv/data"
        assert "/srv/data" in output.read_text()
