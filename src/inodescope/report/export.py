"""JSON export of scan results."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict

from inodescope.scan.scanner import ScanResult
from inodescope.utils.formatting import display_counts, display_path, human_size

LOGGER = logging.getLogger(__name__)


def _file_entry(item) -> Dict[str, Any]:
    entry = asdict(item)
    for name in ("path", "owner", "group"):
        entry[name] = display_path(entry[name])
    entry["mtime"] = item.modified
    return entry


def build_export(result: ScanResult) -> Dict[str, Any]:
    """Assemble the structured export document for ``result``.

    Paths and name keys are given in their display form, so the document
    always encodes as UTF-8.
    """
    document: Dict[str, Any] = asdict(result.stats)
    for name in ("extensions", "owners", "groups"):
        document[name] = display_counts(document[name])
    document.update(
        {
            "root": display_path(result.root),
            "mode": result.mode,
            "largest_files": [_file_entry(item) for item in result.largest_files],
            "oldest_files": [_file_entry(item) for item in result.oldest_files],
            "newest_files": [_file_entry(item) for item in result.newest_files],
            "largest_dirs": [
                {
                    **asdict(item),
                    "path": display_path(item.path),
                    "largest_file": display_path(item.largest_file),
                    "average_size": item.average_size,
                }
                for item in result.largest_dirs
            ],
            "duplicates": [
                {
                    **asdict(group),
                    "files": [display_path(path) for path in group.files],
                    "count": group.count,
                    "total_size": group.total_size,
                    "wasted_space": group.wasted_space,
                }
                for group in result.duplicates
            ],
            "total_inodes": result.total_inodes,
            "total_size": result.total_size,
            "total_size_human": human_size(result.total_size),
            "scan_time": result.scan_time.strftime("%Y-%m-%d %H:%M:%S"),
            "interrupted": result.interrupted,
        }
    )
    return document


def export_json(result: ScanResult, output: Path) -> Path:
    output = Path(output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(build_export(result), indent=2, ensure_ascii=False), encoding="utf-8")
    LOGGER.info("JSON report written to %s", output)
    return output
