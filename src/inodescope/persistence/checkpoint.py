"""Versioned checkpoint files for scan results."""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_core import PydanticSerializationError

from inodescope.config import PROCESSED_PATHS_LIMIT
from inodescope.models import CheckpointError, DirectoryStat, DuplicateSet, FileSummary
from inodescope.scan.aggregator import AggregateStats
from inodescope.scan.scanner import ScanResult
from inodescope.utils.formatting import display_counts, display_path

LOGGER = logging.getLogger(__name__)

CHECKPOINT_FORMAT = "inodescope-checkpoint"
CHECKPOINT_VERSION = 1


class _Schema(BaseModel):
    model_config = ConfigDict(extra="forbid")


class StatsModel(_Schema):
    total_files: int = Field(ge=0)
    total_dirs: int = Field(ge=0)
    total_symlinks: int = Field(ge=0)
    total_sockets: int = Field(ge=0)
    total_fifos: int = Field(ge=0)
    total_devices: int = Field(ge=0)
    total_size: int = Field(ge=0)
    empty_files: int = Field(ge=0)
    empty_dirs: int = Field(ge=0)
    broken_symlinks: int = Field(ge=0)
    permission_denied: int = Field(ge=0)
    file_types: Dict[str, int]
    extensions: Dict[str, int]
    owners: Dict[str, int]
    groups: Dict[str, int]
    permissions: Dict[str, int]
    size_distribution: Dict[str, int]
    age_distribution: Dict[str, int]


class FileSummaryModel(_Schema):
    path: str
    size: int
    mtime: float
    owner: str
    group: str
    permissions: str


class DirectoryStatModel(_Schema):
    path: str
    size: int
    count: int
    largest_file: str
    largest_size: int


class DuplicateSetModel(_Schema):
    size: int
    checksum: str
    files: List[str]


def _summary(item: FileSummary) -> dict:
    return {
        **asdict(item),
        "path": display_path(item.path),
        "owner": display_path(item.owner),
        "group": display_path(item.group),
    }


class CheckpointSnapshot(_Schema):
    format: Literal["inodescope-checkpoint"] = CHECKPOINT_FORMAT
    version: Literal[1] = CHECKPOINT_VERSION
    root: str
    mode: str
    timestamp: datetime
    interrupted: bool
    stats: StatsModel
    processed_paths: List[str] = Field(max_length=PROCESSED_PATHS_LIMIT)
    largest_files: List[FileSummaryModel] = []
    oldest_files: List[FileSummaryModel] = []
    newest_files: List[FileSummaryModel] = []
    largest_dirs: List[DirectoryStatModel] = []
    duplicates: List[DuplicateSetModel] = []

    @classmethod
    def from_result(cls, result: ScanResult) -> "CheckpointSnapshot":
        """Snapshot ``result``; paths are stored in their display form."""
        stats = asdict(result.stats)
        for name in ("extensions", "owners", "groups"):
            stats[name] = display_counts(stats[name])
        return cls.model_validate(
            {
                "root": display_path(result.root),
                "mode": result.mode,
                "timestamp": datetime.now(),
                "interrupted": result.interrupted,
                "stats": stats,
                "processed_paths": [
                    display_path(path) for path in result.processed_paths[:PROCESSED_PATHS_LIMIT]
                ],
                "largest_files": [_summary(item) for item in result.largest_files],
                "oldest_files": [_summary(item) for item in result.oldest_files],
                "newest_files": [_summary(item) for item in result.newest_files],
                "largest_dirs": [
                    {
                        **asdict(item),
                        "path": display_path(item.path),
                        "largest_file": display_path(item.largest_file),
                    }
                    for item in result.largest_dirs
                ],
                "duplicates": [
                    {**asdict(item), "files": [display_path(path) for path in item.files]}
                    for item in result.duplicates
                ],
            }
        )

    def to_result(self) -> ScanResult:
        return ScanResult(
            root=self.root,
            mode=self.mode,
            stats=AggregateStats(**self.stats.model_dump()),
            largest_files=[FileSummary(**item.model_dump()) for item in self.largest_files],
            oldest_files=[FileSummary(**item.model_dump()) for item in self.oldest_files],
            newest_files=[FileSummary(**item.model_dump()) for item in self.newest_files],
            largest_dirs=[DirectoryStat(**item.model_dump()) for item in self.largest_dirs],
            duplicates=[DuplicateSet(**item.model_dump()) for item in self.duplicates],
            processed_paths=list(self.processed_paths),
            interrupted=self.interrupted,
            scan_time=self.timestamp,
        )


def save_checkpoint(result: ScanResult, destination: Path) -> CheckpointSnapshot:
    """Write ``result`` to ``destination``; raises :class:`CheckpointError` on failure."""
    snapshot = CheckpointSnapshot.from_result(result)
    destination = Path(destination)
    try:
        payload = snapshot.model_dump_json(indent=2)
    except PydanticSerializationError as exc:
        raise CheckpointError(f"Cannot encode checkpoint {destination}: {exc}") from exc
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(payload, encoding="utf-8")
    except OSError as exc:
        raise CheckpointError(f"Cannot write checkpoint {destination}: {exc}") from exc
    LOGGER.info("Checkpoint saved to %s", destination)
    return snapshot


def load_checkpoint(source: Path) -> CheckpointSnapshot:
    """Read and validate a checkpoint; raises :class:`CheckpointError` on failure."""
    source = Path(source)
    if not source.is_file():
        raise CheckpointError(f"Checkpoint file not found: {source}")
    try:
        data = source.read_bytes()
    except OSError as exc:
        raise CheckpointError(f"Failed to read checkpoint {source}: {exc}") from exc
    try:
        snapshot = CheckpointSnapshot.model_validate_json(data)
    except ValidationError as exc:
        raise CheckpointError(f"Failed to decode checkpoint {source}: {exc}") from exc
    LOGGER.info("Checkpoint loaded from %s (saved %s)", source, snapshot.timestamp)
    return snapshot
