"""Counters and distributions accumulated during a scan."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field, fields
from typing import Dict

from inodescope.models import InodeKind
from inodescope.scan.classifier import ClassifiedItem

LOGGER = logging.getLogger(__name__)

_KIND_TOTALS = {
    InodeKind.REGULAR: "total_files",
    InodeKind.DIRECTORY: "total_dirs",
    InodeKind.SYMLINK: "total_symlinks",
    InodeKind.SOCKET: "total_sockets",
    InodeKind.FIFO: "total_fifos",
    InodeKind.BLOCK_DEVICE: "total_devices",
    InodeKind.CHAR_DEVICE: "total_devices",
}


@dataclass(slots=True)
class AggregateStats:
    total_files: int = 0
    total_dirs: int = 0
    total_symlinks: int = 0
    total_sockets: int = 0
    total_fifos: int = 0
    total_devices: int = 0
    total_size: int = 0
    empty_files: int = 0
    empty_dirs: int = 0
    broken_symlinks: int = 0
    permission_denied: int = 0
    file_types: Dict[str, int] = field(default_factory=dict)
    extensions: Dict[str, int] = field(default_factory=dict)
    owners: Dict[str, int] = field(default_factory=dict)
    groups: Dict[str, int] = field(default_factory=dict)
    permissions: Dict[str, int] = field(default_factory=dict)
    size_distribution: Dict[str, int] = field(default_factory=dict)
    age_distribution: Dict[str, int] = field(default_factory=dict)

    @property
    def total_inodes(self) -> int:
        return (
            self.total_files
            + self.total_dirs
            + self.total_symlinks
            + self.total_sockets
            + self.total_fifos
            + self.total_devices
        )

    def merge(self, other: "AggregateStats") -> None:
        """Add ``other`` into this instance field by field."""
        for item in fields(self):
            mine = getattr(self, item.name)
            theirs = getattr(other, item.name)
            if isinstance(mine, dict):
                setattr(self, item.name, dict(Counter(mine) + Counter(theirs)))
            else:
                setattr(self, item.name, mine + theirs)


def _bump(mapping: Dict[str, int], key: str) -> None:
    mapping[key] = mapping.get(key, 0) + 1


class Aggregator:
    """Single-writer owner of one :class:`AggregateStats`.

    Parallel scans give every worker its own aggregator and merge them on the
    joining thread once the workers have finished.
    """

    def __init__(self, stats: AggregateStats | None = None) -> None:
        self.stats = stats if stats is not None else AggregateStats()

    def add(self, item: ClassifiedItem) -> None:
        stats = self.stats
        setattr(stats, _KIND_TOTALS[item.kind], getattr(stats, _KIND_TOTALS[item.kind]) + 1)
        _bump(stats.file_types, item.kind.counter_key)

        if item.kind is InodeKind.SYMLINK and item.broken:
            stats.broken_symlinks += 1
        elif item.kind is InodeKind.DIRECTORY and item.empty:
            stats.empty_dirs += 1

        record = item.record
        if record is None:
            return
        stats.total_size += record.size
        if record.size == 0:
            stats.empty_files += 1
        if record.extension:
            _bump(stats.extensions, record.extension)
        _bump(stats.owners, record.owner)
        _bump(stats.groups, record.group)
        _bump(stats.permissions, record.permissions)
        if item.size_category is not None:
            _bump(stats.size_distribution, item.size_category)
        if item.age_category is not None:
            _bump(stats.age_distribution, item.age_category)

    def record_error(self, path: str, exc: OSError) -> None:
        LOGGER.debug("Counting %s as permission denied: %s", path, exc)
        self.stats.permission_denied += 1

    def merge(self, other: "Aggregator") -> None:
        self.stats.merge(other.stats)
