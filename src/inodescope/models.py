"""Core inodescope data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List


class InodescopeError(Exception):
    """Base class for errors raised by inodescope."""


class ScanError(InodescopeError):
    """Raised when a scan cannot start, e.g. the root is not a directory."""


class CheckpointError(InodescopeError):
    """Raised when a checkpoint cannot be written, read or decoded."""


class InodeKind(str, Enum):
    REGULAR = "regular"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    SOCKET = "socket"
    FIFO = "fifo"
    BLOCK_DEVICE = "block_device"
    CHAR_DEVICE = "char_device"

    @property
    def counter_key(self) -> str:
        """Key used in the ``file_types`` distribution; devices share one."""
        if self in (InodeKind.BLOCK_DEVICE, InodeKind.CHAR_DEVICE):
            return "device"
        return self.value


@dataclass(slots=True, frozen=True)
class InodeRecord:
    """Attributes of one retained regular file."""

    path: str
    size: int
    mtime: float
    uid: int
    owner: str
    gid: int
    group: str
    permissions: str
    extension: str = ""


@dataclass(slots=True)
class FileSummary:
    """Presentation form of a top-k entry."""

    path: str
    size: int
    mtime: float
    owner: str
    group: str
    permissions: str

    @property
    def modified(self) -> str:
        return datetime.fromtimestamp(self.mtime).strftime("%Y-%m-%d %H:%M:%S")

    @classmethod
    def from_record(cls, record: InodeRecord) -> "FileSummary":
        return cls(
            path=record.path,
            size=record.size,
            mtime=record.mtime,
            owner=record.owner,
            group=record.group,
            permissions=record.permissions,
        )


@dataclass(slots=True)
class DirectoryStat:
    """Rollup of the retained files sharing one parent directory."""

    path: str
    size: int = 0
    count: int = 0
    largest_file: str = ""
    largest_size: int = 0

    @property
    def average_size(self) -> float:
        return self.size / self.count if self.count else 0.0


@dataclass(slots=True)
class DuplicateSet:
    """Files sharing the same size and content checksum."""

    size: int
    checksum: str
    files: List[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.files)

    @property
    def total_size(self) -> int:
        return self.size * self.count

    @property
    def wasted_space(self) -> int:
        return self.size * (self.count - 1)
