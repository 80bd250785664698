"""Scan configuration defaults."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

APP_NAME = "inodescope"
APP_VERSION = "0.1.0"

DEFAULT_SAMPLE_SIZE = 20
DEEP_SCAN_CAPACITY = 1000
PROCESSED_PATHS_LIMIT = 10_000
HASH_BUFFER_SIZE = 65536


@dataclass(slots=True)
class ScanConfig:
    sample_size: int = DEFAULT_SAMPLE_SIZE
    deep: bool = False
    find_duplicates: bool = False
    follow_symlinks: bool = False
    exclude: Tuple[str, ...] = ()
    max_depth: int | None = None
    age_days: int | None = None
    workers: int = 1

    def __post_init__(self) -> None:
        self.exclude = tuple(self.exclude)
        if self.sample_size < 1:
            raise ValueError("sample_size must be at least 1")
        if self.max_depth is not None and self.max_depth < 0:
            raise ValueError("max_depth cannot be negative")
        if self.age_days is not None and self.age_days < 0:
            raise ValueError("age_days cannot be negative")
        if self.workers < 1:
            raise ValueError("workers must be at least 1")

    @property
    def mode(self) -> str:
        return "deep" if self.deep else "quick"

    def capacity(self) -> int:
        """Working capacity of each top-k list for the configured mode."""
        if self.deep:
            return max(DEEP_SCAN_CAPACITY, self.sample_size)
        return self.sample_size * 2

    def age_limit_seconds(self) -> float | None:
        # The age filter only applies to deep scans; 0 disables it.
        if not self.deep or not self.age_days:
            return None
        return self.age_days * 86400.0
