"""Content duplicate detection by size bucketing and hashing."""

from __future__ import annotations

import logging
import os
import stat
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, List

from inodescope.models import DuplicateSet
from inodescope.scan.walker import ExclusionMatcher, Walker
from inodescope.utils.files import compute_md5

LOGGER = logging.getLogger(__name__)

Hasher = Callable[[str], str]


@dataclass(slots=True)
class DuplicateReport:
    groups: List[DuplicateSet] = field(default_factory=list)
    files_seen: int = 0
    candidate_buckets: int = 0
    hash_failures: int = 0
    interrupted: bool = False

    @property
    def wasted_space(self) -> int:
        return sum(group.wasted_space for group in self.groups)


class DuplicateDetector:
    """Find groups of regular files with identical content below a root."""

    def __init__(
        self,
        root: str | os.PathLike[str],
        *,
        exclude: ExclusionMatcher | tuple[str, ...] = (),
        follow_symlinks: bool = False,
        cancel: threading.Event | None = None,
        hasher: Hasher = compute_md5,
    ) -> None:
        self.root = os.fspath(root)
        self.exclude = exclude
        self.follow_symlinks = follow_symlinks
        self.cancel = cancel
        self.hasher = hasher

    def find(self) -> DuplicateReport:
        report = DuplicateReport()
        buckets = self._bucket_by_size(report)
        if report.interrupted:
            LOGGER.info("Duplicate detection skipped: scan interrupted")
            return report

        candidates = {size: paths for size, paths in buckets.items() if len(paths) > 1}
        report.candidate_buckets = len(candidates)
        LOGGER.info(
            "Duplicate candidates: %d files, %d size buckets",
            report.files_seen,
            report.candidate_buckets,
        )

        for size, paths in candidates.items():
            if self.cancel is not None and self.cancel.is_set():
                report.interrupted = True
                LOGGER.info("Duplicate detection interrupted")
                break
            report.groups.extend(self._hash_bucket(size, paths, report))

        report.groups.sort(key=lambda group: (-group.wasted_space, -group.size, group.checksum))
        return report

    def _bucket_by_size(self, report: DuplicateReport) -> Dict[int, List[str]]:
        walker = Walker(
            self.root,
            exclude=self.exclude,
            follow_symlinks=self.follow_symlinks,
            cancel=self.cancel,
        )
        buckets: Dict[int, List[str]] = {}
        for entry in walker.leaves():
            if not stat.S_ISREG(entry.stat.st_mode):
                continue
            size = entry.stat.st_size
            if size > 0:
                buckets.setdefault(size, []).append(entry.path)
                report.files_seen += 1
        report.interrupted = walker.interrupted
        return buckets

    def _hash_bucket(self, size: int, paths: List[str], report: DuplicateReport) -> List[DuplicateSet]:
        by_checksum: Dict[str, List[str]] = {}
        for path in paths:
            try:
                checksum = self.hasher(path)
            except OSError as exc:
                LOGGER.debug("Cannot hash %s: %s", path, exc)
                report.hash_failures += 1
                continue
            by_checksum.setdefault(checksum, []).append(path)

        return [
            DuplicateSet(size=size, checksum=checksum, files=files)
            for checksum, files in by_checksum.items()
            if len(files) > 1
        ]
