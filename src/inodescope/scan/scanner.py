"""Scan pipeline: walk, classify, aggregate, roll up and detect duplicates."""

from __future__ import annotations

import logging
import math
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Sequence

from inodescope.config import PROCESSED_PATHS_LIMIT, ScanConfig
from inodescope.models import DirectoryStat, DuplicateSet, FileSummary, InodeRecord, ScanError
from inodescope.scan.aggregator import AggregateStats, Aggregator
from inodescope.scan.classifier import Classifier, ClassifiedItem, NameResolver
from inodescope.scan.duplicates import DuplicateDetector
from inodescope.scan.rollup import rollup_directories
from inodescope.scan.topk import Ordering, TopKTracker
from inodescope.scan.walker import ExclusionMatcher, Walker

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ScanResult:
    root: str
    mode: str
    stats: AggregateStats = field(default_factory=AggregateStats)
    largest_files: List[FileSummary] = field(default_factory=list)
    oldest_files: List[FileSummary] = field(default_factory=list)
    newest_files: List[FileSummary] = field(default_factory=list)
    largest_dirs: List[DirectoryStat] = field(default_factory=list)
    duplicates: List[DuplicateSet] = field(default_factory=list)
    processed_paths: List[str] = field(default_factory=list)
    interrupted: bool = False
    duration: float = 0.0
    scan_time: datetime = field(default_factory=datetime.now)

    @property
    def total_inodes(self) -> int:
        return self.stats.total_inodes

    @property
    def total_size(self) -> int:
        return self.stats.total_size

    @property
    def wasted_space(self) -> int:
        return sum(group.wasted_space for group in self.duplicates)


class _ScanState:
    """Private per-worker state, merged once all workers are done."""

    def __init__(self, capacity: int) -> None:
        self.aggregator = Aggregator()
        self.trackers = {ordering: TopKTracker(ordering, capacity) for ordering in Ordering}
        self.records: Dict[str, InodeRecord] = {}
        self.processed_paths: List[str] = []
        self.interrupted = False

    def absorb(self, item: ClassifiedItem) -> None:
        if len(self.processed_paths) < PROCESSED_PATHS_LIMIT:
            self.processed_paths.append(item.path)
        self.aggregator.add(item)
        if item.record is None:
            return
        self.records[item.path] = item.record
        for tracker in self.trackers.values():
            tracker.offer(item.record)

    def merge(self, other: "_ScanState") -> None:
        self.aggregator.merge(other.aggregator)
        for ordering, tracker in self.trackers.items():
            tracker.merge(other.trackers[ordering])
        self.records.update(other.records)
        room = PROCESSED_PATHS_LIMIT - len(self.processed_paths)
        self.processed_paths.extend(other.processed_paths[:max(room, 0)])
        self.interrupted = self.interrupted or other.interrupted


def _partition(paths: Sequence[str], workers: int) -> List[List[str]]:
    size = math.ceil(len(paths) / workers)
    return [list(paths[i : i + size]) for i in range(0, len(paths), size)]


class Scanner:
    """Coordinates one scan of a directory tree."""

    def __init__(
        self,
        config: ScanConfig | None = None,
        *,
        resolver: NameResolver | None = None,
        cancel: threading.Event | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config if config is not None else ScanConfig()
        self.cancel = cancel if cancel is not None else threading.Event()
        self.clock = clock
        self.exclude = ExclusionMatcher(self.config.exclude)
        self.classifier = Classifier(
            follow_symlinks=self.config.follow_symlinks,
            resolver=resolver,
            age_limit=self.config.age_limit_seconds(),
        )

    def interrupt(self) -> None:
        self.cancel.set()

    def scan(self, root: Path | str) -> ScanResult:
        """Scan the tree below ``root`` and return the aggregated result."""
        root_path = Path(root).expanduser()
        if not root_path.is_dir():
            raise ScanError(f"Path is not a directory: {root_path}")
        resolved = str(root_path.resolve())

        config = self.config
        LOGGER.info("Scanning %s (%s mode)", resolved, config.mode)
        started = time.perf_counter()
        state = self._walk(resolved, self.clock())

        k = config.sample_size
        result = ScanResult(
            root=resolved,
            mode=config.mode,
            stats=state.aggregator.stats,
            largest_files=state.trackers[Ordering.LARGEST].finalize(k),
            oldest_files=state.trackers[Ordering.OLDEST].finalize(k),
            newest_files=state.trackers[Ordering.NEWEST].finalize(k),
            largest_dirs=rollup_directories(state.records.values(), k),
            processed_paths=state.processed_paths,
            interrupted=state.interrupted,
        )

        if config.find_duplicates and not result.interrupted:
            report = DuplicateDetector(
                resolved,
                exclude=self.exclude,
                follow_symlinks=config.follow_symlinks,
                cancel=self.cancel,
            ).find()
            result.duplicates = report.groups
            result.interrupted = report.interrupted
            LOGGER.info(
                "Duplicate sets: %d, wasted space: %d bytes",
                len(report.groups),
                report.wasted_space,
            )

        result.duration = time.perf_counter() - started
        if result.interrupted:
            LOGGER.warning("Scan interrupted - partial results")
        LOGGER.info("Scanned %d inodes in %.2fs", result.total_inodes, result.duration)
        return result

    def _walker(self, root: str, state: _ScanState) -> Walker:
        return Walker(
            root,
            exclude=self.exclude,
            max_depth=self.config.max_depth,
            follow_symlinks=self.config.follow_symlinks,
            cancel=self.cancel,
            on_error=state.aggregator.record_error,
        )

    def _walk(self, root: str, now: float) -> _ScanState:
        state = _ScanState(self.config.capacity())
        walker = self._walker(root, state)
        children = walker.children()
        if children is None:
            return state

        workers = min(self.config.workers, len(children))
        if workers <= 1:
            self._consume(walker, children, state, now)
            return state

        chunks = _partition(children, workers)
        LOGGER.debug("Scanning %d top-level entries with %d workers", len(children), len(chunks))
        with ThreadPoolExecutor(max_workers=len(chunks)) as pool:
            futures = [pool.submit(self._scan_chunk, root, chunk, now) for chunk in chunks]
            for future in futures:
                state.merge(future.result())
        return state

    def _scan_chunk(self, root: str, paths: List[str], now: float) -> _ScanState:
        state = _ScanState(self.config.capacity())
        self._consume(self._walker(root, state), paths, state, now)
        return state

    def _consume(self, walker: Walker, paths: List[str], state: _ScanState, now: float) -> None:
        for entry in walker.walk_from(paths, depth=1):
            item = self.classifier.classify(
                entry.path,
                entry.stat,
                is_link=entry.is_link,
                empty=entry.empty,
                now=now,
            )
            if item is not None:
                state.absorb(item)
        state.interrupted = walker.interrupted
