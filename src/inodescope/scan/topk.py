"""Bounded top-k selection of file records."""

from __future__ import annotations

import heapq
import itertools
from enum import Enum
from typing import Iterable, List, Tuple

from inodescope.models import FileSummary, InodeRecord


class Ordering(str, Enum):
    LARGEST = "largest"
    OLDEST = "oldest"
    NEWEST = "newest"

    def sort_key(self, record: InodeRecord) -> float:
        """Ascending key: the first entries after sorting are the reported ones."""
        if self is Ordering.LARGEST:
            return -record.size
        if self is Ordering.OLDEST:
            return record.mtime
        return -record.mtime


# Heap entries are negated (key, path) pairs so heap[0] is the weakest entry kept.
# The insertion counter settles repeated offers of the same path.
_HeapEntry = Tuple[float, Tuple[int, ...], int, InodeRecord]


def _invert(path: str) -> Tuple[int, ...]:
    # Reverses string ordering for the max-heap; the trailing sentinel keeps
    # prefixes ordered correctly.
    return tuple(-ord(ch) for ch in path) + (1,)


class TopKTracker:
    """Keep the ``capacity`` most extreme records for one ordering.

    Equal keys are ordered by path, so the result does not depend on the
    order in which records were offered or trackers were merged.
    """

    def __init__(self, ordering: Ordering, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.ordering = ordering
        self._capacity = capacity
        self._heap: List[_HeapEntry] = []
        self._counter = itertools.count()

    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._heap)

    def offer(self, record: InodeRecord) -> None:
        key = self.ordering.sort_key(record)
        entry = (-key, _invert(record.path), next(self._counter), record)
        if len(self._heap) < self._capacity:
            heapq.heappush(self._heap, entry)
        elif (key, record.path) < self._weakest():
            heapq.heapreplace(self._heap, entry)

    def extend(self, records: Iterable[InodeRecord]) -> None:
        for record in records:
            self.offer(record)

    def merge(self, other: "TopKTracker") -> None:
        if other.ordering is not self.ordering:
            raise ValueError("cannot merge trackers with different orderings")
        self.extend(entry[-1] for entry in other._heap)

    def records(self) -> List[InodeRecord]:
        """Kept records, sorted by the ordering."""
        entries = sorted(self._heap, key=lambda entry: (-entry[0], entry[-1].path))
        return [entry[-1] for entry in entries]

    def finalize(self, k: int) -> List[FileSummary]:
        return [FileSummary.from_record(record) for record in self.records()[:k]]

    def _weakest(self) -> Tuple[float, str]:
        key, _, _, record = self._heap[0]
        return -key, record.path
