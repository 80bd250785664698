"""Per-directory rollup of retained file records."""

from __future__ import annotations

import os
from typing import Dict, Iterable, List

from inodescope.models import DirectoryStat, InodeRecord


def rollup_directories(records: Iterable[InodeRecord], limit: int) -> List[DirectoryStat]:
    """Group records by parent directory and return the ``limit`` largest directories."""
    directories: Dict[str, DirectoryStat] = {}
    for record in records:
        parent = os.path.dirname(record.path)
        entry = directories.get(parent)
        if entry is None:
            entry = directories[parent] = DirectoryStat(path=parent)
        entry.size += record.size
        entry.count += 1
        if record.size > entry.largest_size:
            entry.largest_size = record.size
            entry.largest_file = os.path.basename(record.path)

    ranked = sorted(directories.values(), key=lambda item: (-item.size, item.path))
    return ranked[:limit]
