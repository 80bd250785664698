"""Human-readable figures for reports."""

from __future__ import annotations

import os
from typing import Dict

import humanize


def human_size(value: int) -> str:
    return humanize.naturalsize(value, binary=True)


def human_count(value: int) -> str:
    return humanize.intcomma(value)


def percentage(count: int, total: int) -> str:
    return f"{count / max(total, 1) * 100:.1f}%"


def display_path(path: str) -> str:
    """Printable form of a filesystem name.

    Names that are not valid UTF-8 come back from ``os.scandir`` with
    surrogate escapes; those bytes are shown as U+FFFD.
    """
    return os.fsencode(path).decode("utf-8", "replace")


def display_counts(counts: Dict[str, int]) -> Dict[str, int]:
    """Re-key ``counts`` with :func:`display_path`, summing keys that collide."""
    result: Dict[str, int] = {}
    for key, count in counts.items():
        shown = display_path(key)
        result[shown] = result.get(shown, 0) + count
    return result
