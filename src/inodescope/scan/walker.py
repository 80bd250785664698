"""Filesystem traversal with exclusion, depth and symlink policy."""

from __future__ import annotations

import fnmatch
import logging
import os
import stat
import threading
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Sequence, Set, Tuple

LOGGER = logging.getLogger(__name__)

ErrorHandler = Callable[[str, OSError], None]


class ExclusionMatcher:
    """Glob patterns tested against both the full path and the base name."""

    def __init__(self, patterns: Iterable[str] = ()) -> None:
        self.patterns = tuple(patterns)

    def __bool__(self) -> bool:
        return bool(self.patterns)

    def matches(self, path: str) -> bool:
        name = os.path.basename(path)
        return any(
            fnmatch.fnmatchcase(path, pattern) or fnmatch.fnmatchcase(name, pattern)
            for pattern in self.patterns
        )


@dataclass(slots=True)
class WalkEntry:
    path: str
    depth: int
    stat: os.stat_result
    is_link: bool = False
    is_dir: bool = False
    empty: bool = False


class Walker:
    """Pre-order walk of the subtree below ``root``.

    The root itself is not yielded. Depth is 1 for the root's children. The
    walk stops between items once ``cancel`` is set, leaving ``interrupted``
    true; per-item ``OSError``s are passed to ``on_error`` and never abort the
    walk.
    """

    def __init__(
        self,
        root: str | os.PathLike[str],
        *,
        exclude: ExclusionMatcher | Sequence[str] = (),
        max_depth: int | None = None,
        follow_symlinks: bool = False,
        cancel: threading.Event | None = None,
        on_error: ErrorHandler | None = None,
    ) -> None:
        self.root = os.fspath(root)
        self.exclude = exclude if isinstance(exclude, ExclusionMatcher) else ExclusionMatcher(exclude)
        self.max_depth = max_depth
        self.follow_symlinks = follow_symlinks
        self.cancel = cancel
        self.on_error = on_error
        self.interrupted = False
        self._visited: Set[Tuple[int, int]] = set()

    def children(self, path: str | None = None) -> List[str] | None:
        """Sorted child paths of ``path`` (the root by default), or ``None`` if unreadable."""
        path = self.root if path is None else path
        try:
            with os.scandir(path) as it:
                names = sorted(entry.name for entry in it)
        except OSError as exc:
            self._error(path, exc)
            return None
        return [os.path.join(path, name) for name in names]

    def walk(self) -> Iterator[WalkEntry]:
        """Yield every item below the root, parents before children."""
        children = self.children()
        if children is None:
            return
        yield from self.walk_from(children, depth=1)

    def walk_from(self, paths: Sequence[str], *, depth: int = 1) -> Iterator[WalkEntry]:
        """Walk the subtrees of ``paths``, which all sit at ``depth``."""
        self._remember_root()
        stack = [(path, depth) for path in reversed(paths)]
        while stack:
            if self._cancelled():
                return
            path, item_depth = stack.pop()
            if self.max_depth and item_depth >= self.max_depth:
                continue
            if self.exclude and self.exclude.matches(path):
                continue

            entry = self._entry(path, item_depth)
            if entry is None:
                continue
            if entry.is_dir:
                children = self._descend(entry)
                if children is not None:
                    entry.empty = not children
                    stack.extend((child, item_depth + 1) for child in reversed(children))
            yield entry

    def leaves(self) -> Iterator[WalkEntry]:
        """Yield every non-directory item below the root, ignoring ``max_depth``."""
        max_depth, self.max_depth = self.max_depth, None
        try:
            for entry in self.walk():
                if not entry.is_dir:
                    yield entry
        finally:
            self.max_depth = max_depth

    def _entry(self, path: str, depth: int) -> WalkEntry | None:
        try:
            lst = os.lstat(path)
        except OSError as exc:
            self._error(path, exc)
            return None

        is_link = stat.S_ISLNK(lst.st_mode)
        st = lst
        if is_link and self.follow_symlinks:
            try:
                st = os.stat(path)
            except FileNotFoundError:
                # Dangling link: report the link itself.
                st = lst
            except OSError as exc:
                self._error(path, exc)
                return None

        is_dir = stat.S_ISDIR(st.st_mode)
        return WalkEntry(path=path, depth=depth, stat=st, is_link=is_link, is_dir=is_dir)

    def _descend(self, entry: WalkEntry) -> List[str] | None:
        if self.follow_symlinks:
            key = (entry.stat.st_dev, entry.stat.st_ino)
            if key in self._visited:
                LOGGER.debug("Skipping already visited directory %s", entry.path)
                return None
            self._visited.add(key)
        return self.children(entry.path)

    def _remember_root(self) -> None:
        if not self.follow_symlinks:
            return
        try:
            st = os.stat(self.root)
        except OSError:
            return
        self._visited.add((st.st_dev, st.st_ino))

    def _cancelled(self) -> bool:
        if self.cancel is not None and self.cancel.is_set():
            if not self.interrupted:
                LOGGER.info("Walk of %s interrupted", self.root)
            self.interrupted = True
        return self.interrupted

    def _error(self, path: str, exc: OSError) -> None:
        LOGGER.debug("Cannot access %s: %s", path, exc)
        if self.on_error is not None:
            self.on_error(path, exc)
