"""Per-item classification of inode metadata."""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from functools import lru_cache
from typing import Protocol

try:
    import grp
    import pwd
except ImportError:  # pragma: no cover - non-POSIX platforms
    grp = None
    pwd = None

from inodescope.models import InodeKind, InodeRecord

LOGGER = logging.getLogger(__name__)

KB = 1024
MB = 1024 * KB
GB = 1024 * MB

DAY = 86400
WEEK = 7 * DAY
MONTH = 30 * DAY
YEAR = 365 * DAY

SIZE_CATEGORIES = (
    "< 1 KB",
    "1 KB - 1 MB",
    "1 MB - 10 MB",
    "10 MB - 100 MB",
    "100 MB - 1 GB",
    "> 1 GB",
)

AGE_CATEGORIES = (
    "Today",
    "This week",
    "This month",
    "This year",
    "> 1 year",
)

_SIZE_BOUNDS = (KB, MB, 10 * MB, 100 * MB, GB)
_AGE_BOUNDS = (DAY, WEEK, MONTH, YEAR)


def categorize_size(size: int) -> str:
    """Return the size bucket for ``size``; lower bounds are inclusive."""
    for bound, label in zip(_SIZE_BOUNDS, SIZE_CATEGORIES):
        if size < bound:
            return label
    return SIZE_CATEGORIES[-1]


def categorize_age(mtime: float, now: float) -> str:
    """Return the age bucket for a modification time relative to ``now``."""
    age = now - mtime
    for bound, label in zip(_AGE_BOUNDS, AGE_CATEGORIES):
        if age < bound:
            return label
    return AGE_CATEGORIES[-1]


def file_extension(name: str) -> str:
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


def permission_string(mode: int) -> str:
    return format(stat.S_IMODE(mode), "04o")


def kind_from_mode(mode: int) -> InodeKind | None:
    fmt = stat.S_IFMT(mode)
    if fmt == stat.S_IFLNK:
        return InodeKind.SYMLINK
    if fmt == stat.S_IFSOCK:
        return InodeKind.SOCKET
    if fmt == stat.S_IFIFO:
        return InodeKind.FIFO
    if fmt == stat.S_IFBLK:
        return InodeKind.BLOCK_DEVICE
    if fmt == stat.S_IFCHR:
        return InodeKind.CHAR_DEVICE
    if fmt == stat.S_IFDIR:
        return InodeKind.DIRECTORY
    if fmt == stat.S_IFREG:
        return InodeKind.REGULAR
    return None


class NameResolver(Protocol):
    """Looks up owner and group names for numeric ids."""

    def user_name(self, uid: int) -> str | None: ...

    def group_name(self, gid: int) -> str | None: ...


class PosixNameResolver:
    """Resolve names through the password and group databases, with caching."""

    def __init__(self) -> None:
        self.user_name = lru_cache(maxsize=None)(self._lookup_user)
        self.group_name = lru_cache(maxsize=None)(self._lookup_group)

    @staticmethod
    def _lookup_user(uid: int) -> str | None:
        if pwd is None:
            return None
        try:
            return pwd.getpwuid(uid).pw_name
        except KeyError:
            return None

    @staticmethod
    def _lookup_group(gid: int) -> str | None:
        if grp is None:
            return None
        try:
            return grp.getgrgid(gid).gr_name
        except KeyError:
            return None


@dataclass(slots=True)
class ClassifiedItem:
    """Result of classifying one walked item."""

    path: str
    kind: InodeKind
    record: InodeRecord | None = None
    size_category: str | None = None
    age_category: str | None = None
    broken: bool = False
    empty: bool = False
    retained: bool = True


class Classifier:
    """Turn raw ``os.stat_result`` metadata into a :class:`ClassifiedItem`."""

    def __init__(
        self,
        *,
        follow_symlinks: bool = False,
        resolver: NameResolver | None = None,
        age_limit: float | None = None,
    ) -> None:
        self.follow_symlinks = follow_symlinks
        self.resolver = resolver if resolver is not None else PosixNameResolver()
        self.age_limit = age_limit

    def classify(
        self,
        path: str,
        st: os.stat_result,
        *,
        is_link: bool = False,
        empty: bool = False,
        now: float,
    ) -> ClassifiedItem | None:
        """Classify one item; returns ``None`` for unknown file types."""
        if is_link and (not self.follow_symlinks or stat.S_ISLNK(st.st_mode)):
            return ClassifiedItem(
                path=path,
                kind=InodeKind.SYMLINK,
                broken=not os.path.exists(path),
            )

        kind = kind_from_mode(st.st_mode)
        if kind is None:
            LOGGER.debug("Unknown file type %o for %s", stat.S_IFMT(st.st_mode), path)
            return None
        if kind is InodeKind.DIRECTORY:
            return ClassifiedItem(path=path, kind=kind, empty=empty)
        if kind is not InodeKind.REGULAR:
            return ClassifiedItem(path=path, kind=kind)

        if self.age_limit is not None and now - st.st_mtime > self.age_limit:
            return ClassifiedItem(path=path, kind=kind, retained=False)

        record = InodeRecord(
            path=path,
            size=st.st_size,
            mtime=st.st_mtime,
            uid=st.st_uid,
            owner=self._owner(st.st_uid),
            gid=st.st_gid,
            group=self._group(st.st_gid),
            permissions=permission_string(st.st_mode),
            extension=file_extension(os.path.basename(path)),
        )
        return ClassifiedItem(
            path=path,
            kind=kind,
            record=record,
            size_category=categorize_size(record.size),
            age_category=categorize_age(record.mtime, now),
        )

    def _owner(self, uid: int) -> str:
        try:
            name = self.resolver.user_name(uid)
        except OSError:
            name = None
        return name or str(uid)

    def _group(self, gid: int) -> str:
        try:
            name = self.resolver.group_name(gid)
        except OSError:
            name = None
        return name or str(gid)
