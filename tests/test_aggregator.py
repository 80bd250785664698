"""Tests for the aggregator."""

from __future__ import annotations

import errno

from inodescope.models import InodeKind, InodeRecord
from inodescope.scan.aggregator import AggregateStats, Aggregator
from inodescope.scan.classifier import ClassifiedItem


def regular(path: str, size: int, ext: str = "txt", owner: str = "alice") -> ClassifiedItem:
    return ClassifiedItem(
        path=path,
        kind=InodeKind.REGULAR,
        record=InodeRecord(
            path=path,
            size=size,
            mtime=0.0,
            uid=1000,
            owner=owner,
            gid=1000,
            group="staff",
            permissions="0644",
            extension=ext,
        ),
        size_category="< 1 KB",
        age_category="Today",
    )


class TestAggregator:
    """Test Aggregator.add."""

    def test_regular_file_updates_distributions(self) -> None:
        """A regular file feeds every distribution."""
        aggregator = Aggregator()
        aggregator.add(regular("/a.txt", 10))
        aggregator.add(regular("/b.md", 0, ext="md"))
        stats = aggregator.stats

        assert stats.total_files == 2
        assert stats.total_size == 10
        assert stats.empty_files == 1
        assert stats.extensions == {"txt": 1, "md": 1}
        assert stats.owners == {"alice": 2}
        assert stats.groups == {"staff": 2}
        assert stats.permissions == {"0644": 2}
        assert stats.size_distribution == {"< 1 KB": 2}
        assert stats.age_distribution == {"Today": 2}
        assert stats.file_types == {"regular": 2}

    def test_empty_extension_not_counted(self) -> None:
        """Files without an extension are not counted by extension."""
        aggregator = Aggregator()
        aggregator.add(regular("/Makefile", 5, ext=""))

        assert aggregator.stats.extensions == {}

    def test_filtered_regular_file_only_counted(self) -> None:
        """Age-filtered files only count toward totals and file types."""
        aggregator = Aggregator()
        aggregator.add(ClassifiedItem(path="/old", kind=InodeKind.REGULAR, retained=False))
        stats = aggregator.stats

        assert stats.total_files == 1
        assert stats.total_size == 0
        assert stats.size_distribution == {}

    def test_devices_share_one_counter(self) -> None:
        """Block and character devices share one counter."""
        aggregator = Aggregator()
        aggregator.add(ClassifiedItem(path="/dev/sda", kind=InodeKind.BLOCK_DEVICE))
        aggregator.add(ClassifiedItem(path="/dev/tty", kind=InodeKind.CHAR_DEVICE))

        assert aggregator.stats.total_devices == 2
        assert aggregator.stats.file_types == {"device": 2}

    def test_broken_symlink_and_empty_dir(self) -> None:
        """Broken symlinks and empty directories are counted."""
        aggregator = Aggregator()
        aggregator.add(ClassifiedItem(path="/l", kind=InodeKind.SYMLINK, broken=True))
        aggregator.add(ClassifiedItem(path="/ok", kind=InodeKind.SYMLINK))
        aggregator.add(ClassifiedItem(path="/d", kind=InodeKind.DIRECTORY, empty=True))
        stats = aggregator.stats

        assert stats.total_symlinks == 2
        assert stats.broken_symlinks == 1
        assert stats.empty_dirs == 1

    def test_file_types_sum_matches_totals(self) -> None:
        """file_types sums to the per-kind totals."""
        aggregator = Aggregator()
        for kind in InodeKind:
            aggregator.add(ClassifiedItem(path=f"/{kind.value}", kind=kind))
        stats = aggregator.stats

        assert sum(stats.file_types.values()) == stats.total_inodes == len(InodeKind)

    def test_record_error(self) -> None:
        """Errors count as permission denied."""
        aggregator = Aggregator()
        aggregator.record_error("/secret", PermissionError(errno.EACCES, "denied"))

        assert aggregator.stats.permission_denied == 1


class TestAggregateStatsMerge:
    """Test field-wise merging."""

    def test_merge_sums_every_field(self) -> None:
        """Merging adds every field."""
        left, right = Aggregator(), Aggregator()
        left.add(regular("/a.txt", 10))
        right.add(regular("/b.txt", 20, owner="bob"))
        right.add(ClassifiedItem(path="/d", kind=InodeKind.DIRECTORY, empty=True))

        left.merge(right)
        stats = left.stats

        assert stats.total_files == 2
        assert stats.total_dirs == 1
        assert stats.total_size == 30
        assert stats.owners == {"alice": 1, "bob": 1}
        assert stats.extensions == {"txt": 2}
        assert stats.empty_dirs == 1

    def test_merge_is_commutative(self) -> None:
        """Merge order does not matter."""
        a = AggregateStats(total_files=1, owners={"x": 1}, total_size=5)
        b = AggregateStats(total_files=2, owners={"y": 3}, permission_denied=1)
        ab = AggregateStats(total_files=1, owners={"x": 1}, total_size=5)
        ab.merge(b)
        ba = AggregateStats(total_files=2, owners={"y": 3}, permission_denied=1)
        ba.merge(a)

        assert ab == ba
