"""Tests for file utility functions."""

from __future__ import annotations

from pathlib import Path

import pytest

from inodescope.utils.files import compute_md5


class TestComputeMd5:
    """Test compute_md5 function."""

    def test_compute_hash_simple(self, tmp_path: Path) -> None:
        """Should compute MD5 for file."""
        test_file = tmp_path / "test.txt"
        test_file.write_text("Hello, World!")

        # MD5 of "Hello, World!"
        assert compute_md5(test_file) == "65a8e27d8879283831b664bd8b7f0ad4"

    def test_compute_hash_empty_file(self, tmp_path: Path) -> None:
        """An empty file has the empty MD5 digest."""
        test_file = tmp_path / "empty.txt"
        test_file.write_bytes(b"")

        assert compute_md5(test_file) == "d41d8cd98f00b204e9800998ecf8427e"

    def test_small_buffer_gives_same_digest(self, tmp_path: Path) -> None:
        """Block size does not change the result."""
        test_file = tmp_path / "large.bin"
        test_file.write_bytes(b"x" * 200_000)

        assert compute_md5(test_file, buffer_size=7) == compute_md5(test_file)

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        """A missing file raises OSError."""
        with pytest.raises(OSError):
            compute_md5(tmp_path / "missing")
