"""Utility helpers for working with files."""

from __future__ import annotations

import hashlib
import os

from inodescope.config import HASH_BUFFER_SIZE


def compute_md5(path: str | os.PathLike[str], buffer_size: int = HASH_BUFFER_SIZE) -> str:
    """Compute the MD5 checksum of a file, reading it in fixed-size blocks."""
    digest = hashlib.md5(usedforsecurity=False)
    with open(path, "rb") as handle:
        for chunk in iter(lambda: handle.read(buffer_size), b""):
            digest.update(chunk)
    return digest.hexdigest()
