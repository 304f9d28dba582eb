"""Content fingerprints used for change detection."""

from __future__ import annotations

import hashlib
from pathlib import Path

_READ_BLOCK = 64 * 1024


def content_hash(text: str) -> str:
    """Return the SHA-256 hex digest of *text* encoded as UTF-8."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def hash_file(path: str | Path) -> str:
    """Return the SHA-256 hex digest of a file, read in fixed-size blocks.

    For a UTF-8 file this equals ``content_hash(path.read_text("utf-8"))``.
    """
    digest = hashlib.sha256()
    with open(path, "rb") as fh:
        for block in iter(lambda: fh.read(_READ_BLOCK), b""):
            digest.update(block)
    return digest.hexdigest()
