"""Document discovery: walk the source folder and fingerprint every match."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from doc_ingest.ingestion.hashing import hash_file
from doc_ingest.ingestion.models import DocumentRecord

logger = logging.getLogger(__name__)

DEFAULT_PATTERNS: tuple[str, ...] = ("**/*.md",)


def discover_documents(
    root: str | Path,
    patterns: Iterable[str] = DEFAULT_PATTERNS,
) -> list[DocumentRecord]:
    """Recursively find documents under *root* matching any of *patterns*.

    Parameters
    ----------
    root:
        Directory containing source documents.
    patterns:
        Glob patterns evaluated relative to *root* (``Path.glob`` syntax,
        so ``**`` recurses).

    Returns
    -------
    list[DocumentRecord]
        One record per file, sorted by identity, with ``content`` left
        unloaded.  Identities always use ``/`` as separator.
    """
    root = Path(root)
    if not root.exists():
        raise FileNotFoundError(f"Source directory not found: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"Source path is not a directory: {root}")

    paths = {path for pattern in patterns for path in root.glob(pattern) if path.is_file()}

    records: list[DocumentRecord] = []
    for path in sorted(paths):
        identity = path.relative_to(root).as_posix()
        try:
            fingerprint = hash_file(path)
        except OSError as exc:
            logger.warning("Skipping %s: %s", identity, exc)
            continue
        records.append(DocumentRecord(identity=identity, fingerprint=fingerprint, path=path.resolve()))

    logger.info("Found %d documents under %s", len(records), root)
    return records


def read_document(document: DocumentRecord) -> str:
    """Return the text of *document*, reading it from disk if necessary.

    Line endings are preserved so the text hashes to the same fingerprint
    as the file.
    """
    if document.content is not None:
        return document.content
    if document.path is None:
        raise ValueError(f"Document {document.identity!r} has neither content nor path")
    with open(document.path, encoding="utf-8", newline="") as fh:
        return fh.read()
