"""Boundary-aware text chunking.

Fragments are cut at the most natural boundary available before the
target size (paragraph, sentence, line, word) and overlap by a fixed
number of characters.  Counting and generation walk the very same spans,
so ``count_chunks`` always equals the number of chunks generated.
"""

from __future__ import annotations

import math
from collections.abc import Iterator

from doc_ingest.ingestion.models import Chunk

# Tried in order; the first one found far enough from the cursor wins.
BOUNDARIES: tuple[str, ...] = ("\n\n", ". ", "\n", " ")

_ITERATION_MARGIN = 100


def _validate(chunk_size: int, overlap: int) -> None:
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be > 0, got {chunk_size}")
    if overlap < 0:
        raise ValueError(f"chunk_overlap must be >= 0, got {overlap}")
    if overlap >= chunk_size:
        raise ValueError(f"chunk_overlap ({overlap}) must be < chunk_size ({chunk_size})")


def _chunk_end(text: str, start: int, chunk_size: int) -> int:
    end = min(start + chunk_size, len(text))
    if end == len(text):
        return end

    min_break = start + math.ceil(chunk_size / 2)
    for sep in BOUNDARIES:
        # A separator beginning exactly at the hard cut still counts.
        pos = text.rfind(sep, 0, end + len(sep))
        if pos > min_break:
            return pos + len(sep)
    return end


def _fragments(text: str, chunk_size: int, overlap: int) -> Iterator[str]:
    """Yield the trimmed, non-empty fragments of *text* in order."""
    clean = text.strip()
    length = len(clean)
    if not length:
        return

    max_iterations = length / max(chunk_size - overlap, 1) + _ITERATION_MARGIN
    start = 0
    iterations = 0
    while start < length and iterations < max_iterations:
        end = _chunk_end(clean, start, chunk_size)
        fragment = clean[start:end].strip()
        if fragment:
            yield fragment
        if end >= length:
            break

        start = max(start + 1, end - overlap)
        iterations += 1


def count_chunks(text: str, chunk_size: int = 600, overlap: int = 150) -> int:
    """Return how many chunks :func:`generate_chunks` will produce for *text*."""
    _validate(chunk_size, overlap)
    return sum(1 for _ in _fragments(text, chunk_size, overlap))


def generate_chunks(
    text: str,
    source: str,
    chunk_size: int = 600,
    overlap: int = 150,
    expected_total: int | None = None,
) -> Iterator[Chunk]:
    """Lazily split *text* into overlapping :class:`Chunk` objects.

    Parameters
    ----------
    text:
        Full document text.
    source:
        Identity of the owning document, copied into every chunk.
    chunk_size:
        Target number of characters per chunk.
    overlap:
        Characters repeated from the end of one chunk into the next.
    expected_total:
        Chunk count computed beforehand with :func:`count_chunks`; skips a
        second counting pass.

    Each call returns a fresh generator.
    """
    _validate(chunk_size, overlap)
    total = expected_total if expected_total is not None else count_chunks(text, chunk_size, overlap)
    return (
        Chunk(content=fragment, source=source, index=index, total=total)
        for index, fragment in enumerate(_fragments(text, chunk_size, overlap))
    )
