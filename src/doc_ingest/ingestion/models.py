"""Domain models flowing through the ingestion pipeline."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from doc_ingest.ingestion.hashing import content_hash


class DocumentRecord(BaseModel):
    """A source document identified by its path relative to the source root.

    Attributes
    ----------
    identity:
        Stable, ``/``-separated path relative to the scanned folder.  Used
        as the key in :class:`IngestState` and as the ``source`` metadata
        of every chunk.
    fingerprint:
        SHA-256 hex digest of the raw content.
    path:
        Absolute location on disk (``None`` for in-memory documents).
    content:
        Text, when already loaded.  The scanner leaves this empty so the
        orchestrator reads one document at a time.
    """

    model_config = ConfigDict(frozen=True)

    identity: str
    fingerprint: str
    path: Path | None = None
    content: str | None = None

    @classmethod
    def from_text(cls, identity: str, content: str, *, path: Path | None = None) -> DocumentRecord:
        return cls(identity=identity, fingerprint=content_hash(content), path=path, content=content)

    def with_content(self, content: str) -> DocumentRecord:
        """Return a copy carrying *content* and the fingerprint of that content."""
        return self.model_copy(update={"content": content, "fingerprint": content_hash(content)})


class IngestState(BaseModel):
    """Fingerprints of every document that completed the full pipeline.

    Serialised as ``{"files": {<identity>: <fingerprint>}}``.  Instances
    are treated as values: :meth:`ChangeTracker.commit` returns a new state
    instead of mutating this one.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    fingerprints: dict[str, str] = Field(default_factory=dict, alias="files")

    def fingerprint_of(self, identity: str) -> str | None:
        return self.fingerprints.get(identity)


class Chunk(BaseModel):
    """One text fragment of a source document."""

    model_config = ConfigDict(frozen=True)

    content: str
    source: str
    index: int = Field(ge=0)
    total: int = Field(gt=0)

    @property
    def entry_id(self) -> str:
        """Deterministic vector-store key; re-ingesting overwrites, never duplicates."""
        return f"{self.source}_chunk_{self.index}"

    @property
    def metadata(self) -> dict[str, Any]:
        return {"source": self.source, "chunk_index": self.index, "total_chunks": self.total}


class VectorEntry(BaseModel):
    """A chunk paired with its embedding, ready for upsert."""

    id: str
    vector: list[float]
    document: str
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_chunk(cls, chunk: Chunk, vector: list[float]) -> VectorEntry:
        return cls(id=chunk.entry_id, vector=vector, document=chunk.content, metadata=chunk.metadata)


class DocumentStatus(str, Enum):
    COMMITTED = "committed"
    SKIPPED = "skipped"
    FAILED = "failed"


class DocumentResult(BaseModel):
    """Outcome of pushing one document through the pipeline.

    Attributes
    ----------
    identity:
        The document's identity.
    status:
        ``committed`` when every batch was embedded and stored,
        ``skipped`` when the document produced no chunks, ``failed``
        otherwise.
    total_chunks / total_batches:
        Sizes computed before streaming started.
    batches_done:
        Batches embedded and upserted before the document finished or
        failed.
    failed_batch:
        1-based index of the batch that raised (``None`` unless a batch
        failed).
    error:
        String form of the failure.
    """

    identity: str
    status: DocumentStatus
    total_chunks: int = 0
    total_batches: int = 0
    batches_done: int = 0
    failed_batch: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is not DocumentStatus.FAILED


class IngestReport(BaseModel):
    """Summary of a whole ingestion run."""

    discovered: int = 0
    changed: int = 0
    pruned: int = 0
    results: list[DocumentResult] = Field(default_factory=list)
    state: IngestState = Field(default_factory=IngestState)

    def _count(self, status: DocumentStatus) -> int:
        return sum(1 for r in self.results if r.status is status)

    @property
    def committed(self) -> int:
        return self._count(DocumentStatus.COMMITTED)

    @property
    def skipped(self) -> int:
        return self._count(DocumentStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(DocumentStatus.FAILED)

    def __str__(self) -> str:  # noqa: D105
        return (
            f"{self.discovered} discovered, {self.changed} changed: "
            f"{self.committed} committed, {self.skipped} skipped, {self.failed} failed"
        )
