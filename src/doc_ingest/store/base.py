"""Abstract base class for vector-store backends.

Adding a new backend (Qdrant, pgvector …) only requires subclassing
:class:`VectorStoreBase` and implementing the abstract methods.  The
ingestion pipeline only talks to this interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from pydantic import BaseModel, Field

from doc_ingest.ingestion.models import VectorEntry


class SampleChunk(BaseModel):
    """A stored chunk shown by ``doc-ingest inspect``."""

    source: str = "unknown"
    chunk_index: int | None = None
    total_chunks: int | None = None
    content: str = ""


class CollectionSummary(BaseModel):
    """What a collection currently holds."""

    name: str
    total_chunks: int = 0
    chunks_per_source: dict[str, int] = Field(default_factory=dict)
    samples: list[SampleChunk] = Field(default_factory=list)
    embedding_dim: int | None = None


class VectorStoreBase(ABC):
    """Backend-agnostic vector-store interface.

    Parameters
    ----------
    collection_name:
        Logical name of the collection / index / namespace.
    """

    def __init__(self, collection_name: str) -> None:
        self.collection_name = collection_name

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def ensure_collection(self) -> None:
        """Create the collection if needed and make it ready for upserts.

        Raises :class:`~doc_ingest.exceptions.IngestStartupError` when the
        backend is unreachable.
        """
        ...

    @abstractmethod
    def upsert(self, entries: Sequence[VectorEntry]) -> None:
        """Insert or overwrite *entries*, keyed by ``entry.id``."""
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        ...

    # -- optional overrides ---------------------------------------------------

    def list_collections(self) -> list[str]:
        """Names of all collections on the backend.  Optional, raises NotImplementedError by default."""
        raise NotImplementedError(f"{type(self).__name__} does not support list_collections")

    def describe(self, *, limit: int = 100_000, samples: int = 3) -> CollectionSummary:
        """Summarise stored chunks.  Optional, raises NotImplementedError by default."""
        raise NotImplementedError(f"{type(self).__name__} does not support describe")

    def delete_collection(self) -> None:
        """Drop the whole collection.  Optional, raises NotImplementedError by default."""
        raise NotImplementedError(f"{type(self).__name__} does not support delete_collection")
