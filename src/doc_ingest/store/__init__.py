"""
Store: persistence of embedded chunks in a vector database.

Public surface
--------------
- :class:`VectorStoreBase`: abstract backend (subclass for other databases).
- :class:`ChromaVectorStore`: default Chroma backend.
- :class:`CollectionSummary`, :class:`SampleChunk`: inspection models.
"""

from doc_ingest.store.base import CollectionSummary, SampleChunk, VectorStoreBase

__all__ = [
    "ChromaVectorStore",
    "CollectionSummary",
    "SampleChunk",
    "VectorStoreBase",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaVectorStore to avoid pulling in chromadb at import time."""
    if name == "ChromaVectorStore":
        from doc_ingest.store.chroma_store import ChromaVectorStore

        return ChromaVectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
