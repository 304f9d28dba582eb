"""Chroma implementation of the vector-store abstraction."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence
from typing import Any

import chromadb

from doc_ingest.config import settings
from doc_ingest.exceptions import IngestStartupError, VectorStoreError
from doc_ingest.ingestion.models import VectorEntry
from doc_ingest.store.base import CollectionSummary, SampleChunk, VectorStoreBase

logger = logging.getLogger(__name__)

_PREVIEW_CHARS = 200


class ChromaVectorStore(VectorStoreBase):
    """Chroma-backed vector store.

    Embeddings are always computed by the ingestion pipeline and passed in
    explicitly; the collection never embeds on its own.

    Parameters
    ----------
    collection_name:
        Name of the Chroma collection.
    host:
        Chroma server hostname.
    port:
        Chroma server port.
    ssl:
        Connect over HTTPS.
    client:
        Pre-built Chroma client (mainly for tests); built lazily otherwise.
    """

    def __init__(
        self,
        collection_name: str = settings.chroma_collection,
        *,
        host: str = settings.chroma_host,
        port: int = settings.chroma_port,
        ssl: bool = settings.chroma_ssl,
        client: Any = None,
    ) -> None:
        super().__init__(collection_name)
        self._host = host
        self._port = port
        self._ssl = ssl
        self._client = client
        self._collection: Any = None

    @property
    def url(self) -> str:
        scheme = "https" if self._ssl else "http"
        return f"{scheme}://{self._host}:{self._port}"

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = chromadb.HttpClient(host=self._host, port=self._port, ssl=self._ssl)
        return self._client

    # -- VectorStoreBase overrides --------------------------------------------

    def ensure_collection(self) -> None:
        try:
            self._collection = self._get_client().get_or_create_collection(name=self.collection_name)
        except Exception as exc:
            raise IngestStartupError(
                f"Cannot open Chroma collection {self.collection_name!r} at {self.url}: {exc}"
            ) from exc
        logger.info("Using collection: %s", self.collection_name)

    def upsert(self, entries: Sequence[VectorEntry]) -> None:
        if not entries:
            return
        if self._collection is None:
            self.ensure_collection()

        try:
            self._collection.upsert(
                ids=[e.id for e in entries],
                embeddings=[e.vector for e in entries],
                documents=[e.document for e in entries],
                metadatas=[e.metadata for e in entries],
            )
        except Exception as exc:
            raise VectorStoreError(f"Upsert of {len(entries)} entries failed: {exc}") from exc
        logger.info("  upserted %d chunks into %s", len(entries), self.collection_name)

    def health_check(self) -> bool:
        try:
            self._get_client().heartbeat()
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False

    def list_collections(self) -> list[str]:
        try:
            collections = self._get_client().list_collections()
        except Exception as exc:
            raise VectorStoreError(f"Cannot list collections at {self.url}: {exc}") from exc
        # Older chromadb releases return Collection objects, newer ones plain names.
        return [c if isinstance(c, str) else c.name for c in collections]

    def describe(self, *, limit: int = 100_000, samples: int = 3) -> CollectionSummary:
        try:
            collection = self._get_client().get_collection(name=self.collection_name)
            results = collection.get(limit=limit, include=["documents", "metadatas", "embeddings"])
        except Exception as exc:
            raise VectorStoreError(
                f"Collection {self.collection_name!r} not found or not readable: {exc}"
            ) from exc

        ids = results.get("ids") or []
        metadatas = results.get("metadatas") or []
        documents = results.get("documents") or []

        per_source: Counter[str] = Counter()
        for meta in metadatas:
            if meta and "source" in meta:
                per_source[str(meta["source"])] += 1

        sample_chunks: list[SampleChunk] = []
        for meta, doc in list(zip(metadatas, documents))[:samples]:
            meta = meta or {}
            preview = doc or ""
            if len(preview) > _PREVIEW_CHARS:
                preview = preview[:_PREVIEW_CHARS] + "..."
            sample_chunks.append(
                SampleChunk(
                    source=str(meta.get("source", "unknown")),
                    chunk_index=meta.get("chunk_index"),
                    total_chunks=meta.get("total_chunks"),
                    content=preview,
                )
            )

        # Chroma may hand back a numpy array here, so avoid truthiness tests.
        embeddings = results.get("embeddings")
        embedding_dim = len(embeddings[0]) if embeddings is not None and len(embeddings) > 0 else None

        return CollectionSummary(
            name=self.collection_name,
            total_chunks=len(ids),
            chunks_per_source=dict(sorted(per_source.items())),
            samples=sample_chunks,
            embedding_dim=embedding_dim,
        )

    def delete_collection(self) -> None:
        try:
            self._get_client().delete_collection(name=self.collection_name)
        except Exception as exc:
            raise VectorStoreError(f"Could not delete collection {self.collection_name!r}: {exc}") from exc
        self._collection = None
        logger.info("Deleted collection: %s", self.collection_name)
