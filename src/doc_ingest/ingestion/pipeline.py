"""Incremental ingestion orchestrator.

Drives every changed document through::

    Pending → Chunking → BatchInProgress(n) → Committed
                                            ↘ Failed

one document at a time, one batch at a time.  Chunks are streamed into a
buffer of ``batch_size`` so memory stays bounded regardless of document
length.  State is committed and saved right after each document whose
batches *all* succeeded; a failed document stays pending and is fully
re-chunked and re-embedded on the next run (its partial upserts are
simply overwritten, because entry ids are deterministic).

Usage::

    from doc_ingest.config import settings
    from doc_ingest.ingestion.pipeline import build_orchestrator
    from doc_ingest.ingestion.loader import discover_documents

    orchestrator = build_orchestrator(settings)
    report = orchestrator.run(discover_documents(settings.source_folder))
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Protocol

from doc_ingest.config import Settings, settings
from doc_ingest.ingestion.change_tracker import ChangeTracker
from doc_ingest.ingestion.chunker import count_chunks, generate_chunks
from doc_ingest.ingestion.loader import read_document
from doc_ingest.ingestion.models import (
    Chunk,
    DocumentRecord,
    DocumentResult,
    DocumentStatus,
    IngestReport,
    IngestState,
    VectorEntry,
)

if TYPE_CHECKING:
    from doc_ingest.store.base import VectorStoreBase

logger = logging.getLogger(__name__)

_PREVIEW_CHARS = 150


class Embedder(Protocol):
    def embed_batch(self, texts: Sequence[str]) -> list[list[float]]: ...


class IngestionOrchestrator:
    """Top-level control loop tying chunker, embedder, store and tracker together.

    Parameters
    ----------
    embedder:
        Anything with ``embed_batch(texts) -> vectors``, normally an
        :class:`~doc_ingest.ingestion.embedder.EmbeddingClient`.
    store:
        Vector-store backend receiving the upserts.
    tracker:
        Persists which document versions are ingested.
    chunk_size / overlap:
        Chunking parameters.
    batch_size:
        Chunks embedded and upserted together.
    remove_ingested:
        Delete source files once committed (and unchanged ones up front).
    """

    def __init__(
        self,
        embedder: Embedder,
        store: VectorStoreBase,
        tracker: ChangeTracker,
        *,
        chunk_size: int = settings.chunk_size,
        overlap: int = settings.chunk_overlap,
        batch_size: int = settings.batch_size,
        remove_ingested: bool = settings.remove_ingested,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be > 0, got {chunk_size}")
        if overlap < 0:
            raise ValueError(f"chunk_overlap must be >= 0, got {overlap}")
        if overlap >= chunk_size:
            raise ValueError(f"chunk_overlap ({overlap}) must be < chunk_size ({chunk_size})")
        if batch_size <= 0:
            raise ValueError(f"batch_size must be > 0, got {batch_size}")
        self.embedder = embedder
        self.store = store
        self.tracker = tracker
        self.chunk_size = chunk_size
        self.overlap = overlap
        self.batch_size = batch_size
        self.remove_ingested = remove_ingested

    # -- public API -----------------------------------------------------------

    def run(self, documents: Iterable[DocumentRecord], state: IngestState | None = None) -> IngestReport:
        """Ingest every new or changed document.

        Parameters
        ----------
        documents:
            Discovered documents, processed in the given order.
        state:
            Starting state; loaded from the tracker's state file when omitted.

        Returns
        -------
        IngestReport
            Per-document results plus the final state.

        Raises
        ------
        IngestStartupError
            When the vector store or its collection is unavailable.
        """
        self.store.ensure_collection()

        documents = list(documents)
        if state is None:
            state = self.tracker.load()
        changed = self.tracker.changed_since(documents, state)

        pruned = 0
        if self.remove_ingested:
            pruned = self.tracker.prune_unchanged(documents, state)
            if pruned:
                logger.info("Cleaned up %d unchanged ingested files", pruned)

        report = IngestReport(discovered=len(documents), changed=len(changed), pruned=pruned)
        if not changed:
            logger.info("No changed documents to process")
            report.state = state
            return report

        logger.info("Processing %d changed documents", len(changed))
        for document in changed:
            logger.info("Processing: %s", document.identity)
            try:
                document = document.with_content(read_document(document))
            except (OSError, ValueError) as exc:
                logger.error("  ✗ Cannot read %s: %s", document.identity, exc)
                report.results.append(
                    DocumentResult(identity=document.identity, status=DocumentStatus.FAILED, error=str(exc))
                )
                continue

            result = self.ingest_document(document)
            report.results.append(result)
            if result.status is DocumentStatus.COMMITTED:
                state = self.tracker.commit(state, document)
                self.tracker.save(state)
                if self.remove_ingested:
                    self.tracker.prune_unchanged([document], state)

        report.state = state
        logger.info("Ingestion complete: %s", report)
        return report

    def ingest_document(self, document: DocumentRecord) -> DocumentResult:
        """Chunk, embed and store one document; never raises for batch failures.

        The caller decides what to do with the result; only a
        ``committed`` result may be recorded in the ingest state.
        """
        identity = document.identity
        text = read_document(document)

        total = count_chunks(text, self.chunk_size, self.overlap)
        if total == 0:
            logger.info("  %s is empty, skipping", identity)
            return DocumentResult(identity=identity, status=DocumentStatus.SKIPPED)

        total_batches = math.ceil(total / self.batch_size)
        logger.info("  created %d chunks (%d batches)", total, total_batches)

        batch: list[Chunk] = []
        done = 0
        try:
            for chunk in generate_chunks(text, identity, self.chunk_size, self.overlap, expected_total=total):
                batch.append(chunk)
                if len(batch) >= self.batch_size:
                    self._process_batch(batch, done + 1, total_batches)
                    done += 1
                    batch = []
            if batch:
                self._process_batch(batch, done + 1, total_batches)
                done += 1
        except Exception as exc:
            preview = batch[0].content[:_PREVIEW_CHARS] if batch else ""
            logger.error("  ✗ Batch %d/%d of %s failed: %s", done + 1, total_batches, identity, exc)
            logger.error("    First chunk preview: %s...", preview)
            return DocumentResult(
                identity=identity,
                status=DocumentStatus.FAILED,
                total_chunks=total,
                total_batches=total_batches,
                batches_done=done,
                failed_batch=done + 1,
                error=str(exc),
            )

        logger.info("  ✓ Successfully processed %s", identity)
        return DocumentResult(
            identity=identity,
            status=DocumentStatus.COMMITTED,
            total_chunks=total,
            total_batches=total_batches,
            batches_done=done,
        )

    # -- internals ------------------------------------------------------------

    def _process_batch(self, batch: list[Chunk], batch_index: int, total_batches: int) -> None:
        logger.info("  generating embeddings for batch %d/%d...", batch_index, total_batches)
        vectors = self.embedder.embed_batch([c.content for c in batch])
        if len(vectors) != len(batch):
            raise ValueError(f"Embedder returned {len(vectors)} vectors for {len(batch)} chunks")
        self.store.upsert([VectorEntry.from_chunk(c, v) for c, v in zip(batch, vectors)])


def build_orchestrator(cfg: Settings = settings) -> IngestionOrchestrator:
    """Wire the default Chroma store, HTTP embedder and state file from *cfg*."""
    from doc_ingest.ingestion.embedder import EmbeddingClient
    from doc_ingest.store.chroma_store import ChromaVectorStore

    embedder = EmbeddingClient(
        cfg.embedding_url,
        cfg.embedding_model,
        timeout=cfg.embedding_timeout,
        max_retries=cfg.embedding_max_retries,
        request_delay=cfg.embedding_delay,
        retry_base_delay=cfg.embedding_retry_base_delay,
    )
    store = ChromaVectorStore(
        cfg.chroma_collection,
        host=cfg.chroma_host,
        port=cfg.chroma_port,
        ssl=cfg.chroma_ssl,
    )
    return IngestionOrchestrator(
        embedder,
        store,
        ChangeTracker(cfg.state_file),
        chunk_size=cfg.chunk_size,
        overlap=cfg.chunk_overlap,
        batch_size=cfg.batch_size,
        remove_ingested=cfg.remove_ingested,
    )
