"""
Ingestion: discovery, change tracking, chunking and embedding.

This package converts a folder of text documents into embedded chunks
stored in a vector database, re-processing only documents whose content
changed since the last successful run.

Public surface
--------------
- :class:`IngestionOrchestrator` / :func:`build_orchestrator`: the run loop.
- :class:`ChangeTracker`: persisted fingerprints of ingested documents.
- :func:`count_chunks`, :func:`generate_chunks`: boundary-aware chunking.
- :class:`EmbeddingClient`: retrying, rate-limited embedding client.
- :func:`discover_documents`: source-folder scanner.
"""

from doc_ingest.ingestion.change_tracker import ChangeTracker
from doc_ingest.ingestion.chunker import count_chunks, generate_chunks
from doc_ingest.ingestion.embedder import EmbeddingClient
from doc_ingest.ingestion.loader import discover_documents, read_document
from doc_ingest.ingestion.models import (
    Chunk,
    DocumentRecord,
    DocumentResult,
    DocumentStatus,
    IngestReport,
    IngestState,
    VectorEntry,
)
from doc_ingest.ingestion.pipeline import IngestionOrchestrator, build_orchestrator

__all__ = [
    "ChangeTracker",
    "Chunk",
    "DocumentRecord",
    "DocumentResult",
    "DocumentStatus",
    "EmbeddingClient",
    "IngestReport",
    "IngestState",
    "IngestionOrchestrator",
    "VectorEntry",
    "build_orchestrator",
    "count_chunks",
    "discover_documents",
    "generate_chunks",
    "read_document",
]
