"""Round trip against a running Chroma server (``docker run -p 8000:8000 chromadb/chroma``)."""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from pathlib import Path

import pytest

from doc_ingest.config import settings
from doc_ingest.ingestion.change_tracker import ChangeTracker
from doc_ingest.ingestion.models import DocumentRecord, IngestState
from doc_ingest.ingestion.pipeline import IngestionOrchestrator

pytestmark = pytest.mark.integration


class _ConstantEmbedder:
    def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        return [[float(len(t)), 1.0, 0.0] for t in texts]


def test_ingest_then_describe(tmp_path: Path) -> None:
    from doc_ingest.store.chroma_store import ChromaVectorStore

    store = ChromaVectorStore(
        f"doc-ingest-test-{uuid.uuid4().hex[:8]}",
        host=settings.chroma_host,
        port=settings.chroma_port,
        ssl=settings.chroma_ssl,
    )
    orchestrator = IngestionOrchestrator(
        _ConstantEmbedder(),
        store,
        ChangeTracker(tmp_path / "state.json"),
        chunk_size=60,
        overlap=10,
        batch_size=3,
    )
    try:
        doc = DocumentRecord.from_text("live.md", "Sentence number one. " * 20)
        report = orchestrator.run([doc])
        assert report.committed == 1

        # Re-ingesting overwrites the same ids instead of adding new ones.
        orchestrator.run([doc], state=IngestState())
        summary = store.describe()
        assert summary.total_chunks == report.results[0].total_chunks
        assert summary.embedding_dim == 3
    finally:
        store.delete_collection()
