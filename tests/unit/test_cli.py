"""Unit tests for the typer command-line interface."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from doc_ingest.cli import app
from doc_ingest.exceptions import IngestStartupError, VectorStoreError
from doc_ingest.ingestion.models import DocumentResult, DocumentStatus, IngestReport
from doc_ingest.store.base import CollectionSummary, SampleChunk

runner = CliRunner()


def test_run_reports_summary_and_failures(tmp_path: Path) -> None:
    (tmp_path / "a.md").write_text("hello", encoding="utf-8")
    report = IngestReport(
        discovered=2,
        changed=2,
        results=[
            DocumentResult(identity="a.md", status=DocumentStatus.COMMITTED, total_chunks=1, total_batches=1),
            DocumentResult(identity="b.md", status=DocumentStatus.FAILED, total_chunks=4, total_batches=2,
                           failed_batch=2, error="provider unavailable"),
        ],
    )
    orchestrator = MagicMock()
    orchestrator.run.return_value = report

    with patch("doc_ingest.ingestion.pipeline.build_orchestrator", return_value=orchestrator) as build:
        result = runner.invoke(app, ["run", "--source", str(tmp_path), "--batch-size", "7"])

    assert result.exit_code == 0, result.output
    cfg = build.call_args.args[0]
    assert cfg.batch_size == 7
    assert cfg.source_folder == str(tmp_path)
    assert [d.identity for d in orchestrator.run.call_args.args[0]] == ["a.md"]
    assert "1 committed" in result.output
    assert "b.md (batch 2/2): provider unavailable" in result.output


def test_run_exits_nonzero_on_startup_error(tmp_path: Path) -> None:
    orchestrator = MagicMock()
    orchestrator.run.side_effect = IngestStartupError("Chroma unreachable")

    with patch("doc_ingest.ingestion.pipeline.build_orchestrator", return_value=orchestrator):
        result = runner.invoke(app, ["run", "--source", str(tmp_path)])

    assert result.exit_code == 1
    assert "Chroma unreachable" in result.output


def test_run_exits_nonzero_on_missing_source(tmp_path: Path) -> None:
    result = runner.invoke(app, ["run", "--source", str(tmp_path / "missing")])
    assert result.exit_code == 1


def test_run_rejects_overlap_not_smaller_than_chunk_size(tmp_path: Path) -> None:
    result = runner.invoke(app, ["run", "--source", str(tmp_path), "--chunk-size", "100", "--overlap", "100"])
    assert result.exit_code == 2


def test_check_reports_collections() -> None:
    store = MagicMock(url="http://127.0.0.1:8000")
    store.health_check.return_value = True
    store.list_collections.return_value = ["markdown_docs"]

    with patch("doc_ingest.store.chroma_store.ChromaVectorStore", return_value=store):
        result = runner.invoke(app, ["check"])

    assert result.exit_code == 0
    assert "Chroma is running" in result.output
    assert "- markdown_docs" in result.output


def test_check_exits_nonzero_when_unreachable() -> None:
    store = MagicMock(url="http://127.0.0.1:8000")
    store.health_check.return_value = False

    with patch("doc_ingest.store.chroma_store.ChromaVectorStore", return_value=store):
        result = runner.invoke(app, ["check"])

    assert result.exit_code == 1


def test_inspect_prints_summary() -> None:
    store = MagicMock()
    store.describe.return_value = CollectionSummary(
        name="markdown_docs",
        total_chunks=3,
        chunks_per_source={"a.md": 2, "b.md": 1},
        samples=[SampleChunk(source="a.md", chunk_index=0, total_chunks=2, content="Hello")],
        embedding_dim=768,
    )

    with patch("doc_ingest.store.chroma_store.ChromaVectorStore", return_value=store):
        result = runner.invoke(app, ["inspect", "--samples", "1"])

    assert result.exit_code == 0
    store.describe.assert_called_once_with(limit=100_000, samples=1)
    assert "Total chunks: 3" in result.output
    assert "a.md: 2 chunks" in result.output
    assert "Position: 1 of 2" in result.output
    assert "Embedding dimension: 768" in result.output


def test_inspect_missing_collection_exits_nonzero() -> None:
    store = MagicMock()
    store.describe.side_effect = VectorStoreError("Collection 'x' not found")

    with patch("doc_ingest.store.chroma_store.ChromaVectorStore", return_value=store):
        result = runner.invoke(app, ["inspect", "--collection", "x"])

    assert result.exit_code == 1


def test_delete_collection_with_yes() -> None:
    store = MagicMock(collection_name="markdown_docs")

    with patch("doc_ingest.store.chroma_store.ChromaVectorStore", return_value=store):
        result = runner.invoke(app, ["delete-collection", "--yes"])

    assert result.exit_code == 0
    store.delete_collection.assert_called_once_with()
    assert "Deleted collection: markdown_docs" in result.output


def test_delete_collection_aborts_without_confirmation() -> None:
    store = MagicMock(collection_name="markdown_docs")

    with patch("doc_ingest.store.chroma_store.ChromaVectorStore", return_value=store):
        result = runner.invoke(app, ["delete-collection"], input="n\n")

    assert result.exit_code == 1
    store.delete_collection.assert_not_called()
