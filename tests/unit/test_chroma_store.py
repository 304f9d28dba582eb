"""Unit tests for the Chroma vector-store backend (client mocked)."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from doc_ingest.exceptions import IngestStartupError, VectorStoreError
from doc_ingest.ingestion.models import VectorEntry
from doc_ingest.store.chroma_store import ChromaVectorStore


def _entries() -> list[VectorEntry]:
    return [
        VectorEntry(id="a.md_chunk_0", vector=[0.1, 0.2], document="Hello",
                    metadata={"source": "a.md", "chunk_index": 0, "total_chunks": 2}),
        VectorEntry(id="a.md_chunk_1", vector=[0.3, 0.4], document="World",
                    metadata={"source": "a.md", "chunk_index": 1, "total_chunks": 2}),
    ]


def test_client_is_built_from_connection_settings() -> None:
    with patch("doc_ingest.store.chroma_store.chromadb.HttpClient") as http_client:
        store = ChromaVectorStore("docs", host="chroma.local", port=9000, ssl=True)
        store.ensure_collection()

    http_client.assert_called_once_with(host="chroma.local", port=9000, ssl=True)
    http_client.return_value.get_or_create_collection.assert_called_once_with(name="docs")
    assert store.url == "https://chroma.local:9000"


def test_ensure_collection_failure_is_startup_error() -> None:
    client = MagicMock()
    client.get_or_create_collection.side_effect = ConnectionError("refused")
    store = ChromaVectorStore("docs", client=client)

    with pytest.raises(IngestStartupError, match="docs"):
        store.ensure_collection()


def test_upsert_sends_ids_vectors_documents_and_metadata() -> None:
    client = MagicMock()
    collection = client.get_or_create_collection.return_value
    store = ChromaVectorStore("docs", client=client)

    store.upsert(_entries())

    collection.upsert.assert_called_once_with(
        ids=["a.md_chunk_0", "a.md_chunk_1"],
        embeddings=[[0.1, 0.2], [0.3, 0.4]],
        documents=["Hello", "World"],
        metadatas=[
            {"source": "a.md", "chunk_index": 0, "total_chunks": 2},
            {"source": "a.md", "chunk_index": 1, "total_chunks": 2},
        ],
    )


def test_upsert_empty_is_noop() -> None:
    client = MagicMock()
    ChromaVectorStore("docs", client=client).upsert([])
    client.get_or_create_collection.assert_not_called()


def test_upsert_failure_is_wrapped() -> None:
    client = MagicMock()
    client.get_or_create_collection.return_value.upsert.side_effect = RuntimeError("boom")
    store = ChromaVectorStore("docs", client=client)
    store.ensure_collection()

    with pytest.raises(VectorStoreError, match="boom"):
        store.upsert(_entries())


def test_health_check() -> None:
    client = MagicMock()
    assert ChromaVectorStore("docs", client=client).health_check() is True

    client.heartbeat.side_effect = ConnectionError("down")
    assert ChromaVectorStore("docs", client=client).health_check() is False


def test_list_collections_handles_names_and_objects() -> None:
    client = MagicMock()
    client.list_collections.return_value = ["plain", SimpleNamespace(name="object")]

    assert ChromaVectorStore("docs", client=client).list_collections() == ["plain", "object"]


def test_describe_summarises_collection() -> None:
    client = MagicMock()
    client.get_collection.return_value.get.return_value = {
        "ids": ["b.md_chunk_0", "a.md_chunk_0", "a.md_chunk_1"],
        "metadatas": [
            {"source": "b.md", "chunk_index": 0, "total_chunks": 1},
            {"source": "a.md", "chunk_index": 0, "total_chunks": 2},
            {"source": "a.md", "chunk_index": 1, "total_chunks": 2},
        ],
        "documents": ["x" * 250, "short", "other"],
        "embeddings": [[0.1, 0.2, 0.3]] * 3,
    }

    summary = ChromaVectorStore("docs", client=client).describe(samples=2)

    assert summary.total_chunks == 3
    assert summary.chunks_per_source == {"a.md": 2, "b.md": 1}
    assert list(summary.chunks_per_source) == ["a.md", "b.md"]
    assert len(summary.samples) == 2
    assert summary.samples[0].content == "x" * 200 + "..."
    assert summary.samples[1].total_chunks == 2
    assert summary.embedding_dim == 3


def test_describe_missing_collection_raises() -> None:
    client = MagicMock()
    client.get_collection.side_effect = ValueError("Collection docs does not exist.")

    with pytest.raises(VectorStoreError, match="not found"):
        ChromaVectorStore("docs", client=client).describe()


def test_delete_collection() -> None:
    client = MagicMock()
    ChromaVectorStore("docs", client=client).delete_collection()
    client.delete_collection.assert_called_once_with(name="docs")

    client.delete_collection.side_effect = ValueError("missing")
    with pytest.raises(VectorStoreError):
        ChromaVectorStore("docs", client=client).delete_collection()
