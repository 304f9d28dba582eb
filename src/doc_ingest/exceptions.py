"""Exception hierarchy shared by the ingestion and store layers."""

from __future__ import annotations


class DocIngestError(RuntimeError):
    """Base class for every error raised by :mod:`doc_ingest`."""


class EmbeddingError(DocIngestError):
    """The embedding provider did not return a usable vector.

    ``retryable`` tells callers whether the cause is likely transient
    (timeouts, connection resets, 5xx) or terminal (malformed payloads,
    4xx).  :class:`~doc_ingest.ingestion.embedder.EmbeddingClient` spends
    the same attempt budget on both kinds.
    """

    retryable: bool = True

    def __init__(self, message: str, *, retryable: bool | None = None) -> None:
        super().__init__(message)
        if retryable is not None:
            self.retryable = retryable


class EmbeddingRequestError(EmbeddingError):
    """Transport-level failure: timeout, connection error or HTTP error status."""


class EmbeddingResponseError(EmbeddingError):
    """The provider answered, but the body carries no well-formed vector."""

    retryable = False


class VectorStoreError(DocIngestError):
    """A vector-store operation (upsert, read, delete) failed."""


class IngestStartupError(DocIngestError):
    """The run cannot start: store unreachable or collection unavailable."""
