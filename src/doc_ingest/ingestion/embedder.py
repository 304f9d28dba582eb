"""Embedding client for an OpenAI-compatible ``/v1/embeddings`` endpoint.

The provider (typically a single local llama.cpp / Ollama instance) is
called once per text, strictly sequentially, with a pause between
requests.  Each request has a hard timeout and is retried with
exponential backoff; a batch either returns one vector per input text,
in order, or raises.

Usage::

    client = EmbeddingClient(settings.embedding_url, settings.embedding_model)
    vectors = client.embed_batch(["first chunk", "second chunk"])
"""

from __future__ import annotations

import logging
import numbers
import time
from collections.abc import Callable, Sequence

import requests

from doc_ingest.config import settings
from doc_ingest.exceptions import EmbeddingError, EmbeddingRequestError, EmbeddingResponseError

logger = logging.getLogger(__name__)

_PROGRESS_EVERY = 10


class EmbeddingClient:
    """Sequential, rate-limited, retrying embedding client.

    Parameters
    ----------
    url:
        Full embeddings endpoint URL.
    model:
        Model identifier sent with every request.
    timeout:
        Per-request timeout in seconds; a timeout counts as a failed attempt.
    max_retries:
        Attempts per text (the first call included).
    request_delay:
        Seconds to wait between two texts of the same batch.
    retry_base_delay:
        Backoff unit; after failed attempt *n* the client waits
        ``retry_base_delay * 2 ** (n - 1)`` seconds.
    session:
        ``requests.Session`` to reuse; a new one is created when omitted.
    sleep:
        Delay function, injectable so tests run without waiting.
    """

    def __init__(
        self,
        url: str = settings.embedding_url,
        model: str = settings.embedding_model,
        *,
        timeout: float = settings.embedding_timeout,
        max_retries: int = settings.embedding_max_retries,
        request_delay: float = settings.embedding_delay,
        retry_base_delay: float = settings.embedding_retry_base_delay,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_retries < 1:
            raise ValueError(f"max_retries must be >= 1, got {max_retries}")
        self.url = url
        self.model = model
        self.timeout = timeout
        self.max_retries = max_retries
        self.request_delay = request_delay
        self.retry_base_delay = retry_base_delay
        self._session = session or requests.Session()
        self._sleep = sleep

    # -- public API -----------------------------------------------------------

    def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed *texts*, returning one vector per text in the same order.

        Raises the last :class:`EmbeddingError` of the first text whose
        retries run out; no partial result is returned.
        """
        vectors: list[list[float]] = []
        total = len(texts)
        for i, text in enumerate(texts):
            vector = self.embed_one(text)
            if vectors and len(vector) != len(vectors[0]):
                raise EmbeddingResponseError(
                    f"Embedding dimension changed within batch: {len(vectors[0])} -> {len(vector)}"
                )
            vectors.append(vector)

            done = i + 1
            if done % _PROGRESS_EVERY == 0 or done == total:
                logger.info("  generated embeddings for %d/%d chunks", done, total)
            if done < total and self.request_delay > 0:
                self._sleep(self.request_delay)
        return vectors

    def embed_one(self, text: str) -> list[float]:
        """Embed a single text, retrying with exponential backoff."""
        attempt = 1
        while True:
            try:
                return self._request(text)
            except EmbeddingError as exc:
                if attempt >= self.max_retries:
                    logger.error("Embedding failed after %d attempts: %s", self.max_retries, exc)
                    raise
                wait = self.retry_base_delay * 2 ** (attempt - 1)
                logger.warning(
                    "Embedding attempt %d/%d failed (wait %.1fs): %s",
                    attempt, self.max_retries, wait, exc,
                )
                self._sleep(wait)
            attempt += 1

    # -- internals ------------------------------------------------------------

    def _request(self, text: str) -> list[float]:
        try:
            resp = self._session.post(
                self.url,
                json={"model": self.model, "input": text},
                timeout=self.timeout,
            )
        except requests.Timeout as exc:
            raise EmbeddingRequestError(f"Embedding request timed out after {self.timeout}s") from exc
        except requests.RequestException as exc:
            raise EmbeddingRequestError(f"Embedding request failed: {exc}") from exc

        if not resp.ok:
            transient = resp.status_code >= 500 or resp.status_code == 429
            raise EmbeddingRequestError(
                f"Embedding API error: {resp.status_code} - {resp.text[:200]}",
                retryable=transient,
            )

        try:
            payload = resp.json()
        except ValueError as exc:
            raise EmbeddingResponseError("Embedding API returned a non-JSON body") from exc
        return _parse_vector(payload)


def _parse_vector(payload: object) -> list[float]:
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, list) or not data:
        raise EmbeddingResponseError("No embedding returned from API")

    first = data[0]
    embedding = first.get("embedding") if isinstance(first, dict) else None
    if not isinstance(embedding, list) or not embedding:
        raise EmbeddingResponseError("Invalid embedding data received")
    if not all(isinstance(v, numbers.Real) and not isinstance(v, bool) for v in embedding):
        raise EmbeddingResponseError("Embedding vector contains non-numeric values")
    return [float(v) for v in embedding]
