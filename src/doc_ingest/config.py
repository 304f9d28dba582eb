"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # Sources
    source_folder: str = Field(default="./sources", description="Folder scanned for documents")
    file_patterns: list[str] = Field(
        default_factory=lambda: ["**/*.md"],
        description="Glob patterns (relative to source_folder) selecting documents",
    )

    # Vector store
    chroma_host: str = "127.0.0.1"
    chroma_port: int = 8000
    chroma_ssl: bool = False
    chroma_collection: str = "markdown_docs"

    # Embedding provider
    embedding_url: str = Field(
        default="http://127.0.0.1:12434/engines/llama.cpp/v1/embeddings",
        description="OpenAI-compatible embeddings endpoint",
    )
    embedding_model: str = "ai/embeddinggemma"
    embedding_timeout: float = Field(default=30.0, gt=0, description="Per-request timeout in seconds")
    embedding_max_retries: int = Field(default=3, ge=1, description="Attempts per text before giving up")
    embedding_delay: float = Field(
        default=0.1,
        ge=0,
        description="Pause between consecutive provider requests, in seconds",
    )
    embedding_retry_base_delay: float = Field(
        default=1.0,
        ge=0,
        description="Backoff unit; retry n waits base * 2**(n-1) seconds",
    )

    # Chunking / batching
    chunk_size: int = Field(default=600, gt=0)
    chunk_overlap: int = Field(default=150, ge=0)
    batch_size: int = Field(default=50, gt=0, description="Chunks embedded and stored per batch")

    # Change tracking
    state_file: str = ".ingest-state.json"
    remove_ingested: bool = Field(
        default=False,
        description="Delete source files once they are ingested and unchanged",
    )

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _check_overlap(self) -> Settings:
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be < chunk_size ({self.chunk_size})"
            )
        return self


# Singleton: import `settings` wherever needed.
settings = Settings()
