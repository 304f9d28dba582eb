"""doc_ingest: incremental ingestion of text documents into a vector store."""

__version__ = "0.1.0"
