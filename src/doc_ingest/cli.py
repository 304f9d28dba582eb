"""Command-line interface.

Commands
--------
- ``run``: ingest new and changed documents into the vector store.
- ``check``: verify the Chroma server is reachable and list collections.
- ``inspect``: summarise what the configured collection holds.
- ``delete-collection``: drop the configured collection.

Every option defaults to the value from :mod:`doc_ingest.config`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from doc_ingest.config import Settings, settings
from doc_ingest.exceptions import DocIngestError, IngestStartupError

app = typer.Typer(
    help="Incrementally ingest text documents into a Chroma vector store.",
    no_args_is_help=True,
)


@app.callback()
def main(
    log_level: str = typer.Option(settings.log_level, "--log-level", help="Logging level"),
) -> None:
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _store(cfg: Settings, collection: Optional[str] = None):
    from doc_ingest.store.chroma_store import ChromaVectorStore

    return ChromaVectorStore(
        collection or cfg.chroma_collection,
        host=cfg.chroma_host,
        port=cfg.chroma_port,
        ssl=cfg.chroma_ssl,
    )


@app.command("run")
def run(
    source: Optional[Path] = typer.Option(None, "--source", help="Folder containing documents"),
    collection: Optional[str] = typer.Option(None, "--collection", help="Target collection"),
    state_file: Optional[Path] = typer.Option(None, "--state-file", help="Ingest state file"),
    chunk_size: Optional[int] = typer.Option(None, "--chunk-size", min=1),
    overlap: Optional[int] = typer.Option(None, "--overlap", min=0),
    batch_size: Optional[int] = typer.Option(None, "--batch-size", min=1),
    remove_ingested: Optional[bool] = typer.Option(
        None,
        "--remove-ingested/--keep-ingested",
        help="Delete source files once they are ingested",
    ),
) -> None:
    """Ingest new and changed documents."""
    from doc_ingest.ingestion.loader import discover_documents
    from doc_ingest.ingestion.pipeline import build_orchestrator

    overrides = {
        "source_folder": str(source) if source is not None else None,
        "chroma_collection": collection,
        "state_file": str(state_file) if state_file is not None else None,
        "chunk_size": chunk_size,
        "chunk_overlap": overlap,
        "batch_size": batch_size,
        "remove_ingested": remove_ingested,
    }
    try:
        cfg = Settings(**{**settings.model_dump(), **{k: v for k, v in overrides.items() if v is not None}})
    except ValueError as exc:
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(code=2) from exc

    typer.echo(f"Source folder: {cfg.source_folder}")
    typer.echo(f"Chroma: {cfg.chroma_host}:{cfg.chroma_port}  collection: {cfg.chroma_collection}")

    try:
        documents = discover_documents(cfg.source_folder, cfg.file_patterns)
        report = build_orchestrator(cfg).run(documents)
    except (IngestStartupError, FileNotFoundError, NotADirectoryError) as exc:
        typer.echo(f"Fatal error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(f"✓ Ingestion complete: {report}")
    for result in report.results:
        if not result.ok:
            where = f" (batch {result.failed_batch}/{result.total_batches})" if result.failed_batch else ""
            typer.echo(f"  ✗ {result.identity}{where}: {result.error}")


@app.command("check")
def check() -> None:
    """Check that the Chroma server is running."""
    store = _store(settings)
    typer.echo(f"Checking Chroma at {store.url}...")
    if not store.health_check():
        typer.echo("✗ Failed to connect to Chroma", err=True)
        typer.echo("You can start it with: docker run -p 8000:8000 chromadb/chroma", err=True)
        raise typer.Exit(code=1)

    typer.echo("✓ Chroma is running")
    try:
        names = store.list_collections()
    except DocIngestError as exc:
        typer.echo(f"✗ {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"Existing collections: {len(names)}")
    for name in names:
        typer.echo(f"  - {name}")


@app.command("inspect")
def inspect(
    collection: Optional[str] = typer.Option(None, "--collection", help="Collection to inspect"),
    samples: int = typer.Option(3, "--samples", min=0, help="Sample chunks to show"),
    limit: int = typer.Option(100_000, "--limit", min=1, help="Max chunks to read"),
) -> None:
    """Show chunk counts per source, sample chunks and embedding size."""
    store = _store(settings, collection)
    try:
        summary = store.describe(limit=limit, samples=samples)
    except DocIngestError as exc:
        typer.echo(f"✗ {exc}", err=True)
        typer.echo("Tip: run `doc-ingest run` to ingest documents first", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(f"Collection: {summary.name}")
    typer.echo(f"  Total chunks: {summary.total_chunks}")
    typer.echo(f"  Source files: {len(summary.chunks_per_source)}")
    for source, count in summary.chunks_per_source.items():
        typer.echo(f"    {source}: {count} chunks")

    for i, sample in enumerate(summary.samples, 1):
        position = "?" if sample.chunk_index is None else sample.chunk_index + 1
        typer.echo(f"--- Chunk {i} ---")
        typer.echo(f"Source: {sample.source}")
        typer.echo(f"Position: {position} of {sample.total_chunks or '?'}")
        typer.echo(f"Content: {sample.content}")

    if summary.embedding_dim is not None:
        typer.echo(f"Embedding dimension: {summary.embedding_dim}")


@app.command("delete-collection")
def delete_collection(
    collection: Optional[str] = typer.Option(None, "--collection", help="Collection to delete"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete the collection (the ingest state file is left untouched)."""
    store = _store(settings, collection)
    if not yes:
        typer.confirm(f"Delete collection {store.collection_name!r}?", abort=True)
    try:
        store.delete_collection()
    except DocIngestError as exc:
        typer.echo(f"✗ Failed to delete collection: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"✓ Deleted collection: {store.collection_name}")


if __name__ == "__main__":
    app()
