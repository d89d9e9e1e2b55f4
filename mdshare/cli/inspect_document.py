"""Inspect CLI command: read a record straight from a documents directory."""

import json
from pathlib import Path
from typing import Optional

import typer

from ..lib.config import DOCUMENTS_DIR
from ..lib.exceptions import DocumentStoreError
from ..services.document_store import DocumentStore
from ..services.rate_limiter import InMemoryCounterStorage, RateLimiter


def inspect_command(
    doc: str,
    documents_dir: Optional[Path] = None,
    output_format: str = "text",
):
    """
    Show a stored document and its metadata.
    """
    documents_dir = documents_dir or DOCUMENTS_DIR
    if not documents_dir.is_dir():
        typer.echo(f"Error: documents directory not found: {documents_dir}", err=True)
        raise typer.Exit(code=1)

    # Read-only access; the limiter is never consulted on load
    store = DocumentStore(documents_dir, rate_limiter=RateLimiter(InMemoryCounterStorage()))

    try:
        document = store.load(doc)
    except DocumentStoreError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if output_format == "json":
        typer.echo(json.dumps(document.model_dump(exclude={"success"}), indent=2, ensure_ascii=False))
        return

    typer.echo(f"ID:      {document.id}")
    typer.echo(f"Title:   {document.title}")
    typer.echo(f"Created: {document.created or 'unknown'}")
    typer.echo(f"Size:    {document.size} bytes")
    typer.echo("-" * 40)
    typer.echo(document.content)
