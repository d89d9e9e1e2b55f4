"""Share/fetch CLI commands talking to an mdshare server."""

from pathlib import Path
from typing import Optional

import typer

from ..lib.exceptions import ShareClientError
from ..lib.logging import get_logger
from ..services.share_client import create_share_client

logger = get_logger(__name__)


def share_command(
    file: Path,
    title: Optional[str] = None,
    server: Optional[str] = None,
    output_format: str = "text",
):
    """
    Share a local markdown file and print its URL.
    """
    try:
        content = file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        typer.echo(f"Error: could not read {file}: {e}", err=True)
        raise typer.Exit(code=1)

    client = create_share_client(server_url=server) if server else create_share_client()

    try:
        result = client.share(content, title or file.name)
    except ShareClientError as e:
        logger.error("share_command_failed", file=str(file), error=str(e))
        typer.echo(f"Error sharing document: {e}", err=True)
        raise typer.Exit(code=1)

    if output_format == "json":
        typer.echo(result.model_dump_json(indent=2))
    else:
        typer.echo(f"Shared '{result.title}' as {result.id}")
        typer.echo(result.url)


def fetch_command(
    doc: str,
    server: Optional[str] = None,
    output: Optional[Path] = None,
):
    """
    Download a shared document by ID, slug-ID or share URL.
    """
    client = create_share_client(server_url=server) if server else create_share_client()

    try:
        document = client.fetch(doc)
    except ShareClientError as e:
        logger.error("fetch_command_failed", doc=doc, error=str(e))
        typer.echo(f"Error loading shared document: {e}", err=True)
        raise typer.Exit(code=1)

    if output:
        # Bytes keep line endings exactly as stored
        output.write_bytes(document.content.encode("utf-8"))
        typer.echo(f"Saved '{document.title}' ({document.size} bytes) to {output}")
    else:
        typer.echo(document.content, nl=False)
