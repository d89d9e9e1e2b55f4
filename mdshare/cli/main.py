"""Main CLI entry point for mdshare."""

import typer
from pathlib import Path
from typing import Optional

from .inspect_document import inspect_command
from .share import fetch_command, share_command
from .web import web_command

app = typer.Typer(
    name="mdshare",
    help="Share markdown documents through an mdshare server"
)


@app.command()
def web(
    host: str = typer.Option("0.0.0.0", "--host", help="Host to bind to"),
    port: int = typer.Option(8000, "--port", help="Port to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload for development")
):
    """Start the mdshare web server."""
    web_command(host=host, port=port, reload=reload)


@app.command()
def share(
    file: Path = typer.Argument(..., help="Markdown file to share"),
    title: Optional[str] = typer.Option(None, "--title", help="Document title (default: file name)"),
    server: Optional[str] = typer.Option(None, "--server", help="mdshare server URL"),
    output_format: str = typer.Option("text", "--output-format", help="Output format: text or json")
):
    """Share a markdown file and print its shareable URL."""
    share_command(file=file, title=title, server=server, output_format=output_format)


@app.command()
def fetch(
    doc: str = typer.Argument(..., help="Document ID, slug-ID or share URL"),
    server: Optional[str] = typer.Option(None, "--server", help="mdshare server URL"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write content to this file")
):
    """Download a shared markdown document."""
    fetch_command(doc=doc, server=server, output=output)


@app.command()
def inspect(
    doc: str = typer.Argument(..., help="Document ID or slug-ID"),
    documents_dir: Optional[Path] = typer.Option(None, "--documents-dir", help="Documents directory"),
    output_format: str = typer.Option("text", "--format", help="Output format: text or json")
):
    """Inspect a stored document in a local documents directory."""
    inspect_command(doc=doc, documents_dir=documents_dir, output_format=output_format)


if __name__ == "__main__":
    app()
