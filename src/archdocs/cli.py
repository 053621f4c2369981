"""Command line interface for archdocs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from archdocs.config import DEFAULT_PAGE_LIMIT, AppConfig, ScanConfig, load_scan_config
from archdocs.errors import (
    ConfigError,
    DocsRootError,
    InvalidQueryParameters,
    PathTraversalError,
    ResourceNotFound,
)
from archdocs.index.indexer import ScanStats, build_index
from archdocs.index.search import Searcher
from archdocs.models import ResourceInfo
from archdocs.utils.files import FileReader
from archdocs.web.app import app as web_app, configure

LOGGER = logging.getLogger(__name__)

console = Console()
app = typer.Typer(help="archdocs - index and serve architecture documentation")

DOCS_ROOT_OPTION = typer.Option(..., "--docs-root", help="Root directory of the documentation")
CONFIG_OPTION = typer.Option(None, "--config", help="Path to archdocs.toml")
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Verbose logging")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _load(docs_root: Path, config: Optional[Path]) -> tuple[Searcher, FileReader, ScanStats]:
    app_config = AppConfig(docs_root=docs_root, config_path=config)
    try:
        reader = FileReader(app_config.docs_root)
        config_path = app_config.resolve_config_path(Path.cwd())
        if config is None and not config_path.exists():
            LOGGER.info("No %s found, using default scan groups", config_path.name)
            scan_config = ScanConfig()
        else:
            scan_config = load_scan_config(config_path)
    except (DocsRootError, ConfigError) as exc:
        raise typer.BadParameter(str(exc)) from exc

    index, stats = build_index(reader.docs_root, scan_config)
    return Searcher(index), reader, stats


def _documents_table(documents: list[ResourceInfo]) -> Table:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("URI")
    table.add_column("Area")
    table.add_column("Lang")
    table.add_column("Categories")
    table.add_column("Size", justify="right")
    for info in documents:
        table.add_row(
            info.uri, info.area, info.lang or "-", ", ".join(info.category), str(info.size)
        )
    return table


@app.command()
def scan(
    docs_root: Path = DOCS_ROOT_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Scan the docs tree and print every indexed document."""
    _setup_logging(verbose)
    searcher, _, stats = _load(docs_root, config)

    documents = searcher.list_documents()
    if not documents:
        console.print("[yellow]No documents found.[/yellow]")
    else:
        console.print(_documents_table(documents))
    console.print(
        f"Inserted: {stats.inserted}, replaced: {stats.replaced}, "
        f"skipped: {stats.skipped}, failed: {stats.failed}"
    )
    for target in stats.failed_targets:
        console.print(f"[yellow]Could not scan target: {target}[/yellow]")


@app.command("list")
def list_documents(
    docs_root: Path = DOCS_ROOT_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    area: Optional[str] = typer.Option(None, help="Area filter, e.g. 'backend|frontend'"),
    lang: Optional[str] = typer.Option(None, help="Language filter, e.g. 'php|go'"),
    category: Optional[str] = typer.Option(None, help="Category filter, e.g. 'c1|c4'"),
    page: int = typer.Option(1, help="Page number (1-based)"),
    limit: int = typer.Option(DEFAULT_PAGE_LIMIT, help="Items per page (max 200)"),
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """List indexed documents with filters and pagination."""
    _setup_logging(verbose)
    searcher, _, _ = _load(docs_root, config)
    try:
        result = searcher.filter_and_paginate(
            area=area, lang=lang, category=category, page=page, limit=limit
        )
    except InvalidQueryParameters as exc:
        raise typer.BadParameter(str(exc)) from exc

    if not result.documents:
        console.print("[yellow]No matching documents.[/yellow]")
    else:
        console.print(_documents_table(result.documents))
    console.print(
        f"Page {result.current_page}/{result.total_pages} "
        f"({result.total_documents} documents, limit {result.limit})"
    )


@app.command()
def show(
    uri: str = typer.Argument(..., help="docs:// URI of the document"),
    docs_root: Path = DOCS_ROOT_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Print the content of an indexed document."""
    _setup_logging(verbose)
    searcher, reader, _ = _load(docs_root, config)
    try:
        info = searcher.resolve(uri)
        content = reader.read_text(info.file_path)
    except (ResourceNotFound, PathTraversalError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    except (OSError, UnicodeDecodeError) as exc:
        console.print(f"[red]Failed to read file: {escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from exc
    console.print(content, markup=False, highlight=False)


@app.command()
def serve(
    docs_root: Path = DOCS_ROOT_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    host: str = typer.Option(AppConfig().host, help="Host interface"),
    port: int = typer.Option(AppConfig().port, help="Server port"),
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Scan the docs tree and start the web API."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    _setup_logging(verbose)
    searcher, reader, _ = _load(docs_root, config)
    configure(searcher, reader)

    console.print(
        f"Serving {len(searcher.index)} documents on http://{host}:{port} "
        f"(docs root: {reader.docs_root})"
    )
    uvicorn.run(
        web_app,
        host=host,
        port=port,
        reload=False,
        log_level="debug" if verbose else "info",
    )
