"""FastAPI application serving the scanned docs index."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware

from archdocs.config import DEFAULT_PAGE_LIMIT
from archdocs.errors import InvalidQueryParameters, PathTraversalError, ResourceNotFound
from archdocs.index.search import Searcher
from archdocs.utils.files import FileReader

LOGGER = logging.getLogger(__name__)

URI_SCHEME = "docs://"

app = FastAPI(title="archdocs", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)


def configure(searcher: Searcher, reader: FileReader) -> FastAPI:
    """Attach a built index and a content reader to the application."""
    app.state.searcher = searcher
    app.state.reader = reader
    return app


def _searcher(request: Request) -> Searcher:
    searcher = getattr(request.app.state, "searcher", None)
    if searcher is None:
        raise HTTPException(status_code=503, detail="Document index is not loaded")
    return searcher


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@app.get("/resources")
async def list_resources(request: Request) -> dict[str, Any]:
    searcher = _searcher(request)
    documents = searcher.list_documents()
    return {"resources": [asdict(info) for info in documents], "stats": searcher.index.get_stats()}


@app.get("/documents")
async def get_docs_list(
    request: Request,
    area: Optional[str] = None,
    lang: Optional[str] = None,
    category: Optional[str] = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_LIMIT,
) -> dict[str, Any]:
    """Filter with ``|``-separated alternatives and paginate."""
    searcher = _searcher(request)
    try:
        result = searcher.filter_and_paginate(
            area=area, lang=lang, category=category, page=page, limit=limit
        )
    except InvalidQueryParameters as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return asdict(result)


@app.get("/documents/content")
async def get_resource_content(
    request: Request, uri: str = Query(..., description="docs:// URI")
) -> dict[str, Any]:
    if not uri.startswith(URI_SCHEME):
        raise HTTPException(status_code=400, detail="Path must start with 'docs://'")

    searcher = _searcher(request)
    try:
        info = searcher.resolve(uri)
    except ResourceNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    reader: FileReader = request.app.state.reader
    try:
        content = reader.read_text(info.file_path)
    except PathTraversalError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    except (OSError, UnicodeDecodeError) as exc:
        LOGGER.error("Unable to read %s: %s", info.file_path, exc)
        raise HTTPException(status_code=500, detail=f"Failed to read file: {exc}") from exc
    return {"uri": uri, "mime_type": info.mime_type, "content": content}


@app.get("/adr")
async def get_all_adr_documents(request: Request) -> dict[str, Any]:
    documents = _searcher(request).adr_documents()
    return {
        "adr_documents": [asdict(info) for info in documents],
        "total_adr_documents": len(documents),
    }


@app.get("/projects/{project}")
async def get_project_overview(project: str, request: Request) -> dict[str, Any]:
    try:
        overview = _searcher(request).project_overview(project)
    except ResourceNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return asdict(overview)


@app.get("/agreements")
async def get_agreements(request: Request, lang: str = Query(...)) -> dict[str, Any]:
    documents = _searcher(request).agreements(lang)
    return {
        "lang": lang,
        "agreements": [asdict(info) for info in documents],
        "total_agreements": len(documents),
    }
