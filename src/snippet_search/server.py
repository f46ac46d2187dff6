"""
FastAPI server exposing search and fetch over a snippet corpus.

The corpus and embeddings are loaded once, either through configure() from
the CLI or lazily from environment variables on the first request.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import FastAPI
from fastapi.responses import JSONResponse, PlainTextResponse

from .corpus import CorpusNotFoundError, EmptyCorpusError, FetchError
from .models import ErrorResult, SearchRequest, SearchResponse, StatusResponse
from .service import SearchContext, build_context, to_search_item

logger = logging.getLogger(__name__)

app = FastAPI(
    title="snippet-search",
    description="Hybrid lexical and semantic search over versioned code samples",
)

_context: SearchContext | None = None

_FETCH_STATUS = {
    "InvalidFileName": 400,
    "PathNotFound": 404,
    "FileNotFound": 404,
    "FetchFailed": 500,
}


def configure(context: SearchContext | None) -> None:
    """Install the context used by every request; None resets it."""
    global _context
    _context = context


def _get_context() -> SearchContext:
    global _context
    if _context is None:
        _context = build_context()
    return _context


def _error(result: ErrorResult, status_code: int) -> JSONResponse:
    return JSONResponse(result.model_dump(), status_code=status_code)


def _load_context() -> SearchContext | JSONResponse:
    """Return the request context, or the structured error for a bad corpus."""
    try:
        return _get_context()
    except CorpusNotFoundError as exc:
        logger.error("Corpus unavailable: %s", exc)
        return _error(ErrorResult(error="PathNotFound", message=str(exc)), 404)
    except EmptyCorpusError as exc:
        logger.error("Corpus unavailable: %s", exc)
        return _error(ErrorResult(error="EmptyCorpus", message=str(exc)), 500)


@app.post("/api/search", response_model=SearchResponse)
async def search(request: SearchRequest):
    """Rank corpus files for a natural-language query."""
    context = _load_context()
    if isinstance(context, JSONResponse):
        return context

    version = context.engine.resolve_version(request.version)
    try:
        results = await asyncio.to_thread(
            context.engine.search,
            request.message,
            request.version,
            limit=request.limit,
        )
    except CorpusNotFoundError as exc:
        logger.error("Search failed: %s", exc)
        return _error(ErrorResult(error="PathNotFound", message=str(exc)), 404)
    return SearchResponse(
        query=request.message,
        version=version,
        semantic_available=context.store.is_ready(),
        results=[to_search_item(result) for result in results],
    )


@app.get("/api/fetch")
async def fetch(file_name: str):
    """Return the raw text of one corpus file."""
    context = _load_context()
    if isinstance(context, JSONResponse):
        return context

    try:
        content = context.corpus.fetch(file_name)
    except FetchError as exc:
        logger.warning("Fetch of %r rejected: %s", file_name, exc.message)
        return _error(exc.to_result(), _FETCH_STATUS.get(exc.code, 400))
    return PlainTextResponse(content)


@app.get("/api/status", response_model=StatusResponse)
async def status():
    """Report corpus location and semantic search readiness."""
    context = _load_context()
    if isinstance(context, JSONResponse):
        return context

    store_status = context.store.status()
    return StatusResponse(
        corpus_path=str(context.corpus.root),
        state=store_status.state.value,
        document_embeddings=store_status.document_count,
        semantic_ready=store_status.ready,
        highest_version=store_status.highest_version,
        failure=store_status.failure,
    )


def run_server(host: str = "127.0.0.1", port: int = 8000):
    """Run the FastAPI server."""
    import uvicorn

    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
