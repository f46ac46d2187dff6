"""
Wiring of corpus, embedding store, provider and engine for the surfaces.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .config import (
    resolve_corpus_path,
    resolve_embeddings_path,
    resolve_min_similarity,
    resolve_top_k,
)
from .corpus import Corpus, open_corpus
from .embeddings import Embedder, EmbeddingProvider
from .models import MatchedTerm, SearchResultItem
from .search import RetrievalEngine, ScoredResult
from .storage import DocumentVectorStore, StoreStatus, initialize_store

logger = logging.getLogger(__name__)


@dataclass
class SearchContext:
    """Everything a search or fetch call needs, built once at startup."""

    corpus: Corpus
    store: DocumentVectorStore
    engine: RetrievalEngine
    startup_status: StoreStatus


def default_embedder() -> EmbeddingProvider | None:
    """Return a Google GenAI provider, or None when no API key is set."""
    try:
        return EmbeddingProvider()
    except ValueError as exc:
        logger.warning("Semantic search disabled: %s", exc)
        return None


def build_context(
    corpus_path: str | None = None,
    embeddings_path: str | None = None,
    *,
    embedder: Embedder | None = None,
    use_default_embedder: bool = True,
    probe: bool = False,
    top_k: int | None = None,
    min_similarity: float | None = None,
) -> SearchContext:
    """
    Open the corpus, load the embeddings snapshot and build the engine.

    Raises CorpusNotFoundError when the corpus root is missing and
    EmptyCorpusError when it holds no supported files. A missing
    snapshot or provider only disables semantic search.
    """
    corpus = open_corpus(resolve_corpus_path(corpus_path))
    if embedder is None and use_default_embedder:
        embedder = default_embedder()

    store, status = initialize_store(
        resolve_embeddings_path(embeddings_path),
        embedder,
        probe=probe,
    )
    engine = RetrievalEngine(
        corpus,
        store,
        embedder,
        top_k=resolve_top_k(top_k),
        min_similarity=resolve_min_similarity(min_similarity),
    )
    logger.info(
        "Serving %s: %d embeddings, semantic search %s",
        corpus.root,
        status.document_count,
        "ready" if status.ready else "unavailable",
    )
    return SearchContext(corpus=corpus, store=store, engine=engine, startup_status=status)


def to_search_item(result: ScoredResult) -> SearchResultItem:
    return SearchResultItem(
        path=result.path,
        combined_score=result.combined_score,
        lexical_score=result.lexical_score,
        semantic_score=result.semantic_score,
        match_kind=result.match_kind.value,
        matched_terms=[
            MatchedTerm(term=term, count=count) for term, count in result.matched_terms
        ],
    )
