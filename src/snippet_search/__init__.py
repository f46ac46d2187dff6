"""
snippet-search - hybrid retrieval over versioned code samples and docs.

This package ranks files of a documentation / code-sample corpus for a
natural-language query, combining BM25 keyword scoring over the raw files
with cosine similarity against precomputed Google GenAI embeddings.

Example usage:
    >>> from snippet_search import build_context
    >>> context = build_context("./examples", "./embeddings.json")
    >>> results = context.engine.search("editable root object", version=9)
    >>> [(r.path, round(r.combined_score, 3)) for r in results]
"""

from .corpus import (
    Corpus,
    CorpusDocument,
    CorpusNotFoundError,
    EmptyCorpusError,
    FetchError,
    open_corpus,
    version_from_path,
)
from .embeddings import Embedder, EmbeddingFailure, EmbeddingProvider, FailureKind
from .search import MatchKind, RetrievalEngine, ScoredResult
from .service import SearchContext, build_context
from .storage import DocumentEmbedding, DocumentVectorStore, StoreState, initialize_store

__all__ = [
    # Corpus
    "Corpus",
    "CorpusDocument",
    "CorpusNotFoundError",
    "EmptyCorpusError",
    "FetchError",
    "open_corpus",
    "version_from_path",
    # Embeddings
    "Embedder",
    "EmbeddingFailure",
    "EmbeddingProvider",
    "FailureKind",
    # Search
    "MatchKind",
    "RetrievalEngine",
    "ScoredResult",
    # Storage
    "DocumentEmbedding",
    "DocumentVectorStore",
    "StoreState",
    "initialize_store",
    # Wiring
    "SearchContext",
    "build_context",
]
