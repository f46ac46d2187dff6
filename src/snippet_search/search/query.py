"""
Hybrid retrieval engine: lexical and semantic scoring joined into one ranking.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from ..config import DEFAULT_MIN_SIMILARITY, DEFAULT_TOP_K
from .filters import resolve_version
from .lexical import LexicalHit, LexicalScorer, extract_query_terms
from .ranker import ScoredResult, consolidate
from .semantic import SemanticHit, SemanticSearchEngine

if TYPE_CHECKING:
    from ..corpus import Corpus
    from ..embeddings import Embedder
    from ..storage import EmbeddingStore

logger = logging.getLogger(__name__)


class RetrievalEngine:
    """Parallel retrieval engine for lexical + semantic query paths."""

    def __init__(
        self,
        corpus: Corpus,
        store: EmbeddingStore,
        embedder: Embedder | None = None,
        *,
        top_k: int = DEFAULT_TOP_K,
        min_similarity: float = DEFAULT_MIN_SIMILARITY,
    ) -> None:
        self.corpus = corpus
        self.store = store
        self.lexical = LexicalScorer(corpus)
        self.semantic = SemanticSearchEngine(
            store,
            embedder,
            top_k=top_k,
            min_similarity=min_similarity,
        )

    def resolve_version(self, version: int | None) -> int:
        return resolve_version(version, self.store.highest_version())

    def search(
        self,
        query: str,
        version: int | None = None,
        *,
        limit: int | None = None,
    ) -> list[ScoredResult]:
        """Rank files for *query*; a query without any search term yields []."""
        if query is None or not extract_query_terms(query):
            return []

        resolved = self.resolve_version(version)
        semantic_hits, lexical_hits = self._search_parallel(query, resolved)
        results = consolidate(semantic_hits, lexical_hits)
        if limit is not None:
            results = results[: max(limit, 1)]

        logger.info(
            "Search %r (version %d): %d lexical, %d semantic, %d results",
            query[:50],
            resolved,
            len(lexical_hits),
            len(semantic_hits),
            len(results),
        )
        return results

    def _search_parallel(
        self, query: str, version: int
    ) -> tuple[list[SemanticHit], list[LexicalHit]]:
        with ThreadPoolExecutor(max_workers=2) as executor:
            semantic_future = executor.submit(self.semantic.score, query, version)
            lexical_future = executor.submit(self.lexical.score, query, version)
            semantic_hits = semantic_future.result()
            lexical_hits = lexical_future.result()
        return semantic_hits, lexical_hits
