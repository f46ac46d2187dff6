"""
Vector-based semantic search engine.

Embeds a query once and compares it with every in-scope document embedding
via cosine similarity. When the store is not ready, or the provider fails,
the result is empty and lexical search carries the query alone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

import numpy as np

from ..config import DEFAULT_MIN_SIMILARITY, DEFAULT_TOP_K
from ..embeddings import EmbeddingFailure, FailureKind

if TYPE_CHECKING:
    from ..embeddings import Embedder
    from ..storage import EmbeddingStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SemanticHit:
    """A corpus file with its cosine similarity to the query."""

    path: str
    score: float


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between *a* and *b*; 0.0 if either has no length."""
    left = np.asarray(a, dtype=np.float64)
    right = np.asarray(b, dtype=np.float64)
    if left.shape != right.shape:
        raise ValueError("Vectors must have the same length")
    magnitude = float(np.linalg.norm(left) * np.linalg.norm(right))
    if magnitude == 0.0:
        return 0.0
    return float(np.dot(left, right) / magnitude)


def cosine_similarities(query: Sequence[float], matrix: np.ndarray) -> np.ndarray:
    """Row-wise cosine similarity; zero-magnitude rows score 0.0."""
    query_vec = np.asarray(query, dtype=np.float64)
    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query_vec)
    dots = matrix @ query_vec
    with np.errstate(divide="ignore", invalid="ignore"):
        scores = np.where(norms > 0, dots / norms, 0.0)
    return scores


class SemanticSearchEngine:
    """Embed a query and rank stored document embeddings against it."""

    def __init__(
        self,
        store: EmbeddingStore,
        embedder: Embedder | None,
        *,
        top_k: int = DEFAULT_TOP_K,
        min_similarity: float = DEFAULT_MIN_SIMILARITY,
    ) -> None:
        self.store = store
        self.embedder = embedder
        self.top_k = top_k
        self.min_similarity = min_similarity

    def score(self, query: str, version: int) -> list[SemanticHit]:
        """Return up to top_k hits above the similarity threshold."""
        if self.embedder is None or not self.store.is_ready():
            return []

        try:
            query_embedding = self.embedder.embed_query(query)
        except EmbeddingFailure as exc:
            self.store.mark_unhealthy(str(exc))
            return []
        except Exception as exc:
            logger.error(
                "Unexpected %s from embedder: %s", type(exc).__name__, exc
            )
            self.store.mark_unhealthy(
                str(EmbeddingFailure(FailureKind.TRANSIENT, str(exc)))
            )
            return []
        self.store.mark_healthy()

        candidates = [
            emb
            for emb in self.store.candidates(version)
            if len(emb.vector) == len(query_embedding)
        ]
        if not candidates:
            return []

        matrix = np.asarray([emb.vector for emb in candidates], dtype=np.float64)
        similarities = cosine_similarities(query_embedding, matrix)

        hits = [
            SemanticHit(path=emb.path, score=float(similarity))
            for emb, similarity in zip(candidates, similarities)
            if similarity > self.min_similarity
        ]
        hits.sort(key=lambda hit: (-hit.score, hit.path))
        hits = hits[: self.top_k]
        logger.debug(
            "Semantic search: %d candidates, %d hits (version %d)",
            len(candidates),
            len(hits),
            version,
        )
        return hits
