"""Search helpers for versioned corpora."""

from .filters import is_candidate, resolve_version
from .lexical import LexicalHit, LexicalScorer, extract_query_terms
from .query import RetrievalEngine
from .ranker import MatchKind, ScoredResult, consolidate
from .semantic import SemanticHit, SemanticSearchEngine, cosine_similarity

__all__ = [
    "is_candidate",
    "resolve_version",
    "LexicalHit",
    "LexicalScorer",
    "extract_query_terms",
    "RetrievalEngine",
    "MatchKind",
    "ScoredResult",
    "consolidate",
    "SemanticHit",
    "SemanticSearchEngine",
    "cosine_similarity",
]
