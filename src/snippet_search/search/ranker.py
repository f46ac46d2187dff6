"""
Ranking helpers for merging lexical and semantic result sets.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .lexical import LexicalHit
from .semantic import SemanticHit


class MatchKind(str, Enum):
    BOTH = "both"
    LEXICAL_ONLY = "lexical"
    SEMANTIC_ONLY = "semantic"


@dataclass(frozen=True)
class ScoredResult:
    """Merged retrieval result for one corpus file."""

    path: str
    match_kind: MatchKind
    lexical_score: float | None = None
    semantic_score: float | None = None
    matched_terms: tuple[tuple[str, int], ...] = ()

    @property
    def combined_score(self) -> float:
        # Unweighted mean when both sides matched.
        if self.match_kind is MatchKind.BOTH:
            return (self.semantic_score + self.lexical_score) / 2
        if self.match_kind is MatchKind.LEXICAL_ONLY:
            return self.lexical_score
        return self.semantic_score


def consolidate(
    semantic_hits: list[SemanticHit],
    lexical_hits: list[LexicalHit],
) -> list[ScoredResult]:
    """Merge both hit lists by path and sort by combined score, then path."""
    merged: dict[str, ScoredResult] = {}

    for hit in semantic_hits:
        merged[hit.path] = ScoredResult(
            path=hit.path,
            match_kind=MatchKind.SEMANTIC_ONLY,
            semantic_score=hit.score,
        )

    for hit in lexical_hits:
        existing = merged.get(hit.path)
        if existing is not None:
            merged[hit.path] = ScoredResult(
                path=hit.path,
                match_kind=MatchKind.BOTH,
                semantic_score=existing.semantic_score,
                lexical_score=hit.score,
                matched_terms=hit.matched_terms,
            )
        else:
            merged[hit.path] = ScoredResult(
                path=hit.path,
                match_kind=MatchKind.LEXICAL_ONLY,
                lexical_score=hit.score,
                matched_terms=hit.matched_terms,
            )

    return rank_results(list(merged.values()))


def rank_results(results: list[ScoredResult]) -> list[ScoredResult]:
    """Sort by combined score descending, ties by ascending path."""
    return sorted(results, key=lambda result: (-result.combined_score, result.path))
