"""
BM25 keyword scoring over raw corpus files.

Queries are reduced to single terms longer than three characters plus the
bigrams formed by adjacent terms. Every candidate file is read and scored on
each query; there is no persistent index.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..corpus import Corpus

logger = logging.getLogger(__name__)


K1 = 1.5
B = 0.75
MIN_TERM_LENGTH = 4

_SEPARATORS_RE = re.compile(r"[\s.,;:!?()\[\]{}\"'\-_]+")
_WORD_RE = re.compile(r"\w+")


@dataclass(frozen=True)
class LexicalHit:
    """A corpus file with its max-normalized BM25 score."""

    path: str
    score: float
    raw_score: float
    matched_terms: tuple[tuple[str, int], ...] = ()


def _dedupe(items: list[str]) -> list[str]:
    seen: set[str] = set()
    unique: list[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            unique.append(item)
    return unique


def tokenize_query(query: str) -> list[str]:
    """Split on whitespace and punctuation, keep tokens of four or more chars."""
    return [
        token.lower()
        for token in _SEPARATORS_RE.split(query)
        if len(token) >= MIN_TERM_LENGTH
    ]


def extract_query_terms(query: str) -> list[str]:
    """
    Return unique single terms followed by unique adjacent-token bigrams.

    Bigrams come from the token sequence before de-duplication, so a
    repeated word still pairs with its neighbours.
    """
    tokens = tokenize_query(query)
    singles = _dedupe(tokens)
    bigrams = _dedupe([f"{left} {right}" for left, right in zip(tokens, tokens[1:])])
    return singles + bigrams


@lru_cache(maxsize=1024)
def _term_pattern(term: str) -> re.Pattern[str]:
    words = term.split(" ")
    body = r"\s+".join(re.escape(word) for word in words)
    return re.compile(rf"(?<!\w){body}(?!\w)", re.IGNORECASE)


def count_occurrences(text: str, term: str) -> int:
    """Count whole-word (or whole-phrase) case-insensitive matches."""
    return len(_term_pattern(term).findall(text))


def document_length(text: str) -> int:
    """Length in word tokens, markup and code identifiers included."""
    return len(_WORD_RE.findall(text))


def bm25_contribution(
    f: int,
    n: int,
    total_docs: int,
    dl: int,
    avgdl: float,
    *,
    k1: float = K1,
    b: float = B,
) -> float:
    """BM25 weight of one term in one document."""
    if f <= 0:
        return 0.0
    idf = math.log((total_docs - n + 0.5) / (n + 0.5) + 1.0)
    length_norm = 1.0 - b + b * (dl / avgdl) if avgdl > 0 else 1.0
    return idf * (f * (k1 + 1.0)) / (f + k1 * length_norm)


def score_documents(
    terms: list[str],
    documents: list[tuple[str, str]],
    *,
    k1: float = K1,
    b: float = B,
) -> list[LexicalHit]:
    """
    Score ``(path, text)`` pairs against *terms* with BM25.

    Scores are divided by the best raw score; documents matching nothing are
    left out, and an empty list is returned when nothing matches at all.
    """
    if not terms or not documents:
        return []

    lengths: dict[str, int] = {}
    counts: dict[str, dict[str, int]] = {}
    document_frequency: dict[str, int] = {term: 0 for term in terms}
    for path, text in documents:
        lengths[path] = document_length(text)
        doc_counts: dict[str, int] = {}
        for term in terms:
            f = count_occurrences(text, term)
            if f > 0:
                doc_counts[term] = f
                document_frequency[term] += 1
        counts[path] = doc_counts

    total_docs = len(documents)
    avgdl = sum(lengths.values()) / total_docs

    raw_scores: dict[str, float] = {}
    for path, doc_counts in counts.items():
        if not doc_counts:
            continue
        raw = 0.0
        for term, f in doc_counts.items():
            raw += bm25_contribution(
                f,
                document_frequency[term],
                total_docs,
                lengths[path],
                avgdl,
                k1=k1,
                b=b,
            )
        if raw > 0:
            raw_scores[path] = raw

    if not raw_scores:
        return []

    best = max(raw_scores.values())
    hits = [
        LexicalHit(
            path=path,
            score=raw / best,
            raw_score=raw,
            matched_terms=tuple(
                (term, counts[path][term]) for term in terms if term in counts[path]
            ),
        )
        for path, raw in raw_scores.items()
    ]
    hits.sort(key=lambda hit: (-hit.score, hit.path))
    return hits


class LexicalScorer:
    """Score version-filtered corpus files against a query with BM25."""

    def __init__(self, corpus: Corpus, *, k1: float = K1, b: float = B) -> None:
        self.corpus = corpus
        self.k1 = k1
        self.b = b

    def score(self, query: str, version: int) -> list[LexicalHit]:
        terms = extract_query_terms(query)
        if not terms:
            return []

        documents: list[tuple[str, str]] = []
        for document in self.corpus.candidates(version):
            text = self.corpus.read_text(document.path)
            if text is not None:
                documents.append((document.path, text))

        hits = score_documents(terms, documents, k1=self.k1, b=self.b)
        logger.debug(
            "Lexical search: %d terms, %d candidates, %d hits (version %d)",
            len(terms),
            len(documents),
            len(hits),
            version,
        )
        return hits
