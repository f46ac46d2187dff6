"""Tests for cosine similarity and the semantic search engine."""

from __future__ import annotations

import numpy as np
import pytest

from snippet_search.embeddings import EmbeddingFailure, FailureKind
from snippet_search.search.semantic import (
    SemanticSearchEngine,
    cosine_similarities,
    cosine_similarity,
)
from snippet_search.storage import DocumentEmbedding, DocumentVectorStore, StoreState

from .conftest import FakeEmbedder


def _store(*embeddings: DocumentEmbedding) -> DocumentVectorStore:
    store = DocumentVectorStore()
    for embedding in embeddings:
        store.add(embedding)
    return store


def test_cosine_similarity_basic_cases() -> None:
    assert cosine_similarity([1.0, 0.0], [2.0, 0.0]) == pytest.approx(1.0)
    assert cosine_similarity([1.0, 0.0], [0.0, 3.0]) == pytest.approx(0.0)
    assert cosine_similarity([1.0, 0.0], [-1.0, 0.0]) == pytest.approx(-1.0)


def test_cosine_similarity_zero_magnitude_is_zero() -> None:
    assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0
    scores = cosine_similarities([1.0, 0.0], np.array([[0.0, 0.0], [1.0, 0.0]]))
    assert scores.tolist() == [0.0, pytest.approx(1.0)]


def test_cosine_similarity_rejects_length_mismatch() -> None:
    with pytest.raises(ValueError):
        cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])


def test_not_ready_store_returns_empty_without_provider_call() -> None:
    embedder = FakeEmbedder()
    engine = SemanticSearchEngine(DocumentVectorStore(), embedder)

    assert engine.score("editable root", version=10) == []
    assert embedder.calls == []


def test_filters_threshold_version_and_top_k() -> None:
    store = _store(
        DocumentEmbedding(path="close.md", vector=[1.0, 0.1, 0.0]),
        DocumentEmbedding(path="closest.md", vector=[1.0, 0.0, 0.0]),
        DocumentEmbedding(path="far.md", vector=[0.0, 1.0, 0.0]),
        DocumentEmbedding(path="v9/close.cs", vector=[1.0, 0.0, 0.0], version=9),
        DocumentEmbedding(path="v10/close.cs", vector=[0.9, 0.2, 0.0], version=10),
    )
    engine = SemanticSearchEngine(store, FakeEmbedder(), top_k=2, min_similarity=0.5)

    hits = engine.score("editable root", version=10)

    assert [hit.path for hit in hits] == ["closest.md", "close.md"]
    assert hits[0].score == pytest.approx(1.0)

    all_hits = SemanticSearchEngine(store, FakeEmbedder(), top_k=10).score(
        "editable root", version=10
    )
    paths = [hit.path for hit in all_hits]
    assert "far.md" not in paths
    assert "v9/close.cs" not in paths
    assert "v10/close.cs" in paths


def test_provider_failure_marks_store_unhealthy_once() -> None:
    store = _store(DocumentEmbedding(path="a.md", vector=[1.0, 0.0, 0.0]))
    embedder = FakeEmbedder(
        failure=EmbeddingFailure(FailureKind.AUTHENTICATION, "bad key")
    )
    engine = SemanticSearchEngine(store, embedder)

    assert engine.score("editable root", version=10) == []
    assert store.state is StoreState.UNHEALTHY
    assert not store.is_ready()

    assert engine.score("another query", version=10) == []
    assert embedder.calls == ["editable root"]


def test_successful_query_marks_store_healthy() -> None:
    store = _store(DocumentEmbedding(path="a.md", vector=[1.0, 0.0, 0.0]))
    engine = SemanticSearchEngine(store, FakeEmbedder())

    engine.score("editable root", version=10)

    assert store.state is StoreState.HEALTHY


def test_missing_embedder_returns_empty() -> None:
    store = _store(DocumentEmbedding(path="a.md", vector=[1.0, 0.0, 0.0]))

    assert SemanticSearchEngine(store, None).score("editable root", version=10) == []


class _BrokenEmbedder:
    def embed_query(self, query: str) -> list[float]:
        raise RuntimeError("socket closed")


def test_unexpected_embedder_error_is_treated_as_transient() -> None:
    store = _store(DocumentEmbedding(path="a.md", vector=[1.0, 0.0, 0.0]))
    engine = SemanticSearchEngine(store, _BrokenEmbedder())

    assert engine.score("editable root", version=10) == []
    status = store.status()
    assert status.state is StoreState.UNHEALTHY
    assert status.failure == "transient: socket closed"
