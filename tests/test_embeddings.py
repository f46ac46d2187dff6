"""Tests for the embedding provider."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

import pytest
from google.genai import errors as genai_errors

from snippet_search.embeddings import (
    EmbeddingFailure,
    EmbeddingProvider,
    FailureKind,
    classify_status,
)


# ---------------------------------------------------------------------------
# Mock helpers
# ---------------------------------------------------------------------------


@dataclass
class _FakeEmbedding:
    values: list[float]


@dataclass
class _FakeEmbedResult:
    embeddings: list[_FakeEmbedding]


class _FakeModels:
    """Records calls and returns deterministic embeddings."""

    def __init__(self, error: Exception | None = None) -> None:
        self.calls: list[dict[str, Any]] = []
        self.error = error

    def embed_content(
        self, *, model: str, contents: list[str], config: dict
    ) -> _FakeEmbedResult:
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        dim = config.get("output_dimensionality", 768)
        return _FakeEmbedResult(
            embeddings=[
                _FakeEmbedding(values=[float(i + 1)] * dim) for i in range(len(contents))
            ]
        )


class _FakeClient:
    def __init__(self, error: Exception | None = None) -> None:
        self.models = _FakeModels(error)


def _api_error(cls: type[genai_errors.APIError], code: int) -> genai_errors.APIError:
    return cls(code, {"error": {"code": code, "message": f"status {code}"}})


# ---------------------------------------------------------------------------
# Unit tests (mock-based, no API key needed)
# ---------------------------------------------------------------------------


def test_embed_texts_returns_correct_count() -> None:
    client = _FakeClient()
    provider = EmbeddingProvider(client=client, dim=4, batch_size=50)

    embeddings = provider.embed_texts(["hello", "world"])

    assert len(embeddings) == 2
    assert len(embeddings[0]) == 4


def test_embed_query_uses_query_task_type() -> None:
    client = _FakeClient()
    provider = EmbeddingProvider(client=client, dim=4)

    result = provider.embed_query("editable root")

    assert len(result) == 4
    call = client.models.calls[0]
    assert call["config"]["task_type"] == "RETRIEVAL_QUERY"
    assert call["contents"] == ["editable root"]


def test_embed_texts_batching() -> None:
    client = _FakeClient()
    provider = EmbeddingProvider(client=client, dim=4, batch_size=3)

    texts = [f"text_{i}" for i in range(7)]
    embeddings = provider.embed_texts(texts)

    assert len(embeddings) == 7
    # 7 texts with batch_size=3 → 3 API calls (3+3+1)
    assert [len(call["contents"]) for call in client.models.calls] == [3, 3, 1]
    assert client.models.calls[0]["config"]["task_type"] == "RETRIEVAL_DOCUMENT"


def test_env_overrides(monkeypatch) -> None:
    client = _FakeClient()
    monkeypatch.setenv("SNIPPET_SEARCH_EMBEDDING_MODEL", "custom-model-001")
    monkeypatch.setenv("SNIPPET_SEARCH_EMBEDDING_DIM", "256")
    monkeypatch.setenv("SNIPPET_SEARCH_EMBEDDING_BATCH_SIZE", "10")

    provider = EmbeddingProvider(client=client)

    assert provider.model == "custom-model-001"
    assert provider.dim == 256
    assert provider.batch_size == 10

    provider.embed_texts(["test"])
    call = client.models.calls[0]
    assert call["model"] == "custom-model-001"
    assert call["config"]["output_dimensionality"] == 256


def test_missing_api_key_raises(monkeypatch) -> None:
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    with pytest.raises(ValueError, match="GOOGLE_API_KEY"):
        EmbeddingProvider(api_key=None, client=None)


@pytest.mark.parametrize(
    ("code", "kind"),
    [
        (401, FailureKind.AUTHENTICATION),
        (403, FailureKind.AUTHENTICATION),
        (404, FailureKind.DEPLOYMENT_NOT_FOUND),
        (400, FailureKind.MALFORMED_REQUEST),
        (429, FailureKind.TRANSIENT),
        (None, FailureKind.TRANSIENT),
    ],
)
def test_classify_status(code: int | None, kind: FailureKind) -> None:
    assert classify_status(code) is kind


def test_client_error_is_classified() -> None:
    client = _FakeClient(error=_api_error(genai_errors.ClientError, 404))
    provider = EmbeddingProvider(client=client, dim=4)

    with pytest.raises(EmbeddingFailure) as excinfo:
        provider.embed_query("editable root")

    assert excinfo.value.kind is FailureKind.DEPLOYMENT_NOT_FOUND


def test_server_error_is_transient() -> None:
    client = _FakeClient(error=_api_error(genai_errors.ServerError, 503))
    provider = EmbeddingProvider(client=client, dim=4)

    with pytest.raises(EmbeddingFailure) as excinfo:
        provider.embed_query("editable root")

    assert excinfo.value.kind is FailureKind.TRANSIENT


def test_network_error_is_transient() -> None:
    client = _FakeClient(error=ConnectionError("connection refused"))
    provider = EmbeddingProvider(client=client, dim=4)

    with pytest.raises(EmbeddingFailure) as excinfo:
        provider.embed_query("editable root")

    assert excinfo.value.kind is FailureKind.TRANSIENT
    assert "connection refused" in excinfo.value.message


def test_empty_response_is_a_failure() -> None:
    class _EmptyModels(_FakeModels):
        def embed_content(self, *, model: str, contents: list[str], config: dict):
            return _FakeEmbedResult(embeddings=[])

    client = _FakeClient()
    client.models = _EmptyModels()
    provider = EmbeddingProvider(client=client, dim=4)

    with pytest.raises(EmbeddingFailure):
        provider.embed_query("editable root")


# ---------------------------------------------------------------------------
# Real API integration test (skipped unless GOOGLE_API_KEY is set)
# ---------------------------------------------------------------------------


@pytest.mark.skipif(
    not os.getenv("GOOGLE_API_KEY"),
    reason="GOOGLE_API_KEY not set, skipping real embedding test",
)
def test_real_embedding_api() -> None:
    provider = EmbeddingProvider(dim=128)

    embeddings = provider.embed_texts(["Editable root business object.", "Read only list."])

    assert len(embeddings) == 2
    assert len(embeddings[0]) == 128

    query_emb = provider.embed_query("editable root")
    assert len(query_emb) == 128
