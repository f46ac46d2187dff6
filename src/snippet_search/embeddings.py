"""
Embedding provider for vector-based semantic search.

Wraps the Google GenAI embedding API for batch and single-query embedding
with configurable model, dimensions, and batch size. Provider errors are
reported as EmbeddingFailure with a diagnostic FailureKind; callers decide
what a failure means for the session.
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from typing import Any, Protocol

from google.genai import Client as GenAIClient
from google.genai import errors as genai_errors

logger = logging.getLogger(__name__)


_DEFAULT_MODEL = "gemini-embedding-001"
_DEFAULT_DIM = 768
_DEFAULT_BATCH_SIZE = 50


class FailureKind(str, Enum):
    AUTHENTICATION = "authentication"
    DEPLOYMENT_NOT_FOUND = "deployment_not_found"
    MALFORMED_REQUEST = "malformed_request"
    TRANSIENT = "transient"


class EmbeddingFailure(Exception):
    """Raised when the embedding provider cannot produce a vector."""

    def __init__(self, kind: FailureKind, message: str) -> None:
        super().__init__(f"{kind.value}: {message}")
        self.kind = kind
        self.message = message


def classify_status(code: int | None) -> FailureKind:
    """Map an HTTP status code from the provider to a failure kind."""
    if code in (401, 403):
        return FailureKind.AUTHENTICATION
    if code == 404:
        return FailureKind.DEPLOYMENT_NOT_FOUND
    if code == 400:
        return FailureKind.MALFORMED_REQUEST
    return FailureKind.TRANSIENT


class Embedder(Protocol):
    """The one network call the query path needs."""

    def embed_query(self, query: str) -> list[float]:
        """Return the embedding vector for *query* or raise EmbeddingFailure."""


class EmbeddingProvider:
    """Generate text embeddings via Google GenAI."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        dim: int | None = None,
        batch_size: int | None = None,
        client: Any | None = None,
    ) -> None:
        self.model = model or os.getenv(
            "SNIPPET_SEARCH_EMBEDDING_MODEL", _DEFAULT_MODEL
        )
        self.dim = dim or int(
            os.getenv("SNIPPET_SEARCH_EMBEDDING_DIM", str(_DEFAULT_DIM))
        )
        self.batch_size = batch_size or int(
            os.getenv("SNIPPET_SEARCH_EMBEDDING_BATCH_SIZE", str(_DEFAULT_BATCH_SIZE))
        )

        if client is not None:
            self._client = client
        else:
            resolved_key = api_key or os.getenv("GOOGLE_API_KEY")
            if resolved_key is None:
                raise ValueError(
                    "GOOGLE_API_KEY not found. "
                    "Provide api_key or set the environment variable."
                )
            self._client = GenAIClient(api_key=resolved_key)

    def _embed(self, contents: list[str], task_type: str) -> list[list[float]]:
        try:
            result = self._client.models.embed_content(
                model=self.model,
                contents=contents,
                config={
                    "task_type": task_type,
                    "output_dimensionality": self.dim,
                },
            )
        except genai_errors.APIError as exc:
            kind = classify_status(exc.code)
            logger.error(
                "Embedding request to model %s failed (%s, status %s): %s",
                self.model,
                kind.value,
                exc.code,
                exc.message,
            )
            raise EmbeddingFailure(kind, str(exc.message or exc)) from exc
        except Exception as exc:
            logger.error(
                "Unexpected %s while embedding with model %s: %s",
                type(exc).__name__,
                self.model,
                exc,
            )
            raise EmbeddingFailure(FailureKind.TRANSIENT, str(exc)) from exc

        embeddings = result.embeddings or []
        vectors = [list(emb.values or []) for emb in embeddings]
        if len(vectors) != len(contents) or any(not vector for vector in vectors):
            raise EmbeddingFailure(
                FailureKind.TRANSIENT,
                f"Provider returned {len(vectors)} embeddings for {len(contents)} inputs",
            )
        return vectors

    def embed_texts(
        self,
        texts: list[str],
        *,
        task_type: str = "RETRIEVAL_DOCUMENT",
    ) -> list[list[float]]:
        """Embed a list of texts in batches.

        Returns a list of embedding vectors in the same order as *texts*.
        """
        all_embeddings: list[list[float]] = []
        for start in range(0, len(texts), self.batch_size):
            batch = texts[start : start + self.batch_size]
            all_embeddings.extend(self._embed(batch, task_type))
        return all_embeddings

    def embed_query(self, query: str) -> list[float]:
        """Embed a single query text for retrieval."""
        vector = self._embed([query], "RETRIEVAL_QUERY")[0]
        logger.debug("Generated query embedding with %d dimensions", len(vector))
        return vector
