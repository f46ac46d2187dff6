"""
Storage interfaces and data models for document embeddings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol


@dataclass(frozen=True)
class DocumentEmbedding:
    """A precomputed embedding for one corpus file."""

    path: str
    vector: list[float] = field(repr=False)
    version: int | None = None
    content: str = field(default="", repr=False)


class StoreState(str, Enum):
    """Lifecycle of a document vector store."""

    UNINITIALIZED = "uninitialized"
    LOADED = "loaded"
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass(frozen=True)
class StoreStatus:
    """Point-in-time view of store health, returned by initialization."""

    state: StoreState
    document_count: int
    highest_version: int
    failure: str | None = None

    @property
    def ready(self) -> bool:
        return self.state is not StoreState.UNHEALTHY and self.document_count > 0


class EmbeddingStore(Protocol):
    """Read-side operations used by the semantic scorer and the engine."""

    def is_ready(self) -> bool:
        """True when the provider is healthy and embeddings are loaded."""

    def mark_healthy(self) -> None:
        """Record a successful provider call."""

    def mark_unhealthy(self, reason: str) -> None:
        """Disable semantic search for the rest of the process."""

    def highest_version(self) -> int:
        """Maximum version tag across embeddings, or the fallback version."""

    def candidates(self, version: int) -> list[DocumentEmbedding]:
        """Embeddings that are common or tagged with *version*."""
