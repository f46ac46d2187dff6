"""
In-memory store of precomputed document embeddings.

The store is filled from a snapshot before the first query and only read on
the query path. Provider health is tracked here: a single embedding failure
moves the store to UNHEALTHY for the rest of the process and semantic search
stays off from then on, while lexical search keeps working.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from ..config import DEFAULT_VERSION
from ..embeddings import EmbeddingFailure, EmbeddingProvider, Embedder
from ..search.filters import is_candidate
from .base import DocumentEmbedding, StoreState, StoreStatus
from .snapshot import SnapshotError, read_snapshot, write_snapshot

logger = logging.getLogger(__name__)


class DocumentVectorStore:
    """Path-keyed document embeddings with a one-way health flag."""

    def __init__(self, *, fallback_version: int = DEFAULT_VERSION) -> None:
        self._embeddings: dict[str, DocumentEmbedding] = {}
        self._state = StoreState.UNINITIALIZED
        self._failure: str | None = None
        self._fallback_version = fallback_version
        self._lock = threading.Lock()

    @property
    def state(self) -> StoreState:
        return self._state

    def __len__(self) -> int:
        return len(self._embeddings)

    def load(self, snapshot_path: str) -> int:
        """
        Merge a snapshot into the store and return the number of records read.

        A missing, empty or unparsable snapshot loads nothing and returns 0;
        semantic search is then degraded rather than the process failing.
        """
        if not Path(snapshot_path).is_file():
            logger.warning("Embeddings snapshot not found at %s", snapshot_path)
            self._mark_loaded()
            return 0

        try:
            embeddings = read_snapshot(snapshot_path)
        except (OSError, SnapshotError) as exc:
            logger.error("Could not load embeddings from %s: %s", snapshot_path, exc)
            self._mark_loaded()
            return 0

        if not embeddings:
            logger.warning("No embeddings found in %s", snapshot_path)
            self._mark_loaded()
            return 0

        loaded = 0
        with self._lock:
            for embedding in embeddings:
                if self._accepts(embedding):
                    self._embeddings[embedding.path] = embedding
                    loaded += 1
        self._mark_loaded()
        logger.info("Loaded %d embeddings from %s", loaded, snapshot_path)
        return loaded

    def _accepts(self, embedding: DocumentEmbedding) -> bool:
        if not embedding.vector:
            logger.warning("Skipping %s: empty embedding vector", embedding.path)
            return False
        dimension = self.dimension
        if dimension is not None and len(embedding.vector) != dimension:
            logger.warning(
                "Skipping %s: vector has %d dimensions, store uses %d",
                embedding.path,
                len(embedding.vector),
                dimension,
            )
            return False
        return True

    def _mark_loaded(self) -> None:
        if self._state is StoreState.UNINITIALIZED:
            self._state = StoreState.LOADED

    @property
    def dimension(self) -> int | None:
        for embedding in self._embeddings.values():
            return len(embedding.vector)
        return None

    def add(self, embedding: DocumentEmbedding) -> bool:
        """Insert or replace one embedding. Return False if it was rejected."""
        with self._lock:
            if not self._accepts(embedding):
                return False
            self._embeddings[embedding.path] = embedding
        self._mark_loaded()
        return True

    def index_document(
        self,
        path: str,
        content: str,
        provider: EmbeddingProvider,
        *,
        version: int | None = None,
    ) -> bool:
        """Embed one document and add it. Failures mark the store unhealthy."""
        if self._state is StoreState.UNHEALTHY:
            return False
        try:
            vector = provider.embed_texts([content])[0]
        except EmbeddingFailure as exc:
            self.mark_unhealthy(str(exc))
            return False
        label = f"v{version}" if version is not None else "common"
        logger.info("Indexed %s (%s) with %d dimensions", path, label, len(vector))
        return self.add(
            DocumentEmbedding(path=path, vector=vector, version=version, content=content)
        )

    def export(self, snapshot_path: str) -> int:
        """Write every held embedding to a snapshot file."""
        with self._lock:
            embeddings = sorted(self._embeddings.values(), key=lambda emb: emb.path)
        count = write_snapshot(snapshot_path, embeddings)
        logger.info("Exported %d embeddings to %s", count, snapshot_path)
        return count

    def is_ready(self) -> bool:
        return self._state is not StoreState.UNHEALTHY and len(self._embeddings) > 0

    def mark_healthy(self) -> None:
        """Record a successful provider call. Never revives an unhealthy store."""
        if self._state in (StoreState.UNINITIALIZED, StoreState.LOADED):
            self._state = StoreState.HEALTHY

    def mark_unhealthy(self, reason: str) -> None:
        if self._state is StoreState.UNHEALTHY:
            return
        self._state = StoreState.UNHEALTHY
        self._failure = reason
        logger.warning("Disabling semantic search for this session: %s", reason)

    def highest_version(self) -> int:
        versions = [
            emb.version for emb in self._embeddings.values() if emb.version is not None
        ]
        if versions:
            return max(versions)
        return self._fallback_version

    def candidates(self, version: int) -> list[DocumentEmbedding]:
        with self._lock:
            return [
                emb
                for emb in self._embeddings.values()
                if is_candidate(emb.version, version)
            ]

    def status(self) -> StoreStatus:
        return StoreStatus(
            state=self._state,
            document_count=len(self._embeddings),
            highest_version=self.highest_version(),
            failure=self._failure,
        )

    def check_connectivity(self, embedder: Embedder) -> StoreStatus:
        """Probe the provider once; a failure disables semantic search."""
        if self._state is StoreState.UNHEALTHY:
            return self.status()
        try:
            embedder.embed_query("test connection")
        except EmbeddingFailure as exc:
            self.mark_unhealthy(str(exc))
        else:
            self.mark_healthy()
            logger.info("Embedding provider reachable; semantic search available")
        return self.status()


def initialize_store(
    snapshot_path: str,
    embedder: Embedder | None,
    *,
    probe: bool = False,
    fallback_version: int = DEFAULT_VERSION,
) -> tuple[DocumentVectorStore, StoreStatus]:
    """
    Load the snapshot and settle provider health before serving queries.

    Without an embedder there is no way to vectorize queries, so the store
    is marked unhealthy and only lexical search runs.
    """
    store = DocumentVectorStore(fallback_version=fallback_version)
    store.load(snapshot_path)
    if embedder is None:
        store.mark_unhealthy("no embedding provider configured")
    elif probe:
        store.check_connectivity(embedder)
    return store, store.status()
