"""Embedding storage for semantic search."""

from .base import DocumentEmbedding, EmbeddingStore, StoreState, StoreStatus
from .snapshot import SnapshotError, read_snapshot, write_snapshot
from .vector_store import DocumentVectorStore, initialize_store

__all__ = [
    "DocumentEmbedding",
    "EmbeddingStore",
    "StoreState",
    "StoreStatus",
    "SnapshotError",
    "read_snapshot",
    "write_snapshot",
    "DocumentVectorStore",
    "initialize_store",
]
