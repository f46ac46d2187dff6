"""Snapshot generation for semantic search."""

from .pipeline import SnapshotBuilder, SnapshotResult

__all__ = ["SnapshotBuilder", "SnapshotResult"]
