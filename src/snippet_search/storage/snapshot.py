"""
JSON snapshot format for precomputed document embeddings.

A snapshot is a JSON array of ``{path, content, vector, version}`` records.
Records in the PascalCase layout (``FileName``, ``Content``, ``Embedding``,
``Version``) load the same way.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, BaseModel, Field, TypeAdapter, ValidationError

from .base import DocumentEmbedding


class SnapshotError(ValueError):
    """Raised when a snapshot file cannot be parsed."""


class SnapshotRecord(BaseModel):
    path: str = Field(validation_alias=AliasChoices("path", "FileName", "fileName"))
    content: str = Field(
        default="", validation_alias=AliasChoices("content", "Content")
    )
    vector: list[float] = Field(
        validation_alias=AliasChoices("vector", "embedding", "Embedding")
    )
    version: int | None = Field(
        default=None, validation_alias=AliasChoices("version", "Version")
    )

    def to_embedding(self) -> DocumentEmbedding:
        return DocumentEmbedding(
            path=self.path.replace("\\", "/"),
            vector=list(self.vector),
            version=self.version,
            content=self.content,
        )


_RECORDS = TypeAdapter(list[SnapshotRecord])


def read_snapshot(snapshot_path: str) -> list[DocumentEmbedding]:
    """Parse a snapshot file. An empty file yields an empty list."""
    raw = Path(snapshot_path).read_bytes()
    if not raw.strip():
        return []
    try:
        records = _RECORDS.validate_json(raw)
    except ValidationError as exc:
        raise SnapshotError(f"Invalid embeddings snapshot {snapshot_path}: {exc}") from exc
    return [record.to_embedding() for record in records]


def write_snapshot(snapshot_path: str, embeddings: list[DocumentEmbedding]) -> int:
    """Write embeddings as a snapshot, creating parent folders. Return count."""
    path = Path(snapshot_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    records = [
        SnapshotRecord(
            path=emb.path,
            content=emb.content,
            vector=emb.vector,
            version=emb.version,
        )
        for emb in embeddings
    ]
    path.write_bytes(_RECORDS.dump_json(records, indent=2))
    return len(records)
