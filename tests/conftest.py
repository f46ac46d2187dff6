from __future__ import annotations

from pathlib import Path

import pytest

from snippet_search.embeddings import EmbeddingFailure
from snippet_search.storage import DocumentEmbedding, write_snapshot


class FakeEmbedder:
    """Deterministic embedder; looks vectors up by exact text."""

    def __init__(
        self,
        vectors: dict[str, list[float]] | None = None,
        *,
        default: list[float] | None = None,
        failure: EmbeddingFailure | None = None,
    ) -> None:
        self.vectors = vectors or {}
        self.default = default or [1.0, 0.0, 0.0]
        self.failure = failure
        self.calls: list[str] = []

    def embed_query(self, query: str) -> list[float]:
        self.calls.append(query)
        if self.failure is not None:
            raise self.failure
        return list(self.vectors.get(query, self.default))

    def embed_texts(
        self, texts: list[str], *, task_type: str = "RETRIEVAL_DOCUMENT"
    ) -> list[list[float]]:
        self.calls.extend(texts)
        if self.failure is not None:
            raise self.failure
        return [list(self.vectors.get(text, self.default)) for text in texts]


def write_files(root: Path, files: dict[str, str]) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    for relative_path, content in files.items():
        path = root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


@pytest.fixture()
def versioned_corpus(tmp_path: Path) -> Path:
    """Corpus with common docs plus v9 and v10 specific samples."""
    return write_files(
        tmp_path / "corpus",
        {
            "Glossary.md": "An editable root object is a business object with its own identity.",
            "v9/EditableRoot.cs": "public class Customer : BusinessBase<Customer> // editable root for v9",
            "v10/EditableRoot.cs": "public class Customer : BusinessBase<Customer> // editable root for v10",
            "v10/ReadOnlyList.md": "A read only list holds child objects.",
            "notes.bin": "editable root binary blob",
        },
    )


@pytest.fixture()
def snapshot_path(tmp_path: Path) -> Path:
    """Snapshot matching versioned_corpus with 3-dimensional vectors."""
    path = tmp_path / "embeddings.json"
    write_snapshot(
        str(path),
        [
            DocumentEmbedding(path="Glossary.md", vector=[0.9, 0.1, 0.0]),
            DocumentEmbedding(path="v9/EditableRoot.cs", vector=[1.0, 0.0, 0.0], version=9),
            DocumentEmbedding(path="v10/EditableRoot.cs", vector=[1.0, 0.05, 0.0], version=10),
            DocumentEmbedding(path="v10/ReadOnlyList.md", vector=[0.0, 1.0, 0.0], version=10),
        ],
    )
    return path
