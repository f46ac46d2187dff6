"""
Offline generation of the document embeddings snapshot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..corpus import Corpus
from ..embeddings import EmbeddingProvider
from ..storage import DocumentEmbedding, write_snapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnapshotResult:
    """Summary output for a snapshot build."""

    output_path: str
    files_found: int
    embeddings_written: int
    skipped_files: int
    versions: tuple[int, ...]


class SnapshotBuilder:
    """Embed every corpus file and persist the vectors as a snapshot."""

    def __init__(self, corpus: Corpus, embedding_provider: EmbeddingProvider) -> None:
        self.corpus = corpus
        self.embedding_provider = embedding_provider

    def build(self, output_path: str) -> SnapshotResult:
        documents = list(self.corpus.iter_documents())
        logger.info("Found %d files to embed under %s", len(documents), self.corpus.root)

        readable: list[tuple[str, int | None, str]] = []
        skipped_files = 0
        for document in documents:
            text = self.corpus.read_text(document.path)
            if text is None or not text.strip():
                skipped_files += 1
                continue
            readable.append((document.path, document.version, text))

        # EmbeddingFailure propagates; no partial snapshot is written.
        vectors = self.embedding_provider.embed_texts([text for _, _, text in readable])

        embeddings = [
            DocumentEmbedding(path=path, vector=vector, version=version, content=text)
            for (path, version, text), vector in zip(readable, vectors)
        ]
        written = write_snapshot(output_path, embeddings)
        versions = tuple(
            sorted({emb.version for emb in embeddings if emb.version is not None})
        )
        logger.info("Wrote %d embeddings to %s", written, output_path)

        return SnapshotResult(
            output_path=output_path,
            files_found=len(documents),
            embeddings_written=written,
            skipped_files=skipped_files,
            versions=versions,
        )
