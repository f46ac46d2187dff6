"""
Configuration helpers for locating the corpus and the embeddings snapshot.
"""

from __future__ import annotations

import os
from pathlib import Path


DEFAULT_CORPUS_PATH = "./examples"
ENV_CORPUS_PATH = "SNIPPET_SEARCH_CORPUS_PATH"

DEFAULT_EMBEDDINGS_PATH = "./embeddings.json"
ENV_EMBEDDINGS_PATH = "SNIPPET_SEARCH_EMBEDDINGS_PATH"

ENV_TOP_K = "SNIPPET_SEARCH_TOP_K"
ENV_MIN_SIMILARITY = "SNIPPET_SEARCH_MIN_SIMILARITY"

# Version assumed for queries when no loaded embedding carries a version tag.
DEFAULT_VERSION = 10
DEFAULT_TOP_K = 10
DEFAULT_MIN_SIMILARITY = 0.5


def resolve_corpus_path(override_path: str | None = None) -> str:
    """
    Resolve the corpus root from CLI override, env var, or default.

    Precedence:
    1) explicit override_path
    2) SNIPPET_SEARCH_CORPUS_PATH
    3) default path
    """
    raw_path = override_path or os.getenv(ENV_CORPUS_PATH) or DEFAULT_CORPUS_PATH
    return str(Path(raw_path).expanduser().resolve())


def resolve_embeddings_path(override_path: str | None = None) -> str:
    """
    Resolve the embeddings snapshot path from CLI override, env var, or default.

    The file is not required to exist: a missing snapshot only disables
    semantic search.
    """
    raw_path = (
        override_path or os.getenv(ENV_EMBEDDINGS_PATH) or DEFAULT_EMBEDDINGS_PATH
    )
    return str(Path(raw_path).expanduser().resolve())


def resolve_top_k(override: int | None = None) -> int:
    if override is not None:
        return max(override, 1)
    return max(int(os.getenv(ENV_TOP_K, str(DEFAULT_TOP_K))), 1)


def resolve_min_similarity(override: float | None = None) -> float:
    if override is not None:
        return override
    return float(os.getenv(ENV_MIN_SIMILARITY, str(DEFAULT_MIN_SIMILARITY)))
