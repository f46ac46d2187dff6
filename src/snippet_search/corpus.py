"""
Corpus access for versioned documentation and code-sample files.

Files live under a root directory. A leading ``v<digits>/`` path segment tags a
file with that version; files outside such a segment are common to every
version.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from .models import ErrorCode, ErrorResult
from .search.filters import is_candidate

logger = logging.getLogger(__name__)


SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".cs",
        ".md",
        ".txt",
        ".rst",
        ".py",
        ".vb",
        ".razor",
        ".cshtml",
        ".xaml",
        ".json",
        ".xml",
    }
)

_VERSION_SEGMENT_RE = re.compile(r"^v(\d+)/")
_DRIVE_PREFIX_RE = re.compile(r"^[A-Za-z]:")


class CorpusNotFoundError(ValueError):
    """Raised when the corpus root is missing or not a directory."""


class EmptyCorpusError(ValueError):
    """Raised when the corpus root holds no supported files."""


class FetchError(Exception):
    """Raised when a requested corpus file cannot be returned."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def to_result(self) -> ErrorResult:
        return ErrorResult(error=self.code, message=self.message)


@dataclass(frozen=True)
class CorpusDocument:
    """A corpus file identified by its forward-slash relative path."""

    path: str
    version: int | None


def normalize_relative_path(path: str) -> str:
    """Return *path* with forward-slash separators."""
    return path.replace("\\", "/")


def version_from_path(relative_path: str) -> int | None:
    """Return the version tag encoded in the leading path segment, if any."""
    match = _VERSION_SEGMENT_RE.match(normalize_relative_path(relative_path))
    if match is None:
        return None
    return int(match.group(1))


def is_supported_file(file_name: str) -> bool:
    return Path(file_name).suffix.lower() in SUPPORTED_EXTENSIONS


class Corpus:
    """Enumerate and read files below a corpus root."""

    def __init__(self, root: str) -> None:
        resolved = Path(root).expanduser().resolve()
        if not resolved.exists() or not resolved.is_dir():
            raise CorpusNotFoundError(f"Corpus path does not exist: {resolved}")
        self.root = resolved

    def iter_documents(self) -> Iterator[CorpusDocument]:
        """
        Yield every supported file below the root, sorted by path.

        Raises CorpusNotFoundError if the root has gone away since opening.
        """
        if not self.root.is_dir():
            raise CorpusNotFoundError(f"Corpus path does not exist: {self.root}")
        paths: list[str] = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames.sort()
            for filename in filenames:
                if not is_supported_file(filename):
                    continue
                full_path = os.path.join(dirpath, filename)
                paths.append(
                    normalize_relative_path(os.path.relpath(full_path, self.root))
                )
        for path in sorted(paths):
            yield CorpusDocument(path=path, version=version_from_path(path))

    def candidates(self, version: int) -> list[CorpusDocument]:
        """Return documents that are common or tagged with *version*."""
        return [
            doc for doc in self.iter_documents() if is_candidate(doc.version, version)
        ]

    def has_documents(self) -> bool:
        return next(self.iter_documents(), None) is not None

    def read_text(self, path: str) -> str | None:
        """Read a corpus file; unreadable files are logged and skipped."""
        full_path = self.root / path
        try:
            return full_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping unreadable file %s: %s", path, exc)
            return None

    def fetch(self, file_name: str) -> str:
        """
        Return the raw text of a corpus file requested by relative name.

        Raises FetchError for empty names, path traversal attempts, absolute
        names, and files that do not exist.
        """
        if file_name is None or not file_name.strip():
            raise FetchError("InvalidFileName", "File name cannot be empty or null")

        normalized = normalize_relative_path(file_name.strip())
        if (
            ".." in normalized.split("/")
            or normalized.startswith("/")
            or _DRIVE_PREFIX_RE.match(normalized)
        ):
            raise FetchError(
                "InvalidFileName",
                f"Invalid file name: {file_name}. Only relative file names are allowed.",
            )

        if not self.root.is_dir():
            raise FetchError(
                "PathNotFound", f"Corpus path does not exist: {self.root}"
            )

        full_path = (self.root / normalized).resolve()
        if not full_path.is_relative_to(self.root):
            raise FetchError(
                "InvalidFileName",
                f"Invalid file name: {file_name}. Only relative file names are allowed.",
            )
        if not full_path.is_file():
            raise FetchError(
                "FileNotFound", f"File '{file_name}' not found in corpus directory"
            )

        try:
            return full_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise FetchError("FetchFailed", f"Fetch operation failed: {exc}") from exc


def open_corpus(root: str) -> Corpus:
    """Open a corpus and require at least one supported file."""
    corpus = Corpus(root)
    if not corpus.has_documents():
        raise EmptyCorpusError(
            f"Corpus path '{corpus.root}' does not contain any supported files."
        )
    return corpus
