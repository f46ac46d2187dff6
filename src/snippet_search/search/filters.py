"""
Version filter shared by the lexical and semantic scorers.
"""

from __future__ import annotations


def is_candidate(document_version: int | None, resolved_version: int) -> bool:
    """Common documents match every version; tagged ones only their own."""
    return document_version is None or document_version == resolved_version


def resolve_version(requested: int | None, highest_version: int) -> int:
    """Return the requested version, defaulting to the newest indexed one."""
    if requested is None:
        return highest_version
    return requested
