"""Repository listing filter."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from pydantic import ValidationError

from .models import RepoEntry
from .paths import MARKDOWN_SUFFIX

logger = logging.getLogger(__name__)

FILE_TYPES = frozenset({"file", "blob"})


def _coerce_entry(raw: Any) -> RepoEntry | None:
    if isinstance(raw, RepoEntry):
        return raw
    try:
        return RepoEntry.model_validate(raw)
    except ValidationError:
        return None


def scan_tree(entries: Iterable[Any]) -> list[str]:
    """Return the Markdown file paths of a listing, in listing order.

    Args:
        entries: Listing entries, each a mapping or RepoEntry with
            ``path`` and ``type``

    Returns:
        Paths of file entries ending in ``.md`` (case-sensitive)
    """
    paths: list[str] = []
    for raw in entries:
        entry = _coerce_entry(raw)
        if entry is None:
            logger.debug(f"Skipping malformed listing entry: {raw!r}")
            continue
        if entry.type in FILE_TYPES and entry.path.endswith(MARKDOWN_SUFFIX):
            paths.append(entry.path)

    logger.debug(f"Scanned listing: {len(paths)} Markdown file(s)")
    return paths
