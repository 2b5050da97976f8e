"""Source to output path mapping."""

from __future__ import annotations

from typing import Iterable

from ..exceptions import InvalidPathError, PathCollisionError
from .models import MappedPath

MARKDOWN_SUFFIX = ".md"
HTML_SUFFIX = ".html"
DEFAULT_OUTPUT_ROOT = "html"


def map_path(source_path: str, output_root: str = DEFAULT_OUTPUT_ROOT) -> MappedPath:
    """Map a Markdown source path to its output HTML path and title.

    ``docs/guide.md`` maps to ``html/docs/guide.html`` with title ``guide``.

    Args:
        source_path: Repository-relative path using ``/`` separators
        output_root: Directory the output tree is mirrored under

    Returns:
        Output path and document title

    Raises:
        InvalidPathError: If the path is empty or does not end in ``.md``
    """
    if not isinstance(source_path, str) or not source_path:
        raise InvalidPathError("Source path must be a non-empty string")
    if not source_path.endswith(MARKDOWN_SUFFIX):
        raise InvalidPathError(f"Not a Markdown path: {source_path!r}")

    stem = source_path[: -len(MARKDOWN_SUFFIX)]
    title = stem.rsplit("/", 1)[-1]
    return MappedPath(
        output_path=f"{output_root}/{stem}{HTML_SUFFIX}",
        title=title,
    )


def find_collisions(
    source_paths: Iterable[str],
    output_root: str = DEFAULT_OUTPUT_ROOT,
    *,
    casefold: bool = False,
) -> dict[str, list[str]]:
    """Group distinct source paths claiming the same output path.

    Paths that fail to map are ignored here; the pipeline reports them per item.

    Returns:
        Mapping of output path to the (two or more) source paths claiming it
    """
    claims: dict[str, list[str]] = {}
    for source_path in dict.fromkeys(source_paths):
        try:
            output_path = map_path(source_path, output_root).output_path
        except InvalidPathError:
            continue
        key = output_path.casefold() if casefold else output_path
        claims.setdefault(key, []).append(source_path)

    return {key: sources for key, sources in claims.items() if len(sources) > 1}


def ensure_no_collisions(
    source_paths: Iterable[str],
    output_root: str = DEFAULT_OUTPUT_ROOT,
    *,
    casefold: bool = False,
) -> None:
    """Raise PathCollisionError if any output path is claimed twice."""
    collisions = find_collisions(source_paths, output_root, casefold=casefold)
    if collisions:
        raise PathCollisionError(collisions)
