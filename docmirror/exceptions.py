"""Error taxonomy for the mirror pipeline."""

from __future__ import annotations


class DocMirrorError(Exception):
    """Base class for all docmirror errors."""


class InvalidPathError(DocMirrorError, ValueError):
    """Raised when a source path is not a Markdown path."""


class PathCollisionError(DocMirrorError):
    """Raised when distinct source paths map to the same output path."""

    def __init__(self, collisions: dict[str, list[str]]) -> None:
        self.collisions = collisions
        details = "; ".join(
            f"{output} <- {', '.join(sources)}" for output, sources in collisions.items()
        )
        super().__init__(f"Output path collision: {details}")


class RenderError(DocMirrorError):
    """Raised when Markdown content cannot be rendered."""


class FetchError(DocMirrorError):
    """Raised when a listing, file or asset cannot be fetched."""


class NotFoundError(FetchError):
    """Raised when a fetched path does not exist."""


class PublishError(DocMirrorError):
    """Raised when the output store rejects a write."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"Failed to publish {path}: {message}")


class GitHubError(DocMirrorError):
    """Raised when the GitHub API returns an unexpected response."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
