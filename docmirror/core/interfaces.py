"""Contracts for the collaborators the pipeline consumes."""

from __future__ import annotations

from typing import Any, Protocol


class RepositoryLister(Protocol):
    def list(self, ref: str) -> list[dict[str, Any]]:
        """Return a recursive listing of ``{"path", "type"}`` entries."""
        ...


class ContentFetcher(Protocol):
    def get_file(self, path: str) -> str | bytes:
        """Return file content; raise NotFoundError if the path is absent."""
        ...


class AssetFetcher(Protocol):
    def get_url(self, url: str) -> str:
        """Return the text body of ``url``."""
        ...


class OutputStore(Protocol):
    def exists(self, path: str) -> bool:
        ...

    def read(self, path: str) -> str:
        ...

    def upsert(self, path: str, content: str, message: str) -> str:
        """Create or update ``path`` and return the new revision id."""
        ...
