from __future__ import annotations

import hashlib
from typing import Any

import pytest

from docmirror.exceptions import FetchError, NotFoundError
from docmirror.settings import Settings


class MemoryStore:
    """Output store keeping files in a dict and recording every write."""

    def __init__(self, files: dict[str, str] | None = None) -> None:
        self.files: dict[str, str] = dict(files or {})
        self.writes: list[tuple[str, str]] = []
        self.fail_paths: set[str] = set()

    def exists(self, path: str) -> bool:
        return path in self.files

    def read(self, path: str) -> str:
        return self.files[path]

    def upsert(self, path: str, content: str, message: str) -> str:
        if path in self.fail_paths:
            raise RuntimeError(f"store rejected {path}")
        self.files[path] = content
        self.writes.append((path, message))
        return hashlib.sha1(f"{len(self.writes)}:{path}".encode()).hexdigest()


class MemoryRepository:
    """Repository lister and content fetcher over a dict of files."""

    def __init__(self, files: dict[str, str | bytes], extra: list[Any] | None = None) -> None:
        self.files = files
        self.extra = extra or []
        self.fetched: list[str] = []
        self.refs: list[str] = []

    def list(self, ref: str) -> list[Any]:
        self.refs.append(ref)
        return [{"path": path, "type": "blob"} for path in self.files] + self.extra

    def get_file(self, path: str) -> str | bytes:
        self.fetched.append(path)
        if path not in self.files:
            raise NotFoundError(f"File not found: {path}")
        return self.files[path]


class StaticAssets:
    def __init__(self, css: str = "body{color:red}", error: Exception | None = None) -> None:
        self.css = css
        self.error = error
        self.urls: list[str] = []

    def get_url(self, url: str) -> str:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.css


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def assets() -> StaticAssets:
    return StaticAssets()


@pytest.fixture
def failing_assets() -> StaticAssets:
    return StaticAssets(error=FetchError("stylesheet unreachable"))


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    for name in ("DOCMIRROR_WORKERS", "DOCMIRROR_OUTPUT_ROOT", "DOCMIRROR_ALWAYS_OVERWRITE"):
        monkeypatch.delenv(name, raising=False)
    return Settings(css_url="https://cdn.example/style.css")
