"""GitHub-backed repository listing, content fetching and output store."""

from __future__ import annotations

import base64
import binascii
import logging
import threading
from typing import Any

from ..exceptions import FetchError, GitHubError, NotFoundError, PublishError
from .client import GitHubClient

logger = logging.getLogger(__name__)


def _decode_content(payload: dict[str, Any], path: str) -> bytes:
    if payload.get("type", "file") != "file" or "content" not in payload:
        raise FetchError(f"Not a file: {path}")
    if payload.get("encoding", "base64") != "base64":
        raise FetchError(f"Unsupported encoding for {path}: {payload.get('encoding')}")
    try:
        return base64.b64decode(payload["content"])
    except (binascii.Error, TypeError) as e:
        raise FetchError(f"Malformed content for {path}: {e}") from e


class GitHubRepository:
    """Source tree of a GitHub repository at a given ref."""

    def __init__(self, client: GitHubClient, owner: str, repo: str, ref: str = "main") -> None:
        self.client = client
        self.owner = owner
        self.repo = repo
        self.ref = ref

    def list(self, ref: str) -> list[dict[str, Any]]:
        try:
            payload = self.client.get_tree(self.owner, self.repo, ref)
        except GitHubError as e:
            raise FetchError(f"Unable to list {self.owner}/{self.repo}@{ref}: {e}") from e

        if payload.get("truncated"):
            logger.warning(
                f"Tree listing for {self.owner}/{self.repo}@{ref} was truncated by GitHub"
            )
        tree = payload.get("tree")
        return tree if isinstance(tree, list) else []

    def get_file(self, path: str) -> bytes:
        try:
            payload = self.client.get_contents(self.owner, self.repo, path, self.ref)
        except NotFoundError:
            raise
        except GitHubError as e:
            raise FetchError(f"Unable to fetch {path}: {e}") from e
        return _decode_content(payload, path)


class GitHubOutputStore:
    """Output tree stored as files on a branch of a GitHub repository.

    Blob SHAs seen by ``exists`` and ``read`` are remembered so that the
    following ``upsert`` can address the update without another lookup.
    """

    def __init__(self, client: GitHubClient, owner: str, repo: str, branch: str = "main") -> None:
        self.client = client
        self.owner = owner
        self.repo = repo
        self.branch = branch
        self._shas: dict[str, str] = {}
        self._lock = threading.Lock()

    def _fetch(self, path: str) -> dict[str, Any] | None:
        try:
            payload = self.client.get_contents(self.owner, self.repo, path, self.branch)
        except NotFoundError:
            with self._lock:
                self._shas.pop(path, None)
            return None
        sha = payload.get("sha")
        if sha:
            with self._lock:
                self._shas[path] = sha
        return payload

    def exists(self, path: str) -> bool:
        return self._fetch(path) is not None

    def read(self, path: str) -> str:
        payload = self._fetch(path)
        if payload is None:
            raise NotFoundError(f"Not found in output tree: {path}")
        return _decode_content(payload, path).decode("utf-8")

    def upsert(self, path: str, content: str, message: str) -> str:
        with self._lock:
            sha = self._shas.get(path)
        if sha is None:
            payload = self._fetch(path)
            sha = payload.get("sha") if payload else None

        result = self.client.put_contents(
            self.owner,
            self.repo,
            path,
            content_b64=base64.b64encode(content.encode("utf-8")).decode("ascii"),
            message=message,
            branch=self.branch,
            sha=sha,
        )

        new_sha = (result.get("content") or {}).get("sha")
        with self._lock:
            if new_sha:
                self._shas[path] = new_sha
            else:
                self._shas.pop(path, None)

        revision = (result.get("commit") or {}).get("sha")
        if not revision:
            raise PublishError(path, "GitHub response did not include a commit SHA")
        return revision
