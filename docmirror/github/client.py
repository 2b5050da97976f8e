"""Minimal GitHub REST client."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from ..exceptions import GitHubError, NotFoundError
from ..retry import http_retrying

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"


def contents_endpoint(owner: str, repo: str, path: str) -> str:
    return f"repos/{owner}/{repo}/contents/{quote(path, safe='/')}"


class GitHubClient:
    """GitHub API client using httpx.

    Transport errors, HTTP 429 and 5xx responses are retried with exponential
    backoff. A 404 raises NotFoundError; any other error status raises
    GitHubError.
    """

    def __init__(
        self,
        token: str | None = None,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        attempts: int = 4,
        backoff: float = 0.5,
    ) -> None:
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.attempts = attempts
        self.backoff = backoff
        self.headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "docmirror",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            self.headers["Authorization"] = f"Bearer {token}"
        self._http = httpx.Client(
            base_url=self.api_url, headers=self.headers, timeout=timeout
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _send(self, method: str, endpoint: str, **kwargs: Any) -> httpx.Response:
        response = self._http.request(method, f"/{endpoint}", **kwargs)
        if response.status_code == 429 or response.status_code >= 500:
            response.raise_for_status()
        return response

    def request(self, method: str, endpoint: str, **kwargs: Any) -> httpx.Response:
        """Send a request and return the successful response.

        Raises:
            NotFoundError: On HTTP 404
            GitHubError: On any other failure once retries are exhausted
        """
        retrying = http_retrying(self.attempts, self.backoff)
        try:
            response = retrying(self._send, method, endpoint, **kwargs)
        except httpx.HTTPStatusError as e:
            raise GitHubError(
                f"{method} {endpoint} failed with HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise GitHubError(f"{method} {endpoint} failed: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(f"Not found: {endpoint}")
        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = None
            detail = body.get("message", "") if isinstance(body, dict) else response.text
            raise GitHubError(
                f"{method} {endpoint} failed with HTTP {response.status_code}: {detail}",
                status_code=response.status_code,
            )
        return response

    def _json(self, response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError as e:
            raise GitHubError(
                f"{response.request.method} {response.request.url.path} returned invalid JSON: {e}",
                status_code=response.status_code,
            ) from e
        if not isinstance(body, dict):
            raise GitHubError(
                f"{response.request.method} {response.request.url.path} returned "
                f"{type(body).__name__}, expected an object",
                status_code=response.status_code,
            )
        return body

    def get_tree(self, owner: str, repo: str, ref: str) -> dict[str, Any]:
        """Return the recursive git tree of ``ref``."""
        response = self.request(
            "GET",
            f"repos/{owner}/{repo}/git/trees/{quote(ref, safe='')}",
            params={"recursive": "1"},
        )
        return self._json(response)

    def get_contents(self, owner: str, repo: str, path: str, ref: str) -> dict[str, Any]:
        """Return the contents API payload (base64 content and blob SHA)."""
        response = self.request(
            "GET", contents_endpoint(owner, repo, path), params={"ref": ref}
        )
        return self._json(response)

    def put_contents(
        self,
        owner: str,
        repo: str,
        path: str,
        *,
        content_b64: str,
        message: str,
        branch: str,
        sha: str | None = None,
    ) -> dict[str, Any]:
        """Create or update a file; ``sha`` is required to update."""
        payload: dict[str, Any] = {
            "message": message,
            "content": content_b64,
            "branch": branch,
        }
        if sha:
            payload["sha"] = sha
        response = self.request("PUT", contents_endpoint(owner, repo, path), json=payload)
        return self._json(response)
