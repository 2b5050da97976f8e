"""Stylesheet fetchers."""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import unquote, urlparse

import httpx

from ..exceptions import FetchError
from ..retry import http_retrying

logger = logging.getLogger(__name__)


class HttpAssetFetcher:
    """Fetch text assets over HTTP(S)."""

    def __init__(
        self, timeout: float = 30.0, attempts: int = 4, backoff: float = 0.5
    ) -> None:
        self.timeout = timeout
        self.attempts = attempts
        self.backoff = backoff

    def _get(self, url: str) -> str:
        response = httpx.get(url, timeout=self.timeout, follow_redirects=True)
        response.raise_for_status()
        return response.text

    def get_url(self, url: str) -> str:
        logger.debug(f"Fetching asset: {url}")
        try:
            return http_retrying(self.attempts, self.backoff, max_wait=8)(self._get, url)
        except httpx.HTTPError as e:
            raise FetchError(f"Unable to fetch {url}: {e}") from e


class FileAssetFetcher:
    """Read text assets from local paths or ``file://`` URLs."""

    def get_url(self, url: str) -> str:
        parsed = urlparse(url)
        path = Path(unquote(parsed.path)) if parsed.scheme == "file" else Path(url)
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise FetchError(f"Unable to read asset {url}: {e}") from e


class AssetFetcher:
    """Dispatch to the HTTP or file fetcher based on the URL scheme."""

    def __init__(
        self, timeout: float = 30.0, attempts: int = 4, backoff: float = 0.5
    ) -> None:
        self.http = HttpAssetFetcher(timeout=timeout, attempts=attempts, backoff=backoff)
        self.files = FileAssetFetcher()

    def get_url(self, url: str) -> str:
        if urlparse(url).scheme in ("http", "https"):
            return self.http.get_url(url)
        return self.files.get_url(url)
