"""Output stores backed by the local filesystem."""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path, PurePosixPath

from ..core.interfaces import OutputStore
from ..exceptions import InvalidPathError
from .io import atomic_write_text

logger = logging.getLogger(__name__)

DRY_RUN_REVISION = "dry-run"


def content_digest(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


class LocalOutputStore:
    """Output tree rooted at a local directory.

    Revisions are the SHA-256 digest of the written content.
    """

    def __init__(self, root: Path, file_mode: int = 0o644) -> None:
        self.root = Path(root)
        self.file_mode = file_mode

    def _resolve(self, path: str) -> Path:
        relative = PurePosixPath(path)
        if relative.is_absolute() or ".." in relative.parts:
            raise InvalidPathError(f"Output path escapes the store root: {path!r}")
        return self.root.joinpath(*relative.parts)

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def read(self, path: str) -> str:
        with self._resolve(path).open("r", encoding="utf-8", newline="") as handle:
            return handle.read()

    def upsert(self, path: str, content: str, message: str) -> str:
        target = self._resolve(path)
        atomic_write_text(target, content, mode=self.file_mode)
        logger.debug(f"Wrote {target} ({message})")
        return content_digest(content)


class DryRunOutputStore:
    """Read-through wrapper that reports writes without performing them."""

    def __init__(self, inner: OutputStore) -> None:
        self.inner = inner

    def exists(self, path: str) -> bool:
        return self.inner.exists(path)

    def read(self, path: str) -> str:
        return self.inner.read(path)

    def upsert(self, path: str, content: str, message: str) -> str:
        logger.info(f"[dry-run] would write {path}: {message}")
        return DRY_RUN_REVISION
