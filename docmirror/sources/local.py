"""Working-tree repository access."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Any

from ..exceptions import FetchError, NotFoundError

logger = logging.getLogger(__name__)

IGNORED_DIRS = frozenset({".git"})


class LocalRepository:
    """List and read files of a repository checkout.

    The listing ignores ``ref``: a checkout only has the current tree.
    """

    def __init__(self, root: Path, exclude: tuple[str, ...] = ()) -> None:
        self.root = Path(root)
        self.exclude = frozenset(exclude) | IGNORED_DIRS

    def _excluded(self, relative: PurePosixPath) -> bool:
        return any(
            str(PurePosixPath(*relative.parts[: i + 1])) in self.exclude
            for i in range(len(relative.parts))
        )

    def list(self, ref: str) -> list[dict[str, Any]]:
        if not self.root.is_dir():
            raise FetchError(f"Source directory not found: {self.root}")

        entries: list[dict[str, Any]] = []
        for path in self.root.rglob("*"):
            relative = PurePosixPath(path.relative_to(self.root).as_posix())
            if self._excluded(relative):
                continue
            kind = "directory" if path.is_dir() else "file"
            entries.append({"path": str(relative), "type": kind})

        entries.sort(key=lambda entry: entry["path"])
        logger.debug(f"Listed {len(entries)} entries under {self.root}")
        return entries

    def get_file(self, path: str) -> bytes:
        target = self.root.joinpath(*PurePosixPath(path).parts)
        if not target.is_file():
            raise NotFoundError(f"File not found: {path}")
        try:
            return target.read_bytes()
        except OSError as e:
            raise FetchError(f"Unable to read {path}: {e}") from e
