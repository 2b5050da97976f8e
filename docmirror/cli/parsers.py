"""CLI argument parsers and validators."""

from __future__ import annotations

import re

import typer

_REPO_PATTERN = re.compile(r"^([A-Za-z0-9_.-]+)/([A-Za-z0-9_.-]+)$")


def parse_repo(value: str) -> tuple[str, str]:
    """Parse a repository argument in format OWNER/NAME."""
    match = _REPO_PATTERN.match(value.strip())
    if not match:
        raise typer.BadParameter(f"Must be OWNER/NAME, got: {value!r}")
    return match.group(1), match.group(2)


def parse_file_mode(value: str) -> int:
    """Parse octal file mode string."""
    try:
        return int(value, 8)
    except ValueError as e:
        raise typer.BadParameter(f"Invalid octal mode: {value!r}") from e
