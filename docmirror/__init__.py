"""docmirror - Render a repository's Markdown tree into a mirrored html/ tree.

Markdown files are discovered, rendered to standalone syntax-highlighted HTML
pages and published under ``html/`` with create/update/unchanged reconciliation.
"""

__version__ = "0.1.0"

# Configure logging for library use
import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Re-export main CLI entry point
from .cli import main

__all__ = ["main"]
