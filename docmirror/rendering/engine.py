"""Markdown to standalone HTML rendering engine."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

import markdown
from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template, TemplateError
from pydantic import BaseModel, ConfigDict

from ..core.models import RenderedDocument, SourceFile, StyleAsset
from ..core.paths import DEFAULT_OUTPUT_ROOT, map_path
from ..exceptions import RenderError
from ..settings import DEFAULT_HIGHLIGHT_CSS_URL, DEFAULT_HIGHLIGHT_JS_URL

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
DOCUMENT_TEMPLATE = "document.html.j2"
MARKDOWN_EXTENSIONS = ("fenced_code", "tables", "sane_lists")


class RenderOptions(BaseModel):
    """Page-level settings shared by every rendered document."""

    model_config = ConfigDict(frozen=True)

    highlight_css_url: str = DEFAULT_HIGHLIGHT_CSS_URL
    highlight_js_url: str = DEFAULT_HIGHLIGHT_JS_URL
    container_class: str = "markdown-body"


@lru_cache(maxsize=1)
def load_template() -> Template:
    """Load the page template bundled with the package.

    Returns:
        Compiled Jinja2 template
    """
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        undefined=StrictUndefined,
        autoescape=False,
        keep_trailing_newline=True,
    )
    return env.get_template(DOCUMENT_TEMPLATE)


def _as_text(markdown_text: str | bytes) -> str:
    if isinstance(markdown_text, bytes):
        try:
            return markdown_text.decode("utf-8")
        except UnicodeDecodeError as e:
            raise RenderError(f"Markdown is not valid UTF-8: {e}") from e
    if not isinstance(markdown_text, str):
        raise RenderError(f"Markdown must be text, got {type(markdown_text).__name__}")
    try:
        markdown_text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise RenderError(f"Markdown contains undecodable characters: {e}") from e
    return markdown_text


def convert_markdown(markdown_text: str | bytes) -> str:
    """Convert Markdown to an HTML fragment.

    A fresh converter is built per call; ``markdown.Markdown`` instances keep
    per-document state and are not safe to share across threads.
    """
    text = _as_text(markdown_text)
    converter = markdown.Markdown(extensions=list(MARKDOWN_EXTENSIONS))
    try:
        return converter.convert(text)
    except Exception as e:
        raise RenderError(f"Markdown conversion failed: {e}") from e


def render(
    markdown_text: str | bytes,
    css_text: str,
    title: str,
    *,
    options: RenderOptions | None = None,
) -> str:
    """Render Markdown into a complete HTML5 document.

    Identical arguments always produce identical output.

    Args:
        markdown_text: Markdown source (UTF-8 bytes are accepted)
        css_text: Stylesheet embedded verbatim in a ``<style>`` block
        title: Document title
        options: Page-level settings

    Returns:
        HTML document text

    Raises:
        RenderError: If the Markdown is not valid text or rendering fails
    """
    options = options or RenderOptions()
    body = convert_markdown(markdown_text)

    try:
        return load_template().render(
            title=title,
            css_text=css_text,
            body=body,
            container_class=options.container_class,
            highlight_css_url=options.highlight_css_url,
            highlight_js_url=options.highlight_js_url,
        )
    except TemplateError as e:
        raise RenderError(f"Template rendering failed: {e}") from e


def render_document(
    source: SourceFile,
    style: StyleAsset,
    *,
    output_root: str = DEFAULT_OUTPUT_ROOT,
    options: RenderOptions | None = None,
) -> RenderedDocument:
    """Render a source file into a document addressed by its output path."""
    mapped = map_path(source.path, output_root)
    logger.debug(f"Rendering {source.path} → {mapped.output_path}")

    html = render(source.content, style.css_text, mapped.title, options=options)
    return RenderedDocument(
        source_path=source.path,
        output_path=mapped.output_path,
        html=html,
        title=mapped.title,
    )
