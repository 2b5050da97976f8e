from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CSS_URL = (
    "https://cdnjs.cloudflare.com/ajax/libs/github-markdown-css/5.5.1/"
    "github-markdown.min.css"
)
DEFAULT_HIGHLIGHT_CSS_URL = (
    "https://cdnjs.cloudflare.com/ajax/libs/highlight.js/11.9.0/styles/github.min.css"
)
DEFAULT_HIGHLIGHT_JS_URL = (
    "https://cdnjs.cloudflare.com/ajax/libs/highlight.js/11.9.0/highlight.min.js"
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DOCMIRROR_", case_sensitive=False)

    github_token: SecretStr | None = None
    github_api_url: str = "https://api.github.com"
    ref: str = "main"
    output_root: str = "html"
    css_url: str = DEFAULT_CSS_URL
    highlight_css_url: str = DEFAULT_HIGHLIGHT_CSS_URL
    highlight_js_url: str = DEFAULT_HIGHLIGHT_JS_URL
    commit_message: str = "docs: render {source} to {output}"
    workers: int = Field(default=1, ge=1)
    http_timeout: float = Field(default=30.0, gt=0)
    retry_attempts: int = Field(default=4, ge=1)
    always_overwrite: bool = False
    casefold_collisions: bool = False
