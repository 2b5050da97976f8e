"""Domain models for the mirror pipeline."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class RepoEntry(BaseModel):
    """A single entry of a recursive repository listing."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1, description="Repository-relative path")
    type: str = Field(..., description="Entry type tag (file/blob, directory/tree)")


class SourceFile(BaseModel):
    """A Markdown source document fetched for one pipeline pass."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Repository-relative path ending in .md")
    content: str | bytes = Field(..., description="Raw Markdown content")


class StyleAsset(BaseModel):
    """Stylesheet shared by every render of a run."""

    model_config = ConfigDict(frozen=True)

    css_text: str = Field(..., description="CSS embedded verbatim in each page")


class MappedPath(BaseModel):
    model_config = ConfigDict(frozen=True)

    output_path: str
    title: str


class RenderedDocument(BaseModel):
    """A fully rendered HTML page and where it belongs."""

    model_config = ConfigDict(frozen=True)

    source_path: str = Field(..., description="Source Markdown path")
    output_path: str = Field(..., description="Output HTML path")
    html: str = Field(..., description="Complete HTML document")
    title: str = Field(..., description="Document title")


class PublishOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    FAILED = "failed"


class PublishResult(BaseModel):
    """Result of reconciling one document with the output store."""

    model_config = ConfigDict(frozen=True)

    outcome: PublishOutcome
    output_path: str
    revision: str | None = Field(default=None, description="Store revision id")


class ItemResult(BaseModel):
    """Per-document outcome recorded by the pipeline."""

    source_path: str
    output_path: str | None = None
    outcome: PublishOutcome
    revision: str | None = None
    error: str | None = None
    error_type: str | None = None


class RunReport(BaseModel):
    """Aggregate outcome of a pipeline run, in scan order."""

    items: list[ItemResult] = Field(default_factory=list)

    def _count(self, outcome: PublishOutcome) -> int:
        return sum(1 for item in self.items if item.outcome is outcome)

    @property
    def created(self) -> int:
        return self._count(PublishOutcome.CREATED)

    @property
    def updated(self) -> int:
        return self._count(PublishOutcome.UPDATED)

    @property
    def unchanged(self) -> int:
        return self._count(PublishOutcome.UNCHANGED)

    @property
    def failed(self) -> int:
        return self._count(PublishOutcome.FAILED)

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def counts(self) -> dict[str, int]:
        return {
            "created": self.created,
            "updated": self.updated,
            "unchanged": self.unchanged,
            "failed": self.failed,
        }

    def summary(self) -> str:
        return ", ".join(f"{name}={count}" for name, count in self.counts().items())
