"""Scan, render and publish a repository's Markdown tree."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from enum import Enum

from .core.interfaces import AssetFetcher, ContentFetcher, OutputStore, RepositoryLister
from .core.models import ItemResult, PublishOutcome, RunReport, SourceFile, StyleAsset
from .core.paths import ensure_no_collisions
from .core.scanner import scan_tree
from .exceptions import DocMirrorError
from .publishing.reconciler import publish
from .rendering.engine import RenderOptions, render_document
from .settings import Settings

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    FETCHING = "fetching"
    PUBLISHING = "publishing"
    DONE = "done"
    FAILED = "failed"


class Pipeline:
    """One mirror run over a repository listing.

    Per-document failures are recorded in the report and never stop the run.
    Listing failures, style asset failures and output path collisions abort
    the run before anything is published.
    """

    def __init__(
        self,
        lister: RepositoryLister,
        fetcher: ContentFetcher,
        assets: AssetFetcher,
        store: OutputStore,
        settings: Settings | None = None,
    ) -> None:
        self.lister = lister
        self.fetcher = fetcher
        self.assets = assets
        self.store = store
        self.settings = settings or Settings()
        self.render_options = RenderOptions(
            highlight_css_url=self.settings.highlight_css_url,
            highlight_js_url=self.settings.highlight_js_url,
        )
        self.state = PipelineState.IDLE

    def _transition(self, state: PipelineState) -> None:
        logger.debug(f"Pipeline: {self.state.value} → {state.value}")
        self.state = state

    def scan(self) -> list[str]:
        """Return the de-duplicated Markdown paths to process, in listing order."""
        entries = self.lister.list(self.settings.ref)
        return list(dict.fromkeys(scan_tree(entries)))

    def fetch_style(self) -> StyleAsset:
        return StyleAsset(css_text=self.assets.get_url(self.settings.css_url))

    @staticmethod
    def _failed(source_path: str, output_path: str | None, error: Exception) -> ItemResult:
        return ItemResult(
            source_path=source_path,
            output_path=output_path,
            outcome=PublishOutcome.FAILED,
            error=str(error),
            error_type=type(error).__name__,
        )

    def process(self, source_path: str, style: StyleAsset) -> ItemResult:
        """Fetch, render and publish one document, capturing any failure."""
        output_path: str | None = None
        try:
            source = SourceFile(path=source_path, content=self.fetcher.get_file(source_path))
            document = render_document(
                source,
                style,
                output_root=self.settings.output_root,
                options=self.render_options,
            )
            output_path = document.output_path
            message = self.settings.commit_message.format(
                source=source_path, output=output_path
            )
            result = publish(
                self.store,
                output_path,
                document.html,
                message=message,
                always_overwrite=self.settings.always_overwrite,
            )
        except DocMirrorError as e:
            logger.error(f"Failed {source_path}: {type(e).__name__}: {e}")
            return self._failed(source_path, output_path, e)
        except Exception as e:
            # Failures outside the taxonomy are still scoped to the item.
            logger.exception(f"Failed {source_path}: unexpected {type(e).__name__}: {e}")
            return self._failed(source_path, output_path, e)

        logger.info(f"{result.outcome.value.capitalize()}: {source_path} → {output_path}")
        return ItemResult(
            source_path=source_path,
            output_path=output_path,
            outcome=result.outcome,
            revision=result.revision,
        )

    def run(self) -> RunReport:
        """Execute the pipeline.

        Returns:
            Per-document results in scan order

        Raises:
            FetchError: If the listing or the style asset cannot be fetched
            PathCollisionError: If two source paths share an output path
        """
        try:
            self._transition(PipelineState.SCANNING)
            paths = self.scan()
            logger.info(f"Found {len(paths)} Markdown file(s)")
            ensure_no_collisions(
                paths,
                self.settings.output_root,
                casefold=self.settings.casefold_collisions,
            )

            self._transition(PipelineState.FETCHING)
            style = self.fetch_style()
        except DocMirrorError:
            self._transition(PipelineState.FAILED)
            raise

        self._transition(PipelineState.PUBLISHING)
        if self.settings.workers > 1 and len(paths) > 1:
            with ThreadPoolExecutor(max_workers=self.settings.workers) as pool:
                items = list(pool.map(lambda path: self.process(path, style), paths))
        else:
            items = [self.process(path, style) for path in paths]

        report = RunReport(items=items)
        self._transition(PipelineState.DONE)
        logger.info(f"Run complete: {report.summary()}")
        return report

