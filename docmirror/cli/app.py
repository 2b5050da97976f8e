"""Main CLI application."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from ..core.interfaces import OutputStore
from ..core.paths import map_path
from ..core.scanner import scan_tree
from ..exceptions import DocMirrorError, InvalidPathError
from ..github.adapters import GitHubOutputStore, GitHubRepository
from ..github.client import GitHubClient
from ..pipeline import Pipeline
from ..publishing.stores import DryRunOutputStore, LocalOutputStore
from ..settings import Settings
from ..sources.assets import AssetFetcher
from ..sources.local import LocalRepository
from .parsers import parse_file_mode, parse_repo

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="docmirror",
    help="Render a repository's Markdown files into a mirrored html/ tree.",
    no_args_is_help=True,
)

SourceDirOption = Annotated[
    Optional[Path],
    typer.Option(
        "--source-dir",
        help="Local repository checkout to read Markdown from.",
        metavar="DIR",
    ),
]
RepoOption = Annotated[
    Optional[str],
    typer.Option(
        "--repo",
        help="GitHub repository to read Markdown from (and publish to).",
        metavar="OWNER/NAME",
    ),
]
RefOption = Annotated[
    Optional[str],
    typer.Option("--ref", help="Source ref and target branch (default: main)."),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Enable verbose logging."),
]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )


def _github_client(settings: Settings) -> GitHubClient:
    token = settings.github_token.get_secret_value() if settings.github_token else None
    return GitHubClient(
        token=token,
        api_url=settings.github_api_url,
        timeout=settings.http_timeout,
        attempts=settings.retry_attempts,
    )


def _source(
    source_dir: Path | None,
    repo: str | None,
    settings: Settings,
    client: GitHubClient | None,
    *,
    publishes_in_place: bool = False,
) -> LocalRepository | GitHubRepository:
    if source_dir is not None:
        # The output tree under the checkout is never a source.
        exclude = (settings.output_root,) if publishes_in_place else ()
        return LocalRepository(source_dir, exclude=exclude)
    if repo is None or client is None:
        raise typer.BadParameter("Pass exactly one of --source-dir or --repo")
    owner, name = parse_repo(repo)
    return GitHubRepository(client, owner, name, ref=settings.ref)


def _check_source_choice(source_dir: Path | None, repo: str | None) -> None:
    if (source_dir is None) == (repo is None):
        raise typer.BadParameter("Pass exactly one of --source-dir or --repo")


def _same_dir(output_dir: Path | None, source_dir: Path | None) -> bool:
    """True when outputs are written inside the source checkout."""
    if output_dir is None:
        return True
    return source_dir is not None and output_dir.resolve() == source_dir.resolve()


@app.command()
def run(
    source_dir: SourceDirOption = None,
    repo: RepoOption = None,
    output_dir: Annotated[
        Optional[Path],
        typer.Option(
            "--output-dir",
            help="Write the html/ tree under DIR (default: the source dir, or the GitHub repo).",
            metavar="DIR",
        ),
    ] = None,
    ref: RefOption = None,
    css_url: Annotated[
        Optional[str],
        typer.Option("--css-url", help="Stylesheet URL embedded in every page.", metavar="URL"),
    ] = None,
    css_file: Annotated[
        Optional[Path],
        typer.Option("--css-file", help="Local stylesheet embedded in every page.", metavar="FILE"),
    ] = None,
    workers: Annotated[
        Optional[int],
        typer.Option("--workers", min=1, help="Documents processed in parallel (default: 1)."),
    ] = None,
    file_mode: Annotated[
        str,
        typer.Option("--mode", help="File permissions for local output in octal.", metavar="OCTAL"),
    ] = "0644",
    always_overwrite: Annotated[
        bool,
        typer.Option("--always-overwrite", help="Write documents even when unchanged."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Report what would be written without writing."),
    ] = False,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Exit non-zero when any document fails."),
    ] = False,
    verbose: VerboseOption = False,
) -> None:
    """Render every Markdown file and publish it under the output root."""
    _configure_logging(verbose)
    _check_source_choice(source_dir, repo)
    if css_url is not None and css_file is not None:
        raise typer.BadParameter("Pass at most one of --css-url or --css-file")

    overrides: dict[str, object] = {}
    if ref is not None:
        overrides["ref"] = ref
    if css_url is not None:
        overrides["css_url"] = css_url
    if css_file is not None:
        overrides["css_url"] = str(css_file)
    if workers is not None:
        overrides["workers"] = workers
    if always_overwrite:
        overrides["always_overwrite"] = True
    settings = Settings().model_copy(update=overrides)
    mode = parse_file_mode(file_mode)

    client = _github_client(settings) if repo is not None else None
    try:
        source = _source(
            source_dir,
            repo,
            settings,
            client,
            publishes_in_place=_same_dir(output_dir, source_dir),
        )

        store: OutputStore
        if output_dir is not None:
            store = LocalOutputStore(output_dir, file_mode=mode)
        elif isinstance(source, LocalRepository):
            store = LocalOutputStore(source.root, file_mode=mode)
        else:
            store = GitHubOutputStore(source.client, source.owner, source.repo, branch=settings.ref)
        if dry_run:
            store = DryRunOutputStore(store)

        assets = AssetFetcher(timeout=settings.http_timeout, attempts=settings.retry_attempts)
        pipeline = Pipeline(source, source, assets, store, settings)

        try:
            report = pipeline.run()
        except DocMirrorError as e:
            logger.error(f"Run aborted: {e}")
            raise typer.Exit(code=1) from e
    finally:
        if client is not None:
            client.close()

    typer.echo(report.summary())
    if strict and not report.ok:
        raise typer.Exit(code=1)


@app.command()
def scan(
    source_dir: SourceDirOption = None,
    repo: RepoOption = None,
    ref: RefOption = None,
    verbose: VerboseOption = False,
) -> None:
    """List the Markdown files a run would process."""
    _configure_logging(verbose)
    _check_source_choice(source_dir, repo)

    settings = Settings()
    if ref is not None:
        settings = settings.model_copy(update={"ref": ref})

    client = _github_client(settings) if repo is not None else None
    try:
        source = _source(source_dir, repo, settings, client, publishes_in_place=True)
        try:
            paths = list(dict.fromkeys(scan_tree(source.list(settings.ref))))
        except DocMirrorError as e:
            logger.error(f"Scan failed: {e}")
            raise typer.Exit(code=1) from e
    finally:
        if client is not None:
            client.close()

    for path in paths:
        typer.echo(path)


@app.command("map")
def map_paths(
    paths: Annotated[list[str], typer.Argument(help="Markdown source paths.")],
    output_root: Annotated[
        Optional[str],
        typer.Option("--output-root", help="Output directory (default: html)."),
    ] = None,
) -> None:
    """Show the output path and title for each source path."""
    root = output_root or Settings().output_root
    failed = False
    for path in paths:
        try:
            mapped = map_path(path, root)
        except InvalidPathError as e:
            typer.echo(f"{path}: {e}", err=True)
            failed = True
            continue
        typer.echo(f"{path} -> {mapped.output_path} ({mapped.title})")

    if failed:
        raise typer.Exit(code=2)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
