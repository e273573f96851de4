"""Command line interface for notedex."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Tuple

import typer
from rich.console import Console
from rich.markup import escape
from rich.text import Text

from notedex.config import (
    AppConfig,
    ConfigError,
    ProjectConfig,
    load_project_config,
    save_project_config,
)
from notedex.index.cache import FileCache, RebuildStats
from notedex.index.indexer import IndexingError
from notedex.index.storage import CacheCorruptError, load_cache, save_cache
from notedex.models import Comment
from notedex.note.parser import ParseInlineError
from notedex.utils.text import wrap_block

LOGGER = logging.getLogger(__name__)

console = Console()
app = typer.Typer(help="notedex - index <note> comments and definitions in your files")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


@contextmanager
def _reporting_errors() -> Iterator[None]:
    try:
        yield
    except (IndexingError, ParseInlineError, CacheCorruptError, ConfigError, OSError) as exc:
        LOGGER.debug("Aborting", exc_info=True)
        console.print(Text(f"Error: {exc}", style="red"), soft_wrap=True)
        raise typer.Exit(code=1) from exc


def _rebuild(config: AppConfig, root: Path) -> Tuple[FileCache, RebuildStats]:
    previous = load_cache(config.cache_path(Path.cwd()))
    return FileCache.rebuild(root, previous)


def _current_cache(config: AppConfig) -> FileCache:
    project = load_project_config(config.config_path(Path.cwd()))
    cache, _ = _rebuild(config, project.root)
    return cache


def _print_stats(stats: RebuildStats) -> None:
    console.print(
        f"Files: {stats.files}, reused: {stats.hits}, "
        f"parsed: {stats.misses}, pruned: {stats.pruned}"
    )


def _render_comment(comment: Comment) -> None:
    if comment.heading:
        console.print(Text(comment.heading, style="bold"))
        console.print()
    console.print(Text(wrap_block(comment.comment, width=console.width)))


@app.command()
def config(
    root: Path = typer.Argument(
        ...,
        help="Directory whose files are indexed.",
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
    ),
    home: Path = typer.Option(None, "--home", help="Directory holding config and cache"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Set the indexed directory and rebuild the cache."""
    _setup_logging(verbose)
    app_config = AppConfig(home=home)
    with _reporting_errors():
        cache, stats = _rebuild(app_config, root)
        save_project_config(app_config.config_path(Path.cwd()), ProjectConfig(root=root))
        save_cache(app_config.cache_path(Path.cwd()), cache)
    console.print(f"Indexed [bold]{escape(str(root))}[/bold]", soft_wrap=True)
    _print_stats(stats)


@app.command()
def refresh(
    home: Path = typer.Option(None, "--home", help="Directory holding config and cache"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Rebuild the cache for the configured directory."""
    _setup_logging(verbose)
    app_config = AppConfig(home=home)
    with _reporting_errors():
        project = load_project_config(app_config.config_path(Path.cwd()))
        cache, stats = _rebuild(app_config, project.root)
        save_cache(app_config.cache_path(Path.cwd()), cache)
    _print_stats(stats)


@app.command()
def define(
    term: str = typer.Argument(..., help="Term to look up"),
    home: Path = typer.Option(None, "--home", help="Directory holding config and cache"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Print the definition of a term."""
    _setup_logging(verbose)
    with _reporting_errors():
        cache = _current_cache(AppConfig(home=home))

    definition = cache.define(term)
    if definition is None:
        console.print(Text(f"No definition found for {term}", style="yellow"))
        return

    line = Text(wrap_block(definition, width=console.width))
    line.append(":  ")
    line.append(term, style="bold")
    console.print(line)


@app.command()
def search(
    tag: str = typer.Argument(..., help="Tag to search for"),
    home: Path = typer.Option(None, "--home", help="Directory holding config and cache"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Print every comment filed under a tag, oldest file first."""
    _setup_logging(verbose)
    with _reporting_errors():
        cache = _current_cache(AppConfig(home=home))

    found = False
    for comment in cache.search(tag):
        if found:
            console.print()
        _render_comment(comment)
        found = True

    if not found:
        console.print(Text(f"No comments tagged {tag}", style="yellow"))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
