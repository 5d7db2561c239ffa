# meowdown: static site generator with a small template language
# Copyright (C) 2024-2026 Dr Horst Herb
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""MeowDown command line interface.

Usage:
    meowdown                       # build the site in the current directory
    meowdown build --clean         # delete the output directory first
    meowdown clean                 # delete the output directory
    meowdown watch                 # rebuild whenever a source file changes
    meowdown new my-site --default # scaffold a project with the default layout
    meowdown -c site.yaml -v build # explicit config, verbose logging
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from meowdown import __version__
from meowdown.site.builder import build_site_for_each_variant, clean_output_dir
from meowdown.site.config import ConfigError, SiteConfig
from meowdown.site.scaffold import new_project
from meowdown.site.watch import watch_and_rebuild
from meowdown.templates.frontmatter import FrontMatterError
from meowdown.templates.layouts import LayoutError

DEBUG_ENV = "MEOWDOWN_DEBUG"

console = Console()
logger = logging.getLogger(__name__)

app = typer.Typer(
    name="meowdown",
    help="Build a static site from markdown pages and nested layouts.",
    add_completion=False,
)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the meowdown package.

    Log levels:
    - Normal: only warnings and errors
    - Verbose (-v): INFO, shows written files and cached layouts
    - Debug (MEOWDOWN_DEBUG=1): DEBUG, adds cache hits and page trees
    """
    debug = bool(os.environ.get(DEBUG_ENV))
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=console,
        show_time=verbose or debug,
        show_path=debug,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    package_logger = logging.getLogger("meowdown")
    package_logger.setLevel(level)
    package_logger.handlers = [handler]
    package_logger.propagate = False


@contextmanager
def _fatal_errors() -> Iterator[None]:
    """Report build-stopping errors and exit with status 1."""
    try:
        yield
    except (LayoutError, ConfigError, FrontMatterError, OSError) as exc:
        logger.debug("Fatal error", exc_info=True)
        typer.secho(f"Error: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)


def _load_config(ctx: typer.Context) -> SiteConfig:
    return SiteConfig.discover(ctx.obj)


def _run_build(config: SiteConfig, clean: bool) -> None:
    if clean:
        clean_output_dir(config)
    for report in build_site_for_each_variant(config):
        label = f" ({report.variant})" if report.variant else ""
        typer.echo(f"Wrote {len(report.written)} page(s) to {report.output_dir}{label}")
        for source, reason in report.skipped:
            typer.secho(f"Skipped {source}: {reason}", err=True, fg=typer.colors.YELLOW)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"meowdown {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to meowdown-config.yaml."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show progress messages."),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Build the site when no command is given."""
    setup_logging(verbose)
    ctx.obj = config
    if ctx.invoked_subcommand is None:
        with _fatal_errors():
            _run_build(_load_config(ctx), clean=False)


@app.command()
def build(
    ctx: typer.Context,
    clean: bool = typer.Option(False, "--clean", help="Delete the output directory first."),
) -> None:
    """Build every configured variant of the site."""
    with _fatal_errors():
        _run_build(_load_config(ctx), clean)


@app.command()
def clean(ctx: typer.Context) -> None:
    """Delete the output directory of every variant."""
    with _fatal_errors():
        clean_output_dir(_load_config(ctx))
    typer.echo("Output cleaned")


@app.command()
def watch(ctx: typer.Context) -> None:
    """Build the site, then rebuild it whenever a source file changes."""
    with _fatal_errors():
        config = _load_config(ctx)
        _run_build(config, clean=False)
    typer.echo("Watching for changes (press Ctrl+C to stop)")
    try:
        watch_and_rebuild(config, lambda: _run_build(config, clean=False))
    except KeyboardInterrupt:
        typer.echo("Stopped watching")


@app.command()
def new(
    name: str = typer.Argument(..., help="Directory name of the new project."),
    default: bool = typer.Option(
        False, "--default", help="Include the default layout, stylesheet and fragments."
    ),
) -> None:
    """Create a new project directory."""
    with _fatal_errors():
        project_dir = new_project(name, use_default_template=default)
    typer.echo(f"Created project at {project_dir}")


def main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
