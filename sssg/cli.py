"""Command-line interface for sssg.

This module defines the CLI commands using Click framework.

Commands:
- build: Generate every artifact below htdocs/.
- clean: Delete every generated artifact.
- serve: Serve htdocs/ for local preview.
- watch: Build, then rebuild whenever sources or templates change.
- version: Print the version.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from . import __version__
from .config import load_config
from .errors import BuildError, BuildFailures
from .minifiers import create_default_registry, create_identity_registry
from .utils import display_path


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="sssg")
@click.pass_context
def cli(ctx: click.Context):
    """Simple static site generator."""
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.option(
    "--keep-going",
    is_flag=True,
    help="Build every source and report all failures at the end",
)
@click.option("--no-minify", is_flag=True, help="Write artifacts unminified")
def build(keep_going: bool, no_minify: bool):
    """Generate artifacts from every .src file in htdocs/."""
    project_root = Path.cwd()
    from .build import build_site

    minifiers = create_identity_registry() if no_minify else create_default_registry()
    try:
        result = build_site(project_root, minifiers=minifiers, keep_going=keep_going)
    except BuildFailures as exc:
        for error in exc.errors:
            _echo_error(error, project_root)
        raise SystemExit(1) from None
    except BuildError as exc:
        _echo_error(exc, project_root)
        raise SystemExit(1) from None
    click.echo(f"Built {len(result.artifacts)} artifact(s) in {result.htdocs_dir}")


@cli.command()
def clean():
    """Delete the artifacts generated from .src files in htdocs/."""
    project_root = Path.cwd()
    from .build import clean_site

    try:
        result = clean_site(project_root)
    except BuildError as exc:
        _echo_error(exc, project_root)
        raise SystemExit(1) from None
    click.echo(f"Removed {len(result.removed)} artifact(s) from {result.htdocs_dir}")


@cli.command()
@click.option("--host", type=str, required=False, help="Address to bind (default 0.0.0.0)")
@click.option(
    "--port",
    type=click.IntRange(0, 65535),
    required=False,
    help="Port to listen on (default 1337)",
)
def serve(host: str | None, port: int | None):
    """Serve htdocs/ for local preview."""
    project_root = Path.cwd()
    from .server import PreviewServer, ResponseError

    try:
        config = load_config(project_root)
    except BuildError as exc:
        _echo_error(exc, project_root)
        raise SystemExit(1) from None
    _configure_logging()
    try:
        server = PreviewServer(
            config.htdocs_path,
            host=host or config.host,
            port=port if port is not None else config.port,
            index_file=config.index_file,
        )
    except OSError as exc:
        raise click.ClickException(f"Could not start server ({exc})") from exc
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    except ResponseError as exc:
        click.echo(click.style(f"Error: {exc}", fg="red"), err=True)
        raise SystemExit(1) from None


@cli.command()
@click.option("--no-minify", is_flag=True, help="Write artifacts unminified")
def watch(no_minify: bool):
    """Build, then rebuild whenever sources or templates change."""
    project_root = Path.cwd()
    from .watch import SourceWatcher

    _configure_logging()
    minifiers = create_identity_registry() if no_minify else create_default_registry()
    try:
        watcher = SourceWatcher(project_root, minifiers=minifiers)
    except BuildError as exc:
        _echo_error(exc, project_root)
        raise SystemExit(1) from None
    watcher.start()


@cli.command()
def version():
    """Print the version."""
    click.echo(__version__)


def main():
    """Entry point for the CLI application."""
    cli()


def _echo_error(exc: BuildError, project_root: Path) -> None:
    """Print a single-line diagnostic for a build error."""
    rel_path = display_path(exc.source_path, project_root)
    click.echo(click.style(f"Error: {rel_path}: {exc.message}", fg="red"), err=True)


def _configure_logging() -> None:
    """Send sssg log records to stderr, one line per record."""
    logger = logging.getLogger("sssg")
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
