# SPDX-License-Identifier: MIT
"""CLI entry point for the vendorcrawl command."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from .config import VendorConfig, VendorConfigError
from .errors import VendorCrawlError


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.config: Optional[VendorConfig] = None
        self.verbose: bool = False
        self.project_dir: Optional[Path] = None

    def get_project_dir(self) -> Path:
        """Get the project root: the -C directory, or the current directory."""
        return (self.project_dir or Path.cwd()).resolve()

    def load_config(self, **overrides: object) -> VendorConfig:
        """Load configuration, caching the result."""
        if self.config is None:
            self.config = VendorConfig.from_toml(self.get_project_dir(), **overrides)
        return self.config


pass_context = click.make_pass_decorator(Context, ensure=True)


def echo_error(message: str) -> None:
    """Print an error message to stderr."""
    click.secho(f"Error: {message}", fg="red", err=True)


def echo_success(message: str) -> None:
    """Print a success message."""
    click.secho(message, fg="green")


def echo_info(message: str) -> None:
    """Print an info message."""
    click.echo(message)


def echo_warning(message: str) -> None:
    """Print a warning message."""
    click.secho(f"Warning: {message}", fg="yellow", err=True)


class _ClickHandler(logging.Handler):
    """Routes library log records to stderr through click."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            click.echo(self.format(record), err=True)
        except Exception:
            self.handleError(record)


def setup_logging(verbose: bool) -> None:
    """Send vendorcrawl log records to stderr, DEBUG and up when verbose."""
    logger = logging.getLogger("vendorcrawl")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    handler = _ClickHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False


@click.group()
@click.version_option(package_name="vendorcrawl")
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose output.",
)
@click.option(
    "-C",
    "--directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Use this directory as the project root instead of the current directory.",
)
@pass_context
def cli(ctx: Context, verbose: bool, directory: Optional[Path]) -> None:
    """Recursively vendor the remote dependencies of a Go source tree.

    \b
    Examples:
        vendorcrawl imports
        vendorcrawl -C ./myproject imports --precaire
    """
    ctx.verbose = verbose
    ctx.project_dir = directory
    setup_logging(verbose)


# Import and register commands
from .commands import imports

cli.add_command(imports.imports)


def main() -> None:
    """Main entry point for the CLI."""
    try:
        cli()
    except VendorConfigError as e:
        echo_error(str(e))
        sys.exit(1)
    except VendorCrawlError as e:
        echo_error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
