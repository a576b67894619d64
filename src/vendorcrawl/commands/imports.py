# SPDX-License-Identifier: MIT
"""Read source imports and vendor all upstream dependencies."""

from __future__ import annotations

import click

from ..config import VendorConfigError
from ..errors import VendorCrawlError
from ..fetcher import GitFetcher
from ..main import Context, echo_error, echo_info, echo_success, echo_warning, pass_context
from ..orchestrator import VendorOrchestrator


@click.command()
@click.option(
    "--precaire",
    "--insecure",
    "insecure",
    is_flag=True,
    help="Allow the use of insecure protocols.",
)
@pass_context
def imports(ctx: Context, insecure: bool) -> None:
    """Recursively read imports from .go files and vendor upstream imports.

    This rebuilds the manifest and removes everything in ./vendor/ first.
    Unlike fetching packages one at a time, it works for projects whose
    dependencies ship no manifest of their own: every transitive dependency
    is fetched and recorded directly in the project's manifest.

    \b
    Examples:
        vendorcrawl imports
        vendorcrawl imports --precaire
    """
    project_dir = ctx.get_project_dir()

    try:
        config = ctx.load_config(allow_insecure=True if insecure else None)
    except VendorConfigError as e:
        echo_error(str(e))
        raise SystemExit(1) from e

    if config.allow_insecure:
        echo_warning("Insecure protocols are allowed for fetching dependencies.")

    echo_info(f"Vendoring imports of {project_dir} into {config.storage_dir(project_dir)}")

    orchestrator = VendorOrchestrator(
        project_dir,
        GitFetcher(allow_insecure=config.allow_insecure),
        config,
    )

    try:
        result = orchestrator.rebuild()
    except VendorCrawlError as e:
        echo_error(str(e))
        raise SystemExit(1) from e

    if not result.fetched:
        echo_success("No remote dependencies to vendor.")
        return

    for dep in result.fetched:
        echo_info(f"  {dep.importpath} {dep.revision}")
    echo_success(f"\nVendored {len(result.fetched)} dependencies into {orchestrator.storage_dir}")
