# SPDX-License-Identifier: MIT
"""Check a candidate version for collisions."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from ...conflict import VersionSet, has_conflict
from ...semver import display
from ..main import Context, echo_error, echo_info, echo_success, pass_context, version_source_options


@click.command()
@click.argument("candidate")
@version_source_options
@click.option(
    "--current",
    "-c",
    default="",
    help="Version currently assigned to the entry; re-selecting it is allowed.",
)
@pass_context
def check(
    ctx: Context,
    candidate: str,
    existing: tuple[str, ...],
    from_file: Optional[Path],
    project: Optional[str],
    current: str,
) -> None:
    """Check whether CANDIDATE is still free.

    Exits with status 1 when the version is already used by another entry.

    \b
    Examples:
        changelog-version check 1.2.0 -e v1.0.0 -e v1.1.0
        changelog-version check v1.0.0 --project proj_123 --current v1.0.0
    """
    if not candidate.strip():
        echo_error("Version cannot be empty.")
        raise SystemExit(2)

    versions = VersionSet(ctx.load_versions(existing, from_file, project))
    if ctx.verbose:
        echo_info(f"Checking against {len(versions)} existing versions")

    if has_conflict(candidate, versions, current):
        echo_error(f"{display(candidate)} already exists.")
        raise SystemExit(1)

    echo_success(f"{display(candidate)} is available.")
