# SPDX-License-Identifier: MIT
"""Suggest the next versions for a project."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import click

from ...semver import TYPE_LABELS
from ...suggest import latest_parts, suggest_next
from ..main import Context, echo_info, pass_context, version_source_options


@click.command()
@version_source_options
@click.option(
    "--current",
    "-c",
    default="",
    help="Version currently assigned to the entry being edited.",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Print the suggestions as JSON.",
)
@pass_context
def suggest(
    ctx: Context,
    existing: tuple[str, ...],
    from_file: Optional[Path],
    project: Optional[str],
    current: str,
    as_json: bool,
) -> None:
    """Suggest the next patch, minor and major versions.

    Versions are read newest first; the first semantic version is taken as
    the latest release.

    \b
    Examples:
        changelog-version suggest -e v1.1.0 -e v1.0.0
        changelog-version suggest --project proj_123 --current v1.2.0
    """
    versions = ctx.load_versions(existing, from_file, project)
    latest = latest_parts(versions)
    candidates = suggest_next(versions, latest, current, ctx.load_config().max_probes)

    if as_json:
        payload = {
            "latest": latest.display if latest else None,
            "suggestions": [
                {
                    "value": c.value,
                    "type": c.type.value,
                    "is_conflict": c.is_conflict,
                    "is_current": c.is_current,
                }
                for c in candidates
            ],
        }
        echo_info(json.dumps(payload, indent=2))
        return

    if latest is None:
        echo_info("No semantic versions yet.")
    else:
        echo_info(f"Latest: {latest.display}")

    for candidate in candidates:
        line = f"  {candidate.value:<12} {TYPE_LABELS[candidate.type]}"
        if candidate.is_current:
            line += "  (current)"
        if candidate.is_conflict:
            line += "  (conflict)"
        echo_info(line)
