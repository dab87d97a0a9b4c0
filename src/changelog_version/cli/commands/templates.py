# SPDX-License-Identifier: MIT
"""List resolved version templates and the supported tokens."""

from __future__ import annotations

from itertools import groupby
from pathlib import Path
from typing import Optional

import click

from ...models import TimezoneConfig
from ...suggest import latest_parts
from ...templates import TEMPLATE_TOKENS, resolve_templates
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
    "--timezone",
    "-z",
    default=None,
    help="IANA time zone for date tokens.",
)
@click.option(
    "--remote",
    is_flag=True,
    help="Read the time zone and admin templates from the changelog API.",
)
@pass_context
def templates(
    ctx: Context,
    existing: tuple[str, ...],
    from_file: Optional[Path],
    project: Optional[str],
    current: str,
    timezone: Optional[str],
    remote: bool,
) -> None:
    """Show each template resolved against the current time.

    Admin templates configured on the server replace the built-in date
    formats when --remote is given and at least one exists.

    \b
    Examples:
        changelog-version templates -e v2026.02.20
        changelog-version templates --project proj_123 --remote
    """
    versions = ctx.load_versions(existing, from_file, project)

    tz_config = ctx.fetch_timezone_config() if remote else TimezoneConfig(
        timezone=ctx.load_config().timezone
    )
    zone = timezone or tz_config.timezone

    heading = "Templates" if tz_config.has_admin_templates else "Date Formats"
    echo_info(f"{heading} ({zone}):")

    resolved = resolve_templates(
        tz_config.custom_date_templates,
        zone,
        latest_parts(versions),
        versions,
        current,
    )
    for template in resolved:
        line = f"  {template.value:<20} {template.label}"
        if template.is_current:
            line += "  (current)"
        if template.is_conflict:
            line += "  (conflict)"
        echo_info(line)


@click.command()
def tokens() -> None:
    """List the placeholder tokens templates may use."""
    for category, entries in groupby(TEMPLATE_TOKENS, key=lambda t: t.category):
        echo_info(f"{category}:")
        for entry in entries:
            echo_info(f"  {entry.token:<14} {entry.description} (e.g. {entry.example})")
