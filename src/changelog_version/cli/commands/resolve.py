# SPDX-License-Identifier: MIT
"""Resolve a version template."""

from __future__ import annotations

from typing import Optional

import click

from ...semver import InvalidVersionError, parse_version
from ...templates import preview_template, resolve_template
from ..main import Context, echo_error, echo_info, pass_context


@click.command()
@click.argument("format")
@click.option(
    "--timezone",
    "-z",
    default=None,
    help="IANA time zone for date tokens (defaults to the configured one).",
)
@click.option(
    "--latest",
    "-l",
    default=None,
    help="Latest semantic version used for version tokens, e.g. 1.5.3.",
)
@click.option(
    "--preview",
    is_flag=True,
    help="Use the sample version 1.5.3, as the template editor preview does.",
)
@pass_context
def resolve(
    ctx: Context,
    format: str,
    timezone: Optional[str],
    latest: Optional[str],
    preview: bool,
) -> None:
    """Expand the tokens of a version template.

    \b
    Examples:
        changelog-version resolve "v{YYYY}.{MM}.{DD}"
        changelog-version resolve "{VERSION}-{YY}{MM}" --latest 2.3.1
        changelog-version resolve "v{NEXT_MAJOR}.0.0" --preview
    """
    zone = timezone or ctx.load_config().timezone

    if preview:
        echo_info(preview_template(format, zone))
        return

    parts = None
    if latest:
        try:
            parts = parse_version(latest)
        except InvalidVersionError as e:
            echo_error(str(e))
            raise SystemExit(1) from e

    echo_info(resolve_template(format, zone, parts))
