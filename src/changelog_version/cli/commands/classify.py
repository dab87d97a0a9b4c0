# SPDX-License-Identifier: MIT
"""Classify version labels."""

from __future__ import annotations

import click

from ...semver import TYPE_LABELS, classify as classify_version, display
from ..main import echo_info


@click.command()
@click.argument("versions", nargs=-1, required=True)
def classify(versions: tuple[str, ...]) -> None:
    """Show whether each version is a major, minor, patch or custom label.

    \b
    Examples:
        changelog-version classify v2.0.0 1.4.0 nightly
    """
    width = max(1, *(len(display(v)) for v in versions))
    for version in versions:
        label = TYPE_LABELS[classify_version(version)]
        echo_info(f"{display(version):<{width}}  {label}")
