# SPDX-License-Identifier: MIT
"""Command line interface for changelog-version."""

from .main import cli, main

__all__ = ["cli", "main"]
