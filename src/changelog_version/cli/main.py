# SPDX-License-Identifier: MIT
"""CLI entry point for the changelog-version command."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Callable, Optional, TypeVar

import click
from pydantic import ValidationError

from .. import __version__
from ..client import ChangelogClient
from ..config import ConfigError, SelectorConfig, load_config
from ..log import setup_logging
from ..models import TimezoneConfig, VersionListResponse
from ..semver import InvalidVersionError

F = TypeVar("F", bound=Callable[..., object])


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.config: Optional[SelectorConfig] = None
        self.verbose: bool = False
        self.project_dir: Optional[Path] = None

    def load_config(self) -> SelectorConfig:
        """Load configuration, caching the result."""
        if self.config is None:
            self.config = load_config(self.project_dir)
        return self.config

    def client(self) -> ChangelogClient:
        config = self.load_config()
        return ChangelogClient(
            config.api_url,
            token=config.token,
            timeout=config.request_timeout,
        )

    def fetch_versions(self, project_id: str) -> list[str]:
        """Fetch a project's versions from the API (empty on failure)."""

        async def _fetch() -> list[str]:
            async with self.client() as client:
                return await client.fetch_versions(project_id)

        return asyncio.run(_fetch())

    def fetch_timezone_config(self) -> TimezoneConfig:
        """Fetch time zone settings from the API (UTC defaults on failure)."""

        async def _fetch() -> TimezoneConfig:
            async with self.client() as client:
                return await client.fetch_timezone_config()

        return asyncio.run(_fetch())

    def load_versions(
        self,
        existing: tuple[str, ...],
        from_file: Optional[Path],
        project: Optional[str],
    ) -> list[str]:
        """Collect the version set from a file, the API and --existing options.

        File or API versions come first (newest first), explicit --existing
        values are appended. Without any source the configured project is
        fetched, if there is one.
        """
        versions: list[str] = []

        if from_file is not None:
            versions.extend(read_versions_file(from_file))

        if project is None and not existing and from_file is None:
            try:
                project = self.load_config().project_id
            except ConfigError as e:
                echo_error(f"Could not load configuration: {e}")
                raise SystemExit(1) from e

        if project:
            if self.verbose:
                echo_info(f"Fetching versions for project {project}...")
            versions.extend(self.fetch_versions(project))

        versions.extend(existing)
        return versions


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


def read_versions_file(path: Path) -> list[str]:
    """Read versions from a JSON list or a ``{"versions": [...]}`` object."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(data, list):
            data = {"versions": data}
        return VersionListResponse.model_validate(data).versions
    except (json.JSONDecodeError, ValidationError) as e:
        echo_error(f"Invalid versions file {path}: {e}")
        raise SystemExit(1) from e


def version_source_options(func: F) -> F:
    """Add the --existing / --from-file / --project options to a command."""
    func = click.option(
        "--project",
        "-p",
        default=None,
        help="Project whose versions are fetched from the changelog API.",
    )(func)
    func = click.option(
        "--from-file",
        "-f",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        default=None,
        help='JSON file with a list of versions or {"versions": [...]}, newest first.',
    )(func)
    func = click.option(
        "--existing",
        "-e",
        multiple=True,
        help="Version already in use (can specify multiple).",
    )(func)
    return func


@click.group()
@click.version_option(version=__version__, prog_name="changelog-version")
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
    help="Read configuration relative to this directory.",
)
@pass_context
def cli(ctx: Context, verbose: bool, directory: Optional[Path]) -> None:
    """Changelog version selection tool.

    Suggest, resolve and check versions for changelog entries.

    \b
    Examples:
        changelog-version suggest -e v1.1.0 -e v1.0.0
        changelog-version check 1.0.0 -e v1.0.0
        changelog-version resolve "v{YYYY}.{MM}.{DD}" --timezone Europe/Berlin
        changelog-version templates --project proj_123 --remote
    """
    ctx.verbose = verbose
    ctx.project_dir = directory
    setup_logging(verbose)


# Import and register commands
from .commands import check, classify, resolve, suggest, templates

cli.add_command(classify.classify)
cli.add_command(suggest.suggest)
cli.add_command(check.check)
cli.add_command(resolve.resolve)
cli.add_command(templates.templates)
cli.add_command(templates.tokens)


def main() -> None:
    """Main entry point for the CLI."""
    try:
        cli()
    except ConfigError as e:
        echo_error(str(e))
        sys.exit(1)
    except InvalidVersionError as e:
        echo_error(str(e))
        sys.exit(1)
    except Exception as e:
        echo_error(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
