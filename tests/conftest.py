# SPDX-License-Identifier: MIT
"""Pytest configuration and fixtures for changelog-version tests."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from click.testing import CliRunner

from changelog_version.config import _ENV_VARS


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep CHANGELOG_* variables from the developer's shell out of tests."""
    for var in _ENV_VARS.values():
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def fixed_now() -> datetime:
    """2026-02-20 10:00:00 UTC."""
    return datetime(2026, 2, 20, 10, 0, 0, tzinfo=UTC)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def project_versions() -> list[str]:
    """A project history as the API returns it, newest first."""
    return ["v1.1.0", "nightly", "v1.0.1", "1.0.0", "beta-1"]
