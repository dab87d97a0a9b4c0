# SPDX-License-Identifier: MIT
"""Next-version suggestions for a project's version history."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .conflict import VersionCollection, as_version_set, is_current
from .semver import (
    LatestParts,
    Version,
    VersionType,
    as_parts,
    classify,
    is_semantic_version,
    parse_parts,
)

# Upper bound on successive bumps tried before giving up on a free version
MAX_PROBES = 10

BOOTSTRAP_VERSION = "v1.0.0"


@dataclass(frozen=True)
class Candidate:
    """A computed, not-yet-committed version offered to the user.

    Attributes:
        value: Version string as displayed
        type: Bump classification of the value
        is_standard: Whether the value is a semantic version
        is_conflict: Whether the value is already used by another entry
        is_current: Whether the value is the entry's assigned version
    """

    value: str
    type: VersionType
    is_standard: bool = True
    is_conflict: bool = False
    is_current: bool = False


def process_versions(versions: Iterable[str], current: Optional[str] = None) -> list[Candidate]:
    """Tag each existing version for display, keeping the fetched order."""
    return [
        Candidate(
            value=version,
            type=classify(version),
            is_standard=is_semantic_version(version),
            is_current=is_current(version, current),
        )
        for version in versions
    ]


def latest_parts(versions: Iterable[str]) -> Optional[Version]:
    """Return the parts of the first semantic version in fetched order.

    The backend lists versions newest first, so the first semantic entry is
    the latest release. Custom labels are skipped.
    """
    for version in versions:
        if is_semantic_version(version):
            return parse_parts(version)
    return None


def _bump(parts: tuple[int, int, int], kind: VersionType) -> tuple[int, int, int]:
    major, minor, patch = parts
    if kind is VersionType.PATCH:
        return (major, minor, patch + 1)
    if kind is VersionType.MINOR:
        return (major, minor + 1, 0)
    return (major + 1, 0, 0)


def _probe(
    start: tuple[int, int, int],
    kind: VersionType,
    existing: VersionCollection,
    current: Optional[str],
    max_probes: int,
) -> Candidate:
    parts = start
    for attempt in range(max_probes):
        value = "v{}.{}.{}".format(*parts)
        if is_current(value, current):
            return Candidate(value=value, type=kind, is_current=True)
        if value not in existing:
            return Candidate(value=value, type=kind)
        if attempt < max_probes - 1:
            parts = _bump(parts, kind)
    return Candidate(value="v{}.{}.{}".format(*parts), type=kind, is_conflict=True)


def suggest_next(
    existing: Optional[VersionCollection],
    latest: LatestParts,
    current: Optional[str] = None,
    max_probes: int = MAX_PROBES,
) -> list[Candidate]:
    """Suggest the next patch, minor and major versions.

    Each bump starts right after ``latest`` and walks forward one step at a
    time, skipping versions already taken, for at most ``max_probes`` tries.
    The entry's own current version is accepted as soon as it is reached.
    When every probe collides, the last probed value is returned flagged as
    a conflict so the search always terminates.

    Args:
        existing: Versions already used in the project
        latest: Latest semantic version, or None when the project has none
        current: Version currently assigned to the entry being edited
        max_probes: Number of candidates tried per bump type

    Returns:
        ``[patch, minor, major]`` candidates, or a single ``v1.0.0`` bootstrap
        suggestion when there is no semantic version yet

    Examples:
        >>> [c.value for c in suggest_next({"v1.0.0", "v1.1.0"}, (1, 1, 0))]
        ['v1.1.1', 'v1.2.0', 'v2.0.0']
    """
    if latest is None:
        return [
            Candidate(
                value=BOOTSTRAP_VERSION,
                type=VersionType.MAJOR,
                is_current=is_current(BOOTSTRAP_VERSION, current),
            )
        ]

    version_set = as_version_set(existing)
    base = as_parts(latest)
    probes = max(1, max_probes)
    return [
        _probe(_bump(base, kind), kind, version_set, current, probes)
        for kind in (VersionType.PATCH, VersionType.MINOR, VersionType.MAJOR)
    ]
