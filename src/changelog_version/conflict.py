# SPDX-License-Identifier: MIT
"""Collision detection between candidate versions and a project's history."""

from __future__ import annotations

from typing import AbstractSet, Iterable, Iterator, Optional, Union

from .semver import display, normalize


class VersionSet:
    """Immutable snapshot of the versions already used in a project.

    The stored strings keep their fetched order and spelling; membership
    checks accept either the prefixed or the unprefixed form of a version,
    since the backend may store either.
    """

    __slots__ = ("_ordered", "_members")

    def __init__(self, versions: Iterable[str] = ()) -> None:
        ordered: list[str] = []
        seen: set[str] = set()
        for version in versions:
            if version not in seen:
                seen.add(version)
                ordered.append(version)
        self._ordered = tuple(ordered)
        self._members = frozenset(seen)

    def __contains__(self, candidate: object) -> bool:
        if not isinstance(candidate, str) or not candidate.strip():
            return False
        full = display(candidate)
        return full in self._members or normalize(full) in self._members

    def __iter__(self) -> Iterator[str]:
        return iter(self._ordered)

    def __len__(self) -> int:
        return len(self._ordered)

    def __bool__(self) -> bool:
        return bool(self._ordered)

    def __repr__(self) -> str:
        return f"VersionSet({list(self._ordered)!r})"

    @property
    def versions(self) -> tuple[str, ...]:
        """The versions in fetched order."""
        return self._ordered


VersionCollection = Union[VersionSet, AbstractSet[str], Iterable[str]]


def as_version_set(existing: Optional[VersionCollection]) -> VersionSet:
    """Coerce any collection of version strings to a VersionSet."""
    if isinstance(existing, VersionSet):
        return existing
    return VersionSet(existing or ())


def is_current(candidate: str, current: Optional[str]) -> bool:
    """Check whether a candidate names the entry's already-assigned version."""
    if not candidate or not current:
        return False
    return normalize(candidate) == normalize(current)


def has_conflict(
    candidate: str,
    existing: Optional[VersionCollection],
    current: Optional[str] = None,
) -> bool:
    """Check whether a candidate collides with an already-used version.

    Re-selecting the entry's own current version is never a conflict. A blank
    candidate is a validation problem rather than a conflict, so it reports
    False as well.

    Args:
        candidate: Version the user wants to assign
        existing: Versions already used in the project, in any spelling
        current: Version currently assigned to the entry being edited

    Returns:
        True if the display or normalized form of the candidate is taken

    Examples:
        >>> has_conflict("1.0.0", {"v1.0.0"}, "v1.0.0")
        False
        >>> has_conflict("v1.0.0", {"v1.0.0"}, "v2.0.0")
        True
    """
    if not candidate or not candidate.strip():
        return False
    if is_current(candidate, current):
        return False
    return candidate in as_version_set(existing)
