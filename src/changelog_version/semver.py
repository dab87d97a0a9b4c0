# SPDX-License-Identifier: MIT
"""Semantic version detection and classification for changelog entries.

Changelog versions come in two shapes:
- Semantic: an optional leading ``v`` followed by MAJOR.MINOR.PATCH, where each
  part is one or more digits (leading zeros are accepted).
- Custom: any other non-empty label, e.g. ``beta-1`` or ``nightly``.

The ``v`` prefix is a display convention only; ``1.2.3`` and ``v1.2.3`` name
the same version.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Union

# Matches a single numeric version component
_DIGITS = re.compile(r"[0-9]+")

# MAJOR.MINOR.0 with the prefix already stripped
_MINOR_PATTERN = re.compile(r"\.[0-9]+\.0\Z")


class VersionType(str, Enum):
    """Kind of bump a version label represents."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    CUSTOM = "custom"


TYPE_LABELS: dict[VersionType, str] = {
    VersionType.PATCH: "Patch",
    VersionType.MINOR: "Minor",
    VersionType.MAJOR: "Major",
    VersionType.CUSTOM: "Custom",
}


class InvalidVersionError(Exception):
    """Raised when a version string is not MAJOR.MINOR.PATCH shaped."""

    def __init__(self, version: str, message: str = ""):
        self.version = version
        self.message = message or f"Invalid semantic version: {version}"
        super().__init__(self.message)


@dataclass(frozen=True, slots=True)
class Version:
    """Parsed MAJOR.MINOR.PATCH triple.

    Attributes:
        major: Major version number
        minor: Minor version number
        patch: Patch version number
    """

    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        """Return the unprefixed form, e.g. ``1.5.3``."""
        return f"{self.major}.{self.minor}.{self.patch}"

    @property
    def display(self) -> str:
        """Return the prefixed form, e.g. ``v1.5.3``."""
        return f"v{self}"

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)


def _strip_prefix(version: str) -> str:
    return version[1:] if version.startswith("v") else version


def is_semantic_version(version: str) -> bool:
    """Check whether a string is a semantic version.

    One leading ``v`` is stripped, then the rest must split on ``.`` into
    exactly three all-digit parts. Surrounding whitespace is not trimmed.

    Examples:
        >>> is_semantic_version("v1.2.3")
        True
        >>> is_semantic_version("v01.2.3")
        True
        >>> is_semantic_version("1.2")
        False
        >>> is_semantic_version("")
        False
    """
    if not isinstance(version, str) or not version:
        return False
    parts = _strip_prefix(version).split(".")
    return len(parts) == 3 and all(_DIGITS.fullmatch(part) for part in parts)


def classify(version: str) -> VersionType:
    """Classify a version by its trailing zeros.

    This is a naming heuristic, not a diff against a previous release:
    ``v3.0.0`` is always ``MAJOR`` even if no ``v2.x.x`` ever existed.

    Examples:
        >>> classify("v2.0.0")
        <VersionType.MAJOR: 'major'>
        >>> classify("v1.4.0")
        <VersionType.MINOR: 'minor'>
        >>> classify("nightly")
        <VersionType.CUSTOM: 'custom'>
    """
    if not is_semantic_version(version):
        return VersionType.CUSTOM
    stripped = _strip_prefix(version)
    if stripped.endswith(".0.0"):
        return VersionType.MAJOR
    if _MINOR_PATTERN.search(stripped):
        return VersionType.MINOR
    return VersionType.PATCH


def normalize(version: str) -> str:
    """Return the trimmed version without its leading ``v``.

    Two strings are the same version iff their normalized forms are equal.
    """
    if not version:
        return ""
    return _strip_prefix(version.strip())


def display(version: str) -> str:
    """Return the trimmed version with a leading ``v`` (empty stays empty)."""
    if not version:
        return ""
    trimmed = version.strip()
    if not trimmed or trimmed.startswith("v"):
        return trimmed
    return f"v{trimmed}"


def parse_version(version_string: str) -> Version:
    """Parse a semantic version string into a Version object.

    Args:
        version_string: ``MAJOR.MINOR.PATCH`` with an optional ``v`` prefix

    Returns:
        A Version with integer components

    Raises:
        InvalidVersionError: If the string is not a semantic version

    Examples:
        >>> parse_version("v1.5.3")
        Version(major=1, minor=5, patch=3)
    """
    if not isinstance(version_string, str):
        raise InvalidVersionError(
            str(version_string), f"Version must be a string, got {type(version_string).__name__}"
        )

    if not version_string.strip():
        raise InvalidVersionError(version_string, "Version string cannot be empty")

    if not is_semantic_version(version_string):
        raise InvalidVersionError(version_string)

    major, minor, patch = (int(part) for part in _strip_prefix(version_string).split("."))
    return Version(major=major, minor=minor, patch=patch)


def parse_parts(version: str) -> Optional[Version]:
    """Parse a version, returning None instead of raising for custom labels."""
    try:
        return parse_version(version)
    except InvalidVersionError:
        return None


LatestParts = Union[Version, Sequence[int], None]


def as_parts(latest: LatestParts) -> tuple[int, int, int]:
    """Return ``(major, minor, patch)`` for a Version or 3-sequence; zeros for None."""
    if latest is None:
        return (0, 0, 0)
    if isinstance(latest, Version):
        return latest.as_tuple()
    major, minor, patch = latest
    return (int(major), int(minor), int(patch))
