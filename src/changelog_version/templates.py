# SPDX-License-Identifier: MIT
"""Version template resolution.

A template is a format string containing ``{TOKEN}`` placeholders that are
expanded against the current date/time in a time zone and the latest known
semantic version::

    >>> from datetime import datetime, timezone
    >>> resolve_template("v{YYYY}.{MM}.{DD}", "UTC", None,
    ...                  now=datetime(2026, 2, 20, 10, 0, tzinfo=timezone.utc))
    'v2026.02.20'

Unknown tokens are left verbatim. There is no escape syntax for literal
braces; they pass through unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, tzinfo
from typing import Optional, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .conflict import VersionCollection, as_version_set, has_conflict, is_current
from .models import DateTemplate
from .semver import LatestParts, Version, as_parts

logger = logging.getLogger(__name__)

BUILT_IN_TEMPLATES: tuple[DateTemplate, ...] = (
    DateTemplate(format="v{YYYY}.{MM}.{DD}", label="Date (dotted)"),
    DateTemplate(format="v{YYYY}.{MM}.{DD}.1", label="Date (rev)"),
    DateTemplate(format="v{YYYY}{MM}{DD}", label="Date (compact)"),
)

# Defaults offered by the admin template editor; same formats, longer labels
ADMIN_DEFAULT_TEMPLATES: tuple[DateTemplate, ...] = (
    DateTemplate(format="v{YYYY}.{MM}.{DD}", label="Date (dotted)"),
    DateTemplate(format="v{YYYY}.{MM}.{DD}.1", label="Date (revision)"),
    DateTemplate(format="v{YYYY}{MM}{DD}", label="Date (compact)"),
)

# Version used by the admin preview, where no project history is available
PREVIEW_VERSION = Version(1, 5, 3)


@dataclass(frozen=True)
class TemplateToken:
    """Documentation entry for a supported placeholder."""

    token: str
    category: str
    description: str
    example: str


TEMPLATE_TOKENS: tuple[TemplateToken, ...] = (
    TemplateToken("{YYYY}", "Date & Time", "Full year", "2026"),
    TemplateToken("{YY}", "Date & Time", "2-digit year", "26"),
    TemplateToken("{MM}", "Date & Time", "Month (01-12)", "02"),
    TemplateToken("{DD}", "Date & Time", "Day (01-31)", "20"),
    TemplateToken("{hh}", "Date & Time", "Hour (00-23)", "14"),
    TemplateToken("{mm}", "Date & Time", "Minute (00-59)", "30"),
    TemplateToken("{ss}", "Date & Time", "Second (00-59)", "45"),
    TemplateToken("{MAJOR}", "Version", "Latest major version number", "1"),
    TemplateToken("{MINOR}", "Version", "Latest minor version number", "5"),
    TemplateToken("{PATCH}", "Version", "Latest patch version number", "3"),
    TemplateToken("{VERSION}", "Version", "Full latest version (no v prefix)", "1.5.3"),
    TemplateToken("{NEXT_PATCH}", "Version", "Next patch number", "4"),
    TemplateToken("{NEXT_MINOR}", "Version", "Next minor number", "6"),
    TemplateToken("{NEXT_MAJOR}", "Version", "Next major number", "2"),
)


@dataclass(frozen=True)
class ResolvedTemplate:
    """A template expanded into a concrete candidate version."""

    value: str
    label: str
    is_conflict: bool = False
    is_current: bool = False


def get_timezone(name: Optional[str]) -> tzinfo:
    """Look up a time zone by IANA name, falling back to UTC.

    An unknown or empty name is not an error for the selector: dates are then
    rendered in UTC and a warning is logged.
    """
    if not name or name.upper() == "UTC":
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        # OSError covers names such as "America" that are tzdata directories
        logger.warning("Unknown time zone %r, falling back to UTC", name)
        return UTC


def _localize(now: Optional[datetime], zone: tzinfo) -> datetime:
    if now is None:
        return datetime.now(zone)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return now.astimezone(zone)


def _substitutions(moment: datetime, latest: tuple[int, int, int]) -> list[tuple[str, str]]:
    year = f"{moment.year:04d}"
    major, minor, patch = latest
    return [
        ("{YYYY}", year),
        ("{YY}", year[-2:]),
        ("{MM}", f"{moment.month:02d}"),
        ("{DD}", f"{moment.day:02d}"),
        ("{hh}", f"{moment.hour:02d}"),
        ("{mm}", f"{moment.minute:02d}"),
        ("{ss}", f"{moment.second:02d}"),
        ("{MAJOR}", str(major)),
        ("{MINOR}", str(minor)),
        ("{PATCH}", str(patch)),
        ("{VERSION}", f"{major}.{minor}.{patch}"),
        ("{NEXT_PATCH}", str(patch + 1)),
        ("{NEXT_MINOR}", str(minor + 1)),
        ("{NEXT_MAJOR}", str(major + 1)),
    ]


def resolve_template(
    format: str,
    timezone: Optional[str] = "UTC",
    latest: LatestParts = None,
    now: Optional[datetime] = None,
) -> str:
    """Expand a template format string into a candidate version.

    Args:
        format: Format string, e.g. ``v{YYYY}.{MM}.{DD}``
        timezone: IANA time zone the date/time tokens are rendered in
        latest: Latest semantic version of the project; (0, 0, 0) if None
        now: Moment to render; the wall clock is read once when omitted.
            Naive datetimes are taken as UTC.

    Returns:
        The format string with every recognised token replaced
    """
    moment = _localize(now, get_timezone(timezone))
    result = format
    for token, value in _substitutions(moment, as_parts(latest)):
        result = result.replace(token, value)
    return result


def preview_template(
    format: str,
    timezone: Optional[str] = "UTC",
    now: Optional[datetime] = None,
) -> str:
    """Resolve a format against sample version 1.5.3 for template previews."""
    return resolve_template(format, timezone, PREVIEW_VERSION, now=now)


def merge_default_templates(templates: Sequence[DateTemplate]) -> list[DateTemplate]:
    """Append the admin default templates whose format is not already present."""
    formats = {template.format for template in templates}
    merged = list(templates)
    merged.extend(t for t in ADMIN_DEFAULT_TEMPLATES if t.format not in formats)
    return merged


def resolve_templates(
    templates: Optional[Sequence[DateTemplate]],
    timezone: Optional[str],
    latest: LatestParts,
    existing: Optional[VersionCollection] = None,
    current: Optional[str] = None,
    now: Optional[datetime] = None,
) -> list[ResolvedTemplate]:
    """Resolve a template list into tagged candidates.

    Admin templates replace the built-in ones when at least one is configured.
    All templates are rendered against the same moment.
    """
    source = templates if templates else BUILT_IN_TEMPLATES
    version_set = as_version_set(existing)
    moment = now if now is not None else datetime.now(UTC)

    resolved: list[ResolvedTemplate] = []
    for template in source:
        value = resolve_template(template.format, timezone, latest, now=moment)
        current_match = is_current(value, current)
        resolved.append(
            ResolvedTemplate(
                value=value,
                label=template.label,
                is_conflict=not current_match and has_conflict(value, version_set, current),
                is_current=current_match,
            )
        )
    return resolved
