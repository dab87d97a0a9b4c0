# SPDX-License-Identifier: MIT
"""Version selection and conflict resolution for changelog entries.

This package proposes the next semantic version for a changelog entry,
recognises custom (non-semver) version labels, resolves date/version
templates, and detects collisions with versions a project already uses.

Example:
    >>> from changelog_version import classify, has_conflict, suggest_next
    >>>
    >>> classify("v1.4.0").value
    'minor'
    >>> [c.value for c in suggest_next({"v1.0.0", "v1.1.0"}, (1, 1, 0))]
    ['v1.1.1', 'v1.2.0', 'v2.0.0']
    >>> has_conflict("1.0.0", {"v1.0.0"}, current="v2.0.0")
    True
"""

__version__ = "0.1.0"

from .semver import (
    TYPE_LABELS,
    InvalidVersionError,
    Version,
    VersionType,
    classify,
    display,
    is_semantic_version,
    normalize,
    parse_parts,
    parse_version,
)
from .conflict import (
    VersionSet,
    has_conflict,
    is_current,
)
from .models import (
    DateTemplate,
    TimezoneConfig,
    VersionListResponse,
)
from .templates import (
    ADMIN_DEFAULT_TEMPLATES,
    BUILT_IN_TEMPLATES,
    TEMPLATE_TOKENS,
    ResolvedTemplate,
    merge_default_templates,
    preview_template,
    resolve_template,
    resolve_templates,
)
from .suggest import (
    MAX_PROBES,
    Candidate,
    latest_parts,
    process_versions,
    suggest_next,
)
from .client import (
    ApiError,
    ChangelogClient,
)
from .config import (
    ConfigError,
    SelectorConfig,
    load_config,
)
from .controller import (
    SelectorState,
    Tab,
    VersionSelector,
    reduce,
)

__all__ = [
    # Classification
    "TYPE_LABELS",
    "InvalidVersionError",
    "Version",
    "VersionType",
    "classify",
    "display",
    "is_semantic_version",
    "normalize",
    "parse_parts",
    "parse_version",
    # Conflicts
    "VersionSet",
    "has_conflict",
    "is_current",
    # API payloads
    "DateTemplate",
    "TimezoneConfig",
    "VersionListResponse",
    # Templates
    "ADMIN_DEFAULT_TEMPLATES",
    "BUILT_IN_TEMPLATES",
    "TEMPLATE_TOKENS",
    "ResolvedTemplate",
    "merge_default_templates",
    "preview_template",
    "resolve_template",
    "resolve_templates",
    # Suggestions
    "MAX_PROBES",
    "Candidate",
    "latest_parts",
    "process_versions",
    "suggest_next",
    # API client
    "ApiError",
    "ChangelogClient",
    # Configuration
    "ConfigError",
    "SelectorConfig",
    "load_config",
    # Selection
    "SelectorState",
    "Tab",
    "VersionSelector",
    "reduce",
]
