# SPDX-License-Identifier: MIT
"""Stateful version selection for the changelog entry editor.

The selector owns the free-text input, the active tab and the open/closed
state, and runs debounced conflict checks as the user types. State changes
go through a pure reducer over explicit action types; the only asynchronous
parts are the settle delay before a check and the version list fetch.

Only the most recent input is ever evaluated. Every keystroke and every close
bumps an epoch counter, and a check whose epoch is stale is dropped both
before and after it awaits, so a slow answer for an earlier value can never
overwrite the result for a newer one.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from functools import partial
from typing import Any, Awaitable, Callable, Coroutine, Iterable, Optional, Sequence, Union

import httpx

from .client import ApiError, ChangelogClient
from .config import SETTLE_DELAY
from .conflict import VersionSet, has_conflict, is_current
from .models import DateTemplate, TimezoneConfig
from .semver import Version, VersionType, classify, display, is_semantic_version
from .suggest import MAX_PROBES, Candidate, latest_parts, process_versions, suggest_next
from .templates import ResolvedTemplate, resolve_templates

logger = logging.getLogger(__name__)

VersionFetcher = Callable[[], Awaitable[Sequence[str]]]
ConflictChecker = Callable[[str], Awaitable[bool]]


class Tab(str, Enum):
    """Which candidate list the selector shows."""

    SEMVER = "semver"
    CUSTOM = "custom"


@dataclass(frozen=True)
class SelectorState:
    """UI state owned by a single selector."""

    input: str = ""
    tab: Tab = Tab.SEMVER
    is_open: bool = False
    show_previous: bool = False
    has_conflict: bool = False
    is_validating: bool = False


@dataclass(frozen=True)
class Update:
    """Overwrite some state fields."""

    changes: dict[str, Any]

    @classmethod
    def of(cls, **changes: Any) -> "Update":
        return cls(changes)


@dataclass(frozen=True)
class Reset:
    """Clear stale conflict and validation flags."""


@dataclass(frozen=True)
class TogglePrevious:
    """Expand or collapse the previous-versions list."""


Action = Union[Update, Reset, TogglePrevious]


def reduce(state: SelectorState, action: Action) -> SelectorState:
    """Apply an action to a state, returning the new state."""
    if isinstance(action, Reset):
        return replace(state, has_conflict=False, is_validating=False)
    if isinstance(action, TogglePrevious):
        return replace(state, show_previous=not state.show_previous)
    if isinstance(action, Update):
        return replace(state, **action.changes)
    return state


def _initial_tab(version: str) -> Tab:
    return Tab.CUSTOM if version and not is_semantic_version(version) else Tab.SEMVER


class VersionSelector:
    """Version picker for one changelog entry.

    Args:
        version: Version currently assigned to the entry, or empty
        versions: Initial snapshot of the project's versions, newest first
        fetch_versions: Coroutine function returning the project's versions;
            used by :meth:`refresh` and for the first conflict check
        timezone: Time zone date templates are rendered in
        templates: Admin templates; the built-in date templates when empty
        on_version_change: Called with the chosen version (``v``-prefixed)
        on_conflict_detected: Called with each applied conflict check result
        conflict_checker: Replaces the local check against the version set
        settle_delay: Seconds of input inactivity before a conflict check
        max_probes: Candidates tried per bump type for suggestions
        clock: Source of the current moment for template resolution
    """

    def __init__(
        self,
        version: str = "",
        *,
        versions: Optional[Iterable[str]] = None,
        fetch_versions: Optional[VersionFetcher] = None,
        timezone: str = "UTC",
        templates: Optional[Sequence[DateTemplate]] = None,
        on_version_change: Optional[Callable[[str], None]] = None,
        on_conflict_detected: Optional[Callable[[bool], None]] = None,
        conflict_checker: Optional[ConflictChecker] = None,
        settle_delay: float = SETTLE_DELAY,
        max_probes: int = MAX_PROBES,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.version = version or ""
        self.timezone = timezone
        self.admin_templates: list[DateTemplate] = list(templates or [])
        self.settle_delay = settle_delay
        self.max_probes = max_probes
        self.is_loading = False
        self.state = SelectorState(input=self.version, tab=_initial_tab(self.version))

        self._existing: Optional[VersionSet] = VersionSet(versions) if versions is not None else None
        self._fetch_versions = fetch_versions
        self._on_version_change = on_version_change
        self._on_conflict_detected = on_conflict_detected
        self._conflict_checker = conflict_checker
        self._clock = clock
        self._input_epoch = 0
        self._fetch_epoch = 0
        self._tasks: set[asyncio.Task[None]] = set()

    @classmethod
    async def from_client(
        cls,
        client: ChangelogClient,
        project_id: str,
        version: str = "",
        **kwargs: Any,
    ) -> "VersionSelector":
        """Create a selector fed by the changelog API and load its data."""
        tz_config = await client.fetch_timezone_config()
        selector = cls(
            version,
            fetch_versions=partial(client.fetch_versions, project_id),
            timezone=tz_config.timezone,
            templates=tz_config.custom_date_templates,
            **kwargs,
        )
        await selector.refresh()
        return selector

    # ----- State -----

    def dispatch(self, action: Action) -> None:
        self.state = reduce(self.state, action)

    @property
    def input(self) -> str:
        return self.state.input

    @property
    def tab(self) -> Tab:
        return self.state.tab

    @property
    def is_open(self) -> bool:
        return self.state.is_open

    @property
    def show_previous(self) -> bool:
        return self.state.show_previous

    @property
    def has_conflict(self) -> bool:
        return self.state.has_conflict

    @property
    def is_validating(self) -> bool:
        return self.state.is_validating

    # ----- Version data -----

    @property
    def existing(self) -> VersionSet:
        """The current version snapshot; empty until loaded."""
        return self._existing if self._existing is not None else VersionSet()

    @property
    def versions_loaded(self) -> bool:
        return self._existing is not None

    def load_versions(self, versions: Iterable[str]) -> None:
        """Replace the version snapshot, superseding any fetch in flight."""
        self._fetch_epoch += 1
        self.is_loading = False
        self._existing = VersionSet(versions)

    async def refresh(self) -> VersionSet:
        """Re-fetch the project's versions and replace the snapshot.

        A failed fetch counts as "no versions yet". When fetches overlap,
        only the most recently started one is applied.
        """
        if self._fetch_versions is None:
            return self.existing

        self._fetch_epoch += 1
        epoch = self._fetch_epoch
        self.is_loading = True
        try:
            versions: Sequence[str] = await self._fetch_versions()
        except (ApiError, httpx.HTTPError) as e:
            logger.warning("Version list fetch failed: %s", e)
            versions = []
        finally:
            if epoch == self._fetch_epoch:
                self.is_loading = False

        if epoch != self._fetch_epoch:
            logger.debug("Discarding stale version list (%d entries)", len(versions))
            return self.existing

        self._existing = VersionSet(versions)
        return self._existing

    def set_timezone_config(self, config: TimezoneConfig) -> None:
        self.timezone = config.timezone
        self.admin_templates = list(config.custom_date_templates or [])

    # ----- Transitions -----

    def set_open(self, is_open: bool) -> None:
        """Open or close the picker.

        Opening clears flags left over from an earlier session; closing
        supersedes any pending conflict check.
        """
        if is_open:
            self.dispatch(Update.of(is_open=True))
            self.dispatch(Reset())
        else:
            self._input_epoch += 1
            self.dispatch(Update.of(is_open=False, is_validating=False))

    def open(self) -> None:
        self.set_open(True)

    def close(self) -> None:
        self.set_open(False)

    def switch_tab(self, tab: Union[Tab, str]) -> None:
        self.dispatch(Update.of(tab=Tab(tab)))

    def toggle_previous(self) -> None:
        self.dispatch(TogglePrevious())

    def clear_conflict(self) -> None:
        """Dismiss the conflict banner and empty the input."""
        self._input_epoch += 1
        self.dispatch(Update.of(has_conflict=False, is_validating=False, input=""))

    def set_version(self, version: str) -> None:
        """Apply an externally changed version, e.g. after the entry reloads."""
        self.version = version or ""
        if self.version and not is_semantic_version(self.version):
            self.dispatch(Update.of(tab=Tab.CUSTOM))
        if self.is_open:
            self.dispatch(Reset())

    def input_changed(self, value: str) -> None:
        """Record typed input and schedule a debounced conflict check.

        Must be called from a running event loop when the value is non-blank.
        """
        self._input_epoch += 1
        if not value.strip():
            self.dispatch(Update.of(input=value, is_validating=False, has_conflict=False))
            return

        self.dispatch(Update.of(input=value, is_validating=True))
        self._spawn(self._settle(value, self._input_epoch))

    def select(self, value: str) -> bool:
        """Try to choose a version.

        Returns:
            True if the version was emitted, False if it was blank or taken
        """
        if not value or not value.strip():
            return False

        chosen = display(value)
        if is_current(chosen, self.version):
            self._emit(chosen)
            return True

        if has_conflict(chosen, self.existing, self.version):
            self.dispatch(Update.of(has_conflict=True))
            return False

        self._emit(chosen)
        return True

    def submit_input(self) -> bool:
        """Select the typed input, as pressing Enter does."""
        if not self.input.strip() or self.has_conflict:
            return False
        return self.select(self.input)

    # ----- Async plumbing -----

    def _emit(self, version: str) -> None:
        self._input_epoch += 1
        if self._on_version_change is not None:
            self._on_version_change(version)
        self.dispatch(Update.of(is_open=False, has_conflict=False, is_validating=False))

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _check(self, value: str) -> bool:
        if self._conflict_checker is not None:
            return await self._conflict_checker(value)
        if self._existing is None:
            await self.refresh()
        return has_conflict(value, self.existing, self.version)

    async def _settle(self, value: str, epoch: int) -> None:
        await asyncio.sleep(self.settle_delay)
        if epoch != self._input_epoch:
            return

        try:
            conflict = await self._check(value)
        except (ApiError, httpx.HTTPError) as e:
            logger.warning("Conflict check for %r failed: %s", value, e)
            return
        finally:
            # A failed or cancelled check leaves has_conflict untouched
            if epoch == self._input_epoch:
                self.dispatch(Update.of(is_validating=False))

        if epoch != self._input_epoch:
            logger.debug("Discarding stale conflict result for %r", value)
            return

        self.dispatch(Update.of(has_conflict=conflict, is_validating=False))
        if self._on_conflict_detected is not None:
            self._on_conflict_detected(conflict)

    async def wait_idle(self) -> None:
        """Wait until every scheduled conflict check has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel pending checks, e.g. when the editor unmounts."""
        self._input_epoch += 1
        self.dispatch(Update.of(is_validating=False))
        for task in list(self._tasks):
            task.cancel()
        await self.wait_idle()

    # ----- Derived views -----

    @property
    def version_type(self) -> Optional[VersionType]:
        return classify(self.version) if self.version else None

    @property
    def processed(self) -> list[Candidate]:
        return process_versions(self.existing, self.version)

    @property
    def semver_versions(self) -> list[Candidate]:
        return [c for c in self.processed if c.is_standard]

    @property
    def custom_versions(self) -> list[Candidate]:
        return [c for c in self.processed if not c.is_standard]

    @property
    def previous_versions(self) -> list[Candidate]:
        return self.semver_versions if self.tab is Tab.SEMVER else self.custom_versions

    @property
    def latest(self) -> Optional[Version]:
        return latest_parts(self.existing)

    @property
    def suggestions(self) -> list[Candidate]:
        return suggest_next(self.existing, self.latest, self.version, self.max_probes)

    @property
    def has_admin_templates(self) -> bool:
        return bool(self.admin_templates)

    @property
    def templates(self) -> list[ResolvedTemplate]:
        now = self._clock() if self._clock is not None else None
        return resolve_templates(
            self.admin_templates,
            self.timezone,
            self.latest,
            self.existing,
            self.version,
            now=now,
        )

    @property
    def input_matches_candidate(self) -> bool:
        """Whether the typed input already appears as a listed candidate."""
        if not self.input.strip():
            return True
        typed = display(self.input)
        if self.tab is Tab.SEMVER:
            return any(s.value == typed for s in self.suggestions)
        return any(t.value == typed for t in self.templates)

    @property
    def show_typed_option(self) -> bool:
        return bool(self.input.strip()) and not self.input_matches_candidate

    @property
    def typed_heading(self) -> str:
        return "Use as typed" if self.tab is Tab.SEMVER else "Custom Name"

    @property
    def candidates_heading(self) -> str:
        if self.tab is Tab.SEMVER:
            return "Recommended"
        return "Templates" if self.has_admin_templates else "Date Formats"

    @property
    def previous_heading(self) -> str:
        return "Previous versions" if self.tab is Tab.SEMVER else "Previous custom versions"

    @property
    def empty_message(self) -> str:
        if self.is_loading:
            return "Loading..."
        if self.input.strip():
            if self.has_conflict:
                return "Already exists"
            return f"Press Enter to use {display(self.input)}"
        return "No versions yet" if self.tab is Tab.SEMVER else "Type a name or pick a template"
