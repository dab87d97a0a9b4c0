# SPDX-License-Identifier: MIT
"""Tests for the version selection controller."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import httpx
import pytest

from changelog_version import (
    ApiError,
    ChangelogClient,
    DateTemplate,
    SelectorState,
    Tab,
    TimezoneConfig,
    VersionSelector,
    reduce,
)
from changelog_version.controller import Reset, TogglePrevious, Update

SETTLE = 0.01


def make_selector(version: str = "", versions=None, **kwargs) -> tuple[VersionSelector, list, list]:
    emitted: list[str] = []
    conflicts: list[bool] = []
    selector = VersionSelector(
        version,
        versions=versions,
        on_version_change=emitted.append,
        on_conflict_detected=conflicts.append,
        settle_delay=SETTLE,
        **kwargs,
    )
    return selector, emitted, conflicts


class TestReducer:
    """Tests for the pure state transition function."""

    def test_update(self):
        state = reduce(SelectorState(), Update.of(input="1.0.0", is_validating=True))
        assert state.input == "1.0.0"
        assert state.is_validating is True

    def test_reset_clears_flags_only(self):
        state = SelectorState(input="x", has_conflict=True, is_validating=True, is_open=True)
        state = reduce(state, Reset())
        assert state == SelectorState(input="x", is_open=True)

    def test_toggle_previous(self):
        state = reduce(SelectorState(), TogglePrevious())
        assert state.show_previous is True
        assert reduce(state, TogglePrevious()).show_previous is False

    def test_reduce_does_not_mutate(self):
        state = SelectorState()
        reduce(state, Update.of(has_conflict=True))
        assert state.has_conflict is False


class TestInitialState:
    """Tests for selector construction and external version changes."""

    def test_starts_with_current_version(self):
        selector, _, _ = make_selector("v1.2.0")
        assert selector.input == "v1.2.0"
        assert selector.tab is Tab.SEMVER
        assert selector.is_open is False

    def test_custom_version_opens_custom_tab(self):
        selector, _, _ = make_selector("nightly")
        assert selector.tab is Tab.CUSTOM

    def test_set_version_forces_custom_tab(self):
        selector, _, _ = make_selector("v1.0.0")
        selector.set_version("beta-2")
        assert selector.tab is Tab.CUSTOM
        assert selector.version == "beta-2"

    def test_set_semantic_version_keeps_tab(self):
        selector, _, _ = make_selector("")
        selector.switch_tab("custom")
        selector.set_version("v2.0.0")
        assert selector.tab is Tab.CUSTOM

    def test_set_version_while_open_resets_flags(self):
        selector, _, _ = make_selector("v1.0.0")
        selector.open()
        selector.dispatch(Update.of(has_conflict=True))
        selector.set_version("v1.0.1")
        assert selector.has_conflict is False


class TestSelection:
    """Tests for choosing a version."""

    def test_select_free_version(self):
        selector, emitted, _ = make_selector("", versions=["v1.0.0"])
        selector.open()
        assert selector.select("1.1.0") is True
        assert emitted == ["v1.1.0"]
        assert selector.is_open is False
        assert selector.has_conflict is False

    def test_select_taken_version(self):
        selector, emitted, _ = make_selector("v2.0.0", versions=["v1.0.0", "v2.0.0"])
        selector.open()
        assert selector.select("1.0.0") is False
        assert emitted == []
        assert selector.has_conflict is True
        assert selector.is_open is True

    def test_reselect_current_version(self):
        selector, emitted, _ = make_selector("v1.0.0", versions=["v1.0.0"])
        selector.open()
        assert selector.select("1.0.0") is True
        assert emitted == ["v1.0.0"]
        assert selector.is_open is False

    def test_select_blank_is_noop(self):
        selector, emitted, _ = make_selector("", versions=[])
        assert selector.select("   ") is False
        assert emitted == []

    def test_submit_blank_input(self):
        selector, emitted, _ = make_selector("", versions=[])
        assert selector.submit_input() is False
        assert emitted == []

    def test_submit_blocked_by_conflict(self):
        selector, emitted, _ = make_selector("", versions=[])
        selector.dispatch(Update.of(input="v3.0.0", has_conflict=True))
        assert selector.submit_input() is False
        assert emitted == []

    def test_submit_typed_custom_label(self):
        selector, emitted, _ = make_selector("", versions=["v1.0.0"])
        selector.dispatch(Update.of(input="beta-1"))
        assert selector.submit_input() is True
        assert emitted == ["vbeta-1"]


class TestOpenClose:
    """Tests for popover state."""

    def test_open_clears_stale_flags(self):
        selector, _, _ = make_selector("")
        selector.dispatch(Update.of(has_conflict=True, is_validating=True))
        selector.open()
        assert selector.is_open is True
        assert selector.has_conflict is False
        assert selector.is_validating is False

    def test_clear_conflict(self):
        selector, _, _ = make_selector("")
        selector.dispatch(Update.of(has_conflict=True, input="v1.0.0"))
        selector.clear_conflict()
        assert selector.has_conflict is False
        assert selector.input == ""

    def test_toggle_previous(self):
        selector, _, _ = make_selector("")
        selector.toggle_previous()
        assert selector.show_previous is True


class TestDebouncedValidation:
    """Tests for the settle-delayed conflict check."""

    @pytest.mark.asyncio
    async def test_conflict_detected_after_settle(self):
        selector, _, conflicts = make_selector("", versions=["v1.0.0"])
        selector.input_changed("1.0.0")
        assert selector.is_validating is True
        assert selector.has_conflict is False

        await selector.wait_idle()

        assert selector.has_conflict is True
        assert selector.is_validating is False
        assert conflicts == [True]

    @pytest.mark.asyncio
    async def test_free_version(self):
        selector, _, conflicts = make_selector("", versions=["v1.0.0"])
        selector.input_changed("1.0.1")
        await selector.wait_idle()
        assert selector.has_conflict is False
        assert conflicts == [False]

    @pytest.mark.asyncio
    async def test_current_version_is_not_a_conflict(self):
        selector, _, conflicts = make_selector("v1.0.0", versions=["v1.0.0"])
        selector.input_changed("1.0.0")
        await selector.wait_idle()
        assert conflicts == [False]

    @pytest.mark.asyncio
    async def test_only_latest_input_is_checked(self):
        checked: list[str] = []

        async def checker(value: str) -> bool:
            checked.append(value)
            return False

        selector, _, conflicts = make_selector("", versions=[], conflict_checker=checker)
        for value in ("1", "1.", "1.0", "1.0.", "1.0.0"):
            selector.input_changed(value)
        await selector.wait_idle()

        assert checked == ["1.0.0"]
        assert conflicts == [False]

    @pytest.mark.asyncio
    async def test_blank_input_clears_flags(self):
        selector, _, conflicts = make_selector("", versions=["v1.0.0"])
        selector.dispatch(Update.of(has_conflict=True))
        selector.input_changed("  ")
        await selector.wait_idle()
        assert selector.has_conflict is False
        assert selector.is_validating is False
        assert conflicts == []

    @pytest.mark.asyncio
    async def test_slow_stale_check_does_not_overwrite(self):
        """Test that an earlier, slower check cannot clobber the latest result."""
        started = asyncio.Event()
        release = asyncio.Event()
        applied = asyncio.Event()

        async def checker(value: str) -> bool:
            if value == "1.0.0":
                started.set()
                await release.wait()
                return True
            return False

        conflicts: list[bool] = []

        def on_conflict(result: bool) -> None:
            conflicts.append(result)
            applied.set()

        selector = VersionSelector(
            "",
            versions=["v1.0.0"],
            conflict_checker=checker,
            on_conflict_detected=on_conflict,
            settle_delay=SETTLE,
        )

        selector.input_changed("1.0.0")
        await asyncio.wait_for(started.wait(), timeout=1)

        selector.input_changed("1.0.1")
        await asyncio.wait_for(applied.wait(), timeout=1)
        assert selector.has_conflict is False

        release.set()
        await selector.wait_idle()

        assert selector.has_conflict is False
        assert selector.is_validating is False
        assert conflicts == [False]

    @pytest.mark.asyncio
    async def test_close_supersedes_pending_check(self):
        selector, _, conflicts = make_selector("", versions=["v1.0.0"])
        selector.open()
        selector.input_changed("1.0.0")
        selector.close()
        await selector.wait_idle()
        assert conflicts == []
        assert selector.is_validating is False
        assert selector.has_conflict is False

    @pytest.mark.asyncio
    async def test_failed_check_clears_validating(self):
        async def checker(value: str) -> bool:
            raise ApiError("boom", status_code=500)

        selector, _, conflicts = make_selector("", versions=[], conflict_checker=checker)
        selector.input_changed("1.0.0")
        await selector.wait_idle()
        assert selector.is_validating is False
        assert conflicts == []

    @pytest.mark.asyncio
    async def test_unexpected_check_error_clears_validating(self):
        async def checker(value: str) -> bool:
            raise RuntimeError("checker bug")

        selector, _, conflicts = make_selector("", versions=[], conflict_checker=checker)
        selector.dispatch(Update.of(has_conflict=True))
        selector.input_changed("1.0.0")
        await selector.wait_idle()
        assert selector.is_validating is False
        assert selector.has_conflict is True
        assert conflicts == []

    @pytest.mark.asyncio
    async def test_aclose_cancels_pending(self):
        selector, _, conflicts = make_selector("", versions=["v1.0.0"])
        selector.settle_delay = 10
        selector.input_changed("1.0.0")
        await selector.aclose()
        assert conflicts == []

    @pytest.mark.asyncio
    async def test_check_loads_versions_on_demand(self):
        calls = 0

        async def fetch() -> list[str]:
            nonlocal calls
            calls += 1
            return ["v1.0.0"]

        selector, _, conflicts = make_selector("", fetch_versions=fetch)
        assert selector.versions_loaded is False
        selector.input_changed("v1.0.0")
        await selector.wait_idle()
        assert calls == 1
        assert conflicts == [True]


class TestRefresh:
    """Tests for fetching the version list."""

    @pytest.mark.asyncio
    async def test_refresh_replaces_snapshot(self):
        batches = [["v1.0.0"], ["v1.1.0", "v1.0.0"]]

        async def fetch() -> list[str]:
            return batches.pop(0)

        selector, _, _ = make_selector("", fetch_versions=fetch)
        await selector.refresh()
        assert list(selector.existing) == ["v1.0.0"]
        await selector.refresh()
        assert list(selector.existing) == ["v1.1.0", "v1.0.0"]
        assert selector.is_loading is False

    @pytest.mark.asyncio
    async def test_failed_fetch_means_no_versions(self):
        async def fetch() -> list[str]:
            raise httpx.ConnectError("unreachable")

        selector, _, _ = make_selector("", fetch_versions=fetch)
        versions = await selector.refresh()
        assert list(versions) == []
        assert selector.versions_loaded is True
        assert [c.value for c in selector.suggestions] == ["v1.0.0"]

    @pytest.mark.asyncio
    async def test_overlapping_fetches_keep_latest(self):
        release = asyncio.Event()
        responses = iter([["v0.9.0"], ["v2.0.0"]])

        async def fetch() -> list[str]:
            result = next(responses)
            if result == ["v0.9.0"]:
                await release.wait()
            return result

        selector, _, _ = make_selector("", fetch_versions=fetch)
        slow = asyncio.create_task(selector.refresh())
        await asyncio.sleep(0)
        await selector.refresh()
        release.set()
        await slow

        assert list(selector.existing) == ["v2.0.0"]

    @pytest.mark.asyncio
    async def test_cancelled_refresh_clears_loading(self):
        started = asyncio.Event()

        async def fetch() -> list[str]:
            started.set()
            await asyncio.Event().wait()
            return []

        selector, _, _ = make_selector("", fetch_versions=fetch)
        task = asyncio.create_task(selector.refresh())
        await asyncio.wait_for(started.wait(), timeout=1)
        assert selector.is_loading is True
        assert selector.empty_message == "Loading..."

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert selector.is_loading is False
        assert selector.empty_message == "No versions yet"

    @pytest.mark.asyncio
    async def test_unexpected_fetch_error_clears_loading(self):
        async def fetch() -> list[str]:
            raise RuntimeError("fetcher bug")

        selector, _, _ = make_selector("", fetch_versions=fetch)
        with pytest.raises(RuntimeError):
            await selector.refresh()
        assert selector.is_loading is False

    @pytest.mark.asyncio
    async def test_aclose_during_lazy_load(self):
        """Test that closing while the first check loads versions resets both flags."""
        started = asyncio.Event()

        async def fetch() -> list[str]:
            started.set()
            await asyncio.Event().wait()
            return []

        selector, _, conflicts = make_selector("", fetch_versions=fetch)
        selector.input_changed("1.0.0")
        await asyncio.wait_for(started.wait(), timeout=1)
        assert selector.is_loading is True

        await selector.aclose()

        assert selector.is_loading is False
        assert selector.is_validating is False
        assert conflicts == []

    @pytest.mark.asyncio
    async def test_refresh_without_fetcher(self):
        selector, _, _ = make_selector("", versions=["v1.0.0"])
        assert list(await selector.refresh()) == ["v1.0.0"]

    def test_load_versions(self):
        selector, _, _ = make_selector("")
        selector.load_versions(["v3.0.0"])
        assert "3.0.0" in selector.existing


class TestDerivedViews:
    """Tests for the lists and labels the picker displays."""

    def test_suggestions(self, project_versions):
        selector, _, _ = make_selector("", versions=project_versions)
        assert [c.value for c in selector.suggestions] == ["v1.1.1", "v1.2.0", "v2.0.0"]

    def test_previous_versions_follow_tab(self, project_versions):
        selector, _, _ = make_selector("", versions=project_versions)
        assert [c.value for c in selector.previous_versions] == ["v1.1.0", "v1.0.1", "1.0.0"]
        assert selector.previous_heading == "Previous versions"
        selector.switch_tab(Tab.CUSTOM)
        assert [c.value for c in selector.previous_versions] == ["nightly", "beta-1"]
        assert selector.previous_heading == "Previous custom versions"

    def test_switching_tab_keeps_input(self):
        selector, _, _ = make_selector("v1.0.0")
        selector.switch_tab("custom")
        assert selector.input == "v1.0.0"
        assert selector.typed_heading == "Custom Name"
        selector.switch_tab("semver")
        assert selector.typed_heading == "Use as typed"

    def test_templates_use_clock_and_timezone(self):
        clock = lambda: datetime(2026, 2, 20, 20, 30, tzinfo=UTC)  # noqa: E731
        selector, _, _ = make_selector("", versions=[], timezone="Asia/Tokyo", clock=clock)
        assert selector.templates[0].value == "v2026.02.21"
        assert selector.candidates_heading == "Recommended"
        selector.switch_tab("custom")
        assert selector.candidates_heading == "Date Formats"

    def test_admin_templates(self, fixed_now):
        selector, _, _ = make_selector("", versions=["v1.4.2"], clock=lambda: fixed_now)
        selector.set_timezone_config(
            TimezoneConfig(
                timezone="UTC",
                customDateTemplates=[DateTemplate(format="{VERSION}-{YY}", label="Tagged")],
            )
        )
        selector.switch_tab("custom")
        assert [t.value for t in selector.templates] == ["1.4.2-26"]
        assert selector.candidates_heading == "Templates"

    def test_input_matches_candidate(self, fixed_now):
        selector, _, _ = make_selector("", versions=["v1.0.0"], clock=lambda: fixed_now)
        assert selector.input_matches_candidate is True
        selector.dispatch(Update.of(input="1.0.1"))
        assert selector.input_matches_candidate is True
        assert selector.show_typed_option is False
        selector.dispatch(Update.of(input="1.0.5"))
        assert selector.show_typed_option is True
        selector.switch_tab("custom")
        selector.dispatch(Update.of(input="2026.02.20"))
        assert selector.input_matches_candidate is True

    def test_empty_message(self):
        selector, _, _ = make_selector("", versions=[])
        assert selector.empty_message == "No versions yet"
        selector.switch_tab("custom")
        assert selector.empty_message == "Type a name or pick a template"
        selector.dispatch(Update.of(input="rc1"))
        assert selector.empty_message == "Press Enter to use vrc1"
        selector.dispatch(Update.of(has_conflict=True))
        assert selector.empty_message == "Already exists"

    def test_version_type(self):
        selector, _, _ = make_selector("v2.0.0")
        assert selector.version_type is not None
        assert selector.version_type.value == "major"
        assert make_selector("")[0].version_type is None


class TestFromClient:
    """Tests for building a selector from the API client."""

    @pytest.mark.asyncio
    async def test_from_client(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/api/config/timezone":
                return httpx.Response(
                    200,
                    json={
                        "timezone": "Europe/Berlin",
                        "source": "system",
                        "allowUserTimezone": True,
                        "customDateTemplates": [{"format": "r{NEXT_MINOR}", "label": "Next"}],
                    },
                )
            if request.url.path == "/api/projects/proj_1/versions":
                return httpx.Response(200, json={"versions": ["v1.2.0", "v1.1.0"]})
            return httpx.Response(404)

        async with ChangelogClient(
            "https://changes.example.com", transport=httpx.MockTransport(handler)
        ) as client:
            selector = await VersionSelector.from_client(
                client, "proj_1", version="v1.2.0", settle_delay=SETTLE
            )

        assert selector.timezone == "Europe/Berlin"
        assert list(selector.existing) == ["v1.2.0", "v1.1.0"]
        assert [t.value for t in selector.templates] == ["r3"]
        assert [c.value for c in selector.suggestions] == ["v1.2.1", "v1.3.0", "v2.0.0"]
