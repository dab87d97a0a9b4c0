# SPDX-License-Identifier: MIT
"""Tests for configuration loading."""

from __future__ import annotations

import pytest

from changelog_version import ConfigError, SelectorConfig, load_config
from changelog_version.config import SETTLE_DELAY, find_project_root


def write_pyproject(directory, body: str) -> None:
    (directory / "pyproject.toml").write_text(body, encoding="utf-8")


class TestSelectorConfig:
    """Tests for SelectorConfig construction."""

    def test_defaults(self):
        config = SelectorConfig()
        assert config.api_url == "http://localhost:3000"
        assert config.token is None
        assert config.timezone == "UTC"
        assert config.settle_delay == SETTLE_DELAY == 0.3
        assert config.max_probes == 10

    def test_from_mapping_accepts_dashes(self):
        config = SelectorConfig.from_mapping(
            {"api-url": "https://changes.example.com", "max-probes": "5", "settle_delay": 0.1}
        )
        assert config.api_url == "https://changes.example.com"
        assert config.max_probes == 5
        assert config.settle_delay == 0.1

    def test_unknown_keys_ignored(self):
        assert SelectorConfig.from_mapping({"colour": "blue"}) == SelectorConfig()

    def test_invalid_number(self):
        with pytest.raises(ConfigError, match="max_probes"):
            SelectorConfig.from_mapping({"max_probes": "lots"})

    @pytest.mark.parametrize(
        "field, value",
        [("settle_delay", -1.0), ("max_probes", 0), ("request_timeout", 0.0)],
    )
    def test_out_of_range(self, field, value):
        with pytest.raises(ConfigError, match=field):
            SelectorConfig(**{field: value})


class TestFromPyproject:
    """Tests for reading [tool.changelog-version]."""

    def test_reads_section(self, tmp_path):
        write_pyproject(
            tmp_path,
            '[tool.changelog-version]\nproject-id = "proj_9"\ntimezone = "Europe/Paris"\n',
        )
        config = SelectorConfig.from_pyproject(tmp_path)
        assert config.project_id == "proj_9"
        assert config.timezone == "Europe/Paris"

    def test_missing_section_is_defaults(self, tmp_path):
        write_pyproject(tmp_path, '[project]\nname = "x"\n')
        assert SelectorConfig.from_pyproject(tmp_path) == SelectorConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            SelectorConfig.from_pyproject(tmp_path)

    def test_invalid_toml(self, tmp_path):
        write_pyproject(tmp_path, "[tool.changelog-version\n")
        with pytest.raises(ConfigError, match="Invalid TOML"):
            SelectorConfig.from_pyproject(tmp_path)

    def test_section_must_be_table(self, tmp_path):
        write_pyproject(tmp_path, '[tool]\nchangelog-version = "yes"\n')
        with pytest.raises(ConfigError, match="must be a table"):
            SelectorConfig.from_pyproject(tmp_path)


class TestLoadConfig:
    """Tests for layered configuration."""

    def test_environment_overrides_file(self, tmp_path):
        write_pyproject(tmp_path, '[tool.changelog-version]\ntimezone = "Europe/Paris"\n')
        config = load_config(
            tmp_path,
            environ={"CHANGELOG_TIMEZONE": "Asia/Tokyo", "CHANGELOG_TOKEN": "t0k"},
        )
        assert config.timezone == "Asia/Tokyo"
        assert config.token == "t0k"

    def test_empty_environment_value_ignored(self, tmp_path):
        write_pyproject(tmp_path, '[tool.changelog-version]\nproject-id = "proj_1"\n')
        config = load_config(tmp_path, environ={"CHANGELOG_PROJECT": ""})
        assert config.project_id == "proj_1"

    def test_invalid_environment_value(self, tmp_path):
        write_pyproject(tmp_path, "")
        with pytest.raises(ConfigError, match="environment"):
            load_config(tmp_path, environ={"CHANGELOG_SETTLE_DELAY": "soon"})

    def test_searches_parent_directories(self, tmp_path):
        write_pyproject(tmp_path, '[tool.changelog-version]\nmax-probes = 3\n')
        nested = tmp_path / "docs" / "changes"
        nested.mkdir(parents=True)
        assert find_project_root(nested) == tmp_path.resolve()
        assert load_config(nested, environ={}).max_probes == 3

    def test_reads_process_environment(self, tmp_path, monkeypatch):
        write_pyproject(tmp_path, "")
        monkeypatch.setenv("CHANGELOG_API_URL", "https://env.example.com")
        assert load_config(tmp_path).api_url == "https://env.example.com"
