"""Tests for application settings."""

from __future__ import annotations

from pathlib import Path

import pytest

from searchsync.config.settings import BackendConfig, Settings


class TestDefaults:
    def test_defaults(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.app_name == "searchsync"
        assert s.search.backend == "opensearch"
        assert s.search.index_prefix == ""
        assert s.search.query_limit == 100
        assert s.codec.indent_output is False
        assert s.observability.log_format == "json"

    def test_query_limit_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            Settings(_env_file=None, search={"query_limit": 0})  # type: ignore[call-arg]


class TestEnvironment:
    def test_nested_env_vars(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SEARCHSYNC_SEARCH__BACKEND", "meilisearch")
        monkeypatch.setenv("SEARCHSYNC_SEARCH__INDEX_PREFIX", "onboarding-")
        monkeypatch.setenv("SEARCHSYNC_CODEC__INDENT_OUTPUT", "true")

        s = Settings(_env_file=None)  # type: ignore[call-arg]

        assert s.search.backend == "meilisearch"
        assert s.search.index_prefix == "onboarding-"
        assert s.codec.indent_output is True


class TestBackendConfig:
    def test_hosts_from_json_string(self) -> None:
        assert BackendConfig(hosts='["http://a:9200", "http://b:9200"]').hosts == [
            "http://a:9200",
            "http://b:9200",
        ]

    def test_hosts_from_plain_string(self) -> None:
        assert BackendConfig(hosts="http://a:9200").hosts == ["http://a:9200"]

    def test_hosts_empty_string(self) -> None:
        assert BackendConfig(hosts="").hosts == []


class TestFromYaml:
    def test_loads_nested_sections(self, tmp_path: Path) -> None:
        config = tmp_path / "searchsync.yaml"
        config.write_text(
            "search:\n"
            "  backend: meilisearch\n"
            "  query_limit: 25\n"
            "  backends:\n"
            "    meilisearch:\n"
            "      hosts: [\"http://localhost:7700\"]\n"
            "      api_key: secret\n"
            "codec:\n"
            "  indent_output: true\n"
        )

        s = Settings.from_yaml(config)

        assert s.search.backend == "meilisearch"
        assert s.search.query_limit == 25
        assert s.search.backends["meilisearch"].api_key == "secret"
        assert s.codec.indent_output is True

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        config = tmp_path / "empty.yaml"
        config.write_text("")
        assert Settings.from_yaml(config).search.backend == "opensearch"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            Settings.from_yaml(tmp_path / "nope.yaml")
