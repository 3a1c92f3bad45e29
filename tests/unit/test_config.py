"""Unit tests for settings defaults and credential loading."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from repogrep.config import (
    DEFAULT_CONCURRENCY,
    TOKEN_ENV_VAR,
    Settings,
    load_settings,
    load_token,
)
from repogrep.errors import ErrorCode, RepoGrepError


class TestDefaults:
    def test_fetch_defaults(self) -> None:
        settings = Settings()
        assert settings.fetch.concurrency == DEFAULT_CONCURRENCY == 100
        assert settings.fetch.cache_dir == "./.cache"

    def test_github_defaults(self) -> None:
        settings = Settings()
        assert settings.github.api_base == "https://api.github.com"
        assert settings.github.api_version == "2022-11-28"

    def test_crawl_has_page_ceiling(self) -> None:
        assert Settings().crawl.max_pages >= 1

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REPOGREP__FETCH__CONCURRENCY", "7")
        assert Settings().fetch.concurrency == 7

    def test_concurrency_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            Settings(fetch={"concurrency": 0})


class TestLoadToken:
    def test_reads_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(TOKEN_ENV_VAR, "ghp_abc")
        assert load_token() == "ghp_abc"

    def test_missing_is_fatal(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(TOKEN_ENV_VAR, raising=False)
        with pytest.raises(RepoGrepError) as exc_info:
            load_token()
        assert exc_info.value.code == ErrorCode.MISSING_TOKEN

    def test_blank_is_fatal(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(TOKEN_ENV_VAR, "   ")
        with pytest.raises(RepoGrepError):
            load_token()


class TestLoadSettings:
    def test_valid_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REPOGREP__CRAWL__MAX_PAGES", "5")
        assert load_settings().crawl.max_pages == 5

    def test_invalid_value_is_config_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REPOGREP__FETCH__CONCURRENCY", "0")
        with pytest.raises(RepoGrepError) as exc_info:
            load_settings()
        assert exc_info.value.code == ErrorCode.INVALID_CONFIG
        assert "fetch.concurrency" in exc_info.value.message
        assert exc_info.value.suggestion
