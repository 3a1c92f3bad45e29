"""Shared test fixtures for the repogrep test suite."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from repogrep.cache import DiskCache
from repogrep.config import Settings

if TYPE_CHECKING:
    from pathlib import Path

TEST_TOKEN = "ghp_test_token"


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Settings pointing the cache at an isolated tmp directory."""
    return Settings(fetch={"cache_dir": str(tmp_path / "cache"), "concurrency": 4})


@pytest.fixture()
async def cache(tmp_path: Path) -> DiskCache:
    disk_cache = DiskCache(tmp_path / "cache")
    await disk_cache.ensure_dir()
    return disk_cache


@pytest.fixture()
def token(monkeypatch: pytest.MonkeyPatch) -> str:
    monkeypatch.setenv("GHP_TOKEN", TEST_TOKEN)
    return TEST_TOKEN
