"""Integration test fixtures.

Provides a fully wired AppState (real DiskCache under tmp_path, real
httpx.AsyncClient) whose network traffic is intercepted by respx in each
test. ``settings`` and ``token`` come from tests/conftest.py.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from repogrep.cli import open_state

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator
    from pathlib import Path

    from repogrep.config import Settings
    from repogrep.state import AppState


@pytest.fixture()
def repos_file(tmp_path: Path) -> Path:
    """A repos.json listing two repositories, out of order."""
    path = tmp_path / "repos.json"
    path.write_text(json.dumps(["acme/b", "acme/a"]), encoding="utf-8")
    return path


@pytest.fixture()
async def app_state(settings: Settings, token: str) -> AsyncGenerator[AppState, None]:
    async with open_state(settings, token) as state:
        yield state
