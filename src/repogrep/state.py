"""Runtime state container.

AppState is created once per run inside ``cli.open_state`` and handed to
``run``. It owns nothing itself; ``open_state`` closes the HTTP client.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

    from repogrep.cache import DiskCache
    from repogrep.config import Settings
    from repogrep.crawler import SearchCrawler
    from repogrep.orchestrator import FetchOrchestrator


@dataclass
class AppState:
    """Holds all shared runtime state for one run."""

    settings: Settings
    http_client: httpx.AsyncClient
    cache: DiskCache
    orchestrator: FetchOrchestrator
    crawler: SearchCrawler
