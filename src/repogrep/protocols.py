"""Protocol interfaces for swappable components.

The orchestrator references these protocols, not the concrete
implementations, so tests can plug in in-memory fakes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from repogrep.models.cache import CacheEntry
    from repogrep.models.fetch import FetchOutcome


class CacheStoreProtocol(Protocol):
    """Interface for the conditional response cache."""

    async def lookup(self, key: str) -> CacheEntry: ...

    async def record_success(
        self, key: str, content: bytes, etag: str | None = None
    ) -> None: ...

    async def record_absent(self, key: str) -> None: ...

    async def clear_all(self) -> None: ...


class ResourceClientProtocol(Protocol):
    """Interface for the single-resource conditional GET."""

    async def fetch(self, uri: str, cached_etag: str | None = None) -> FetchOutcome: ...
