"""Bounded-concurrency batch fetch over the conditional cache.

For each descriptor: lookup -> negative short-circuit -> conditional GET ->
cache write. At most ``concurrency`` descriptors are in flight at once, and
results land in a pre-sized list by input index, so output order always
matches input order whatever the completion order.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from repogrep.cache import CONTENTS_PREFIX, cache_key
from repogrep.config import DEFAULT_CONCURRENCY
from repogrep.models.fetch import (
    Absent,
    Failure,
    FailureKind,
    FetchOutcome,
    Fresh,
    RequestDescriptor,
    Updated,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from repogrep.protocols import CacheStoreProtocol, ResourceClientProtocol

log = structlog.get_logger()


def outcome_bytes(outcome: FetchOutcome) -> bytes | None:
    """Map an outcome to what content inspectors consume. ``None`` means no data."""
    match outcome:
        case Fresh(content=content) | Updated(content=content):
            return content
        case _:
            return None


class FetchOrchestrator:
    """Drives the cache store and resource client across many URIs."""

    def __init__(
        self,
        cache: CacheStoreProtocol,
        client: ResourceClientProtocol,
        concurrency: int = DEFAULT_CONCURRENCY,
        key_prefix: str = CONTENTS_PREFIX,
    ) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        self._cache = cache
        self._client = client
        self._concurrency = concurrency
        self._key_prefix = key_prefix

    async def fetch_all(self, descriptors: Sequence[RequestDescriptor]) -> list[FetchOutcome]:
        """Resolve every descriptor. One failure never aborts the others.

        ``result[i]`` is the outcome of the descriptor whose ``index`` is ``i``;
        the indices must be exactly ``0..len(descriptors) - 1``.
        """
        if sorted(d.index for d in descriptors) != list(range(len(descriptors))):
            raise ValueError("descriptor indices must be a permutation of 0..n-1")

        results: list[FetchOutcome | None] = [None] * len(descriptors)
        semaphore = asyncio.Semaphore(self._concurrency)

        async def run(descriptor: RequestDescriptor) -> None:
            async with semaphore:
                results[descriptor.index] = await self._resolve_guarded(descriptor)

        await asyncio.gather(*(run(d) for d in descriptors))

        log.info(
            "fetch_batch_complete",
            total=len(descriptors),
            failures=sum(isinstance(r, Failure) for r in results),
        )
        return [r if r is not None else Failure(reason="unresolved") for r in results]

    async def fetch_uris(self, uris: Sequence[str]) -> list[FetchOutcome]:
        """Convenience wrapper: index ``uris`` positionally and fetch them all."""
        return await self.fetch_all(
            [RequestDescriptor(index=i, uri=uri) for i, uri in enumerate(uris)]
        )

    async def _resolve_guarded(self, descriptor: RequestDescriptor) -> FetchOutcome:
        try:
            return await self.resolve(descriptor)
        except Exception as exc:
            log.error(
                "fetch_unexpected_error",
                index=descriptor.index,
                uri=descriptor.uri,
                exc_info=True,
            )
            return Failure(reason=f"Unexpected error: {exc}", kind=FailureKind.TRANSPORT)

    async def resolve(self, descriptor: RequestDescriptor) -> FetchOutcome:
        """Run the lookup -> fetch -> record cycle for a single descriptor."""
        key = cache_key(descriptor.uri, self._key_prefix)
        entry = await self._cache.lookup(key)

        if entry.negative:
            log.debug("cache_negative_hit", uri=descriptor.uri)
            return Absent()

        # Only revalidate when there are bytes to fall back on after a 304
        cached_etag = entry.etag if entry.content is not None else None
        outcome = await self._client.fetch(descriptor.uri, cached_etag)

        match outcome:
            case Fresh(etag=etag):
                if entry.content is None:
                    return Failure(
                        reason=f"304 for {descriptor.uri} but no cached body",
                        kind=FailureKind.CACHE_MISSING,
                    )
                await self._cache.record_success(key, entry.content, etag or entry.etag)
                return Fresh(content=entry.content, etag=etag or entry.etag)
            case Updated(content=content, etag=etag):
                await self._cache.record_success(key, content, etag)
                return outcome
            case Absent():
                await self._cache.record_absent(key)
                return outcome
            case _:
                return outcome
