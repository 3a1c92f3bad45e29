from __future__ import annotations

from pydantic import BaseModel


class CacheEntry(BaseModel):
    """On-disk state for one cache key, as seen by a single lookup."""

    content: bytes | None = None  # Raw body from the last successful fetch
    etag: str | None = None  # Only reported alongside content
    negative: bool = False  # Last known state: resource absent
