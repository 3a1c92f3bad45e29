"""Disk-backed conditional cache for raw API bodies.

Layout, one group of files per cache key inside the cache directory::

    <key>            raw body bytes from the last 2xx
    <key>_.etag      validator string sent back as If-None-Match
    <key>_.notfound  empty marker: the origin last answered 404

Every filesystem call runs in a worker thread via ``asyncio.to_thread`` so
cache I/O is a suspension point, like network I/O.

Reads treat missing files as absence. Write failures are logged and ignored:
the caller already holds the freshly fetched bytes, and a failed write only
costs a refetch on the next run. Infrastructure errors never cross the
DiskCache boundary, except ``ensure_dir`` which is fatal at startup.

Every underscore in a key starts a two-character escape (``__``, ``_-`` or
``_q``, see :func:`cache_key`), so ``<key>_.etag`` and ``<key>_.notfound``
can never be the name of another key.

There is no locking. Two in-flight requests for the same key race on its
files and the last writer wins. Inputs are expected to hold distinct URIs.
"""

from __future__ import annotations

import asyncio
import os
import shutil
from contextlib import suppress
from pathlib import Path

import structlog

from repogrep.config import DEFAULT_API_BASE
from repogrep.errors import ErrorCode, RepoGrepError
from repogrep.models.cache import CacheEntry

log = structlog.get_logger()


def contents_prefix(api_base: str) -> str:
    """URI prefix shared by every contents request against ``api_base``."""
    return f"{api_base.rstrip('/')}/repos/"


CONTENTS_PREFIX = contents_prefix(DEFAULT_API_BASE)

_ETAG_SUFFIX = "_.etag"
_NOTFOUND_SUFFIX = "_.notfound"


def cache_key(uri: str, prefix: str = CONTENTS_PREFIX) -> str:
    """Derive a filesystem-safe key from a request URI.

    ``https://api.github.com/repos/acme/a/contents/x.json`` becomes
    ``acme_-a_-contents_-x.json``. Existing underscores are doubled before
    separators are rewritten, so ``a/b_c`` and ``a_b/c`` stay distinct.
    """
    rest = uri[len(prefix) :] if uri.startswith(prefix) else uri
    return rest.replace("_", "__").replace("/", "_-").replace("?", "_q")


class DiskCache:
    """File-per-key cache implementing CacheStoreProtocol."""

    def __init__(self, cache_dir: Path) -> None:
        self.cache_dir = cache_dir

    def _paths(self, key: str) -> tuple[Path, Path, Path]:
        return (
            self.cache_dir / key,
            self.cache_dir / f"{key}{_ETAG_SUFFIX}",
            self.cache_dir / f"{key}{_NOTFOUND_SUFFIX}",
        )

    # ------------------------------------------------------------------
    # Directory lifecycle
    # ------------------------------------------------------------------

    async def ensure_dir(self) -> None:
        """Create the cache directory. Raises RepoGrepError if impossible."""
        try:
            await asyncio.to_thread(self.cache_dir.mkdir, parents=True, exist_ok=True)
        except OSError as exc:
            raise RepoGrepError(
                code=ErrorCode.CACHE_UNAVAILABLE,
                message=f"Cannot create cache directory {self.cache_dir}: {exc}",
                suggestion="Point REPOGREP__FETCH__CACHE_DIR at a writable location.",
            ) from exc

    async def clear_all(self) -> None:
        """Delete the whole store. Lookups afterwards behave as empty."""
        await asyncio.to_thread(shutil.rmtree, self.cache_dir, ignore_errors=True)
        log.info("cache_cleared", path=str(self.cache_dir))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def lookup(self, key: str) -> CacheEntry:
        """Read the on-disk state for ``key``. Read failures count as a miss."""
        try:
            return await asyncio.to_thread(self._lookup_sync, key)
        except OSError:
            log.warning("cache_read_error", key=key, exc_info=True)
            return CacheEntry()

    def _lookup_sync(self, key: str) -> CacheEntry:
        content_path, etag_path, notfound_path = self._paths(key)

        if notfound_path.exists():
            return CacheEntry(negative=True)

        try:
            content = content_path.read_bytes()
        except FileNotFoundError:
            return CacheEntry()

        etag: str | None = None
        with suppress(FileNotFoundError):
            etag = etag_path.read_text(encoding="utf-8").strip() or None

        return CacheEntry(content=content, etag=etag)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def record_success(self, key: str, content: bytes, etag: str | None = None) -> None:
        """Persist body and validator, retracting any negative marker. Non-fatal."""
        try:
            await asyncio.to_thread(self._record_success_sync, key, content, etag)
        except OSError:
            log.warning("cache_write_error", key=key, exc_info=True)

    def _record_success_sync(self, key: str, content: bytes, etag: str | None) -> None:
        content_path, etag_path, notfound_path = self._paths(key)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

        notfound_path.unlink(missing_ok=True)
        _atomic_write(content_path, content)
        if etag:
            _atomic_write(etag_path, etag.encode("utf-8"))
        else:
            # A validator for the previous body would wrongly revalidate this one
            etag_path.unlink(missing_ok=True)

    async def record_absent(self, key: str) -> None:
        """Write the negative marker and drop stale content and etag. Non-fatal."""
        try:
            await asyncio.to_thread(self._record_absent_sync, key)
        except OSError:
            log.warning("cache_write_error", key=key, exc_info=True)

    def _record_absent_sync(self, key: str) -> None:
        content_path, etag_path, notfound_path = self._paths(key)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

        content_path.unlink(missing_ok=True)
        etag_path.unlink(missing_ok=True)
        notfound_path.touch()


def _atomic_write(path: Path, data: bytes) -> None:
    """Write via a sibling temp file and ``os.replace`` so readers never see a torn file."""
    tmp_path = path.with_name(path.name + "_.tmp")
    try:
        tmp_path.write_bytes(data)
        os.replace(tmp_path, path)
    finally:
        with suppress(OSError):
            tmp_path.unlink(missing_ok=True)
