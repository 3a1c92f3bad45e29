"""Per-request data model for the fetch pipeline.

Outcomes are a closed tagged union so each cache-write rule in the
orchestrator hangs off exactly one ``match`` arm.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class FailureKind(StrEnum):
    STATUS = "status"  # Non-cacheable HTTP status
    TRANSPORT = "transport"  # Connection or protocol error
    TIMEOUT = "timeout"  # Per-request timeout expired
    CACHE_MISSING = "cache_missing"  # 304 received but cached bytes are gone


@dataclass(frozen=True)
class Fresh:
    """Origin answered 304; ``content`` holds the cached bytes once resolved."""

    content: bytes = b""
    etag: str | None = None  # Validator echoed on the 304, if any


@dataclass(frozen=True)
class Updated:
    """Origin answered 2xx with a new body and, optionally, a new validator."""

    content: bytes
    etag: str | None = None


@dataclass(frozen=True)
class Absent:
    """Origin confirmed (or the negative cache remembers) the resource is missing."""


@dataclass(frozen=True)
class Failure:
    """Anything else. Never written to the cache."""

    reason: str
    kind: FailureKind = FailureKind.STATUS
    status_code: int | None = None


FetchOutcome = Fresh | Updated | Absent | Failure


@dataclass(frozen=True)
class RequestDescriptor:
    """One unit of fetch work: a URI plus its position in the input list."""

    index: int
    uri: str
