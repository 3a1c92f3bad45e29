from __future__ import annotations

from repogrep.models.cache import CacheEntry
from repogrep.models.fetch import (
    Absent,
    Failure,
    FailureKind,
    FetchOutcome,
    Fresh,
    RequestDescriptor,
    Updated,
)
from repogrep.models.report import InspectionResult
from repogrep.models.search import SearchItem, SearchPage, SearchRepository

__all__ = [
    # cache
    "CacheEntry",
    # fetch
    "Absent",
    "Failure",
    "FailureKind",
    "FetchOutcome",
    "Fresh",
    "RequestDescriptor",
    "Updated",
    # search
    "SearchItem",
    "SearchPage",
    "SearchRepository",
    # report
    "InspectionResult",
]
