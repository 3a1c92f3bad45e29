from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    MISSING_TOKEN = "MISSING_TOKEN"
    INVALID_REPOS_FILE = "INVALID_REPOS_FILE"
    SEARCH_FAILED = "SEARCH_FAILED"
    SEARCH_MALFORMED = "SEARCH_MALFORMED"
    PAGINATION_LIMIT = "PAGINATION_LIMIT"
    CACHE_UNAVAILABLE = "CACHE_UNAVAILABLE"
    INVALID_CONFIG = "INVALID_CONFIG"


class RepoGrepError(Exception):
    """Raised for every condition that is fatal to the whole run.

    Caught once in cli.main and turned into a message on stderr plus a
    non-zero exit status. Failures scoped to a single repository never raise
    this; they travel as ``Failure`` outcomes instead.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: str = "",
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
