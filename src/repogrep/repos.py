"""Repository list file and contents-URI helpers."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import structlog

from repogrep.cache import contents_prefix
from repogrep.config import DEFAULT_API_BASE
from repogrep.errors import ErrorCode, RepoGrepError

if TYPE_CHECKING:
    from pathlib import Path

log = structlog.get_logger()


def load_repos(path: Path) -> list[str]:
    """Read a JSON array of ``"owner/repo"`` strings. Any problem is fatal."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise RepoGrepError(
            code=ErrorCode.INVALID_REPOS_FILE,
            message=f"Repository list not found: {path}",
            suggestion="Pass --repos <file> or use --query to discover repositories.",
        ) from exc
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise RepoGrepError(
            code=ErrorCode.INVALID_REPOS_FILE,
            message=f"Cannot read repository list {path}: {exc}",
        ) from exc

    if not isinstance(data, list) or not all(isinstance(r, str) for r in data):
        raise RepoGrepError(
            code=ErrorCode.INVALID_REPOS_FILE,
            message=f"{path} must contain a JSON array of \"owner/repo\" strings",
        )

    log.info("repos_loaded", path=str(path), count=len(data))
    return data


def save_repos(path: Path, repos: list[str]) -> None:
    """Overwrite ``path`` with the pretty-printed list."""
    try:
        path.write_text(json.dumps(repos, indent=2), encoding="utf-8")
    except OSError as exc:
        raise RepoGrepError(
            code=ErrorCode.INVALID_REPOS_FILE,
            message=f"Cannot write repository list {path}: {exc}",
        ) from exc
    log.info("repos_saved", path=str(path), count=len(repos))


def contents_uri(repo: str, filename: str, api_base: str = DEFAULT_API_BASE) -> str:
    return f"{contents_prefix(api_base)}{repo}/contents/{filename}"
