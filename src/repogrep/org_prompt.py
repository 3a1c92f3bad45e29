"""Default organisation for code search, remembered in ``.repogrep.yaml``.

On first use the user is asked once (interactive terminals only) and the
answer, possibly empty, is written so later runs never prompt again.
"""

from __future__ import annotations

import sys
from pathlib import Path

import structlog
import yaml

from repogrep.errors import ErrorCode, RepoGrepError

log = structlog.get_logger()

ORG_CONFIG_PATH = Path(".repogrep.yaml")


def read_org(path: Path) -> str | None:
    """Return the stored org, or None when no config file exists."""
    if not path.is_file():
        return None
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise RepoGrepError(
            code=ErrorCode.INVALID_CONFIG,
            message=f"Cannot read {path}: {exc}",
            suggestion=f"Fix or delete {path} to be asked again.",
        ) from exc
    if not isinstance(data, dict):
        raise RepoGrepError(
            code=ErrorCode.INVALID_CONFIG,
            message=f"{path} must contain a mapping with an 'org' key",
            suggestion=f"Fix or delete {path} to be asked again.",
        )
    return str(data.get("org") or "")


def write_org(path: Path, org: str) -> None:
    path.write_text(yaml.safe_dump({"org": org}), encoding="utf-8")


def prompt_org() -> str:
    """Ask for a default org on an interactive stdin; empty otherwise."""
    if not sys.stdin.isatty():
        log.info("org_prompt_skipped", reason="non_interactive")
        return ""
    try:
        return input("Enter default GitHub organization (or leave empty to skip): ").strip()
    except EOFError:
        return ""


def load_or_prompt_org(path: Path = ORG_CONFIG_PATH) -> str:
    """Load the default org, prompting and persisting it on first run.

    A failed write is logged and the in-memory answer is used anyway.
    """
    org = read_org(path)
    if org is not None:
        return org

    org = prompt_org()
    try:
        write_org(path, org)
    except OSError:
        log.warning("org_config_write_error", path=str(path), exc_info=True)
    else:
        log.info("org_config_created", path=str(path), org=org)
    return org
