"""Content inspectors applied to each fetched file.

Each inspector takes decoded text plus a query and returns the value to
report, or ``None`` when the repository does not match.
"""

from __future__ import annotations

import json
from collections.abc import Callable

import structlog

log = structlog.get_logger()

FOUND = "found"

Inspector = Callable[[str, str], str | None]


def decode_utf8(content: bytes) -> str | None:
    """Strict UTF-8 decode. Undecodable bodies are logged and skipped."""
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError as exc:
        log.warning("utf8_decode_error", error=str(exc))
        return None


def _version_of(section: object, name: str) -> str | None:
    if not isinstance(section, dict):
        return None
    package = section.get(name)
    if isinstance(package, dict):
        version = package.get("version")
        if isinstance(version, str):
            return version
    return None


def lockfile_version(text: str, package: str) -> str | None:
    """Installed version of ``package`` in a ``package-lock.json``.

    Lockfile v1 keeps a flat ``dependencies`` map keyed by package name;
    v2 and v3 key ``packages`` by install path (``node_modules/<name>``).
    A v1 file without a match still falls through to ``packages``.
    """
    try:
        lock = json.loads(text)
    except json.JSONDecodeError as exc:
        log.warning("lockfile_parse_error", error=str(exc))
        return None
    if not isinstance(lock, dict):
        log.warning("lockfile_parse_error", error="top level is not an object")
        return None

    if lock.get("lockfileVersion") == 1:
        version = _version_of(lock.get("dependencies"), package)
        if version is not None:
            return version

    return _version_of(lock.get("packages"), f"node_modules/{package}")


def contains(text: str, needle: str) -> str | None:
    return FOUND if needle in text else None
