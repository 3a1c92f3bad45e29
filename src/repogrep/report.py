"""Aggregate per-repository outcomes into the printed report."""

from __future__ import annotations

from typing import TYPE_CHECKING

import semver

from repogrep.inspectors import decode_utf8
from repogrep.models.report import InspectionResult
from repogrep.orchestrator import outcome_bytes

if TYPE_CHECKING:
    from collections.abc import Sequence

    from repogrep.inspectors import Inspector
    from repogrep.models.fetch import FetchOutcome

# npm versions are SemVer; anything unparsable (git URLs, tags) ranks as 0.0.0
_ZERO = semver.Version(0, 0, 0)


def repo_name(full_name: str) -> str:
    """``acme/widget`` -> ``widget``."""
    _, _, name = full_name.partition("/")
    return name or full_name


def collect_results(
    repos: Sequence[str],
    outcomes: Sequence[FetchOutcome],
    inspect: Inspector,
    query: str,
) -> list[InspectionResult]:
    """Apply ``inspect`` to every outcome that carries bytes.

    ``outcomes[i]`` belongs to ``repos[i]``. Absent, failed, undecodable and
    non-matching repositories are dropped from the report.
    """
    if len(repos) != len(outcomes):
        raise ValueError(f"{len(repos)} repos but {len(outcomes)} outcomes")

    results: list[InspectionResult] = []
    for full_name, outcome in zip(repos, outcomes, strict=True):
        content = outcome_bytes(outcome)
        if content is None:
            continue
        text = decode_utf8(content)
        if text is None:
            continue
        value = inspect(text, query)
        if value is not None:
            results.append(InspectionResult(repo=repo_name(full_name), value=value))
    return results


def _version_key(result: InspectionResult) -> semver.Version:
    try:
        return semver.Version.parse(result.value)
    except ValueError:
        return _ZERO


def format_version_report(results: Sequence[InspectionResult]) -> list[str]:
    """Lockfile mode: ascending by version, unparsable versions first."""
    ordered = sorted(results, key=_version_key)
    return [f"{r.value}\t: {r.repo}" for r in ordered]


def format_search_report(results: Sequence[InspectionResult]) -> list[str]:
    """Search mode: matching repository names, alphabetically."""
    return sorted(r.repo for r in results)
