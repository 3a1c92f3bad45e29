"""Command-line entrypoint.

Responsibilities (and nothing more):
- Parse arguments and load settings
- Configure structlog
- Create AppState for the run and tear it down afterwards
- Choose the audit mode, run the pipeline, print the report
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from repogrep import __version__
from repogrep.cache import DiskCache, contents_prefix
from repogrep.client import ResourceClient, build_http_client
from repogrep.config import Settings, load_settings, load_token
from repogrep.crawler import SearchCrawler
from repogrep.errors import RepoGrepError
from repogrep.inspectors import contains, lockfile_version
from repogrep.org_prompt import load_or_prompt_org
from repogrep.orchestrator import FetchOrchestrator
from repogrep.report import collect_results, format_search_report, format_version_report
from repogrep.repos import contents_uri, load_repos, save_repos
from repogrep.state import AppState

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Sequence

log = structlog.get_logger()

DEFAULT_LOCKFILE = "package-lock.json"


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [*shared_processors, structlog.processors.JSONRenderer()]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # Logs go to stderr; stdout is reserved for the report
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Arguments
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repogrep",
        description=(
            "Grep GitHub repos: audit npm lockfile versions or search custom strings in files"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-r",
        "--repos",
        type=Path,
        default=Path("repos.json"),
        help="JSON file listing owner/repo names (default: repos.json)",
    )
    parser.add_argument(
        "-q",
        "--query",
        default=None,
        help="Code search query; discovers repos dynamically and rewrites --repos",
    )
    parser.add_argument(
        "-o",
        "--org",
        default=None,
        help="Organization for code search (default: from .repogrep.yaml)",
    )
    parser.add_argument(
        "-p",
        "--package",
        default=None,
        help="npm package whose lockfile version to report (lockfile mode)",
    )
    parser.add_argument(
        "-f",
        "--filename",
        default=None,
        help="File to fetch and search instead of package-lock.json (search mode)",
    )
    parser.add_argument(
        "-s",
        "--search",
        default=None,
        help="String to look for in --filename (search mode)",
    )
    parser.add_argument(
        "-c",
        "--clear-cache",
        action="store_true",
        help="Clear the response cache to force fetching from GitHub",
    )
    return parser


@dataclass(frozen=True)
class AuditMode:
    """Resolved audit mode: which file to fetch and how to inspect it."""

    lockfile: bool
    filename: str
    query: str


def resolve_mode(args: argparse.Namespace) -> AuditMode | None:
    """Return the audit mode, or None when the flags only ask for a repo listing."""
    if args.filename is None:
        if args.package is None:
            return None
        return AuditMode(lockfile=True, filename=DEFAULT_LOCKFILE, query=args.package)
    if args.search is None:
        return None
    return AuditMode(lockfile=False, filename=args.filename, query=args.search)


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------


@asynccontextmanager
async def open_state(settings: Settings, token: str) -> AsyncGenerator[AppState, None]:
    """Create and tear down all shared resources for one run."""
    http_client = build_http_client(settings)
    cache = DiskCache(Path(settings.fetch.cache_dir).expanduser())
    state = AppState(
        settings=settings,
        http_client=http_client,
        cache=cache,
        orchestrator=FetchOrchestrator(
            cache,
            ResourceClient(http_client, token, settings),
            concurrency=settings.fetch.concurrency,
            key_prefix=contents_prefix(settings.github.api_base),
        ),
        crawler=SearchCrawler(http_client, token, settings),
    )
    try:
        yield state
    finally:
        await http_client.aclose()


async def run(args: argparse.Namespace, state: AppState) -> list[str]:
    """Execute one audit and return the report lines."""
    if args.query is not None:
        org = args.org if args.org is not None else load_or_prompt_org()
        repos = await state.crawler.crawl(args.query, org)
        save_repos(args.repos, repos)
    else:
        repos = load_repos(args.repos)

    repos = sorted(repos)

    mode = resolve_mode(args)
    if mode is None:
        return repos

    if args.clear_cache:
        await state.cache.clear_all()
    await state.cache.ensure_dir()

    api_base = state.settings.github.api_base
    uris = [contents_uri(repo, mode.filename, api_base) for repo in repos]
    outcomes = await state.orchestrator.fetch_uris(uris)

    inspect = lockfile_version if mode.lockfile else contains
    results = collect_results(repos, outcomes, inspect, mode.query)
    log.info("audit_complete", repos=len(repos), matches=len(results))

    if mode.lockfile:
        return format_version_report(results)
    return format_search_report(results)


async def _main_async(args: argparse.Namespace, settings: Settings) -> list[str]:
    token = load_token()
    async with open_state(settings, token) as state:
        return await run(args, state)


def main(argv: Sequence[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings()
        setup_logging(settings)
        lines = asyncio.run(_main_async(args, settings))
    except RepoGrepError as exc:
        log.debug("fatal_error", code=exc.code, message=exc.message)
        print(f"error: {exc.message}", file=sys.stderr)
        if exc.suggestion:
            print(f"hint: {exc.suggestion}", file=sys.stderr)
        sys.exit(1)

    for line in lines:
        print(line)


if __name__ == "__main__":
    main()
