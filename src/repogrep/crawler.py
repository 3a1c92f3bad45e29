"""Code-search pagination crawler.

Walks ``GET /search/code`` following ``Link: <...>; rel="next"`` headers and
collects the distinct ``owner/repo`` names of every hit. Any failure here is
fatal to the run: there is no meaningful partial result for a discovery crawl.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urlencode

import httpx
import structlog
from pydantic import ValidationError

from repogrep.client import ACCEPT_JSON, api_headers
from repogrep.errors import ErrorCode, RepoGrepError
from repogrep.models.search import SearchPage

if TYPE_CHECKING:
    from repogrep.config import Settings

log = structlog.get_logger()


def parse_next_link(header: str | None) -> str | None:
    """Return the target of the ``rel="next"`` entry in a Link header, if any.

    The header is a comma-separated list of ``<uri>; rel="name"`` entries.
    """
    if not header:
        return None
    for link in header.split(","):
        target, _, params = link.strip().partition(";")
        rels: set[str] = set()
        for param in params.split(";"):
            name, _, value = param.strip().partition("=")
            if name.strip().lower() == "rel":
                rels.update(value.strip().strip('"').split())
        target = target.strip()
        if "next" in rels and target.startswith("<") and target.endswith(">"):
            return target[1:-1]
    return None


def build_search_query(query: str, org: str = "") -> str:
    return f"org:{org} {query}" if org else query


class SearchCrawler:
    """Discovers repositories via the paginated code-search API."""

    def __init__(self, client: httpx.AsyncClient, token: str, settings: Settings) -> None:
        self._client = client
        self._headers = api_headers(token, settings, accept=ACCEPT_JSON)
        self._search_url = f"{settings.github.api_base.rstrip('/')}/search/code"
        self._per_page = settings.crawl.per_page
        self._max_pages = settings.crawl.max_pages

    def initial_url(self, query: str, org: str = "") -> str:
        params = urlencode({"q": build_search_query(query, org), "per_page": self._per_page})
        return f"{self._search_url}?{params}"

    async def crawl(self, query: str, org: str = "") -> list[str]:
        """Return the sorted, deduplicated ``owner/repo`` names matching ``query``."""
        repos: set[str] = set()
        url: str | None = self.initial_url(query, org)
        pages = 0

        while url is not None:
            if pages >= self._max_pages:
                raise RepoGrepError(
                    code=ErrorCode.PAGINATION_LIMIT,
                    message=f"Code search exceeded {self._max_pages} pages for {query!r}",
                    suggestion="Narrow the query or raise REPOGREP__CRAWL__MAX_PAGES.",
                )

            response = await self._get_page(url)
            pages += 1

            # Cursor first, then the body
            next_url = parse_next_link(response.headers.get("link"))
            page = self._parse_page(response, url)

            before = len(repos)
            repos.update(item.repository.full_name for item in page.items)
            log.info(
                "crawl_page",
                page=pages,
                items=len(page.items),
                new_repos=len(repos) - before,
                has_next=next_url is not None,
            )
            url = next_url

        log.info("crawl_complete", pages=pages, repos=len(repos))
        return sorted(repos)

    async def _get_page(self, url: str) -> httpx.Response:
        try:
            response = await self._client.get(url, headers=self._headers)
        except httpx.HTTPError as exc:
            raise RepoGrepError(
                code=ErrorCode.SEARCH_FAILED,
                message=f"Network error during code search: {exc}",
                suggestion="Check your connection and try again.",
            ) from exc

        if not response.is_success:
            raise RepoGrepError(
                code=ErrorCode.SEARCH_FAILED,
                message=f"API error: HTTP {response.status_code} from code search",
                suggestion="Check that GHP_TOKEN is valid and has access to the organisation.",
            )
        return response

    def _parse_page(self, response: httpx.Response, url: str) -> SearchPage:
        try:
            return SearchPage.model_validate_json(response.content)
        except ValidationError as exc:
            log.warning("crawl_malformed_page", url=url)
            raise RepoGrepError(
                code=ErrorCode.SEARCH_MALFORMED,
                message=f"Malformed code search response: {exc}",
            ) from exc
