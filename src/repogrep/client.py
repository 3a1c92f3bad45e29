"""Authenticated conditional GET against the GitHub contents API.

All network I/O for file contents goes through a single ResourceClient shared
by every in-flight request. The client receives an httpx.AsyncClient via
constructor injection; the CLI run owns the client lifecycle.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import structlog

from repogrep.models.fetch import Absent, Failure, FailureKind, FetchOutcome, Fresh, Updated

if TYPE_CHECKING:
    from repogrep.config import Settings

log = structlog.get_logger()

ACCEPT_RAW = "application/vnd.github.v3.raw"
ACCEPT_JSON = "application/vnd.github.v3+json"


def build_http_client(settings: Settings) -> httpx.AsyncClient:
    """Create the shared httpx client. Called once per run.

    The connection pool is sized to the fetch concurrency so the orchestrator,
    not the transport, is the component that bounds in-flight work.
    """
    concurrency = settings.fetch.concurrency
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=httpx.Timeout(settings.http.timeout_seconds),
        headers={"User-Agent": settings.github.user_agent},
        limits=httpx.Limits(
            max_connections=concurrency,
            max_keepalive_connections=concurrency,
        ),
    )


def api_headers(token: str, settings: Settings, *, accept: str) -> dict[str, str]:
    """Headers GitHub expects on every REST call."""
    return {
        "Authorization": f"token {token}",
        "User-Agent": settings.github.user_agent,
        "Accept": accept,
        "X-GitHub-Api-Version": settings.github.api_version,
    }


class ResourceClient:
    """Issues one conditional GET and classifies the response.

    Holds no state besides the injected client and the fixed request headers,
    so a single instance serves an unbounded number of calls.
    """

    def __init__(self, client: httpx.AsyncClient, token: str, settings: Settings) -> None:
        self._client = client
        self._headers = api_headers(token, settings, accept=ACCEPT_RAW)

    async def fetch(self, uri: str, cached_etag: str | None = None) -> FetchOutcome:
        """Fetch ``uri``, sending ``If-None-Match`` when a validator is cached.

        Never raises for network or HTTP failures; they become ``Failure``.
        A ``Fresh`` result carries no body: the caller re-reads its cache.
        """
        headers = dict(self._headers)
        if cached_etag:
            headers["If-None-Match"] = cached_etag

        try:
            response = await self._client.get(uri, headers=headers)
        except httpx.TimeoutException as exc:
            log.warning("fetch_timeout", uri=uri)
            return Failure(reason=f"Timed out fetching {uri}: {exc}", kind=FailureKind.TIMEOUT)
        except httpx.HTTPError as exc:
            log.warning("fetch_transport_error", uri=uri, error=str(exc))
            return Failure(
                reason=f"Network error fetching {uri}: {exc}", kind=FailureKind.TRANSPORT
            )

        status = response.status_code

        if status == httpx.codes.NOT_MODIFIED:
            log.debug("fetch_not_modified", uri=uri)
            return Fresh(etag=response.headers.get("etag"))

        if response.is_success:
            log.info(
                "fetch_complete",
                uri=uri,
                status_code=status,
                content_length=len(response.content),
            )
            return Updated(content=response.content, etag=response.headers.get("etag"))

        if status == httpx.codes.NOT_FOUND:
            log.info("fetch_not_found", uri=uri)
            return Absent()

        log.warning("fetch_unexpected_status", uri=uri, status_code=status)
        return Failure(
            reason=f"HTTP {status} fetching {uri}",
            kind=FailureKind.STATUS,
            status_code=status,
        )
