"""HTTP fetching with status classification and a response size guard.

``Fetcher.fetch_json`` and ``Fetcher.fetch_html`` return parsed documents or
raise a ``GemContextError`` subclass:

* 404 -> ``NotFoundError``; other 4xx -> ``ClientError``; 5xx -> ``ServerError``;
  anything else that is not 2xx (redirects included) -> ``APIError``.
* TLS failures (an unloadable CA bundle included) and transport failures -> ``APIError``.
* Oversized bodies -> ``ResponseSizeExceededError`` before any parsing.
* Integrity failures from ``gemcontext.integrity`` propagate unchanged.

No request is ever retried.
"""

from __future__ import annotations

import os
import ssl
from typing import TYPE_CHECKING, Any, Literal

import httpx
import structlog

from gemcontext.config import FetcherSettings
from gemcontext.errors import (
    BODY_EXCERPT_LIMIT,
    APIError,
    ClientError,
    NotFoundError,
    ResponseSizeExceededError,
    ServerError,
)
from gemcontext.integrity import parse_html, parse_json

if TYPE_CHECKING:
    from bs4 import BeautifulSoup

log = structlog.get_logger()

ResponseKind = Literal["json", "html"]

_ACCEPT = {
    "json": "application/json",
    "html": "text/html",
}


def resolve_ca_file() -> str | None:
    """Return the trust-anchor file to verify peers against, if one resolves.

    ``SSL_CERT_FILE`` wins when it names a readable file; otherwise the
    platform OpenSSL default is used when it exists. ``None`` leaves the
    choice to httpx.
    """
    override = os.environ.get("SSL_CERT_FILE")
    if override and os.path.isfile(override) and os.access(override, os.R_OK):
        return override
    default = ssl.get_default_verify_paths().openssl_cafile
    if default and os.path.exists(default):
        return default
    return None


def build_http_client(settings: FetcherSettings | None = None) -> httpx.AsyncClient:
    settings = settings or FetcherSettings()
    ca_file = resolve_ca_file()
    verify: ssl.SSLContext | bool = True
    if ca_file:
        try:
            verify = ssl.create_default_context(cafile=ca_file)
        except ssl.SSLError as exc:
            log.warning("fetch_tls_error", ca_file=ca_file, error=str(exc))
            raise APIError(
                f"SSL verification failed: cannot load trust anchors from {ca_file}: {exc}. "
                "This may be due to system certificate configuration issues."
            ) from exc
    return httpx.AsyncClient(
        timeout=httpx.Timeout(
            settings.read_timeout,
            connect=settings.connect_timeout,
            read=settings.read_timeout,
        ),
        headers={"User-Agent": settings.user_agent},
        follow_redirects=False,
        verify=verify,
    )


def _excerpt(body: bytes) -> str:
    return body[:BODY_EXCERPT_LIMIT].decode("utf-8", errors="replace")


def _tls_error(exc: BaseException) -> ssl.SSLError | None:
    current: BaseException | None = exc
    while current is not None:
        if isinstance(current, ssl.SSLError):
            return current
        current = current.__cause__ or current.__context__
    return None


class Fetcher:
    """Issues GET requests and hands successful bodies to the integrity checks.

    When no client is injected a fresh one is built for every request, which
    re-resolves the trust anchors each time.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        settings: FetcherSettings | None = None,
    ) -> None:
        self._client = client
        self._settings = settings or FetcherSettings()

    @property
    def max_response_size(self) -> int:
        return self._settings.max_response_size

    async def fetch_json(self, url: str, params: dict[str, str] | None = None) -> Any:
        body = await self.fetch_bytes(url, "json", params=params)
        return parse_json(body, url)

    async def fetch_html(self, url: str) -> BeautifulSoup:
        body = await self.fetch_bytes(url, "html")
        return parse_html(body, url)

    async def fetch_bytes(
        self,
        url: str,
        kind: ResponseKind,
        params: dict[str, str] | None = None,
    ) -> bytes:
        """Return the raw body of a 2xx response, bounded by ``max_response_size``."""
        if self._client is not None:
            return await self._request(self._client, url, kind, params)
        async with build_http_client(self._settings) as client:
            return await self._request(client, url, kind, params)

    async def _request(
        self,
        client: httpx.AsyncClient,
        url: str,
        kind: ResponseKind,
        params: dict[str, str] | None,
    ) -> bytes:
        log.debug("fetch_started", url=url, kind=kind)
        headers = {"Accept": _ACCEPT[kind], "User-Agent": self._settings.user_agent}
        try:
            async with client.stream("GET", url, params=params, headers=headers) as response:
                body = await self._read_bounded(response, url)
                status = response.status_code
        except ResponseSizeExceededError:
            raise
        except httpx.HTTPError as exc:
            tls = _tls_error(exc)
            if tls is not None:
                log.warning("fetch_tls_error", url=url, error=str(tls))
                raise APIError(
                    f"SSL verification failed for {url}: {tls}. "
                    "This may be due to system certificate configuration issues.",
                    url=url,
                ) from exc
            log.warning("fetch_network_error", url=url, error=type(exc).__name__)
            raise APIError(
                f"Request to {url} failed: {type(exc).__name__} - {exc}", url=url
            ) from exc

        if 200 <= status < 300:
            log.debug("fetch_complete", url=url, status=status, size=len(body))
            return body

        excerpt = _excerpt(body)
        log.warning("fetch_http_error", url=url, status=status)
        if status == 404:
            raise NotFoundError(
                f"Resource not found: {url}", status_code=status, url=url, body_excerpt=excerpt
            )
        if 500 <= status < 600:
            error_cls: type[APIError] = ServerError
        elif 400 <= status < 500:
            error_cls = ClientError
        else:
            error_cls = APIError
        raise error_cls(
            f"API request to {url} failed with status {status}",
            status_code=status,
            url=url,
            body_excerpt=excerpt,
        )

    async def _read_bounded(self, response: httpx.Response, url: str) -> bytes:
        limit = self._settings.max_response_size
        declared = response.headers.get("content-length")
        if declared is not None and declared.isdigit() and int(declared) > limit:
            log.warning("response_too_large", url=url, size=int(declared), max_size=limit)
            raise ResponseSizeExceededError(int(declared), limit, url=url)

        chunks: list[bytes] = []
        size = 0
        async for chunk in response.aiter_bytes():
            size += len(chunk)
            if size > limit:
                log.warning("response_too_large", url=url, size=size, max_size=limit)
                raise ResponseSizeExceededError(size, limit, url=url)
            chunks.append(chunk)
        return b"".join(chunks)
