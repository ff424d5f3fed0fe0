"""Response integrity checks run before any format-specific parsing.

Upstream sites sometimes answer with a crawler-protection interstitial or an
error page and a ``200`` status. These helpers reject such bodies with a
``CorruptedDataError`` that records the response size and, when a parser
failed, the original exception.
"""

from __future__ import annotations

import json
import re
from typing import Any

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from gemcontext.errors import CorruptedDataError

_JSON_CRAWLER_RE = re.compile(r"cloudflare|ddos protection|access denied|blocked|captcha", re.I)
_HTML_CRAWLER_RE = re.compile(
    r"cloudflare|ddos protection|access denied|blocked|captcha|rate limit", re.I
)
_HTML_DOCUMENT_RE = re.compile(r"<!DOCTYPE|<html", re.I)
_ERROR_PAGE_PATTERNS = (
    re.compile(r"error 404", re.I),
    re.compile(r"page not found", re.I),
    re.compile(r"access denied", re.I),
    re.compile(r"forbidden", re.I),
    re.compile(r"internal server error", re.I),
)

MIN_HTML_TEXT_LENGTH = 50


def _decode(body: bytes) -> str:
    return body.decode("utf-8", errors="replace")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def parse_json(body: bytes, url: str) -> dict[str, Any] | list[Any]:
    """Parse a JSON body, rejecting HTML interstitials and scalar payloads."""
    size = len(body)
    text = _decode(body)
    stripped = text.strip()

    if stripped.startswith("<") and _JSON_CRAWLER_RE.search(text):
        raise CorruptedDataError(
            f"Response appears to be a crawler protection page from {url}",
            response_size=size,
            url=url,
        )

    try:
        parsed = json.loads(text, parse_constant=_reject_constant)
    except ValueError as exc:
        if re.match(r"<!DOCTYPE|<html", stripped, re.I):
            raise CorruptedDataError(
                f"Received HTML instead of JSON from {url}. "
                "This may indicate an error page or crawler protection.",
                response_size=size,
                url=url,
                original_error=exc,
            ) from exc
        raise CorruptedDataError(
            f"Failed to parse JSON response from {url}: {exc}",
            response_size=size,
            url=url,
            original_error=exc,
        ) from exc

    if not isinstance(parsed, dict | list):
        raise CorruptedDataError(
            f"Invalid JSON structure: expected object or array, got {type(parsed).__name__}",
            response_size=size,
            url=url,
        )
    return parsed


def expect_object(payload: Any, url: str, response_size: int | None = None) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise CorruptedDataError(
            f"Invalid JSON structure: expected object, got {type(payload).__name__}",
            response_size=response_size,
            url=url,
        )
    return payload


def expect_array(payload: Any, url: str, response_size: int | None = None) -> list[Any]:
    if not isinstance(payload, list):
        raise CorruptedDataError(
            f"Invalid JSON structure: expected array, got {type(payload).__name__}",
            response_size=response_size,
            url=url,
        )
    return payload


def parse_html(body: bytes, url: str) -> BeautifulSoup:
    """Parse an HTML body permissively after screening out non-content pages."""
    size = len(body)
    text = _decode(body)

    if _HTML_CRAWLER_RE.search(text):
        raise CorruptedDataError(
            f"Response appears to be a crawler protection page from {url}",
            response_size=size,
            url=url,
        )

    if not _HTML_DOCUMENT_RE.search(text):
        raise CorruptedDataError(
            f"Response from {url} does not appear to be HTML",
            response_size=size,
            url=url,
        )

    try:
        soup = BeautifulSoup(text, "html.parser")
    except ParserRejectedMarkup as exc:
        raise CorruptedDataError(
            f"Failed to parse HTML from {url}: {exc}",
            response_size=size,
            url=url,
            original_error=exc,
        ) from exc

    page_text = soup.get_text()
    if len(page_text.strip()) < MIN_HTML_TEXT_LENGTH:
        raise CorruptedDataError(
            f"HTML response from {url} appears to be empty or too short",
            response_size=size,
            url=url,
        )

    if any(pattern.search(page_text) for pattern in _ERROR_PAGE_PATTERNS):
        raise CorruptedDataError(
            f"HTML response from {url} appears to be an error page",
            response_size=size,
            url=url,
        )

    return soup
