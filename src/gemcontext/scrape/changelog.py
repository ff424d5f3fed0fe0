"""Changelog and release-notes extraction.

Extraction runs as an ordered pipeline:

1. ``find_content`` tries a priority list of container selectors until one
   matches.
2. ``strip_chrome`` removes navigation, footers and GitHub UI widgets from it.
3. ``clean_changelog_text`` turns the remaining text into a compact summary:
   boilerplate phrases, bare commit hashes and dangling issue numbers go,
   short lines and author attributions are dropped, and the result is
   truncated to ``MAX_CHANGELOG_LENGTH`` characters.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from bs4 import BeautifulSoup, Tag

MAX_CHANGELOG_LENGTH = 10_000
TRUNCATION_MARKER = "..."
MIN_LINE_LENGTH = 10

RUBY_RELEASE_NOTES_SELECTORS: tuple[str, ...] = (
    "div#content",
    "div.content, div.entry-content, article, main",
)

GITHUB_RELEASE_SELECTORS: tuple[str, ...] = (
    ".markdown-body",
    "[data-testid='release-body'], .release-body",
    "div.repository-content article",
)

GEM_CHANGELOG_SELECTORS: tuple[str, ...] = (
    "div.content, div.entry-content, article, main, .markdown-body",
)

CHROME_SELECTORS: tuple[str, ...] = (
    "nav",
    "header",
    "footer",
    "script",
    "style",
    "details",
    "summary",
    ".navigation",
    ".sidebar",
    ".post-info",
    ".blankslate",
    ".Box-footer",
    ".Counter",
    "[data-view-component]",
    "[class*='blankslate']",
    "[class*='Box-footer']",
    "[class*='Counter']",
    "[class*='details-toggle']",
)

_BOILERPLATE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"Notifications.*?signed in.*?reload", re.I | re.S),
    re.compile(r"You must be signed in.*?reload", re.I | re.S),
    re.compile(r"There was an error.*?reload", re.I | re.S),
    re.compile(r"Please reload this page\.?", re.I),
    re.compile(r"^[ \t]*Loading(?:\.\.\.|…)?[ \t]*$", re.I | re.M),
    re.compile(r"Uh oh!", re.I),
    re.compile(r"^[ \t]*Assets[ \t]*\d+[ \t]*$", re.I | re.M),
)

# A hex run of 7-40 chars with at least one digit, so words like "defaced" survive.
_COMMIT_HASH_RE = re.compile(r"\b(?=[a-f0-9]*\d)[a-f0-9]{7,40}\b")
_TRAILING_ISSUE_RE = re.compile(r"#\d+[ \t]*$", re.M)
_INLINE_SPACE_RE = re.compile(r"[ \t]{2,}")
_BLANK_RUN_RE = re.compile(r"\n{3,}")

_UI_LINE_RE = re.compile(
    r"^(Notifications|You must|There was|Please reload|Loading|Uh oh|Assets|\d+\s*$)", re.I
)
_SLASH_LINE_RE = re.compile(r"^/\s*$")
_HASH_LINE_RE = re.compile(r"^[a-f0-9]{7,40}$")
_ISSUE_LINE_RE = re.compile(r"^\s*#\d+\s*$")
_PERSON_NAME_RE = re.compile(r"^[A-Z][a-z]+(?:\s+[A-Z][a-z]+){1,2}$")
_SENTENCE_END_RE = re.compile(r"[.!]$")
_TRAILING_BOILERPLATE_RE = re.compile(r"^(No changes\.?|Guides)$", re.I)


def is_github_release_url(url: str) -> bool:
    return "github.com" in url and "/releases/" in url


def selectors_for(url: str) -> tuple[str, ...]:
    if is_github_release_url(url):
        return GITHUB_RELEASE_SELECTORS
    return GEM_CHANGELOG_SELECTORS


def find_content(
    soup: BeautifulSoup, selectors: Sequence[str], *, fallback_to_body: bool = True
) -> Tag | None:
    for selector in selectors:
        found = soup.select_one(selector)
        if found is not None:
            return found
    if fallback_to_body:
        body = soup.find("body")
        return body if isinstance(body, Tag) else None
    return None


def strip_chrome(content: Tag) -> Tag:
    for selector in CHROME_SELECTORS:
        for element in content.select(selector):
            # Nested matches are already gone with their ancestor.
            if not element.decomposed:
                element.decompose()
    return content


def _looks_like_author(line: str) -> bool:
    return bool(_PERSON_NAME_RE.match(line)) and len(line) < 50


def _filter_lines(lines: Sequence[str]) -> list[str]:
    kept: list[str] = []
    for idx, line in enumerate(lines):
        stripped = line.strip()
        if not stripped:
            continue
        if (
            _UI_LINE_RE.match(stripped)
            or _SLASH_LINE_RE.match(stripped)
            or _HASH_LINE_RE.match(stripped)
            or _ISSUE_LINE_RE.match(stripped)
        ):
            continue
        if _looks_like_author(stripped):
            if idx == 0:
                continue
            if kept and _SENTENCE_END_RE.search(kept[-1].strip()):
                continue
        if len(stripped) >= MIN_LINE_LENGTH:
            kept.append(line)

    while kept and _TRAILING_BOILERPLATE_RE.match(kept[-1].strip()):
        kept.pop()
    return kept


def truncate(text: str, limit: int = MAX_CHANGELOG_LENGTH) -> str:
    """Cut ``text`` at the last paragraph break within ``limit``, else hard-cut."""
    if len(text) <= limit:
        return text
    head = text[:limit]
    cut = head.rfind("\n\n")
    if cut > 0:
        head = head[:cut]
    return head.rstrip() + TRUNCATION_MARKER


def clean_changelog_text(text: str) -> str | None:
    """Reduce raw page text to a changelog summary; ``None`` if nothing survives."""
    text = text.strip()
    for pattern in _BOILERPLATE_PATTERNS:
        text = pattern.sub("", text)
    text = _COMMIT_HASH_RE.sub("", text)
    text = _TRAILING_ISSUE_RE.sub("", text)
    text = _INLINE_SPACE_RE.sub(" ", text)

    lines = re.split(r"\n+", text)
    summary = "\n".join(_filter_lines(lines)).strip()
    summary = _BLANK_RUN_RE.sub("\n\n", summary)
    summary = truncate(summary)
    return summary or None


def extract_changelog(
    soup: BeautifulSoup, selectors: Sequence[str], *, fallback_to_body: bool = True
) -> str | None:
    content = find_content(soup, selectors, fallback_to_body=fallback_to_body)
    if content is None:
        return None
    return clean_changelog_text(strip_chrome(content).get_text())
