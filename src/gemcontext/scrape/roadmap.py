"""ruby-master roadmap pages on bugs.ruby-lang.org (Redmine).

The roadmap index lists one block per target version: a heading linking to
``/versions/<id>``, a due date carried in a ``title`` attribute, and a
progress line such as ``42 issues (30 closed - 12 open)``. A version detail
page has a wiki description and a table of related issues.
"""

from __future__ import annotations

import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from gemcontext.models.records import RoadmapIssue, RoadmapVersion, RoadmapVersionDetail
from gemcontext.normalize import iso_date

REDMINE_ORIGIN = "https://bugs.ruby-lang.org"

_VERSION_HREF_RE = re.compile(r"/versions/(\d+)")
_ISSUE_HREF_RE = re.compile(r"/issues/(\d+)")
_ISSUE_COUNT_RE = re.compile(r"(\d+)\s+issues?\s*\(([^)]*)\)", re.I)
_TRACKER_RE = re.compile(r"^([A-Za-z]+)\s*#\d+")
_WHITESPACE_RE = re.compile(r"\s+")


def _squash(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def _href(tag: Tag) -> str:
    href = tag.get("href")
    return href if isinstance(href, str) else ""


def _version_block(heading: Tag) -> list[Tag]:
    """Elements describing the version introduced by ``heading``.

    Usually the siblings up to the next heading; Redmine wraps the heading in
    a ``<header>`` inside an ``<article>``, in which case it is the rest of
    the article.
    """
    block: list[Tag] = []
    sibling = heading.find_next_sibling()
    while isinstance(sibling, Tag) and sibling.name not in ("h2", "h3"):
        block.append(sibling)
        sibling = sibling.find_next_sibling()
    container = heading.parent
    if not block and isinstance(container, Tag) and container.name == "header":
        block = [tag for tag in container.find_next_siblings() if isinstance(tag, Tag)]
    return block


def _target_date(heading: Tag, link: Tag, block: list[Tag]) -> str | None:
    """Due date from an anchor ``title``, falling back to any titled element nearby."""
    candidates = [link, *heading.find_all(title=True)]
    for element in block:
        candidates.extend(element.find_all(title=True))
    for candidate in candidates:
        title = candidate.get("title")
        if isinstance(title, str):
            parsed = iso_date(title)
            if parsed:
                return parsed
    return None


def _issue_count(block: list[Tag]) -> tuple[int | None, str | None]:
    text = _squash(" ".join(element.get_text(" ") for element in block))
    match = _ISSUE_COUNT_RE.search(text)
    if match is None:
        return None, None
    return int(match.group(1)), _squash(match.group(2))


def extract_roadmap(soup: BeautifulSoup) -> list[RoadmapVersion]:
    versions: list[RoadmapVersion] = []
    seen: set[str] = set()
    for heading in soup.find_all(["h2", "h3"]):
        link = heading.find("a", href=_VERSION_HREF_RE)
        if not isinstance(link, Tag):
            continue
        url = urljoin(REDMINE_ORIGIN, _href(link))
        if url in seen:
            continue
        seen.add(url)
        match = _VERSION_HREF_RE.search(url)
        if match is None:
            continue
        block = _version_block(heading)
        issue_count, issue_summary = _issue_count(block)
        versions.append(
            RoadmapVersion(
                name=_squash(link.get_text()) or _squash(heading.get_text()),
                version_id=int(match.group(1)),
                url=url,
                target_date=_target_date(heading, link, block),
                issue_count=issue_count,
                issue_summary=issue_summary,
            )
        )
    return versions


def _description(soup: BeautifulSoup) -> str | None:
    for selector in ("#roadmap .wiki", "div.version-overview .wiki", "div.wiki", "#content .wiki"):
        block = soup.select_one(selector)
        if block is not None:
            text = _squash(block.get_text(" "))
            if text:
                return text
    return None


def _issue_from_row(row: Tag) -> RoadmapIssue | None:
    cells = [_squash(cell.get_text(" ")) for cell in row.find_all("td")]
    if not any(cells):
        return None
    link = row.find("a", href=_ISSUE_HREF_RE)
    if not isinstance(link, Tag):
        return None
    match = _ISSUE_HREF_RE.search(_href(link))
    if match is None:
        return None

    link_text = _squash(link.get_text())
    tracker_match = _TRACKER_RE.match(link_text)
    status_cell = row.find("td", class_="status")
    subject_cell = row.find("td", class_="subject")
    subject = _squash(subject_cell.get_text(" ")) if isinstance(subject_cell, Tag) else ""
    if not subject:
        subject = next((c for c in reversed(cells) if c), link_text)
    # Redmine renders "Feature #123: subject"; keep only the subject.
    subject = re.sub(r"^[A-Za-z]+\s*#\d+\s*:\s*", "", subject)

    return RoadmapIssue(
        id=int(match.group(1)),
        tracker=tracker_match.group(1) if tracker_match else None,
        subject=subject or link_text,
        status=_squash(status_cell.get_text()) if isinstance(status_cell, Tag) else None,
        url=urljoin(REDMINE_ORIGIN, _href(link)),
    )


def extract_roadmap_version(soup: BeautifulSoup, version_id: int, url: str) -> RoadmapVersionDetail:
    heading = soup.find(["h2", "h3"], class_="version") or soup.find("h2")
    name = _squash(heading.get_text()) if isinstance(heading, Tag) else None

    issues: list[RoadmapIssue] = []
    seen: set[int] = set()
    for row in soup.select("table.related-issues tr, table.list tr"):
        issue = _issue_from_row(row)
        if issue is None or issue.id in seen:
            continue
        seen.add(issue.id)
        issues.append(issue)

    return RoadmapVersionDetail(
        version_id=version_id,
        name=name or None,
        url=url,
        description=_description(soup),
        issues=issues,
    )
