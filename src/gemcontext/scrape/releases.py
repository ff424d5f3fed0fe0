"""Ruby release index (https://www.ruby-lang.org/en/downloads/releases/)."""

from __future__ import annotations

import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from gemcontext.models.records import LanguageVersionRecord
from gemcontext.normalize import iso_date

RUBY_LANG_ORIGIN = "https://www.ruby-lang.org"

_VERSION_LABEL_RE = re.compile(r"Ruby (.+)")
_VERSION_PREFIX_RE = re.compile(r"^\d+\.\d+\.\d+")


def _link_href(cell: Tag | None) -> str | None:
    if cell is None:
        return None
    link = cell.find("a", href=True)
    if not isinstance(link, Tag):
        return None
    href = link["href"]
    return href if isinstance(href, str) else None


def absolute_url(href: str | None, origin: str = RUBY_LANG_ORIGIN) -> str | None:
    if not href:
        return None
    if href.startswith("http"):
        return href
    return urljoin(origin, href)


def extract_ruby_releases(soup: BeautifulSoup) -> list[LanguageVersionRecord]:
    """One record per table row whose first cell reads ``Ruby <x.y.z...>``.

    Columns: version label, release date, download link, release notes link.
    """
    records: list[LanguageVersionRecord] = []
    for row in soup.find_all("tr"):
        cells = row.find_all("td")
        if not cells:
            continue
        match = _VERSION_LABEL_RE.search(cells[0].get_text())
        if match is None:
            continue
        version = match.group(1).strip()
        if not _VERSION_PREFIX_RE.match(version):
            continue
        records.append(
            LanguageVersionRecord(
                version=version,
                release_date=iso_date(cells[1].get_text()) if len(cells) > 1 else None,
                download_url=_link_href(cells[2]) if len(cells) > 2 else None,
                release_notes_url=absolute_url(_link_href(cells[3])) if len(cells) > 3 else None,
            )
        )
    return records
