"""Ruby maintenance branches (https://www.ruby-lang.org/en/downloads/branches/)."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, Tag

from gemcontext.models.records import MaintenanceRecord, MaintenanceStatus
from gemcontext.normalize import iso_date
from gemcontext.query import version_key

_HEADING_RE = re.compile(r"Ruby ([\d.]+)")
_BRANCH_RE = re.compile(r"^\d+\.\d+$")

_STATUS_RE = re.compile(r"status:\s*([^\n<]+)", re.I)
_RELEASE_DATE_RE = re.compile(r"release date:\s*(\d{4}-\d{2}-\d{2})", re.I)
_NORMAL_UNTIL_RE = re.compile(r"normal maintenance until:\s*([^<\n]+)", re.I)
_EOL_RE = re.compile(r"EOL:\s*([^<\n]+)", re.I)


def classify_status(text: str) -> MaintenanceStatus:
    """First match wins: preview, eol, security, normal."""
    value = text.strip().lower()
    if "preview" in value:
        return "preview"
    if "eol" in value or "end-of-life" in value:
        return "eol"
    if "security" in value:
        return "security maintenance"
    if "normal" in value:
        return "normal maintenance"
    return "unknown"


def _date_or_tbd(raw: str | None) -> str | None:
    if raw is None:
        return None
    value = raw.split("(", 1)[0].strip()
    if value == "TBD":
        return "TBD"
    return iso_date(value)


def _search(pattern: re.Pattern[str], text: str) -> str | None:
    match = pattern.search(text)
    return match.group(1).strip() if match else None


def parse_branch_paragraph(version: str, text: str) -> MaintenanceRecord:
    status_text = _search(_STATUS_RE, text) or ""
    return MaintenanceRecord(
        version=version,
        status=classify_status(status_text),
        release_date=_search(_RELEASE_DATE_RE, text),
        normal_maintenance_until=_date_or_tbd(_search(_NORMAL_UNTIL_RE, text)),
        eol=_date_or_tbd(_search(_EOL_RE, text)),
    )


def extract_maintenance_status(soup: BeautifulSoup) -> list[MaintenanceRecord]:
    """Pair every ``Ruby X.Y`` heading with the paragraph right after it.

    Result is sorted by branch version, newest first.
    """
    records: list[MaintenanceRecord] = []
    for heading in soup.find_all(["h2", "h3", "h4"]):
        match = _HEADING_RE.search(heading.get_text())
        if match is None or not _BRANCH_RE.match(match.group(1)):
            continue
        paragraph = heading.find_next_sibling()
        if not isinstance(paragraph, Tag) or paragraph.name != "p":
            continue
        records.append(parse_branch_paragraph(match.group(1), paragraph.get_text("\n")))
    return sorted(records, key=lambda r: version_key(r.version), reverse=True)
