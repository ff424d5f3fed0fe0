"""Map RubyGems and GitHub JSON payloads onto gemcontext records.

Absent optional fields get defaults (``prerelease=False``,
``platform="generic"``, empty containers). Version entries whose number is
not a plain ``major.minor.patch`` are dropped: RubyGems accepts pre-release
and platform build identifiers that are not useful as "versions" here.
Unparseable dates become ``None`` everywhere, in JSON and HTML alike.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

import structlog

from gemcontext.integrity import expect_array, expect_object
from gemcontext.models.records import (
    DownloadStats,
    GemSummary,
    PackageInfo,
    VersionRecord,
)

log = structlog.get_logger()

SEMVER_RE = re.compile(r"^\d+\.\d+\.\d+$")

_DATE_FORMATS = ("%Y-%m-%d", "%B %d, %Y", "%b %d, %Y", "%d %B %Y", "%d %b %Y", "%m/%d/%Y")


def parse_date(value: Any) -> date | None:
    """Parse an ISO-ish or human date string; ``None`` when it does not parse."""
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def iso_date(value: Any) -> str | None:
    parsed = parse_date(value)
    if parsed is None:
        if value:
            log.debug("date_unparseable", value=value)
        return None
    return parsed.isoformat()


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _int_or_none(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    return value if isinstance(value, int) else None


def _licenses(value: Any) -> list[str]:
    if isinstance(value, list):
        return [item for item in value if isinstance(item, str)]
    if isinstance(value, str):
        return [value]
    return []


def _metadata(value: Any) -> dict[str, Any]:
    return dict(value) if isinstance(value, dict) else {}


def versions_from_json(payload: Any, url: str) -> list[VersionRecord]:
    entries = expect_array(payload, url)
    records: list[VersionRecord] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        number = entry.get("number")
        if not isinstance(number, str) or not SEMVER_RE.match(number):
            continue
        licenses = _licenses(entry.get("licenses"))
        records.append(
            VersionRecord(
                version=number,
                release_date=iso_date(entry.get("created_at")),
                built_at=iso_date(entry.get("built_at")),
                license=licenses[0] if licenses else None,
                prerelease=bool(entry.get("prerelease") or False),
                platform=_str_or_none(entry.get("platform")) or "generic",
                ruby_version=_str_or_none(entry.get("ruby_version")),
                rubygems_version=_str_or_none(entry.get("rubygems_version")),
                downloads_count=_int_or_none(entry.get("downloads_count")),
                sha=_str_or_none(entry.get("sha")),
                spec_sha=_str_or_none(entry.get("spec_sha")),
                requirements=list(entry.get("requirements") or []),
                metadata=_metadata(entry.get("metadata")),
            )
        )
    return records


def _dependencies(value: Any) -> dict[str, list[Any]]:
    if not isinstance(value, dict):
        return {"runtime": [], "development": []}
    return {str(group): list(deps or []) for group, deps in value.items()}


def package_info_from_json(payload: Any, url: str) -> PackageInfo:
    """Build a ``PackageInfo`` from the v1 gem or the v2 version endpoint."""
    data = expect_object(payload, url)
    metadata = _metadata(data.get("metadata"))
    return PackageInfo(
        name=_str_or_none(data.get("name")),
        version=_str_or_none(data.get("version")) or _str_or_none(data.get("number")),
        summary=_str_or_none(data.get("summary")) or _str_or_none(data.get("info")),
        description=_str_or_none(data.get("description")),
        info=_str_or_none(data.get("info")),
        homepage=_str_or_none(data.get("homepage_uri")),
        source_repo_url=_str_or_none(data.get("source_code_uri")),
        documentation_url=_str_or_none(data.get("documentation_uri")),
        licenses=_licenses(data.get("licenses")),
        authors=_str_or_none(data.get("authors")),
        downloads=_int_or_none(data.get("downloads")),
        version_downloads=_int_or_none(data.get("version_downloads")),
        yanked=bool(data.get("yanked") or False),
        dependencies=_dependencies(data.get("dependencies")),
        changelog_url=_str_or_none(data.get("changelog_uri"))
        or _str_or_none(metadata.get("changelog_uri")),
        funding_url=_str_or_none(data.get("funding_uri"))
        or _str_or_none(metadata.get("funding_uri")),
        platform=_str_or_none(data.get("platform")) or "generic",
        sha=_str_or_none(data.get("sha")),
        spec_sha=_str_or_none(data.get("spec_sha")),
        metadata=metadata,
    )


def gem_summaries_from_json(payload: Any, url: str) -> list[GemSummary]:
    """Search results and both activity feeds share this shape."""
    entries = expect_array(payload, url)
    return [
        GemSummary(
            name=_str_or_none(entry.get("name")),
            version=_str_or_none(entry.get("version")),
            info=_str_or_none(entry.get("info")),
            authors=_str_or_none(entry.get("authors")),
            downloads=_int_or_none(entry.get("downloads")),
            version_downloads=_int_or_none(entry.get("version_downloads")),
            homepage=_str_or_none(entry.get("homepage_uri")),
            source_repo_url=_str_or_none(entry.get("source_code_uri")),
            documentation_url=_str_or_none(entry.get("documentation_uri")),
            licenses=_licenses(entry.get("licenses")),
            created_at=_str_or_none(entry.get("created_at")),
        )
        for entry in entries
        if isinstance(entry, dict)
    ]


def reverse_dependencies_from_json(payload: Any, url: str) -> list[str]:
    entries = expect_array(payload, url)
    return [entry for entry in entries if isinstance(entry, str)]


def downloads_from_json(payload: Any, url: str, gem_name: str, version: str) -> DownloadStats:
    data = expect_object(payload, url)
    return DownloadStats(
        gem_name=gem_name,
        version=version,
        version_downloads=_int_or_none(data.get("version_downloads")),
        total_downloads=_int_or_none(data.get("total_downloads")),
    )


def release_body_from_json(payload: Any, url: str) -> str | None:
    """Markdown body of a GitHub release, or ``None`` when it is blank."""
    data = expect_object(payload, url)
    body = _str_or_none(data.get("body"))
    if body is None or not body.strip():
        return None
    return body
