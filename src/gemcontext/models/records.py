"""Normalized record shapes returned by the client.

Records are frozen so a cached list can be handed to several callers without
one of them mutating what the next one sees.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


class VersionRecord(_Record):
    """One published version of a gem."""

    version: str
    release_date: str | None = None  # ISO-8601 date
    built_at: str | None = None  # ISO-8601 date
    license: str | None = None
    prerelease: bool = False
    platform: str = "generic"
    ruby_version: str | None = None
    rubygems_version: str | None = None
    downloads_count: int | None = None
    sha: str | None = None
    spec_sha: str | None = None
    requirements: list[Any] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


class PackageInfo(_Record):
    name: str | None = None
    version: str | None = None
    summary: str | None = None
    description: str | None = None
    info: str | None = None
    homepage: str | None = None
    source_repo_url: str | None = None
    documentation_url: str | None = None
    licenses: list[str] = Field(default_factory=list)
    authors: str | None = None
    downloads: int | None = None
    version_downloads: int | None = None
    yanked: bool = False
    dependencies: dict[str, list[Any]] = Field(
        default_factory=lambda: {"runtime": [], "development": []}
    )
    changelog_url: str | None = None
    funding_url: str | None = None
    platform: str = "generic"
    sha: str | None = None
    spec_sha: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class GemSummary(_Record):
    """Entry of the search results and the activity feeds."""

    name: str | None = None
    version: str | None = None
    info: str | None = None
    authors: str | None = None
    downloads: int | None = None
    version_downloads: int | None = None
    homepage: str | None = None
    source_repo_url: str | None = None
    documentation_url: str | None = None
    licenses: list[str] = Field(default_factory=list)
    created_at: str | None = None


class DownloadStats(_Record):
    gem_name: str
    version: str
    version_downloads: int | None = None
    total_downloads: int | None = None


class LanguageVersionRecord(_Record):
    """One Ruby release from the ruby-lang.org release index."""

    version: str
    release_date: str | None = None
    download_url: str | None = None
    release_notes_url: str | None = None


MaintenanceStatus = Literal[
    "preview", "normal maintenance", "security maintenance", "eol", "unknown"
]


class MaintenanceRecord(_Record):
    version: str  # major.minor
    status: MaintenanceStatus = "unknown"
    release_date: str | None = None
    normal_maintenance_until: str | None = None  # ISO date or "TBD"
    eol: str | None = None  # ISO date or "TBD"


class ChangelogResult(_Record):
    subject_name: str
    version: str | None = None
    source_url: str | None = None
    content: str | None = None
    error: str | None = None


class RoadmapVersion(_Record):
    name: str
    version_id: int
    url: str
    target_date: str | None = None
    issue_count: int | None = None
    issue_summary: str | None = None


class RoadmapIssue(_Record):
    id: int
    tracker: str | None = None
    subject: str
    status: str | None = None
    url: str


class RoadmapVersionDetail(_Record):
    version_id: int
    name: str | None = None
    url: str
    description: str | None = None
    issues: list[RoadmapIssue] = Field(default_factory=list)
