from __future__ import annotations

from gemcontext.models.cache import CacheEntry
from gemcontext.models.records import (
    ChangelogResult,
    DownloadStats,
    GemSummary,
    LanguageVersionRecord,
    MaintenanceRecord,
    PackageInfo,
    RoadmapIssue,
    RoadmapVersion,
    RoadmapVersionDetail,
    VersionRecord,
)
from gemcontext.models.tools import (
    ActivityFeedInput,
    GetGemInfoInput,
    GetGemVersionDownloadsInput,
    GetGemVersionsInput,
    GetLatestVersionsInput,
    GetRubyRoadmapInput,
    GetRubyVersionsInput,
    ReverseDependenciesInput,
    RoadmapVersionInput,
    RubyVersionInput,
    SearchGemsInput,
)

__all__ = [
    # cache
    "CacheEntry",
    # records
    "VersionRecord",
    "PackageInfo",
    "GemSummary",
    "DownloadStats",
    "LanguageVersionRecord",
    "MaintenanceRecord",
    "ChangelogResult",
    "RoadmapVersion",
    "RoadmapIssue",
    "RoadmapVersionDetail",
    # tools
    "ActivityFeedInput",
    "GetGemInfoInput",
    "GetGemVersionDownloadsInput",
    "GetGemVersionsInput",
    "GetLatestVersionsInput",
    "GetRubyRoadmapInput",
    "GetRubyVersionsInput",
    "ReverseDependenciesInput",
    "RoadmapVersionInput",
    "RubyVersionInput",
    "SearchGemsInput",
]
