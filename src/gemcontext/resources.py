"""MCP resources: aggregate views assembled from several client operations."""

from __future__ import annotations

from collections import Counter
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog

from gemcontext.errors import CorruptedDataError, ResponseSizeExceededError

if TYPE_CHECKING:
    from gemcontext.state import AppState

log = structlog.get_logger()

POPULAR_GEMS: tuple[str, ...] = (
    "rails", "nokogiri", "bundler", "rake", "rspec", "devise", "puma", "sidekiq",
    "pg", "mysql2", "redis", "json", "webrick", "sinatra", "haml", "sass",
    "jekyll", "octokit", "faraday", "httparty", "rest-client",
)  # fmt: skip

RECENT_VERSIONS_LIMIT = 20
RECENT_MAINTENANCE_LIMIT = 10


async def popular_gems(state: AppState) -> list[dict[str, Any]]:
    """Latest version of each popular gem.

    A gem whose upstream response is oversized or corrupt is reported inline
    with its error instead of failing the whole listing. Gems with no
    release are left out.
    """
    gems: list[dict[str, Any]] = []
    for name in POPULAR_GEMS:
        try:
            latest = await state.client.get_gem_versions(
                name, limit=1, fields=["version", "release_date"]
            )
        except (ResponseSizeExceededError, CorruptedDataError) as exc:
            log.warning("popular_gem_skipped", gem_name=name, error=exc.message)
            gems.append({"name": name, "version": None, "release_date": None, "error": exc.message})
            continue
        if latest:
            gems.append({"name": name, **latest[0]})
    return gems


async def latest_ruby(state: AppState) -> dict[str, Any]:
    return await state.client.get_latest_ruby_version()


def _summarize(versions: list[dict[str, Any]]) -> dict[str, int]:
    counts = Counter(v["status"] for v in versions)
    return {
        "preview": counts["preview"],
        "normal_maintenance": counts["normal maintenance"],
        "security_maintenance": counts["security maintenance"],
        "eol": counts["eol"],
    }


async def ruby_maintenance(state: AppState) -> dict[str, Any]:
    versions = await state.client.get_ruby_maintenance_status()
    return {
        "updated_at": datetime.now(UTC).isoformat(timespec="seconds"),
        "versions": versions,
        "summary": _summarize(versions),
    }


def compatibility_note(record: dict[str, Any]) -> str:
    status = record.get("status")
    if status == "preview":
        return "Preview release. Not intended for production use."
    if status == "normal maintenance":
        until = record.get("normal_maintenance_until") or "TBD"
        return f"Stable series. Normal maintenance until {until}. Well-supported by most gems."
    if status == "security maintenance":
        eol = record.get("eol") or "TBD"
        return f"Security maintenance only. EOL expected {eol}."
    if status == "eol":
        eol = record.get("eol")
        if eol:
            return f"End of life (EOL: {eol}). No longer supported."
        return "End of life. No longer supported."
    return "Maintenance status unknown."


async def ruby_compatibility(state: AppState) -> dict[str, Any]:
    latest = await state.client.get_latest_ruby_version()
    recent = await state.client.get_ruby_versions(limit=RECENT_VERSIONS_LIMIT)
    maintenance = (await state.client.get_ruby_maintenance_status())[:RECENT_MAINTENANCE_LIMIT]
    return {
        "latest": latest,
        "recent_versions": recent,
        "maintenance_status": maintenance,
        "compatibility_notes": {f"{m['version']}.x": compatibility_note(m) for m in maintenance},
    }
