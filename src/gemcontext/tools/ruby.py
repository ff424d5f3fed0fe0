"""Tool handlers for Ruby release, maintenance and release-notes queries."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from gemcontext.state import AppState

log = structlog.get_logger()


async def handle_get_ruby_versions(
    state: AppState,
    limit: int | None = None,
    offset: int = 0,
    sort: str = "version_desc",
    fields: list[str] | None = None,
) -> dict[str, Any]:
    log.info("tool_called", tool="get_ruby_versions", limit=limit, offset=offset, sort=sort)
    versions = await state.client.get_ruby_versions(
        limit=limit, offset=offset, sort=sort, fields=fields
    )
    return {"versions": versions}


async def handle_get_latest_ruby_version(state: AppState) -> dict[str, Any]:
    log.info("tool_called", tool="get_latest_ruby_version")
    return await state.client.get_latest_ruby_version()


async def handle_get_ruby_maintenance_status(state: AppState) -> dict[str, Any]:
    log.info("tool_called", tool="get_ruby_maintenance_status")
    return {"versions": await state.client.get_ruby_maintenance_status()}


async def handle_get_ruby_version_changelog(state: AppState, version: str) -> dict[str, Any]:
    log.info("tool_called", tool="get_ruby_version_changelog", version=version)
    return await state.client.get_ruby_version_changelog(version)


async def handle_get_ruby_version_changelog_from_github(
    state: AppState, version: str
) -> dict[str, Any]:
    log.info("tool_called", tool="get_ruby_version_changelog_from_github", version=version)
    return await state.client.get_ruby_version_changelog_from_github(version)
