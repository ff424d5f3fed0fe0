"""Tool handlers for RubyGems queries.

Handlers are plain coroutines over ``AppState`` so they can be tested
without an MCP session. List results are wrapped in an object keyed by what
they list, which is what MCP clients render best.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from gemcontext.state import AppState

log = structlog.get_logger()


async def handle_get_gem_versions(
    state: AppState,
    gem_name: str,
    limit: int | None = None,
    offset: int = 0,
    sort: str = "version_desc",
    fields: list[str] | None = None,
) -> dict[str, Any]:
    log.info("tool_called", tool="get_gem_versions", gem_name=gem_name)
    versions = await state.client.get_gem_versions(
        gem_name, limit=limit, offset=offset, sort=sort, fields=fields
    )
    return {"gem_name": gem_name.strip(), "versions": versions}


async def handle_get_latest_versions(
    state: AppState, gem_names: list[str], fields: list[str] | None = None
) -> dict[str, Any]:
    log.info("tool_called", tool="get_latest_versions", count=len(gem_names))
    return {"gems": await state.client.get_latest_versions(gem_names, fields=fields)}


async def handle_get_gem_info(
    state: AppState,
    gem_name: str,
    version: str | None = None,
    fields: list[str] | None = None,
) -> dict[str, Any]:
    log.info("tool_called", tool="get_gem_info", gem_name=gem_name, version=version)
    return await state.client.get_gem_info(gem_name, version=version, fields=fields)


async def handle_get_gem_reverse_dependencies(
    state: AppState, gem_name: str, limit: int | None = None, offset: int = 0
) -> dict[str, Any]:
    log.info("tool_called", tool="get_gem_reverse_dependencies", gem_name=gem_name)
    names = await state.client.get_gem_reverse_dependencies(gem_name, limit=limit, offset=offset)
    return {"gem_name": gem_name.strip(), "reverse_dependencies": names}


async def handle_get_gem_version_downloads(
    state: AppState, gem_name: str, version: str
) -> dict[str, Any]:
    log.info("tool_called", tool="get_gem_version_downloads", gem_name=gem_name, version=version)
    return await state.client.get_gem_version_downloads(gem_name, version)


async def handle_search_gems(
    state: AppState,
    query: str,
    limit: int | None = None,
    offset: int = 0,
    fields: list[str] | None = None,
) -> dict[str, Any]:
    log.info("tool_called", tool="search_gems", query=query)
    results = await state.client.search_gems(query, limit=limit, offset=offset, fields=fields)
    return {"query": query.strip(), "results": results}


async def handle_get_latest_gems(
    state: AppState, limit: int = 30, fields: list[str] | None = None
) -> dict[str, Any]:
    log.info("tool_called", tool="get_latest_gems", limit=limit)
    return {"gems": await state.client.get_latest_gems(limit=limit, fields=fields)}


async def handle_get_recently_updated_gems(
    state: AppState, limit: int = 30, fields: list[str] | None = None
) -> dict[str, Any]:
    log.info("tool_called", tool="get_recently_updated_gems", limit=limit)
    return {"gems": await state.client.get_recently_updated_gems(limit=limit, fields=fields)}


async def handle_get_gem_changelog(
    state: AppState, gem_name: str, version: str | None = None
) -> dict[str, Any]:
    log.info("tool_called", tool="get_gem_changelog", gem_name=gem_name, version=version)
    return await state.client.get_gem_changelog(gem_name, version=version)
