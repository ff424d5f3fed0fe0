"""MCP server entrypoint.

Registers one tool per client operation plus the aggregate resources, and
runs over stdio (default) or streamable HTTP depending on configuration.

Run with ``python -m gemcontext.server`` or the ``gemcontext`` script.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Awaitable
from contextlib import asynccontextmanager
from typing import Any

import structlog
from mcp.server.fastmcp import Context, FastMCP
from mcp.types import CallToolResult, TextContent

from gemcontext import resources
from gemcontext.config import Settings
from gemcontext.errors import GemContextError
from gemcontext.log_setup import configure_logging
from gemcontext.state import AppState, build_state
from gemcontext.tools import gems, roadmap, ruby

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[AppState]:
    settings = Settings()
    state = build_state(settings)
    log.info(
        "server_started",
        transport=settings.server.transport,
        cache_enabled=settings.cache.enabled,
    )
    try:
        yield state
    finally:
        state.cache.clear()
        log.info("server_stopped")


mcp = FastMCP("gemcontext", lifespan=lifespan)


def _state(ctx: Context) -> AppState:
    return ctx.request_context.lifespan_context


def _text(payload: Any) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps(payload, ensure_ascii=False))]


async def _call(handler: Awaitable[Any]) -> CallToolResult:
    """Await a handler, turning ``GemContextError`` into a structured tool error.

    The error envelope is ``{"error": {"code", "message", "recoverable"}}`` in
    the tool result text, with ``isError`` set.
    """
    try:
        payload = await handler
    except GemContextError as exc:
        log.warning("tool_failed", code=str(exc.code), error=exc.message)
        return CallToolResult(content=_text(exc.to_payload()), isError=True)
    return CallToolResult(content=_text(payload))


# ---------------------------------------------------------------------------
# Gem tools
# ---------------------------------------------------------------------------


@mcp.tool(
    description=(
        "Get all versions of a gem with release dates and licenses, sorted by version "
        "descending by default. Sort: version_desc, version_asc, date_desc, date_asc. "
        "Supports field selection."
    ),
    structured_output=False,
)
async def get_gem_versions(
    gem_name: str,
    ctx: Context,
    limit: int | None = None,
    offset: int = 0,
    sort: str = "version_desc",
    fields: list[str] | None = None,
) -> CallToolResult:
    return await _call(
        gems.handle_get_gem_versions(_state(ctx), gem_name, limit, offset, sort, fields)
    )


@mcp.tool(
    description="Get the latest version of each gem in a list, with release date and license.",
    structured_output=False,
)
async def get_latest_versions(
    gem_names: list[str], ctx: Context, fields: list[str] | None = None
) -> CallToolResult:
    return await _call(gems.handle_get_latest_versions(_state(ctx), gem_names, fields))


@mcp.tool(
    description=(
        "Get gem details: summary, homepage, source code, documentation, licenses, authors, "
        "dependencies and downloads. Pass a version to describe that release."
    ),
    structured_output=False,
)
async def get_gem_info(
    gem_name: str,
    ctx: Context,
    version: str | None = None,
    fields: list[str] | None = None,
) -> CallToolResult:
    return await _call(gems.handle_get_gem_info(_state(ctx), gem_name, version, fields))


@mcp.tool(description="List gems that depend on the given gem.", structured_output=False)
async def get_gem_reverse_dependencies(
    gem_name: str, ctx: Context, limit: int | None = None, offset: int = 0
) -> CallToolResult:
    return await _call(
        gems.handle_get_gem_reverse_dependencies(_state(ctx), gem_name, limit, offset)
    )


@mcp.tool(
    description="Get download counts for one version of a gem and for the gem overall.",
    structured_output=False,
)
async def get_gem_version_downloads(gem_name: str, version: str, ctx: Context) -> CallToolResult:
    return await _call(gems.handle_get_gem_version_downloads(_state(ctx), gem_name, version))


@mcp.tool(description="Search RubyGems.org by gem name.", structured_output=False)
async def search_gems(
    query: str,
    ctx: Context,
    limit: int | None = None,
    offset: int = 0,
    fields: list[str] | None = None,
) -> CallToolResult:
    return await _call(gems.handle_search_gems(_state(ctx), query, limit, offset, fields))


@mcp.tool(
    description="Gems most recently added to RubyGems.org (up to 50).", structured_output=False
)
async def get_latest_gems(
    ctx: Context, limit: int = 30, fields: list[str] | None = None
) -> CallToolResult:
    return await _call(gems.handle_get_latest_gems(_state(ctx), limit, fields))


@mcp.tool(description="Most recently published gem versions (up to 50).", structured_output=False)
async def get_recently_updated_gems(
    ctx: Context, limit: int = 30, fields: list[str] | None = None
) -> CallToolResult:
    return await _call(gems.handle_get_recently_updated_gems(_state(ctx), limit, fields))


@mcp.tool(
    description="Summarize a gem's changelog by fetching and parsing its changelog_uri.",
    structured_output=False,
)
async def get_gem_changelog(
    gem_name: str, ctx: Context, version: str | None = None
) -> CallToolResult:
    return await _call(gems.handle_get_gem_changelog(_state(ctx), gem_name, version))


# ---------------------------------------------------------------------------
# Ruby tools
# ---------------------------------------------------------------------------


@mcp.tool(
    description=(
        "Get all Ruby versions with release dates, download URLs and release notes URLs, "
        "sorted by version descending by default."
    ),
    structured_output=False,
)
async def get_ruby_versions(
    ctx: Context,
    limit: int | None = None,
    offset: int = 0,
    sort: str = "version_desc",
    fields: list[str] | None = None,
) -> CallToolResult:
    return await _call(ruby.handle_get_ruby_versions(_state(ctx), limit, offset, sort, fields))


@mcp.tool(description="Get the latest Ruby version with its release date.", structured_output=False)
async def get_latest_ruby_version(ctx: Context) -> CallToolResult:
    return await _call(ruby.handle_get_latest_ruby_version(_state(ctx)))


@mcp.tool(
    description=(
        "Get the maintenance phase of every Ruby branch: preview, normal maintenance, "
        "security maintenance or eol, with the relevant dates."
    ),
    structured_output=False,
)
async def get_ruby_maintenance_status(ctx: Context) -> CallToolResult:
    return await _call(ruby.handle_get_ruby_maintenance_status(_state(ctx)))


@mcp.tool(
    description="Summarize the release notes of a Ruby version (e.g. '3.4.7').",
    structured_output=False,
)
async def get_ruby_version_changelog(version: str, ctx: Context) -> CallToolResult:
    return await _call(ruby.handle_get_ruby_version_changelog(_state(ctx), version))


@mcp.tool(
    description="Summarize the GitHub release notes of a Ruby version (e.g. '3.4.7').",
    structured_output=False,
)
async def get_ruby_version_changelog_from_github(version: str, ctx: Context) -> CallToolResult:
    return await _call(ruby.handle_get_ruby_version_changelog_from_github(_state(ctx), version))


# ---------------------------------------------------------------------------
# Roadmap tools
# ---------------------------------------------------------------------------


@mcp.tool(
    description="List upcoming ruby-master versions with target dates and issue counts.",
    structured_output=False,
)
async def get_ruby_roadmap(
    ctx: Context, limit: int | None = None, offset: int = 0
) -> CallToolResult:
    return await _call(roadmap.handle_get_ruby_roadmap(_state(ctx), limit, offset))


@mcp.tool(
    description="Get the description and issues of one ruby-master roadmap version by its id.",
    structured_output=False,
)
async def get_ruby_roadmap_version(version_id: int, ctx: Context) -> CallToolResult:
    return await _call(roadmap.handle_get_ruby_roadmap_version(_state(ctx), version_id))


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------


def _resource_state() -> AppState:
    return mcp.get_context().request_context.lifespan_context


@mcp.resource(
    "gemcontext://popular",
    name="Popular Ruby Gems",
    description="A curated list of popular Ruby gems with their latest versions",
    mime_type="application/json",
)
async def popular_gems_resource() -> str:
    return json.dumps(await resources.popular_gems(_resource_state()), indent=2)


@mcp.resource(
    "gemcontext://ruby/latest",
    name="Latest Ruby Version",
    description="The latest stable Ruby version with release date",
    mime_type="application/json",
)
async def latest_ruby_resource() -> str:
    return json.dumps(await resources.latest_ruby(_resource_state()), indent=2)


@mcp.resource(
    "gemcontext://ruby/maintenance",
    name="Ruby Maintenance Status",
    description="Maintenance phase, release date and EOL date of every Ruby branch",
    mime_type="application/json",
)
async def ruby_maintenance_resource() -> str:
    return json.dumps(await resources.ruby_maintenance(_resource_state()), indent=2)


@mcp.resource(
    "gemcontext://ruby/compatibility",
    name="Ruby Version Compatibility",
    description="Recent Ruby versions, their maintenance status and compatibility notes",
    mime_type="application/json",
)
async def ruby_compatibility_resource() -> str:
    return json.dumps(await resources.ruby_compatibility(_resource_state()), indent=2)


def main() -> None:
    # Validates configuration before any transport starts.
    settings = Settings()
    configure_logging(settings.logging)

    if settings.server.transport == "http":
        mcp.settings.host = settings.server.host
        mcp.settings.port = settings.server.port
        mcp.run(transport="streamable-http")
    else:
        mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
