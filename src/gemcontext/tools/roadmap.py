"""Tool handlers for the ruby-master roadmap."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from gemcontext.state import AppState

log = structlog.get_logger()


async def handle_get_ruby_roadmap(
    state: AppState, limit: int | None = None, offset: int = 0
) -> dict[str, Any]:
    log.info("tool_called", tool="get_ruby_roadmap", limit=limit, offset=offset)
    return {"versions": await state.client.get_ruby_roadmap(limit=limit, offset=offset)}


async def handle_get_ruby_roadmap_version(state: AppState, version_id: int) -> dict[str, Any]:
    log.info("tool_called", tool="get_ruby_roadmap_version", version_id=version_id)
    return await state.client.get_ruby_roadmap_version(version_id)
