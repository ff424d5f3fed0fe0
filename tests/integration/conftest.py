"""Integration test fixtures.

Provides a fully wired AppState (cache, fetcher, client) sharing one httpx
client that the tests intercept with respx.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
import pytest

from gemcontext.config import Settings
from gemcontext.state import AppState, build_state


@pytest.fixture()
async def app_state() -> AsyncIterator[AppState]:
    """AppState wired exactly as the server lifespan builds it."""
    async with httpx.AsyncClient() as client:
        yield build_state(Settings(), client)
