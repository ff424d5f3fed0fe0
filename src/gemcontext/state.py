from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from gemcontext.cache import Cache
from gemcontext.client import Client
from gemcontext.fetcher import Fetcher

if TYPE_CHECKING:
    import httpx

    from gemcontext.config import Settings


@dataclass
class AppState:
    """Everything a tool or resource handler needs, built once at startup."""

    settings: Settings
    cache: Cache
    client: Client


def build_state(settings: Settings, http_client: httpx.AsyncClient | None = None) -> AppState:
    """Wire the cache, fetcher and client together.

    Without ``http_client`` the fetcher opens a fresh connection per request.
    """
    cache = Cache()
    fetcher = Fetcher(http_client, settings=settings.fetcher)
    client = Client(cache, fetcher, settings)
    return AppState(settings=settings, cache=cache, client=client)
