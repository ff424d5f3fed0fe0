"""Unit-specific fixtures (no I/O; HTTP is mocked with respx in the tests)."""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
import pytest

from gemcontext.cache import Cache
from gemcontext.client import Client
from gemcontext.config import Settings
from gemcontext.fetcher import Fetcher


class FakeClock:
    """Monotonic clock the tests advance by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def cache(clock: FakeClock) -> Cache:
    return Cache(clock=clock)


@pytest.fixture()
async def http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient() as client:
        yield client


@pytest.fixture()
def client(cache: Cache, http_client: httpx.AsyncClient) -> Client:
    settings = Settings()
    return Client(cache, Fetcher(http_client, settings=settings.fetcher), settings)
