from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class CacheEntry(BaseModel):
    """A cached value and the monotonic timestamp after which it is stale."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    value: Any
    expires_at: float  # time.monotonic() seconds
