"""Sorting, pagination and field projection shared by all listing operations."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, TypeVar

T = TypeVar("T")

SORT_ORDERS = ("version_desc", "version_asc", "date_desc", "date_asc")
DEFAULT_SORT = "version_desc"

_NUMERIC_PREFIX_RE = re.compile(r"^(\d+(?:\.\d+)*)(.*)$")
_SEGMENT_RE = re.compile(r"\d+|[A-Za-z]+")


def version_key(version: str | None) -> tuple[Any, ...]:
    """Sort key for version strings such as ``3.4.1`` or ``3.5.0-preview1``.

    Numeric release segments compare as integers. A version with a suffix is
    a pre-release and sorts before the bare release it precedes.
    """
    if not version:
        return ((), 0, ())
    match = _NUMERIC_PREFIX_RE.match(version.strip())
    if match is None:
        return ((), 0, _suffix_key(version))
    release = tuple(int(part) for part in match.group(1).split("."))
    suffix = match.group(2)
    if not suffix:
        return (release, 1, ())
    return (release, 0, _suffix_key(suffix))


def _suffix_key(suffix: str) -> tuple[tuple[int, int, str], ...]:
    # Letters sort before numbers, mirroring RubyGems pre-release ordering.
    return tuple(
        (1, int(seg), "") if seg.isdigit() else (0, 0, seg.lower())
        for seg in _SEGMENT_RE.findall(suffix)
    )


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def sort_records(records: Iterable[T], sort: str = DEFAULT_SORT) -> list[T]:
    """Sort by version or by ISO date string; unknown tokens mean ``version_desc``."""
    items = list(records)
    if sort == "version_asc":
        return sorted(items, key=lambda r: version_key(_field(r, "version")))
    if sort == "date_desc":
        return sorted(items, key=lambda r: _field(r, "release_date") or "", reverse=True)
    if sort == "date_asc":
        return sorted(items, key=lambda r: _field(r, "release_date") or "")
    return sorted(items, key=lambda r: version_key(_field(r, "version")), reverse=True)


def paginate(records: Sequence[T], limit: int | None = None, offset: int = 0) -> list[T]:
    if offset >= len(records):
        return []
    page = list(records[offset:])
    if limit is not None:
        page = page[:limit]
    return page


def apply(
    records: Iterable[T],
    limit: int | None = None,
    offset: int = 0,
    sort: str = DEFAULT_SORT,
) -> list[T]:
    """Sort, then slice ``offset``/``limit`` off the sorted list."""
    return paginate(sort_records(records, sort), limit=limit, offset=offset)


def select_fields(
    items: Iterable[Mapping[str, Any]], fields: Sequence[str] | None
) -> list[dict[str, Any]]:
    """Keep only the requested keys of each item, in the item's own key order.

    Unknown field names are ignored. ``None`` or an empty list returns every key.
    """
    if not fields:
        return [dict(item) for item in items]
    wanted = set(fields)
    return [{key: value for key, value in item.items() if key in wanted} for item in items]
