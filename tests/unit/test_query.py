"""Unit tests for gemcontext.query: sorting, pagination and field selection."""

from __future__ import annotations

import pytest

from gemcontext.models.records import LanguageVersionRecord, VersionRecord
from gemcontext.query import SORT_ORDERS, apply, paginate, select_fields, sort_records, version_key


def _records(*pairs: tuple[str, str | None]) -> list[dict[str, str | None]]:
    return [{"version": version, "release_date": released} for version, released in pairs]


RECORDS = _records(
    ("1.10.0", "2021-06-01"),
    ("1.2.0", "2020-03-01"),
    ("2.0.0", "2022-01-15"),
    ("1.9.3", "2021-01-10"),
)


# ---------------------------------------------------------------------------
# version_key
# ---------------------------------------------------------------------------


class TestVersionKey:
    def test_numeric_segments_compare_as_integers(self) -> None:
        assert version_key("3.4.10") > version_key("3.4.9")
        assert version_key("10.0.0") > version_key("9.9.9")

    def test_prerelease_sorts_before_release(self) -> None:
        assert version_key("3.5.0-preview1") < version_key("3.5.0")
        assert version_key("3.5.0-preview2") > version_key("3.5.0-preview1")
        assert version_key("3.5.0-preview1") > version_key("3.4.7")

    def test_empty_version_sorts_lowest(self) -> None:
        assert version_key(None) < version_key("0.0.1")


# ---------------------------------------------------------------------------
# sort_records
# ---------------------------------------------------------------------------


class TestSortRecords:
    def test_version_desc_is_default(self) -> None:
        versions = [r["version"] for r in sort_records(RECORDS)]
        assert versions == ["2.0.0", "1.10.0", "1.9.3", "1.2.0"]

    def test_version_asc_is_exact_reverse_of_desc(self) -> None:
        desc = sort_records(RECORDS, "version_desc")
        asc = sort_records(RECORDS, "version_asc")
        assert asc == list(reversed(desc))

    def test_date_orders(self) -> None:
        desc = [r["release_date"] for r in sort_records(RECORDS, "date_desc")]
        asc = [r["release_date"] for r in sort_records(RECORDS, "date_asc")]
        assert desc == ["2022-01-15", "2021-06-01", "2021-01-10", "2020-03-01"]
        assert asc == list(reversed(desc))

    def test_missing_dates_sort_first_ascending(self) -> None:
        records = _records(("1.0.0", "2020-01-01"), ("1.1.0", None))
        assert sort_records(records, "date_asc")[0]["version"] == "1.1.0"

    def test_unknown_token_falls_back_to_version_desc(self) -> None:
        assert sort_records(RECORDS, "newest_first") == sort_records(RECORDS, "version_desc")

    def test_works_on_models(self) -> None:
        records = [
            LanguageVersionRecord(version="3.3.9"),
            LanguageVersionRecord(version="3.5.0-preview1"),
            LanguageVersionRecord(version="3.4.7"),
        ]
        assert [r.version for r in sort_records(records)] == ["3.5.0-preview1", "3.4.7", "3.3.9"]

    def test_does_not_mutate_input(self) -> None:
        original = list(RECORDS)
        sort_records(RECORDS, "version_asc")
        assert RECORDS == original


# ---------------------------------------------------------------------------
# paginate / apply
# ---------------------------------------------------------------------------


class TestPagination:
    @pytest.mark.parametrize("sort", SORT_ORDERS)
    @pytest.mark.parametrize("limit", [None, 1, 100])
    def test_offset_past_end_is_empty(self, sort: str, limit: int | None) -> None:
        assert apply(RECORDS, limit=limit, offset=len(RECORDS), sort=sort) == []
        assert apply(RECORDS, limit=limit, offset=len(RECORDS) + 5, sort=sort) == []

    def test_limit_caps_after_offset(self) -> None:
        page = apply(RECORDS, limit=2, offset=1)
        assert [r["version"] for r in page] == ["1.10.0", "1.9.3"]

    def test_no_limit_returns_remainder(self) -> None:
        assert paginate([1, 2, 3, 4], offset=2) == [3, 4]

    def test_limit_larger_than_remainder(self) -> None:
        assert paginate([1, 2, 3], limit=10, offset=1) == [2, 3]

    def test_empty_input(self) -> None:
        assert apply([], limit=5) == []


# ---------------------------------------------------------------------------
# select_fields
# ---------------------------------------------------------------------------


class TestSelectFields:
    def test_keeps_only_requested_fields(self) -> None:
        items = [{"name": "rack", "version": "3.1.8", "description": "Rack"}]
        assert select_fields(items, ["name", "version"]) == [{"name": "rack", "version": "3.1.8"}]

    def test_preserves_item_key_order(self) -> None:
        items = [{"name": "rack", "version": "3.1.8", "description": "Rack"}]
        result = select_fields(items, ["version", "name"])
        assert list(result[0]) == ["name", "version"]

    def test_unknown_fields_ignored(self) -> None:
        items = [{"name": "rack"}]
        assert select_fields(items, ["name", "stars"]) == [{"name": "rack"}]

    @pytest.mark.parametrize("fields", [None, []])
    def test_empty_selection_is_passthrough(self, fields: list[str] | None) -> None:
        items = [{"name": "rack", "version": "3.1.8"}]
        assert select_fields(items, fields) == items

    def test_works_with_dumped_records(self) -> None:
        record = VersionRecord(version="1.0.0", release_date="2020-01-01")
        result = select_fields([record.model_dump(mode="json")], ["version", "release_date"])
        assert result == [{"version": "1.0.0", "release_date": "2020-01-01"}]

    def test_record_order_preserved(self) -> None:
        items = [{"name": "b"}, {"name": "a"}]
        assert select_fields(items, ["name"]) == items
