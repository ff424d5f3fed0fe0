"""Unit tests for gemcontext.normalize."""

from __future__ import annotations

from datetime import date

import pytest

from gemcontext.errors import CorruptedDataError
from gemcontext.normalize import (
    downloads_from_json,
    gem_summaries_from_json,
    iso_date,
    package_info_from_json,
    parse_date,
    release_body_from_json,
    reverse_dependencies_from_json,
    versions_from_json,
)

URL = "https://rubygems.org/api/v1/versions/rack.json"


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


class TestDates:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("2020-01-01", date(2020, 1, 1)),
            ("2024-11-05T18:23:41.123Z", date(2024, 11, 5)),
            ("December 25, 2024", date(2024, 12, 25)),
            ("25 Dec 2024", date(2024, 12, 25)),
            ("12/25/2024", date(2024, 12, 25)),
        ],
    )
    def test_parse_date_formats(self, raw: str, expected: date) -> None:
        assert parse_date(raw) == expected

    @pytest.mark.parametrize("raw", ["not a date", "", "   ", None, 42])
    def test_unparseable_dates_are_none(self, raw: object) -> None:
        assert parse_date(raw) is None
        assert iso_date(raw) is None

    def test_iso_date_serializes(self) -> None:
        assert iso_date("2024-11-05T18:23:41Z") == "2024-11-05"


# ---------------------------------------------------------------------------
# Versions
# ---------------------------------------------------------------------------


class TestVersionsFromJson:
    def test_non_semver_entries_dropped(self) -> None:
        payload = [
            {"number": "1.0.0", "created_at": "2020-01-01"},
            {"number": "bad", "created_at": "2020-01-02"},
        ]
        records = versions_from_json(payload, URL)
        assert len(records) == 1
        assert records[0].version == "1.0.0"
        assert records[0].release_date == "2020-01-01"

    @pytest.mark.parametrize("number", ["1.0.0.rc1", "2.0.0-java", "1.0", "v1.0.0", None])
    def test_each_invalid_number_dropped(self, number: object) -> None:
        assert versions_from_json([{"number": number}], URL) == []

    def test_defaults_for_absent_fields(self) -> None:
        record = versions_from_json([{"number": "3.1.0"}], URL)[0]
        assert record.prerelease is False
        assert record.platform == "generic"
        assert record.requirements == []
        assert record.metadata == {}
        assert record.license is None
        assert record.release_date is None

    def test_full_entry(self) -> None:
        entry = {
            "number": "3.1.8",
            "created_at": "2024-10-14T18:23:41.123Z",
            "built_at": "2024-10-14T00:00:00.000Z",
            "licenses": ["MIT"],
            "prerelease": False,
            "platform": "ruby",
            "ruby_version": ">= 2.4.0",
            "rubygems_version": ">= 0",
            "downloads_count": 1234,
            "sha": "abc",
            "metadata": {"changelog_uri": "https://example.com/CHANGELOG.md"},
        }
        record = versions_from_json([entry], URL)[0]
        assert record.release_date == "2024-10-14"
        assert record.built_at == "2024-10-14"
        assert record.license == "MIT"
        assert record.platform == "ruby"
        assert record.ruby_version == ">= 2.4.0"
        assert record.downloads_count == 1234
        assert record.metadata["changelog_uri"] == "https://example.com/CHANGELOG.md"

    def test_unparseable_created_at_degrades_to_none(self) -> None:
        record = versions_from_json([{"number": "1.2.3", "created_at": "yesterday"}], URL)[0]
        assert record.release_date is None

    def test_object_payload_is_corrupt(self) -> None:
        with pytest.raises(CorruptedDataError, match="expected array"):
            versions_from_json({"number": "1.0.0"}, URL)


# ---------------------------------------------------------------------------
# Package info
# ---------------------------------------------------------------------------


class TestPackageInfoFromJson:
    def test_v1_gem_payload(self) -> None:
        payload = {
            "name": "rack",
            "version": "3.1.8",
            "info": "Rack provides a minimal interface",
            "homepage_uri": "https://github.com/rack/rack",
            "source_code_uri": "https://github.com/rack/rack/tree/v3.1.8",
            "documentation_uri": "https://rubydoc.info/gems/rack/3.1.8",
            "changelog_uri": "https://github.com/rack/rack/blob/main/CHANGELOG.md",
            "licenses": ["MIT"],
            "authors": "Leah Neukirchen",
            "downloads": 100,
            "version_downloads": 10,
            "dependencies": {"development": [], "runtime": [{"name": "x"}]},
        }
        info = package_info_from_json(payload, URL)
        assert info.name == "rack"
        assert info.version == "3.1.8"
        assert info.summary == "Rack provides a minimal interface"
        assert info.homepage == "https://github.com/rack/rack"
        assert info.source_repo_url.endswith("v3.1.8")
        assert info.changelog_url == "https://github.com/rack/rack/blob/main/CHANGELOG.md"
        assert info.dependencies["runtime"] == [{"name": "x"}]
        assert info.yanked is False

    def test_v2_version_payload_uses_number_and_metadata(self) -> None:
        payload = {
            "name": "rack",
            "number": "3.0.0",
            "summary": "A modular Ruby webserver interface.",
            "metadata": {
                "changelog_uri": "https://github.com/rack/rack/blob/v3.0.0/CHANGELOG.md",
                "funding_uri": "https://github.com/sponsors/rack",
            },
        }
        info = package_info_from_json(payload, URL)
        assert info.version == "3.0.0"
        assert info.summary == "A modular Ruby webserver interface."
        assert info.changelog_url == "https://github.com/rack/rack/blob/v3.0.0/CHANGELOG.md"
        assert info.funding_url == "https://github.com/sponsors/rack"

    def test_defaults(self) -> None:
        info = package_info_from_json({}, URL)
        assert info.licenses == []
        assert info.dependencies == {"runtime": [], "development": []}
        assert info.metadata == {}
        assert info.platform == "generic"

    def test_array_payload_is_corrupt(self) -> None:
        with pytest.raises(CorruptedDataError, match="expected object"):
            package_info_from_json([], URL)


# ---------------------------------------------------------------------------
# Other endpoints
# ---------------------------------------------------------------------------


class TestOtherEndpoints:
    def test_gem_summaries(self) -> None:
        payload = [
            {"name": "rack", "version": "3.1.8", "downloads": 5, "licenses": None},
            "garbage",
        ]
        summaries = gem_summaries_from_json(payload, URL)
        assert len(summaries) == 1
        assert summaries[0].name == "rack"
        assert summaries[0].licenses == []

    def test_reverse_dependencies_keeps_strings(self) -> None:
        assert reverse_dependencies_from_json(["rails", 3, "sinatra"], URL) == ["rails", "sinatra"]

    def test_downloads(self) -> None:
        stats = downloads_from_json(
            {"version_downloads": 10, "total_downloads": 100}, URL, "rack", "3.1.8"
        )
        assert stats.gem_name == "rack"
        assert stats.version == "3.1.8"
        assert stats.version_downloads == 10
        assert stats.total_downloads == 100

    def test_release_body(self) -> None:
        assert release_body_from_json({"body": "## Notes"}, URL) == "## Notes"
        assert release_body_from_json({"body": "   "}, URL) is None
        assert release_body_from_json({}, URL) is None
