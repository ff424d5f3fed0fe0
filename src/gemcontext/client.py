"""Client facade: the public operation surface of gemcontext.

Every operation follows the same flow: validate the arguments, look the
normalized records up in the cache, otherwise fetch, validate and normalize
them and store them, then sort, paginate and project the result for the
caller. Only successfully normalized records are ever cached.

Some "not found" conditions are returned as ``{..., "error": reason}``
payloads instead of being raised (changelog lookups), so the adapter can
still render a partial answer. Everything else raises a ``GemContextError``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar
from urllib.parse import quote

import pydantic
import structlog

from gemcontext import normalize, query
from gemcontext.config import CacheSettings, Settings
from gemcontext.errors import (
    CorruptedDataError,
    InvalidInputError,
    NotFoundError,
    ResponseSizeExceededError,
)
from gemcontext.fetcher import Fetcher
from gemcontext.models.records import ChangelogResult
from gemcontext.models.tools import (
    ActivityFeedInput,
    GetGemInfoInput,
    GetGemVersionDownloadsInput,
    GetGemVersionsInput,
    GetLatestVersionsInput,
    GetRubyRoadmapInput,
    GetRubyVersionsInput,
    ReverseDependenciesInput,
    RoadmapVersionInput,
    RubyVersionInput,
    SearchGemsInput,
)
from gemcontext.scrape import (
    RUBY_RELEASE_NOTES_SELECTORS,
    clean_changelog_text,
    extract_changelog,
    extract_maintenance_status,
    extract_roadmap,
    extract_roadmap_version,
    extract_ruby_releases,
)
from gemcontext.scrape.changelog import selectors_for

if TYPE_CHECKING:
    from gemcontext.cache import Cache
    from gemcontext.models.records import (
        DownloadStats,
        GemSummary,
        LanguageVersionRecord,
        MaintenanceRecord,
        PackageInfo,
        RoadmapVersion,
        RoadmapVersionDetail,
        VersionRecord,
    )

log = structlog.get_logger()

M = TypeVar("M", bound=pydantic.BaseModel)

RUBYGEMS_API_BASE = "https://rubygems.org/api/v1"
RUBYGEMS_API_V2_BASE = "https://rubygems.org/api/v2"
RUBY_RELEASES_URL = "https://www.ruby-lang.org/en/downloads/releases/"
RUBY_BRANCHES_URL = "https://www.ruby-lang.org/en/downloads/branches/"
RUBY_ROADMAP_URL = "https://bugs.ruby-lang.org/projects/ruby-master/roadmap"
RUBY_VERSION_URL = "https://bugs.ruby-lang.org/versions/{version_id}"
GITHUB_RUBY_RELEASE_URL = "https://api.github.com/repos/ruby/ruby/releases/tags/{tag}"


def validate_input(model: type[M], **kwargs: Any) -> M:
    """Build an input model, turning pydantic errors into ``InvalidInputError``."""
    try:
        return model(**kwargs)
    except pydantic.ValidationError as exc:
        messages = "; ".join(str(err["msg"]).removeprefix("Value error, ") for err in exc.errors())
        raise InvalidInputError(messages) from exc


def _dump(records: list[Any]) -> list[dict[str, Any]]:
    return [record.model_dump(mode="json") for record in records]


def ruby_release_tag(version: str) -> str:
    """GitHub tag for a Ruby version: ``3.4.7`` -> ``v3_4_7``."""
    return "v" + version.replace(".", "_").replace("-", "_")


class Client:
    """RubyGems and Ruby release metadata client.

    The cache is injected so that the server owns a single process-wide
    instance while tests build their own.
    """

    def __init__(
        self,
        cache: Cache,
        fetcher: Fetcher | None = None,
        settings: Settings | None = None,
        *,
        cache_enabled: bool | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._cache = cache
        self._fetcher = fetcher or Fetcher(settings=self._settings.fetcher)
        self._cache_enabled = (
            self._settings.cache.enabled if cache_enabled is None else cache_enabled
        )

    @property
    def cache_settings(self) -> CacheSettings:
        return self._settings.cache

    # ------------------------------------------------------------------
    # Cache helpers
    # ------------------------------------------------------------------

    def _cached(self, key: str) -> Any | None:
        if not self._cache_enabled:
            return None
        value = self._cache.get(key)
        if value is not None:
            log.debug("cache_hit", key=key)
        return value

    def _store(self, key: str, value: Any, ttl: float) -> None:
        if self._cache_enabled:
            self._cache.set(key, value, ttl)

    def clear_cache(self) -> None:
        self._cache.clear()

    # ------------------------------------------------------------------
    # Gems
    # ------------------------------------------------------------------

    async def _gem_versions(self, gem_name: str) -> list[VersionRecord]:
        key = f"gem_versions:{gem_name}"
        cached = self._cached(key)
        if cached is not None:
            return cached
        url = f"{RUBYGEMS_API_BASE}/versions/{quote(gem_name)}.json"
        records = normalize.versions_from_json(await self._fetcher.fetch_json(url), url)
        self._store(key, records, self.cache_settings.gem_ttl_seconds)
        return records

    async def get_gem_versions(
        self,
        gem_name: str,
        limit: int | None = None,
        offset: int = 0,
        sort: str = "version_desc",
        fields: list[str] | None = None,
    ) -> list[dict[str, Any]]:
        """All ``major.minor.patch`` versions of a gem, sorted and paginated."""
        params = validate_input(
            GetGemVersionsInput,
            gem_name=gem_name,
            limit=limit,
            offset=offset,
            sort=sort,
            fields=fields,
        )
        records = await self._gem_versions(params.gem_name)
        page = query.apply(records, limit=params.limit, offset=params.offset, sort=params.sort)
        return query.select_fields(_dump(page), params.fields)

    async def get_latest_versions(
        self, gem_names: list[str], fields: list[str] | None = None
    ) -> list[dict[str, Any]]:
        """Latest version of each gem, in the order the names were given.

        ``fields`` projects the version record; ``name`` is always kept so
        every entry still says which gem it describes.
        """
        params = validate_input(GetLatestVersionsInput, gem_names=gem_names, fields=fields)
        results: list[dict[str, Any]] = []
        for name in params.gem_names:
            latest = query.apply(await self._gem_versions(name), limit=1)
            if latest:
                record = latest[0].model_dump(mode="json")
            else:
                record = {"version": None, "release_date": None, "license": None}
            projected = query.select_fields([record], params.fields)[0]
            results.append({"name": name, **projected})
        return results

    async def _gem_info(self, gem_name: str, version: str | None) -> PackageInfo:
        key = f"gem_info:{gem_name}:{version or 'latest'}"
        cached = self._cached(key)
        if cached is not None:
            return cached
        if version is None:
            url = f"{RUBYGEMS_API_BASE}/gems/{quote(gem_name)}.json"
        else:
            name, number = quote(gem_name), quote(version)
            url = f"{RUBYGEMS_API_V2_BASE}/rubygems/{name}/versions/{number}.json"
        info = normalize.package_info_from_json(await self._fetcher.fetch_json(url), url)
        self._store(key, info, self.cache_settings.gem_ttl_seconds)
        return info

    async def get_gem_info(
        self, gem_name: str, version: str | None = None, fields: list[str] | None = None
    ) -> dict[str, Any]:
        params = validate_input(GetGemInfoInput, gem_name=gem_name, version=version, fields=fields)
        info = await self._gem_info(params.gem_name, params.version)
        return query.select_fields([info.model_dump(mode="json")], params.fields)[0]

    async def get_gem_reverse_dependencies(
        self, gem_name: str, limit: int | None = None, offset: int = 0
    ) -> list[str]:
        """Names of gems that depend on ``gem_name``, in upstream order."""
        params = validate_input(
            ReverseDependenciesInput, gem_name=gem_name, limit=limit, offset=offset
        )
        key = f"gem_reverse_deps:{params.gem_name}"
        names = self._cached(key)
        if names is None:
            url = f"{RUBYGEMS_API_BASE}/gems/{quote(params.gem_name)}/reverse_dependencies.json"
            names = normalize.reverse_dependencies_from_json(
                await self._fetcher.fetch_json(url), url
            )
            self._store(key, names, self.cache_settings.gem_ttl_seconds)
        return query.paginate(names, limit=params.limit, offset=params.offset)

    async def get_gem_version_downloads(self, gem_name: str, version: str) -> dict[str, Any]:
        params = validate_input(GetGemVersionDownloadsInput, gem_name=gem_name, version=version)
        key = f"gem_downloads:{params.gem_name}:{params.version}"
        stats: DownloadStats | None = self._cached(key)
        if stats is None:
            name, number = quote(params.gem_name), quote(params.version)
            url = f"{RUBYGEMS_API_BASE}/downloads/{name}-{number}.json"
            stats = normalize.downloads_from_json(
                await self._fetcher.fetch_json(url), url, params.gem_name, params.version
            )
            self._store(key, stats, self.cache_settings.gem_ttl_seconds)
        return stats.model_dump(mode="json")

    async def search_gems(
        self,
        query_text: str,
        limit: int | None = None,
        offset: int = 0,
        fields: list[str] | None = None,
    ) -> list[dict[str, Any]]:
        """Search RubyGems by name. Results are never cached."""
        params = validate_input(
            SearchGemsInput, query=query_text, limit=limit, offset=offset, fields=fields
        )
        url = f"{RUBYGEMS_API_BASE}/search.json"
        payload = await self._fetcher.fetch_json(url, params={"query": params.query})
        results = normalize.gem_summaries_from_json(payload, url)
        page = query.paginate(results, limit=params.limit, offset=params.offset)
        return query.select_fields(_dump(page), params.fields)

    async def _activity(
        self, feed: str, limit: int, fields: list[str] | None
    ) -> list[dict[str, Any]]:
        params = validate_input(ActivityFeedInput, limit=limit, fields=fields)
        key = f"activity:{feed}"
        gems: list[GemSummary] | None = self._cached(key)
        if gems is None:
            url = f"{RUBYGEMS_API_BASE}/activity/{feed}.json"
            gems = normalize.gem_summaries_from_json(await self._fetcher.fetch_json(url), url)
            self._store(key, gems, self.cache_settings.activity_ttl_seconds)
        return query.select_fields(_dump(gems[: params.limit]), params.fields)

    async def get_latest_gems(
        self, limit: int = 30, fields: list[str] | None = None
    ) -> list[dict[str, Any]]:
        """Gems most recently added to RubyGems.org."""
        return await self._activity("latest", limit, fields)

    async def get_recently_updated_gems(
        self, limit: int = 30, fields: list[str] | None = None
    ) -> list[dict[str, Any]]:
        """Most recently published gem versions."""
        return await self._activity("just_updated", limit, fields)

    async def get_gem_changelog(self, gem_name: str, version: str | None = None) -> dict[str, Any]:
        """Changelog summary scraped from the gem's ``changelog_uri``."""
        params = validate_input(GetGemInfoInput, gem_name=gem_name, version=version)
        try:
            info = await self._gem_info(params.gem_name, params.version)
        except NotFoundError:
            reason = "Version not found" if params.version else "Gem not found"
            return ChangelogResult(
                subject_name=params.gem_name, version=params.version, error=reason
            ).model_dump(mode="json")

        resolved_version = params.version or info.version
        if not info.changelog_url:
            return ChangelogResult(
                subject_name=params.gem_name,
                version=resolved_version,
                error="No changelog URI available",
            ).model_dump(mode="json")

        key = f"gem_changelog:{params.gem_name}:{resolved_version}"
        cached: ChangelogResult | None = self._cached(key)
        if cached is None:
            soup = await self._fetcher.fetch_html(info.changelog_url)
            cached = ChangelogResult(
                subject_name=params.gem_name,
                version=resolved_version,
                source_url=info.changelog_url,
                content=extract_changelog(soup, selectors_for(info.changelog_url)),
            )
            self._store(key, cached, self.cache_settings.page_ttl_seconds)
        return cached.model_dump(mode="json")

    # ------------------------------------------------------------------
    # Ruby releases
    # ------------------------------------------------------------------

    async def _ruby_releases(self) -> list[LanguageVersionRecord]:
        key = "ruby_versions"
        cached = self._cached(key)
        if cached is not None:
            return cached
        soup = await self._fetcher.fetch_html(RUBY_RELEASES_URL)
        records = query.sort_records(extract_ruby_releases(soup))
        self._store(key, records, self.cache_settings.page_ttl_seconds)
        return records

    async def get_ruby_versions(
        self,
        limit: int | None = None,
        offset: int = 0,
        sort: str = "version_desc",
        fields: list[str] | None = None,
    ) -> list[dict[str, Any]]:
        """Ruby releases with release date, download and release notes URLs."""
        params = validate_input(
            GetRubyVersionsInput, limit=limit, offset=offset, sort=sort, fields=fields
        )
        page = query.apply(
            await self._ruby_releases(), limit=params.limit, offset=params.offset, sort=params.sort
        )
        return query.select_fields(_dump(page), params.fields)

    async def get_latest_ruby_version(self) -> dict[str, Any]:
        releases = await self._ruby_releases()
        if not releases:
            return {"version": None, "release_date": None}
        return releases[0].model_dump(mode="json")

    async def get_ruby_maintenance_status(self) -> list[dict[str, Any]]:
        """Maintenance phase of every Ruby branch, newest branch first."""
        key = "ruby_maintenance_status"
        records: list[MaintenanceRecord] | None = self._cached(key)
        if records is None:
            soup = await self._fetcher.fetch_html(RUBY_BRANCHES_URL)
            records = extract_maintenance_status(soup)
            self._store(key, records, self.cache_settings.page_ttl_seconds)
        return _dump(records)

    async def get_ruby_version_changelog(self, version: str) -> dict[str, Any]:
        """Release notes for one Ruby version.

        Falls back to the GitHub release of the matching tag when the
        ruby-lang.org page has no extractable content.
        """
        params = validate_input(RubyVersionInput, version=version)
        releases = await self._ruby_releases()
        release = next((r for r in releases if r.version == params.version), None)
        if release is None:
            return ChangelogResult(
                subject_name="ruby", version=params.version, error="Version not found"
            ).model_dump(mode="json")
        if not release.release_notes_url:
            return ChangelogResult(
                subject_name="ruby", version=params.version, error="No release notes available"
            ).model_dump(mode="json")

        key = f"ruby_changelog:{params.version}"
        cached: ChangelogResult | None = self._cached(key)
        if cached is not None:
            return cached.model_dump(mode="json")

        soup = await self._fetcher.fetch_html(release.release_notes_url)
        content = extract_changelog(soup, RUBY_RELEASE_NOTES_SELECTORS, fallback_to_body=False)
        if content is None:
            log.info("release_notes_empty", version=params.version, fallback="github")
            try:
                fallback = await self._github_release_notes(params.version)
            except (NotFoundError, CorruptedDataError, ResponseSizeExceededError) as exc:
                log.warning("release_notes_fallback_failed", version=params.version, error=str(exc))
                return ChangelogResult(
                    subject_name="ruby",
                    version=params.version,
                    source_url=release.release_notes_url,
                    error="No release notes content available",
                ).model_dump(mode="json")
            if fallback.content is None:
                return fallback.model_copy(
                    update={"error": "No release notes content available"}
                ).model_dump(mode="json")
            result = fallback
        else:
            result = ChangelogResult(
                subject_name="ruby",
                version=params.version,
                source_url=release.release_notes_url,
                content=content,
            )
        self._store(key, result, self.cache_settings.page_ttl_seconds)
        return result.model_dump(mode="json")

    async def _github_release_notes(self, version: str) -> ChangelogResult:
        url = GITHUB_RUBY_RELEASE_URL.format(tag=ruby_release_tag(version))
        body = normalize.release_body_from_json(await self._fetcher.fetch_json(url), url)
        return ChangelogResult(
            subject_name="ruby",
            version=version,
            source_url=url,
            content=clean_changelog_text(body) if body else None,
        )

    async def get_ruby_version_changelog_from_github(self, version: str) -> dict[str, Any]:
        """Release notes for one Ruby version taken from the GitHub release."""
        params = validate_input(RubyVersionInput, version=version)
        key = f"ruby_github_changelog:{params.version}"
        cached: ChangelogResult | None = self._cached(key)
        if cached is None:
            try:
                cached = await self._github_release_notes(params.version)
            except NotFoundError:
                return ChangelogResult(
                    subject_name="ruby", version=params.version, error="Release not found"
                ).model_dump(mode="json")
            self._store(key, cached, self.cache_settings.page_ttl_seconds)
        return cached.model_dump(mode="json")

    # ------------------------------------------------------------------
    # Roadmap
    # ------------------------------------------------------------------

    async def get_ruby_roadmap(
        self, limit: int | None = None, offset: int = 0
    ) -> list[dict[str, Any]]:
        """Upcoming ruby-master versions with their issue counts."""
        params = validate_input(GetRubyRoadmapInput, limit=limit, offset=offset)
        key = "ruby_roadmap"
        versions: list[RoadmapVersion] | None = self._cached(key)
        if versions is None:
            versions = extract_roadmap(await self._fetcher.fetch_html(RUBY_ROADMAP_URL))
            self._store(key, versions, self.cache_settings.page_ttl_seconds)
        return _dump(query.paginate(versions, limit=params.limit, offset=params.offset))

    async def get_ruby_roadmap_version(self, version_id: int) -> dict[str, Any]:
        params = validate_input(RoadmapVersionInput, version_id=version_id)
        key = f"ruby_roadmap_version:{params.version_id}"
        detail: RoadmapVersionDetail | None = self._cached(key)
        if detail is None:
            url = RUBY_VERSION_URL.format(version_id=params.version_id)
            detail = extract_roadmap_version(
                await self._fetcher.fetch_html(url), params.version_id, url
            )
            self._store(key, detail, self.cache_settings.page_ttl_seconds)
        return detail.model_dump(mode="json")
