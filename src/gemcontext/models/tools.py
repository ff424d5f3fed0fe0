from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, field_validator

# RubyGems names: letters, digits, dot, dash, underscore; must start alphanumeric.
_GEM_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
_GEM_VERSION_RE = re.compile(r"^\d+(\.[0-9A-Za-z]+)*(-[0-9A-Za-z.]+)?$")
_RUBY_VERSION_RE = re.compile(r"^\d+\.\d+\.\d+([.-][0-9A-Za-z]+)*$")

MAX_LIST_LIMIT = 1000
MAX_ACTIVITY_LIMIT = 50

SortOrder = Literal["version_desc", "version_asc", "date_desc", "date_asc"]


def _check_gem_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("gem_name must not be empty")
    if len(v) > 200:
        raise ValueError("gem_name must not exceed 200 characters")
    if not _GEM_NAME_RE.match(v):
        raise ValueError(f"Invalid gem name: {v!r}")
    return v


def _check_fields(v: list[str] | None) -> list[str] | None:
    if v is None:
        return None
    return [f.strip() for f in v if f.strip()]


class _Paginated(BaseModel):
    limit: int | None = None
    offset: int = 0

    @field_validator("limit")
    @classmethod
    def validate_limit(cls, v: int | None) -> int | None:
        if v is None:
            return v
        if v < 1:
            raise ValueError("limit must be >= 1")
        if v > MAX_LIST_LIMIT:
            raise ValueError(f"limit must not exceed {MAX_LIST_LIMIT}")
        return v

    @field_validator("offset")
    @classmethod
    def validate_offset(cls, v: int) -> int:
        if v < 0:
            raise ValueError("offset must be >= 0")
        return v


class GetGemVersionsInput(_Paginated):
    gem_name: str
    sort: SortOrder = "version_desc"
    fields: list[str] | None = None

    @field_validator("gem_name")
    @classmethod
    def validate_gem_name(cls, v: str) -> str:
        return _check_gem_name(v)

    @field_validator("fields")
    @classmethod
    def validate_fields(cls, v: list[str] | None) -> list[str] | None:
        return _check_fields(v)


class GetLatestVersionsInput(BaseModel):
    gem_names: list[str]
    fields: list[str] | None = None

    @field_validator("gem_names")
    @classmethod
    def validate_gem_names(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("gem_names must contain at least one name")
        if len(v) > 100:
            raise ValueError("gem_names must not contain more than 100 names")
        return [_check_gem_name(name) for name in v]

    @field_validator("fields")
    @classmethod
    def validate_fields(cls, v: list[str] | None) -> list[str] | None:
        return _check_fields(v)


class GetGemInfoInput(BaseModel):
    gem_name: str
    version: str | None = None
    fields: list[str] | None = None

    @field_validator("gem_name")
    @classmethod
    def validate_gem_name(cls, v: str) -> str:
        return _check_gem_name(v)

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not _GEM_VERSION_RE.match(v):
            raise ValueError(f"Invalid gem version: {v!r}")
        return v

    @field_validator("fields")
    @classmethod
    def validate_fields(cls, v: list[str] | None) -> list[str] | None:
        return _check_fields(v)


class GetGemVersionDownloadsInput(BaseModel):
    gem_name: str
    version: str

    @field_validator("gem_name")
    @classmethod
    def validate_gem_name(cls, v: str) -> str:
        return _check_gem_name(v)

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        v = v.strip()
        if not _GEM_VERSION_RE.match(v):
            raise ValueError(f"Invalid gem version: {v!r}")
        return v


class ReverseDependenciesInput(_Paginated):
    gem_name: str

    @field_validator("gem_name")
    @classmethod
    def validate_gem_name(cls, v: str) -> str:
        return _check_gem_name(v)


class SearchGemsInput(_Paginated):
    query: str
    fields: list[str] | None = None

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("query must not be empty")
        if len(v) > 500:
            raise ValueError("query must not exceed 500 characters")
        return v

    @field_validator("fields")
    @classmethod
    def validate_fields(cls, v: list[str] | None) -> list[str] | None:
        return _check_fields(v)


class ActivityFeedInput(BaseModel):
    limit: int = 30
    fields: list[str] | None = None

    @field_validator("limit")
    @classmethod
    def validate_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError("limit must be >= 1")
        if v > MAX_ACTIVITY_LIMIT:
            raise ValueError(f"limit must not exceed {MAX_ACTIVITY_LIMIT}")
        return v

    @field_validator("fields")
    @classmethod
    def validate_fields(cls, v: list[str] | None) -> list[str] | None:
        return _check_fields(v)


class GetRubyVersionsInput(_Paginated):
    sort: SortOrder = "version_desc"
    fields: list[str] | None = None

    @field_validator("fields")
    @classmethod
    def validate_fields(cls, v: list[str] | None) -> list[str] | None:
        return _check_fields(v)


class RubyVersionInput(BaseModel):
    version: str

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("version must not be empty")
        if not _RUBY_VERSION_RE.match(v):
            raise ValueError(f"Invalid Ruby version: {v!r}")
        return v


class RoadmapVersionInput(BaseModel):
    version_id: int

    @field_validator("version_id")
    @classmethod
    def validate_version_id(cls, v: int) -> int:
        if v < 1:
            raise ValueError("version_id must be >= 1")
        return v


class GetRubyRoadmapInput(_Paginated):
    pass
