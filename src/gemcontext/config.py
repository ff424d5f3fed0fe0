"""Configuration loading.

Sources, highest priority first:
  1. Constructor arguments (tests, embedding)
  2. Environment variables, e.g. GEMCONTEXT__FETCHER__READ_TIMEOUT=5
  3. gemcontext.yaml, looked up when Settings() is built: the current
     directory first, then ~/.config/gemcontext/
  4. Field defaults

Every section forbids unknown keys, so a typo in the YAML file or an env var
name fails at startup instead of being ignored.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

# Bodies above this size are rejected before parsing.
DEFAULT_MAX_RESPONSE_SIZE = 5 * 1024 * 1024

CONFIG_FILENAME = "gemcontext.yaml"


def find_config_file() -> Path | None:
    for directory in (Path.cwd(), Path.home() / ".config" / "gemcontext"):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid")


class ServerSettings(_Section):
    transport: Literal["stdio", "http"] = "stdio"
    host: str = "127.0.0.1"
    port: int = 8080


class FetcherSettings(_Section):
    connect_timeout: float = Field(default=10.0, gt=0)
    read_timeout: float = Field(default=10.0, gt=0)
    max_response_size: int = Field(default=DEFAULT_MAX_RESPONSE_SIZE, gt=0)
    user_agent: str = "gemcontext/0.1.0 (+https://github.com/gemcontext/gemcontext)"


class CacheSettings(_Section):
    enabled: bool = True
    gem_ttl_seconds: float = Field(default=3600, ge=0)
    activity_ttl_seconds: float = Field(default=900, ge=0)
    page_ttl_seconds: float = Field(default=86400, ge=0)


class LoggingSettings(_Section):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="GEMCONTEXT__",
        env_nested_delimiter="__",
        yaml_file_encoding="utf-8",
        extra="forbid",
    )

    server: ServerSettings = ServerSettings()
    fetcher: FetcherSettings = FetcherSettings()
    cache: CacheSettings = CacheSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # No dotenv or secrets-dir sources.
        yaml_settings = YamlConfigSettingsSource(settings_cls, yaml_file=find_config_file())
        return init_settings, env_settings, yaml_settings
