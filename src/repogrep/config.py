"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (REPOGREP__FETCH__CONCURRENCY=50)
  2. repogrep.yaml          (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional. The GitHub token is deliberately not a setting:
it is read from ``GHP_TOKEN`` by :func:`load_token` and never persisted.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from repogrep.errors import ErrorCode, RepoGrepError

TOKEN_ENV_VAR = "GHP_TOKEN"
DEFAULT_CONCURRENCY = 100
DEFAULT_API_BASE = "https://api.github.com"


def _find_config_file() -> str | None:
    """Return the path of the first repogrep.yaml found, or None."""
    candidates = [
        Path("repogrep.yaml"),
        Path(platformdirs.user_config_dir("repogrep")) / "repogrep.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class GitHubSettings(BaseModel):
    api_base: str = DEFAULT_API_BASE
    api_version: str = "2022-11-28"
    user_agent: str = "repogrep/0.1"


class FetchSettings(BaseModel):
    concurrency: int = Field(default=DEFAULT_CONCURRENCY, ge=1)
    cache_dir: str = "./.cache"


class HttpSettings(BaseModel):
    timeout_seconds: float = 30.0


class CrawlSettings(BaseModel):
    per_page: int = Field(default=100, ge=1, le=100)
    max_pages: int = Field(default=100, ge=1)


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    format: Literal["json", "text"] = "text"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: REPOGREP__CRAWL__MAX_PAGES=10
        env_prefix="REPOGREP__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    github: GitHubSettings = GitHubSettings()
    fetch: FetchSettings = FetchSettings()
    http: HttpSettings = HttpSettings()
    crawl: CrawlSettings = CrawlSettings()
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
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
        )


def load_token() -> str:
    """Read the GitHub token from the environment. Missing or empty is fatal."""
    token = os.environ.get(TOKEN_ENV_VAR, "").strip()
    if not token:
        raise RepoGrepError(
            code=ErrorCode.MISSING_TOKEN,
            message=f"Environment variable {TOKEN_ENV_VAR} is not set",
            suggestion=f"Export a GitHub personal access token as {TOKEN_ENV_VAR}.",
        )
    return token


def load_settings() -> Settings:
    """Build Settings, turning validation failures into a fatal RepoGrepError."""
    try:
        return Settings()
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "settings"
        raise RepoGrepError(
            code=ErrorCode.INVALID_CONFIG,
            message=f"Invalid setting {location}: {first['msg']}",
            suggestion="Check REPOGREP__* environment variables and repogrep.yaml.",
        ) from exc
