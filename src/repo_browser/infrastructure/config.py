"""Application configuration — loaded from the environment and an optional TOML file."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)


class Settings(BaseSettings):
    """Central configuration, read once at startup and immutable afterwards.

    Values come from (highest priority first) keyword arguments,
    ``REPO_BROWSER_*`` environment variables, a ``.env`` file and
    ``repo-browser.toml`` in the working directory.
    """

    model_config = SettingsConfigDict(
        env_prefix="REPO_BROWSER_",
        env_file=".env",
        env_file_encoding="utf-8",
        toml_file="repo-browser.toml",
        extra="ignore",
        frozen=True,
    )

    project_root: Path = Path("repos")
    export_marker: str = "git-daemon-export-ok"
    site_name: str = "repo-browser"
    emoji_favicon: str = ""
    page_size: int = Field(default=100, gt=0)
    feed_size: int = Field(default=50, gt=0)
    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton application settings (cached after first call)."""
    return Settings()
