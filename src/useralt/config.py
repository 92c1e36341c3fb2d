"""Configuration models and loading logic."""

from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_SETTINGS_FILE = Path("~/.config/useralt/settings.yaml")
SETTINGS_FILE_ENV = "USERALT_SETTINGS_FILE"


class ProjectConfig(BaseModel):
    """Project metadata settings."""

    name: str = "useralt"
    env: str = "user"


class PathsConfig(BaseModel):
    """Overlay and log locations."""

    persistent_root: Path = Path("~/.config/useralt")
    session_root: Path | None = None
    logs_root: Path = Path("~/.cache/useralt/logs")

    def expanded(self) -> "PathsConfig":
        """Return a copy with `~` expanded in every configured path."""

        updates: dict[str, Path] = {}
        for field_name in type(self).model_fields:
            value = getattr(self, field_name)
            if value is not None:
                updates[field_name] = value.expanduser()
        return self.model_copy(update=updates)


class ExecutableConfig(BaseModel):
    """The external alternatives executable and its directory layout."""

    program: str = "update-alternatives"
    system_altdir: Path = Path("/etc/alternatives")
    system_admindir: Path = Path("/var/lib/dpkg/alternatives")
    altdir_name: str = Field(default="alternatives", min_length=1)
    admindir_name: str = Field(default="admin", min_length=1)
    log_name: str | None = "alternatives.log"


class SearchConfig(BaseModel):
    """Manual-page directories used when MANPATH is unset."""

    manual_fallback: list[str] = Field(
        default_factory=lambda: [
            "/usr/local/share/man",
            "/usr/share/man",
            "/usr/local/man",
            "/usr/man",
        ]
    )


class AppSettings(BaseSettings):
    """Top-level application settings."""

    _yaml_file_override: ClassVar[Path | None] = None

    project: ProjectConfig = Field(default_factory=ProjectConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    executable: ExecutableConfig = Field(default_factory=ExecutableConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)

    model_config = SettingsConfigDict(
        env_prefix="USERALT_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Use YAML defaults while allowing env vars to override values."""

        yaml_file = resolve_settings_file(cls._yaml_file_override)
        yaml_settings = YamlConfigSettingsSource(settings_cls, yaml_file=yaml_file)
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            yaml_settings,
            file_secret_settings,
        )

    def as_dict(self) -> dict[str, object]:
        """Return settings as a standard nested dictionary."""

        return self.model_dump(mode="json")


def resolve_settings_file(override: Path | None = None) -> Path:
    """Resolve settings file from explicit override, env var, or default."""

    chosen = override
    if chosen is None:
        env_value = os.getenv(SETTINGS_FILE_ENV)
        if env_value:
            chosen = Path(env_value)
    if chosen is None:
        chosen = DEFAULT_SETTINGS_FILE
    return chosen.expanduser().resolve()


def load_settings(config_file: Path | None = None) -> AppSettings:
    """Load settings with YAML defaults and environment variable overrides."""

    settings_file = resolve_settings_file(config_file)
    AppSettings._yaml_file_override = settings_file
    try:
        settings = AppSettings()
    finally:
        AppSettings._yaml_file_override = None
    return settings.model_copy(update={"paths": settings.paths.expanded()})
