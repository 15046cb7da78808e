from __future__ import annotations

from pathlib import Path
from typing import Optional, Type

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from .loader import YamlConfigSettingsSource, load_config
from .logs import LoggingSettings
from .network import NetworkSettings
from .resolver import ResolverSettings
from .updater import UpdaterSettings


class Settings(BaseSettings):
    """
    Main application configuration model.
    """

    network: NetworkSettings = Field(default_factory=NetworkSettings)
    resolver: ResolverSettings = Field(default_factory=ResolverSettings)
    updater: UpdaterSettings = Field(default_factory=UpdaterSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    config_file: Optional[Path] = Field(default=None, exclude=True)

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_nested_delimiter="__"
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        config_file = init_settings.init_kwargs.get("config_file")
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=config_file),
            file_secret_settings,
        )


__all__ = [
    "Settings",
    "NetworkSettings",
    "ResolverSettings",
    "UpdaterSettings",
    "LoggingSettings",
    "load_config",
]
