from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

from domain.models import DEFAULT_FONT_SIZE, DEFAULT_SOURCE, ConversionOptions

DEFAULT_CONFIG_PATH = Path("config/flowscene.yaml")
CONFIG_PATH_ENV = "FLOWSCENE_CONFIG_PATH"


def _validate_backend_spec(value: object) -> str | None:
    normalized = str(value or "").strip()
    if not normalized:
        return None
    module_name, _, attribute = normalized.partition(":")
    if not module_name or not attribute:
        msg = "external backends must be given as 'module:attribute'"
        raise ValueError(msg)
    return normalized


class ConverterSettings(BaseModel):
    font_size: float = Field(DEFAULT_FONT_SIZE, gt=0)
    regenerate_ids: bool = True
    pretty: bool = True
    strict: bool = False
    source: str = DEFAULT_SOURCE
    external_backend: str | None = None
    external_restore: str | None = None

    @field_validator("external_backend", "external_restore", mode="before")
    @classmethod
    def normalize_backend(cls, value: object) -> str | None:
        return _validate_backend_spec(value)

    def to_options(self) -> ConversionOptions:
        return ConversionOptions(font_size=self.font_size, regenerate_ids=self.regenerate_ids)


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="FLOWSCENE_", env_nested_delimiter="__")

    converter: ConverterSettings = ConverterSettings()

    _yaml_path: ClassVar[Path | None] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        ]
        if cls._yaml_path:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path))
        return tuple(sources)


def load_settings(config_path: Path | None = None) -> AppSettings:
    env_path = os.getenv(CONFIG_PATH_ENV)
    resolved_path: Path | None = None

    if config_path is not None:
        resolved_path = config_path
    elif env_path:
        resolved_path = Path(env_path)
    elif DEFAULT_CONFIG_PATH.exists():
        resolved_path = DEFAULT_CONFIG_PATH

    previous = AppSettings._yaml_path
    try:
        if resolved_path is not None:
            if not resolved_path.exists():
                msg = f"Config file not found: {resolved_path}"
                raise FileNotFoundError(msg)
            AppSettings._yaml_path = resolved_path
        return AppSettings()
    finally:
        AppSettings._yaml_path = previous
