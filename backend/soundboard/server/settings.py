"""Soundboard server configuration via environment variables."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from shared.validators import StringListEnvSettingsSource, parse_string_list

if TYPE_CHECKING:
    from pydantic_settings.sources.base import PydanticBaseSettingsSource


class SoundboardServerSettings(BaseSettings):
    model_config = {"env_prefix": "SOUNDBOARD_"}

    log_dir: str | None = "backend/logs/soundboard"
    cors_origins: list[str] = ["*"]

    # Empty rooms are kept this long to absorb reconnect churn; 0 reclaims
    # a room as soon as its last member leaves.
    room_idle_grace_seconds: float = Field(default=60, ge=0)
    reaper_interval_seconds: float = Field(default=10, gt=0)
    # A send to one member that takes longer than this closes that member
    # instead of holding up the sender.
    deliver_timeout_seconds: float = Field(default=1.0, gt=0)

    @field_validator("cors_origins", mode="before")
    @classmethod
    def validate_cors_origins(cls, v: str | list[str]) -> list[str]:
        return parse_string_list(v, allow_empty=True)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings, StringListEnvSettingsSource(settings_cls), dotenv_settings, file_secret_settings)
