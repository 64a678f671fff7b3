"""Soundboard client configuration via environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings


class SoundClientSettings(BaseSettings):
    model_config = {"env_prefix": "SOUNDCLIENT_"}

    api_base_url: str = "http://localhost:3000"
    ws_base_url: str = "ws://localhost:3000"
    http_timeout_seconds: float = Field(default=10.0, gt=0)
    connect_timeout_seconds: float = Field(default=10.0, gt=0)

    reconnect_delay_seconds: float = Field(default=2.0, ge=0)
    # None retries forever.
    max_reconnect_attempts: int | None = Field(default=None, ge=1)
    reconnect_jitter_seconds: float = Field(default=0.0, ge=0)
