"""
storage/config.py

Backend configuration loaded from the environment (and an optional .env file).

    SUPABASE_URL                    project URL, e.g. https://xyz.supabase.co
    SUPABASE_ANON_KEY               public anon key sent as ``apikey``
    MEDISYNC_HTTP_TIMEOUT           request timeout in seconds
    MEDISYNC_TOKEN_REFRESH_MARGIN   refresh the session this many seconds before expiry
    MEDISYNC_LOG_LEVEL              root log level for the Streamlit app
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BackendSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    supabase_url: str = Field(default="", validation_alias=AliasChoices("SUPABASE_URL"))
    supabase_anon_key: str = Field(default="", validation_alias=AliasChoices("SUPABASE_ANON_KEY"))
    http_timeout: float = Field(default=15.0, validation_alias=AliasChoices("MEDISYNC_HTTP_TIMEOUT"))
    token_refresh_margin: float = Field(
        default=60.0, validation_alias=AliasChoices("MEDISYNC_TOKEN_REFRESH_MARGIN")
    )
    log_level: str = Field(default="INFO", validation_alias=AliasChoices("MEDISYNC_LOG_LEVEL"))

    @property
    def configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)


@lru_cache(maxsize=1)
def get_settings() -> BackendSettings:
    """Return the cached settings instance."""
    return BackendSettings()
