from __future__ import annotations

from functools import cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    coinmarketcap_api_key: str | None = None
    kaiko_api_key: str | None = None
    cryptocompare_api_key: str | None = None
    request_timeout_seconds: float = 10.0
    resolve_deadline_seconds: float | None = 60.0
    kaiko_max_workers: int = 4

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("coinmarketcap_api_key", "kaiko_api_key", "cryptocompare_api_key", mode="before")
    @classmethod
    def _blank_as_missing(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


@cache
def config() -> AppSettings:
    return AppSettings()
