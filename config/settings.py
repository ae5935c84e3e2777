"""Centralised configuration for the flight search proxy."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven settings for the search handler and its providers."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    flight_provider: Literal["amadeus", "travelpayouts", "sample"] = Field(
        "amadeus",
        description="Upstream provider answering flight searches.",
    )

    amadeus_api_key: str | None = None
    amadeus_api_secret: str | None = None
    amadeus_base_url: HttpUrl = Field("https://test.api.amadeus.com")

    travelpayouts_token: str | None = None
    travelpayouts_marker: str | None = Field(
        None,
        description="Affiliate marker appended to Aviasales booking links.",
    )
    travelpayouts_endpoint: HttpUrl = Field(
        "https://api.travelpayouts.com/aviasales/v3/prices_for_dates"
    )
    aviasales_base_url: HttpUrl = Field("https://www.aviasales.com")

    search_currency: str = Field("USD", min_length=3, max_length=3)
    search_max_results: int = Field(10, ge=1, le=250)
    http_timeout: float = Field(20.0, gt=0)
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()
