"""Provider configuration via pydantic-settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings

REGION_BASE_URLS: dict[str, str] = {
    "us": "https://app.getcensus.com/api/v1",
    "eu": "https://app-eu.getcensus.com/api/v1",
}


class CensusSettings(BaseSettings):
    workspace_access_token: str | None = None
    region: str = "us"
    # Overrides the region default when set (e.g. a mock server).
    base_url: str | None = None
    timeout_seconds: float = 30.0
    user_agent: str = "census-provider"

    model_config = {"env_prefix": "CENSUS_", "env_file": ".env", "extra": "ignore"}

    @property
    def api_base_url(self) -> str:
        if self.base_url:
            return self.base_url.rstrip("/")
        region = self.region.strip().lower()
        if region not in REGION_BASE_URLS:
            raise ValueError(f"region must be either 'us' or 'eu', got {self.region!r}")
        return REGION_BASE_URLS[region]


@lru_cache
def get_settings() -> CensusSettings:
    return CensusSettings()
