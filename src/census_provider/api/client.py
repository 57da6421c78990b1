"""Census API client - thin async wrapper over the Management API.

Authenticates with a workspace access token. Retries and pagination are
left to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import httpx

from ..config import CensusSettings, get_settings

if TYPE_CHECKING:
    from .syncs import SyncsAPI

log = logging.getLogger(__name__)


@dataclass
class CensusConfig:
    """Census API configuration."""

    token: str
    base_url: str = "https://app.getcensus.com/api/v1"
    timeout: float = 30.0
    user_agent: str = "census-provider"

    @classmethod
    def from_settings(cls, settings: CensusSettings | None = None) -> "CensusConfig":
        """Build a config from ``CENSUS_*`` environment settings."""
        settings = settings or get_settings()
        if not settings.workspace_access_token:
            raise ValueError(
                "workspace access token required. Set CENSUS_WORKSPACE_ACCESS_TOKEN."
            )
        return cls(
            token=settings.workspace_access_token,
            base_url=settings.api_base_url,
            timeout=settings.timeout_seconds,
            user_agent=settings.user_agent,
        )


def is_not_found(exc: BaseException) -> bool:
    return isinstance(exc, httpx.HTTPStatusError) and exc.response.status_code == 404


class CensusClient:
    """Async client for the Census Management API.

    Usage:
        async with CensusClient(CensusConfig.from_settings()) as census:
            sync = await census.syncs.get(123)
    """

    def __init__(self, config: CensusConfig):
        self.config = config
        self._client: httpx.AsyncClient | None = None
        self._syncs: SyncsAPI | None = None

    @classmethod
    def from_settings(cls, settings: CensusSettings | None = None) -> "CensusClient":
        return cls(CensusConfig.from_settings(settings))

    async def __aenter__(self) -> "CensusClient":
        self._client = httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            headers={
                "Authorization": f"Bearer {self.config.token}",
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": self.config.user_agent,
            },
        )

        from .syncs import SyncsAPI

        self._syncs = SyncsAPI(self)
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
        self._client = None
        self._syncs = None

    @property
    def syncs(self) -> "SyncsAPI":
        """Syncs API."""
        if not self._syncs:
            raise RuntimeError("Client not initialized. Use 'async with' context.")
        return self._syncs

    # HTTP methods
    async def _get(self, endpoint: str, **params) -> dict[str, Any]:
        """Make GET request."""
        resp = await self._client.get(endpoint, params=params)
        resp.raise_for_status()
        return resp.json()

    async def _post(self, endpoint: str, data: dict | None = None) -> dict[str, Any]:
        """Make POST request."""
        resp = await self._client.post(endpoint, json=data)
        resp.raise_for_status()
        return resp.json()

    async def _patch(self, endpoint: str, data: dict | None = None) -> dict[str, Any]:
        """Make PATCH request."""
        resp = await self._client.patch(endpoint, json=data)
        resp.raise_for_status()
        return resp.json()

    async def _delete(self, endpoint: str) -> dict[str, Any]:
        """Make DELETE request. Census answers some deletes with an empty body."""
        resp = await self._client.delete(endpoint)
        resp.raise_for_status()
        if not resp.content:
            return {}
        return resp.json()
