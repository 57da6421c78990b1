"""Syncs API - sync endpoints of the Census Management API."""

from __future__ import annotations

import logging
from typing import Any, TYPE_CHECKING

import httpx

from ..errors import WireDecodeError
from .client import is_not_found

if TYPE_CHECKING:
    from .client import CensusClient

log = logging.getLogger(__name__)


class SyncsAPI:
    """Syncs API for Census.

    Usage:
        async with CensusClient.from_settings() as census:
            # Read a sync (None when it no longer exists)
            sync = await census.syncs.get(123)

            # Create / update from a codec payload
            sync_id = await census.syncs.create(build_create_payload(spec))
            await census.syncs.update(sync_id, build_update_payload(spec))

            # Trigger a run
            run_id = await census.syncs.trigger(sync_id, force_full_sync=True)
    """

    def __init__(self, client: "CensusClient"):
        self._client = client

    async def get(self, sync_id: int) -> dict[str, Any] | None:
        """Get sync details.

        Returns:
            The sync object, or None if Census reports 404. A successful
            response without a data object raises WireDecodeError.
        """
        try:
            result = await self._client._get(f"/syncs/{sync_id}")
        except httpx.HTTPStatusError as exc:
            if is_not_found(exc):
                log.info("Sync %s not found", sync_id)
                return None
            raise
        data = result.get("data")
        if not isinstance(data, dict):
            raise WireDecodeError(f"get sync response has no data object: {result!r}")
        return data

    async def create(self, payload: dict[str, Any]) -> int:
        """Create a sync.

        Returns:
            The new sync id.
        """
        result = await self._client._post("/syncs", payload)
        sync_id = (result.get("data") or {}).get("sync_id")
        if sync_id is None:
            raise WireDecodeError(f"create sync response has no sync_id: {result!r}")
        log.info("Created sync %s", sync_id)
        return int(sync_id)

    async def update(self, sync_id: int, payload: dict[str, Any]) -> dict[str, Any]:
        result = await self._client._patch(f"/syncs/{sync_id}", payload)
        log.info("Updated sync %s", sync_id)
        return result.get("data") or {}

    async def delete(self, sync_id: int) -> None:
        await self._client._delete(f"/syncs/{sync_id}")
        log.info("Deleted sync %s", sync_id)

    async def trigger(self, sync_id: int, force_full_sync: bool = False) -> int:
        """Start a sync run.

        Returns:
            The sync run id.
        """
        result = await self._client._post(
            f"/syncs/{sync_id}/trigger", {"force_full_sync": force_full_sync}
        )
        run_id = (result.get("data") or {}).get("sync_run_id")
        if run_id is None:
            raise WireDecodeError(f"trigger response has no sync_run_id: {result!r}")
        return int(run_id)
