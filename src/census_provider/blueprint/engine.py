"""Blueprint engine - read, plan, apply, and import Census syncs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx

from ..codec.sync import build_create_payload, build_update_payload, decode_sync, parse_import_id
from ..errors import CensusProviderError
from ..models import SyncBlueprint, SyncSpec, SyncStatus

if TYPE_CHECKING:
    from ..api.client import CensusClient

log = logging.getLogger(__name__)


@dataclass
class PlanAction:
    name: str
    action: str  # CREATE, UPDATE, OK, MISSING, ERROR (then CREATED / UPDATED after apply)
    details: str = ""
    sync_id: int | None = None
    spec: SyncSpec | None = None


@dataclass
class PlanResult:
    actions: list[PlanAction] = field(default_factory=list)
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)


async def read_sync(
    census: CensusClient,
    spec: SyncSpec,
    logger: logging.Logger | None = None,
) -> tuple[SyncSpec, SyncStatus] | None:
    """Fetch the remote counterpart of ``spec``, decoded with ``spec`` as prior.

    Returns None when the sync has never been created or no longer exists.
    """
    if spec.sync_id is None:
        return None
    wire = await census.syncs.get(spec.sync_id)
    if wire is None:
        return None
    return decode_sync(wire, prior=spec, logger=logger)


async def plan_blueprint(
    census: CensusClient,
    blueprint: SyncBlueprint,
) -> PlanResult:
    """Compute the plan without touching anything remote beyond reads."""
    from .diff import compute_plan

    return await compute_plan(census, blueprint)


async def apply_blueprint(
    census: CensusClient,
    blueprint: SyncBlueprint,
    dry_run: bool = True,
) -> PlanResult:
    """Apply a blueprint to a Census workspace.

    If dry_run=True (default), computes the plan without making changes.
    If dry_run=False, executes creates/updates via the API. New sync ids are
    written back onto the blueprint's specs so it can be saved.
    """
    from .diff import compute_plan

    plan = await compute_plan(census, blueprint)

    if dry_run:
        return plan

    result = PlanResult(errors=list(plan.errors))

    for action in plan.actions:
        if action.action in ("CREATE", "MISSING") and action.spec is not None:
            try:
                sync_id = await census.syncs.create(build_create_payload(action.spec))
                action.spec.sync_id = sync_id
                action.sync_id = sync_id
                result.created += 1
                action.action = "CREATED"
            except (CensusProviderError, httpx.HTTPError) as e:
                result.errors.append(f"Failed to create sync/{action.name}: {e}")
        elif action.action == "UPDATE" and action.spec is not None and action.sync_id is not None:
            try:
                await census.syncs.update(action.sync_id, build_update_payload(action.spec))
                result.updated += 1
                action.action = "UPDATED"
            except (CensusProviderError, httpx.HTTPError) as e:
                result.errors.append(f"Failed to update sync/{action.name}: {e}")
        elif action.action != "ERROR":
            result.skipped += 1

        result.actions.append(action)

    log.info(
        "Applied blueprint %r: %d created, %d updated, %d errors",
        blueprint.metadata.name,
        result.created,
        result.updated,
        len(result.errors),
    )
    return result


async def import_sync(
    census: CensusClient,
    import_id: str,
    name: str | None = None,
) -> SyncSpec:
    """Build a SyncSpec from an existing sync.

    Args:
        import_id: ``"<workspace_id>:<sync_id>"``.
        name: Blueprint key for the sync; defaults to its label.
    """
    workspace_id, sync_id = parse_import_id(import_id)
    wire = await census.syncs.get(sync_id)
    if wire is None:
        raise CensusProviderError(f"sync {sync_id} not found in workspace {workspace_id}")
    spec, _ = decode_sync(wire, workspace_id=workspace_id, name=name)
    return spec
