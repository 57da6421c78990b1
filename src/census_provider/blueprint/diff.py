"""Blueprint diff - Terraform-style plan computation and Rich rendering."""

from __future__ import annotations

import json
from typing import Any, TYPE_CHECKING

import httpx
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from ..codec.alerts import alert_key
from ..codec.sync import build_create_payload, json_equivalent
from ..errors import CensusProviderError
from ..models import SyncBlueprint, SyncSpec
from .engine import PlanAction, PlanResult, read_sync

if TYPE_CHECKING:
    from ..api.client import CensusClient

# Settings that may be left unset and then filled in by Census. Unset in the
# blueprint means "whatever the server chose", so they never count as drift.
_SERVER_OWNED_WHEN_UNSET = (
    "field_behavior",
    "field_normalization",
    "field_order",
    "sync_behavior_family",
    "high_water_mark_attribute",
    "historical_sync_operation",
    "mirror_strategy",
    "run_mode",
)


def _brief(value: Any) -> str:
    if hasattr(value, "model_dump"):
        value = value.model_dump(mode="json", exclude_none=True)
    return json.dumps(value, sort_keys=True)


def _mapping_drift(index: int, desired, live) -> list[str]:
    want = desired.model_dump(mode="json", by_alias=True)
    have = live.model_dump(mode="json", by_alias=True)
    if desired.sync_null_values is None:
        want.pop("sync_null_values")
        have.pop("sync_null_values", None)

    label = f"field_mapping[{index}] ({desired.to})"
    if want.get("type") != have.get("type"):
        return [f"{label}: type: {have.get('type')} -> {want.get('type')}"]
    return [
        f"{label}: {key}: {have.get(key)!r} -> {want[key]!r}"
        for key in want
        if want[key] != have.get(key)
    ]


def diff_sync(desired: SyncSpec, live: SyncSpec) -> list[str]:
    """Compare desired vs live spec and return drift descriptions (empty if matched)."""
    diffs: list[str] = []

    for name in ("label", "operation", "paused"):
        if getattr(desired, name) != getattr(live, name):
            diffs.append(f"{name}: {getattr(live, name)!r} -> {getattr(desired, name)!r}")

    if desired.source != live.source:
        diffs.append(f"source: {_brief(live.source)} -> {_brief(desired.source)}")
    if desired.destination != live.destination:
        diffs.append(f"destination: {_brief(live.destination)} -> {_brief(desired.destination)}")

    for name in _SERVER_OWNED_WHEN_UNSET:
        want = getattr(desired, name)
        if want is None:
            continue
        have = getattr(live, name)
        if want != have:
            if name == "run_mode":
                diffs.append(f"run_mode: {_brief(have)} -> {_brief(want)}")
            else:
                diffs.append(f"{name}: {have!r} -> {want!r}")

    if desired.advanced_configuration is not None and not json_equivalent(
        desired.advanced_configuration, live.advanced_configuration
    ):
        diffs.append("advanced_configuration changed")

    if len(desired.field_mappings) != len(live.field_mappings):
        diffs.append(
            f"field_mappings: {len(live.field_mappings)} -> {len(desired.field_mappings)} entries"
        )
    # Census may return mappings in any order; pair them by destination field.
    live_by_to: dict[str, Any] = {}
    for m in live.field_mappings:
        live_by_to.setdefault(m.to, m)
    desired_to = {m.to for m in desired.field_mappings}
    for i, want in enumerate(desired.field_mappings):
        have = live_by_to.get(want.to)
        if have is None:
            diffs.append(f"field_mapping[{i}] ({want.to}): not present in Census")
        else:
            diffs.extend(_mapping_drift(i, want, have))
    for m in live.field_mappings:
        if m.to not in desired_to:
            diffs.append(f"field_mapping ({m.to}): not in blueprint")

    if {alert_key(a) for a in desired.alerts} != {alert_key(a) for a in live.alerts}:
        diffs.append(f"alerts: {len(live.alerts)} -> {len(desired.alerts)} configured")

    return diffs


def _display_details(spec: SyncSpec) -> str:
    obj = spec.source.object
    source = getattr(obj, "id", None) or getattr(obj, "table_name", None) or obj.type
    return f"{spec.operation} {obj.type}:{source} -> {spec.destination.object}"


async def compute_plan(
    census: CensusClient,
    blueprint: SyncBlueprint,
) -> PlanResult:
    """Classify every sync in the blueprint against its live counterpart."""
    actions: list[PlanAction] = []
    errors: list[str] = []

    for spec in blueprint.syncs:
        # Local validation runs before any request for this sync.
        try:
            build_create_payload(spec)
        except CensusProviderError as e:
            actions.append(PlanAction(name=spec.name, action="ERROR", details=str(e), spec=spec))
            errors.append(f"sync/{spec.name}: {e}")
            continue

        if spec.sync_id is None:
            actions.append(PlanAction(
                name=spec.name,
                action="CREATE",
                details=_display_details(spec),
                spec=spec,
            ))
            continue

        try:
            live = await read_sync(census, spec)
        except (CensusProviderError, httpx.HTTPError) as e:
            actions.append(PlanAction(
                name=spec.name, action="ERROR", details=str(e), sync_id=spec.sync_id, spec=spec,
            ))
            errors.append(f"sync/{spec.name}: {e}")
            continue

        if live is None:
            actions.append(PlanAction(
                name=spec.name,
                action="MISSING",
                details=f"sync {spec.sync_id} not found; will be recreated",
                sync_id=spec.sync_id,
                spec=spec,
            ))
            continue

        drift = diff_sync(spec, live[0])
        actions.append(PlanAction(
            name=spec.name,
            action="UPDATE" if drift else "OK",
            details="; ".join(drift),
            sync_id=spec.sync_id,
            spec=spec,
        ))

    return PlanResult(
        actions=actions,
        created=sum(1 for a in actions if a.action in ("CREATE", "MISSING")),
        updated=sum(1 for a in actions if a.action == "UPDATE"),
        skipped=sum(1 for a in actions if a.action == "OK"),
        errors=errors,
    )


# ============================================================================
# Rich rendering
# ============================================================================

ACTION_STYLES = {
    "CREATE": ("+ ", "green"),
    "CREATED": ("+ ", "green"),
    "MISSING": ("+ ", "magenta"),
    "UPDATE": ("~ ", "yellow"),
    "UPDATED": ("~ ", "yellow"),
    "OK": ("= ", "dim"),
    "ERROR": ("! ", "red"),
}


def render_plan(plan: PlanResult, console: Console | None = None) -> None:
    """Render a terraform-style plan to the console."""
    if console is None:
        console = Console()

    console.print()
    console.print(Panel(
        "[bold]Census Sync Plan[/bold]\n"
        "Actions to reconcile Census with the blueprint:",
        style="blue",
    ))
    console.print()

    for action in plan.actions:
        prefix, style = ACTION_STYLES.get(action.action, ("  ", "white"))
        line = Text()
        line.append(f"  {prefix}", style=style)
        line.append(action.name, style=style)
        if action.sync_id is not None:
            line.append(f" [{action.sync_id}]", style="dim")
        if action.details:
            line.append(f"  ({action.details})", style="dim")
        console.print(line)

    console.print()

    summary_parts = []
    if plan.created:
        summary_parts.append(f"[green]{plan.created} to create[/green]")
    if plan.updated:
        summary_parts.append(f"[yellow]{plan.updated} to update[/yellow]")
    if plan.skipped:
        summary_parts.append(f"[dim]{plan.skipped} OK[/dim]")
    if plan.errors:
        summary_parts.append(f"[red]{len(plan.errors)} errors[/red]")

    console.print(f"  Plan: {', '.join(summary_parts) or 'nothing to do'}")
    console.print()
