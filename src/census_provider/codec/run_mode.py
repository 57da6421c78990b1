"""Run mode codec: ``RunMode`` <-> the wire ``mode`` object."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ValidationError

from ..coerce import to_int
from ..errors import WireDecodeError
from ..models import (
    DbtCloudTrigger,
    FivetranTrigger,
    RunMode,
    ScheduleTrigger,
    SyncSequenceTrigger,
)

_TRIGGER_MODELS: dict[str, type[BaseModel]] = {
    "schedule": ScheduleTrigger,
    "dbt_cloud": DbtCloudTrigger,
    "fivetran": FivetranTrigger,
    "sync_sequence": SyncSequenceTrigger,
}
_INTEGER_FIELDS = frozenset({"hour", "minute", "sync_id"})


def encode_run_mode(run_mode: RunMode) -> dict[str, Any]:
    """Unset schedule fields are omitted rather than sent as zero values."""
    return run_mode.model_dump(mode="json", exclude_none=True)


def _decode_trigger(name: str, wire: dict[str, Any]) -> dict[str, Any]:
    # Server-side bookkeeping keys are ignored; unknown fields never reach the model.
    known = _TRIGGER_MODELS[name].model_fields
    return {
        k: to_int(v) if k in _INTEGER_FIELDS else v
        for k, v in wire.items()
        if k in known and v is not None and v != ""
    }


def decode_run_mode(wire: Any) -> RunMode | None:
    if wire is None:
        return None
    if not isinstance(wire, dict):
        raise WireDecodeError(f"mode: expected an object, got {type(wire).__name__}")

    data: dict[str, Any] = {"type": wire.get("type")}
    triggers = wire.get("triggers")
    if isinstance(triggers, dict):
        decoded = {
            name: _decode_trigger(name, triggers[name])
            for name in _TRIGGER_MODELS
            if isinstance(triggers.get(name), dict)
        }
        if decoded:
            data["triggers"] = decoded

    try:
        return RunMode.model_validate(data)
    except ValidationError as exc:
        raise WireDecodeError(f"mode: {exc}") from exc
