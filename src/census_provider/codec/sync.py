"""Whole-sync codec: request payloads, response decoding and import ids."""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from ..coerce import to_int, to_str
from ..errors import ImportIdError, WireDecodeError
from ..models import SyncSpec, SyncStatus
from .alerts import decode_alerts, encode_alerts
from .mappings import (
    decode_legacy_mappings,
    decode_mappings,
    encode_mappings,
    format_validation_error,
)
from .objects import (
    decode_destination_attributes,
    decode_source_attributes,
    encode_destination_attributes,
    encode_source_attributes,
)
from .run_mode import decode_run_mode, encode_run_mode

log = logging.getLogger(__name__)

# Settings the server fills with defaults when they are not sent. They are
# only read back when the prior spec configured them.
SERVER_DEFAULTED_FIELDS = (
    "field_behavior",
    "field_normalization",
    "field_order",
    "sync_behavior_family",
)

_OPTIONAL_SCALARS = SERVER_DEFAULTED_FIELDS + (
    "high_water_mark_attribute",
    "historical_sync_operation",
    "mirror_strategy",
)

_STATUS_FIELDS = ("status", "created_at", "updated_at", "last_run_at", "next_run_at")


# ============================================================================
# Request payloads
# ============================================================================


def _base_payload(spec: SyncSpec, logger: logging.Logger) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "operation": spec.operation,
        "source_attributes": encode_source_attributes(spec.source),
        "destination_attributes": encode_destination_attributes(spec.destination),
        "mappings": encode_mappings(spec.field_mappings, logger=logger),
        "label": spec.label,
        "paused": spec.paused,
    }
    if spec.run_mode is not None:
        payload["mode"] = encode_run_mode(spec.run_mode)
    for name in _OPTIONAL_SCALARS:
        value = getattr(spec, name)
        if value is not None:
            payload[name] = value
    if spec.advanced_configuration:
        payload["advanced_configuration"] = spec.advanced_configuration
    return payload


def build_create_payload(spec: SyncSpec, logger: logging.Logger | None = None) -> dict[str, Any]:
    """Body for ``POST /syncs``.

    Raises:
        MappingValidationError: the field mappings do not name exactly one
            primary identifier. Raised before anything is sent.
    """
    logger = logger or log
    payload = _base_payload(spec, logger)
    if spec.alerts:
        payload["alert_attributes"] = encode_alerts(spec.alerts)
    logger.debug("Built create payload for sync %r", spec.name)
    return payload


def build_update_payload(spec: SyncSpec, logger: logging.Logger | None = None) -> dict[str, Any]:
    """Body for ``PATCH /syncs/{id}``.

    Alerts are always sent so that removing the last alert clears it remotely.
    """
    logger = logger or log
    payload = _base_payload(spec, logger)
    payload["alert_attributes"] = encode_alerts(spec.alerts)
    logger.debug("Built update payload for sync %r (id=%s)", spec.name, spec.sync_id)
    return payload


# ============================================================================
# Response decoding
# ============================================================================


def _decode_advanced_configuration(value: Any) -> dict[str, Any] | None:
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            value = json.loads(value)
        except ValueError as exc:
            raise WireDecodeError(f"advanced_configuration: invalid JSON: {exc}") from exc
    if isinstance(value, dict) and value:
        return value
    return None


def decode_sync(
    wire: Any,
    prior: SyncSpec | None = None,
    workspace_id: str | None = None,
    name: str | None = None,
    logger: logging.Logger | None = None,
) -> tuple[SyncSpec, SyncStatus]:
    """Rebuild a ``SyncSpec`` and its server status from a ``GET /syncs/{id}`` body.

    With ``prior`` given, the result diffs clean against it whenever the
    remote sync did not change. Without it (import), every reported setting
    is adopted.
    """
    logger = logger or log
    if not isinstance(wire, dict):
        raise WireDecodeError(f"sync: expected an object, got {type(wire).__name__}")
    if wire.get("id") is None:
        raise WireDecodeError("sync: missing required 'id'")
    sync_id = to_int(wire["id"])

    if "mode" not in wire and wire.get("schedule_frequency"):
        raise WireDecodeError(
            f"sync {sync_id} was created with an older version of the Census API "
            "that pre-dates run_mode support. Recreate it using run_mode "
            "configuration or contact Census support to migrate it."
        )

    workspace = wire.get("workspace_id") or workspace_id or (prior.workspace_id if prior else None)
    if not workspace:
        raise WireDecodeError(f"sync {sync_id}: workspace_id is unknown")
    operation = wire.get("operation") or (prior.operation if prior else None)
    if not operation:
        raise WireDecodeError(f"sync {sync_id}: missing required 'operation'")

    label = to_str(wire.get("label"))
    data: dict[str, Any] = {
        "name": name or (prior.name if prior else None) or label or f"sync_{sync_id}",
        "workspace_id": to_str(workspace),
        "label": label,
        "operation": operation,
        "source": decode_source_attributes(wire.get("source_attributes"), logger=logger),
        "destination": decode_destination_attributes(wire.get("destination_attributes")),
        "paused": bool(wire.get("paused", False)),
        "sync_id": sync_id,
    }

    prior_mappings = prior.field_mappings if prior else None
    if wire.get("mappings"):
        data["field_mappings"] = decode_mappings(wire["mappings"], prior=prior_mappings, logger=logger)
    elif wire.get("field_mappings"):
        logger.debug("sync %s: no 'mappings'; reading legacy 'field_mappings'", sync_id)
        data["field_mappings"] = decode_legacy_mappings(wire["field_mappings"], logger=logger)
    else:
        data["field_mappings"] = []

    for field in _OPTIONAL_SCALARS:
        value = wire.get(field)
        if not value:
            continue
        if field in SERVER_DEFAULTED_FIELDS and prior is not None and getattr(prior, field) is None:
            continue
        data[field] = value

    advanced = _decode_advanced_configuration(wire.get("advanced_configuration"))
    if advanced is not None:
        data["advanced_configuration"] = advanced
    data["alerts"] = decode_alerts(wire.get("alert_attributes"), logger=logger)
    data["run_mode"] = decode_run_mode(wire.get("mode"))

    try:
        spec = SyncSpec(**data)
        status = SyncStatus(
            id=sync_id,
            last_run_id=to_int(wire["last_run_id"]) if wire.get("last_run_id") is not None else None,
            **{f: to_str(wire[f]) for f in _STATUS_FIELDS if wire.get(f) is not None},
        )
    except ValidationError as exc:
        details = "; ".join(format_validation_error(exc))
        raise WireDecodeError(f"sync {sync_id}: {details}") from exc

    logger.debug("Decoded sync %s (%d mappings)", sync_id, len(spec.field_mappings))
    return spec, status


# ============================================================================
# Helpers
# ============================================================================


def _normalize_json(value: Any) -> Any:
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            value = json.loads(value)
        except ValueError:
            return value
    if value in ({}, []):
        return None
    return value


def json_equivalent(a: Any, b: Any) -> bool:
    """Compare two JSON documents (dicts or JSON text) semantically.

    Key order and whitespace are ignored; empty documents equal None.
    """
    return _normalize_json(a) == _normalize_json(b)


def parse_import_id(value: str) -> tuple[str, int]:
    """Split ``"<workspace_id>:<sync_id>"`` into its parts."""
    parts = value.strip().split(":")
    if len(parts) == 1:
        raise ImportIdError(
            "import requires workspace_id. Use format: workspace_id:sync_id\n\n"
            "Example:\n"
            "  69962:123\n\n"
            "Where 69962 is the workspace_id and 123 is the sync_id."
        )
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise ImportIdError(f"invalid import id {value!r}. Use: workspace_id:sync_id")
    workspace_id, raw_sync_id = parts
    if not raw_sync_id.isdigit():
        raise ImportIdError(f"sync_id must be numeric, got {raw_sync_id!r}")
    return workspace_id, int(raw_sync_id)
