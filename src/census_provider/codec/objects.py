"""Source and destination object codec.

Most object descriptors pass through as ``{type, id}``. Segments and cohorts
are addressed on the wire through their parent dataset, with the segment or
cohort id lifted to a top-level key::

    {"type": "segment", "id": "42", "dataset_id": "7"}
        -> {"object": {"type": "dataset", "id": "7"}, "filter_segment_id": "42"}

When reading a sync back, the API reports these as ``filter_segment_source``,
``cohort_source`` and ``business_object_source`` objects instead, so decoding
accepts both the request form and the read form.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from ..coerce import to_int, to_str
from ..errors import WireDecodeError
from ..models import (
    CohortObject,
    DestinationAttributes,
    ObjectDescriptor,
    SegmentObject,
    SourceAttributes,
    TableObject,
)

log = logging.getLogger(__name__)

_TABLE_FIELDS = ("table_name", "table_schema", "table_catalog")


# ============================================================================
# Encode
# ============================================================================


def encode_object(obj: ObjectDescriptor) -> tuple[dict[str, Any], dict[str, Any]]:
    """Return ``(wire_object, extra_top_level_keys)`` for a source object."""
    if isinstance(obj, SegmentObject):
        return {"type": "dataset", "id": obj.dataset_id}, {"filter_segment_id": obj.id}
    if isinstance(obj, CohortObject):
        return {"type": "dataset", "id": obj.dataset_id}, {"cohort_id": obj.id}
    if isinstance(obj, TableObject):
        wire = {"type": "table"}
        for name in _TABLE_FIELDS:
            value = getattr(obj, name)
            if value:
                wire[name] = value
        return wire, {}
    return {"type": obj.type, "id": obj.id}, {}


def encode_source_attributes(source: SourceAttributes) -> dict[str, Any]:
    wire_object, extra = encode_object(source.object)
    return {"connection_id": source.connection_id, "object": wire_object, **extra}


def encode_destination_attributes(destination: DestinationAttributes) -> dict[str, Any]:
    wire: dict[str, Any] = {
        "connection_id": destination.connection_id,
        "object": destination.object,
    }
    if destination.lead_union_insert_to:
        wire["lead_union_insert_to"] = destination.lead_union_insert_to
    return wire


# ============================================================================
# Decode
# ============================================================================


def _decode_object(wire: dict[str, Any], obj: dict[str, Any], logger: logging.Logger) -> dict[str, Any]:
    kind = to_str(obj.get("type"))
    segment_id = wire.get("filter_segment_id")
    cohort_id = wire.get("cohort_id")

    if kind == "filter_segment_source" or (kind == "dataset" and segment_id is not None):
        if segment_id is None:
            segment_id = obj.get("id")
        dataset_id = obj.get("dataset_id") if kind == "filter_segment_source" else obj.get("id")
        return {"type": "segment", "id": to_str(segment_id), "dataset_id": to_str(dataset_id)}

    if kind == "cohort_source" or (kind == "dataset" and cohort_id is not None):
        if cohort_id is None:
            cohort_id = obj.get("id")
        dataset_id = obj.get("dataset_id") if kind == "cohort_source" else obj.get("id")
        return {"type": "cohort", "id": to_str(cohort_id), "dataset_id": to_str(dataset_id)}

    if kind == "business_object_source":
        dataset_id = obj.get("dataset_id", obj.get("id"))
        return {"type": "dataset", "id": to_str(dataset_id)}

    if kind == "table":
        decoded = {"type": "table"}
        for name in _TABLE_FIELDS:
            if obj.get(name) is not None:
                decoded[name] = to_str(obj[name])
        return decoded

    if kind in ("dataset", "model", "topic"):
        return {"type": kind, "id": to_str(obj.get("id"))}

    logger.warning("unknown source object type %r: %r", kind, obj)
    raise WireDecodeError(f"source_attributes.object: unsupported type {kind!r}")


def decode_source_attributes(
    wire: Any, logger: logging.Logger | None = None
) -> SourceAttributes:
    logger = logger or log
    if not isinstance(wire, dict):
        raise WireDecodeError("source_attributes: expected an object")
    if wire.get("connection_id") is None:
        raise WireDecodeError("source_attributes: missing required 'connection_id'")
    obj = wire.get("object")
    if not isinstance(obj, dict):
        raise WireDecodeError("source_attributes: missing required 'object'")

    try:
        return SourceAttributes(
            connection_id=to_int(wire["connection_id"]),
            object=_decode_object(wire, obj, logger),
        )
    except ValidationError as exc:
        raise WireDecodeError(f"source_attributes: {exc}") from exc


def decode_destination_attributes(wire: Any) -> DestinationAttributes:
    if not isinstance(wire, dict):
        raise WireDecodeError("destination_attributes: expected an object")
    if wire.get("connection_id") is None:
        raise WireDecodeError("destination_attributes: missing required 'connection_id'")
    if wire.get("object") is None:
        raise WireDecodeError("destination_attributes: missing required 'object'")

    try:
        return DestinationAttributes(
            connection_id=to_int(wire["connection_id"]),
            object=to_str(wire["object"]),
            lead_union_insert_to=wire.get("lead_union_insert_to"),
        )
    except ValidationError as exc:
        raise WireDecodeError(f"destination_attributes: {exc}") from exc
