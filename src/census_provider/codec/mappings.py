"""Field mapping codec.

Translates between the user-facing field mapping union and the Census
``mappings`` wire list. Every variant round-trips: ``decode_mapping`` applied
to ``encode_mapping(m)`` (with ``m`` as the prior) yields ``m`` again.

Wire ``from`` shapes by mapping type::

    direct / hash        {"type": "column", "data": <from>}
    constant             {"type": "constant_value",
                          "data": {"basic_type": "text", "value": <constant>}}
    sync_metadata        {"type": "sync_metadata", "data": <key>}
    segment_membership   {"type": "segment_membership",
                          "data": {"identify_by": <segment_identify_by>}}
    liquid_template      {"type": "liquid_template",
                          "data": {"liquid_template": <template>}}
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

from pydantic import TypeAdapter, ValidationError

from ..models import (
    ConstantMapping,
    FieldMapping,
    HashMapping,
    LiquidTemplateMapping,
    MappingAttribute,
    MappingFrom,
    SegmentMembershipMapping,
    SyncMetadataMapping,
    _MappingBase,
)
from ..coerce import to_str
from ..errors import MappingValidationError, WireDecodeError

log = logging.getLogger(__name__)

_MAPPING_ADAPTER: TypeAdapter[FieldMapping] = TypeAdapter(FieldMapping)

# Optional string modifiers, sent only when set.
_STRING_MODIFIERS = ("lookup_object", "lookup_field", "field_type")
# Boolean modifiers, sent only when true.
_FLAG_MODIFIERS = ("preserve_values", "generate_field", "array_field", "follow_source_type")


def format_validation_error(exc: ValidationError, tag: str | None = None) -> list[str]:
    """Flatten a pydantic error into ``"field: message"`` strings."""
    messages = []
    for err in exc.errors():
        loc = list(err.get("loc", ()))
        if tag is not None and loc and loc[0] == tag:
            loc = loc[1:]
        path = ".".join(str(part) for part in loc)
        messages.append(f"{path}: {err['msg']}" if path else err["msg"])
    return messages


# ============================================================================
# Config parsing and validation
# ============================================================================


def parse_field_mapping(raw: Any, index: int | None = None) -> FieldMapping:
    """Validate one config entry into its mapping variant."""
    if isinstance(raw, _MappingBase):
        return raw
    if not isinstance(raw, dict):
        raise MappingValidationError(
            f"expected a mapping, got {type(raw).__name__}", index=index
        )
    try:
        return _MAPPING_ADAPTER.validate_python(raw)
    except ValidationError as exc:
        tag = raw.get("type") or "direct"
        raise MappingValidationError(
            "; ".join(format_validation_error(exc, tag=tag)), index=index
        ) from exc


def parse_field_mappings(raw: Iterable[Any]) -> list[FieldMapping]:
    return [parse_field_mapping(entry, index=i) for i, entry in enumerate(raw)]


def validate_primary_identifier(mappings: Sequence[FieldMapping]) -> None:
    """Require exactly one mapping flagged as the primary identifier."""
    primary = [i for i, m in enumerate(mappings) if m.is_primary_identifier]
    if len(primary) == 1:
        return
    message = (
        "exactly one field_mapping must have is_primary_identifier = true, "
        f"but found {len(primary)}"
    )
    if primary:
        message += " (" + ", ".join(f"field_mapping[{i}]" for i in primary) + ")"
    raise MappingValidationError(message)


# ============================================================================
# Encode
# ============================================================================


def _wire_from(mapping: FieldMapping) -> MappingFrom:
    if isinstance(mapping, ConstantMapping):
        return {
            "type": "constant_value",
            "data": {"basic_type": "text", "value": to_str(mapping.constant)},
        }
    if isinstance(mapping, SyncMetadataMapping):
        return {"type": "sync_metadata", "data": mapping.sync_metadata_key}
    if isinstance(mapping, SegmentMembershipMapping):
        return {
            "type": "segment_membership",
            "data": {"identify_by": mapping.segment_identify_by},
        }
    if isinstance(mapping, LiquidTemplateMapping):
        return {
            "type": "liquid_template",
            "data": {"liquid_template": mapping.liquid_template},
        }
    # direct and hash share the column form
    return {"type": "column", "data": mapping.from_}


def encode_mapping(mapping: FieldMapping) -> MappingAttribute:
    wire: dict[str, Any] = {
        "from": _wire_from(mapping),
        "to": mapping.to,
        "is_primary_identifier": mapping.is_primary_identifier,
    }
    for name in _STRING_MODIFIERS:
        value = getattr(mapping, name)
        if value:
            wire[name] = value
    for name in _FLAG_MODIFIERS:
        if getattr(mapping, name):
            wire[name] = True
    if mapping.sync_null_values is not None:
        wire["sync_null_values"] = mapping.sync_null_values
    return wire  # type: ignore[return-value]


def encode_mappings(
    mappings: Sequence[FieldMapping], logger: logging.Logger | None = None
) -> list[MappingAttribute]:
    """Encode a full mapping list. Fails before producing any output if the
    primary identifier count is wrong."""
    logger = logger or log
    validate_primary_identifier(mappings)
    encoded = [encode_mapping(m) for m in mappings]
    logger.debug("Encoded %d field mappings", len(encoded))
    return encoded


# ============================================================================
# Decode
# ============================================================================


def _decode_source(
    source: Any,
    prior: FieldMapping | None,
    label: str,
    logger: logging.Logger,
) -> dict[str, Any]:
    if source is None:
        return {"type": "direct", "from": ""}
    if not isinstance(source, dict):
        logger.warning("%s: 'from' is not an object (%r); treating as column", label, source)
        return {"type": "direct", "from": to_str(source)}

    kind = source.get("type")
    data = source.get("data")
    if data is None:
        return {"type": "direct", "from": ""}

    if kind == "constant_value":
        if isinstance(data, dict) and "value" in data:
            return {"type": "constant", "constant": to_str(data["value"])}
        logger.warning(
            "%s: constant_value data has no 'value' key; using raw data %r", label, data
        )
        constant = data if isinstance(data, (dict, list)) else to_str(data)
        return {"type": "constant", "constant": constant}

    if kind == "sync_metadata":
        return {"type": "sync_metadata", "sync_metadata_key": to_str(data)}

    if kind == "segment_membership":
        if isinstance(data, dict):
            identify_by = data.get("identify_by")
        else:
            logger.warning("%s: segment_membership data is not an object: %r", label, data)
            identify_by = data
        return {"type": "segment_membership", "segment_identify_by": to_str(identify_by)}

    if kind == "liquid_template":
        if isinstance(data, dict):
            template = data.get("liquid_template")
        else:
            logger.warning("%s: liquid_template data is not an object: %r", label, data)
            template = data
        return {"type": "liquid_template", "liquid_template": to_str(template)}

    if kind != "column":
        logger.warning("%s: unknown mapping source type %r; treating as column", label, kind)
    column = to_str(data)
    # Hashing happens server-side, so only the prior config can tell us.
    if isinstance(prior, HashMapping) and prior.from_ == column:
        return {"type": "hash", "from": column}
    return {"type": "direct", "from": column}


def _decode_modifiers(wire: dict[str, Any]) -> dict[str, Any]:
    modifiers: dict[str, Any] = {}
    if isinstance(wire.get("is_primary_identifier"), bool):
        modifiers["is_primary_identifier"] = wire["is_primary_identifier"]
    for name in _STRING_MODIFIERS:
        value = wire.get(name)
        if value is not None:
            modifiers[name] = to_str(value)
    for name in _FLAG_MODIFIERS:
        if isinstance(wire.get(name), bool):
            modifiers[name] = wire[name]
    if isinstance(wire.get("sync_null_values"), bool):
        modifiers["sync_null_values"] = wire["sync_null_values"]
    return modifiers


def decode_mapping(
    wire: Any,
    prior: FieldMapping | None = None,
    index: int | None = None,
    logger: logging.Logger | None = None,
) -> FieldMapping:
    """Rebuild a field mapping from its wire form.

    Unexpected shapes degrade to the closest representation with a warning;
    only a structurally absent ``to`` is an error.
    """
    logger = logger or log
    label = f"mappings[{index}]" if index is not None else "mapping"
    if not isinstance(wire, dict):
        raise WireDecodeError(f"{label}: expected an object, got {type(wire).__name__}")
    if wire.get("to") is None:
        raise WireDecodeError(f"{label}: missing required 'to'")

    config: dict[str, Any] = {"to": to_str(wire["to"])}
    config.update(_decode_source(wire.get("from"), prior, label, logger))
    config.update(_decode_modifiers(wire))

    try:
        return _MAPPING_ADAPTER.validate_python(config)
    except ValidationError as exc:
        details = "; ".join(format_validation_error(exc, tag=config["type"]))
        raise WireDecodeError(f"{label}: {details}") from exc


def decode_mappings(
    wire: Sequence[Any] | None,
    prior: Sequence[FieldMapping] | None = None,
    logger: logging.Logger | None = None,
) -> list[FieldMapping]:
    """Decode a wire mapping list, pairing each entry with the prior
    mapping that targets the same destination field."""
    if not wire:
        return []
    prior_by_to: dict[str, FieldMapping] = {}
    for m in prior or ():
        prior_by_to.setdefault(m.to, m)

    decoded = []
    for i, entry in enumerate(wire):
        to = entry.get("to") if isinstance(entry, dict) else None
        match = prior_by_to.get(to_str(to)) if to is not None else None
        decoded.append(decode_mapping(entry, prior=match, index=i, logger=logger))
    return decoded


def decode_legacy_mapping(
    wire: Any, index: int | None = None, logger: logging.Logger | None = None
) -> FieldMapping:
    """Decode an entry of the older flat ``field_mappings`` list.

    Flat entries already use the config field names, except that the mapping
    type travels under the ``operation`` key.
    """
    logger = logger or log
    label = f"field_mappings[{index}]" if index is not None else "field_mapping"
    if not isinstance(wire, dict):
        raise WireDecodeError(f"{label}: expected an object, got {type(wire).__name__}")
    if wire.get("to") is None:
        raise WireDecodeError(f"{label}: missing required 'to'")

    config = {k: v for k, v in wire.items() if v is not None and v != "" and k != "operation"}
    config["type"] = wire.get("operation") or wire.get("type") or "direct"
    if config["type"] in ("direct", "hash"):
        config.setdefault("from", "")
    elif config.pop("from", None):
        logger.warning("%s: ignoring 'from' on a %s mapping", label, config["type"])

    try:
        return _MAPPING_ADAPTER.validate_python(config)
    except ValidationError as exc:
        details = "; ".join(format_validation_error(exc, tag=config["type"]))
        raise WireDecodeError(f"{label}: {details}") from exc


def decode_legacy_mappings(
    wire: Sequence[Any] | None, logger: logging.Logger | None = None
) -> list[FieldMapping]:
    return [decode_legacy_mapping(entry, index=i, logger=logger) for i, entry in enumerate(wire or ())]
