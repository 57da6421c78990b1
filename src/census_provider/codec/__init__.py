"""Attribute translation between sync blueprints and the Census wire format."""

from .alerts import alert_key, decode_alerts, encode_alerts
from .mappings import (
    decode_legacy_mappings,
    decode_mapping,
    decode_mappings,
    encode_mapping,
    encode_mappings,
    parse_field_mapping,
    parse_field_mappings,
    validate_primary_identifier,
)
from .objects import (
    decode_destination_attributes,
    decode_source_attributes,
    encode_destination_attributes,
    encode_object,
    encode_source_attributes,
)
from .run_mode import decode_run_mode, encode_run_mode
from .sync import (
    build_create_payload,
    build_update_payload,
    decode_sync,
    json_equivalent,
    parse_import_id,
)

__all__ = [
    "alert_key",
    "build_create_payload",
    "build_update_payload",
    "decode_alerts",
    "decode_destination_attributes",
    "decode_legacy_mappings",
    "decode_mapping",
    "decode_mappings",
    "decode_run_mode",
    "decode_source_attributes",
    "decode_sync",
    "encode_alerts",
    "encode_destination_attributes",
    "encode_mapping",
    "encode_mappings",
    "encode_object",
    "encode_run_mode",
    "encode_source_attributes",
    "json_equivalent",
    "parse_field_mapping",
    "parse_field_mappings",
    "parse_import_id",
    "validate_primary_identifier",
]
