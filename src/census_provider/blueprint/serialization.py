"""Blueprint serialization - YAML read/write for SyncBlueprint."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..errors import BlueprintValidationError
from ..models import (
    MAPPING_TYPES,
    BlueprintMetadata,
    DirectMapping,
    FieldMapping,
    HashMapping,
    SyncBlueprint,
    SyncSpec,
)

_OBJECT_TYPES = frozenset({"table", "dataset", "model", "topic", "segment", "cohort"})
# The one field each non-column variant carries, written right after `type`.
_VARIANT_FIELDS = ("constant", "sync_metadata_key", "segment_identify_by", "liquid_template")


def _format_loc(loc: tuple) -> str:
    """Render a pydantic error location as ``syncs[0].field_mappings[2].to``.

    Union tags pydantic inserts into the path are dropped.
    """
    out = ""
    prev: Any = None
    for part in loc:
        if isinstance(part, int):
            out += f"[{part}]"
        elif (isinstance(prev, int) and part in MAPPING_TYPES) or (
            prev == "object" and part in _OBJECT_TYPES
        ):
            pass
        else:
            out += f".{part}" if out else str(part)
        prev = part
    return out


def _validation_messages(exc: ValidationError) -> list[str]:
    return [f"{_format_loc(err['loc'])}: {err['msg']}" for err in exc.errors()]


def mapping_to_config(mapping: FieldMapping) -> dict[str, Any]:
    """Convert a field mapping to its YAML shape: ``from``/``to``/``type`` first,
    then the variant field, then non-default modifiers."""
    d: dict[str, Any] = {}
    if isinstance(mapping, (DirectMapping, HashMapping)):
        d["from"] = mapping.from_
    d["to"] = mapping.to
    if mapping.type != "direct":
        d["type"] = mapping.type
    for key in _VARIANT_FIELDS:
        if hasattr(mapping, key):
            d[key] = getattr(mapping, key)
    rest = mapping.model_dump(mode="json", by_alias=True, exclude_defaults=True)
    for key, value in rest.items():
        if key not in d and key != "type":
            d[key] = value
    return d


def sync_to_dict(spec: SyncSpec) -> dict[str, Any]:
    """Convert a SyncSpec to a serializable dict, omitting unset fields."""
    dumped = spec.model_dump(mode="json", exclude_none=True, exclude={"field_mappings"})
    d: dict[str, Any] = {}
    for key in SyncSpec.model_fields:
        if key == "field_mappings":
            d["field_mappings"] = [mapping_to_config(m) for m in spec.field_mappings]
        elif key == "paused" and not spec.paused:
            continue
        elif key == "alerts" and not spec.alerts:
            continue
        elif key in dumped:
            d[key] = dumped[key]
    return d


def _blueprint_to_dict(bp: SyncBlueprint) -> dict[str, Any]:
    return {
        "blueprint": {
            "name": bp.metadata.name,
            "version": bp.metadata.version,
            "description": bp.metadata.description,
            "created_at": bp.metadata.created_at,
        },
        "syncs": [sync_to_dict(s) for s in bp.syncs],
    }


def _dict_to_blueprint(d: dict[str, Any]) -> SyncBlueprint:
    """Convert a parsed YAML dict to a SyncBlueprint."""
    bp_meta = d.get("blueprint") or {}
    if not isinstance(bp_meta, dict):
        raise BlueprintValidationError(
            f"blueprint: expected a mapping of metadata, got {type(bp_meta).__name__}"
        )
    try:
        return SyncBlueprint(
            metadata=BlueprintMetadata(**bp_meta),
            syncs=d.get("syncs") or [],
        )
    except ValidationError as exc:
        raise BlueprintValidationError(
            "Invalid sync blueprint", errors=_validation_messages(exc)
        ) from exc


def save_blueprint(blueprint: SyncBlueprint, path: str | Path) -> Path:
    """Save a SyncBlueprint to a YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = _blueprint_to_dict(blueprint)
    with open(path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
    return path


def load_blueprint(path: str | Path) -> SyncBlueprint:
    """Load a SyncBlueprint from a YAML file.

    Raises:
        BlueprintValidationError: the file is empty, not a mapping, or does
            not match the sync schema.
    """
    path = Path(path)
    with open(path) as f:
        data = yaml.safe_load(f)
    if not data:
        raise BlueprintValidationError(f"Empty or invalid blueprint file: {path}")
    if not isinstance(data, dict):
        raise BlueprintValidationError(
            f"Blueprint file must contain a YAML mapping, got {type(data).__name__}: {path}"
        )
    return _dict_to_blueprint(data)
