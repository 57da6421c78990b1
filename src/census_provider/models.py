"""Data models - typed specs for Census sync configuration.

User-facing shapes are pydantic models validated once at the boundary
(YAML load or API decode). Tagged variants (field mappings, source objects)
are discriminated unions, so each variant only carries the fields that are
valid for it.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Literal, TypedDict, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    field_validator,
    model_validator,
)

from .coerce import empty_to_none, to_str

MappingType = Literal[
    "direct", "hash", "constant", "sync_metadata", "segment_membership", "liquid_template"
]
MAPPING_TYPES: tuple[str, ...] = (
    "direct", "hash", "constant", "sync_metadata", "segment_membership", "liquid_template",
)

Operation = Literal["append", "insert", "mirror", "update", "upsert"]
FieldBehavior = Literal["sync_all_properties", "specific_properties"]
FieldNormalization = Literal[
    "start_case", "lower_case", "upper_case", "camel_case", "snake_case", "match_source_names"
]
FieldOrder = Literal["alphabetical_column_name", "mapping_order"]
SyncBehaviorFamily = Literal["activateEvents", "mapRecords"]
HistoricalSyncOperation = Literal["skip_current_records", "backfill_all_records"]
MirrorStrategy = Literal["sync_updates_and_deletes", "sync_updates_and_nulls", "upload_and_swap"]

AlertType = Literal[
    "FailureAlertConfiguration",
    "InvalidRecordPercentAlertConfiguration",
    "FullSyncTriggerAlertConfiguration",
    "RecordCountDeviationAlertConfiguration",
    "RuntimeAlertConfiguration",
    "StatusAlertConfiguration",
]
AlertSendFor = Literal["first_time", "every_time"]

ScheduleFrequency = Literal[
    "never", "continuous", "quarter_hourly", "hourly", "daily", "weekly", "expression"
]
Weekday = Literal["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


# ============================================================================
# Field mappings
# ============================================================================


class _MappingBase(BaseModel):
    """Modifiers shared by every field mapping variant."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    to: str
    is_primary_identifier: bool = False
    lookup_object: str | None = None
    lookup_field: str | None = None
    preserve_values: bool = False
    generate_field: bool = False
    # None means "use the server default"; False explicitly disables.
    sync_null_values: bool | None = None
    array_field: bool = False
    field_type: str | None = None
    follow_source_type: bool = False

    @field_validator("lookup_object", "lookup_field", "field_type", mode="before")
    @classmethod
    def _blank_is_unset(cls, value: Any) -> Any:
        return empty_to_none(value)


class DirectMapping(_MappingBase):
    type: Literal["direct"] = "direct"
    from_: str = Field(default="", alias="from")


class HashMapping(_MappingBase):
    type: Literal["hash"] = "hash"
    from_: str = Field(default="", alias="from")


class ConstantMapping(_MappingBase):
    type: Literal["constant"] = "constant"
    # Scalars are stored as the text the API will receive. Containers only
    # appear when an upstream response carried a malformed constant payload.
    constant: Union[str, dict[str, Any], list[Any]]

    @field_validator("constant", mode="before")
    @classmethod
    def _stringify_scalar(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("constant mappings require a constant value")
        if isinstance(value, (dict, list)):
            return value
        return to_str(value)


class SyncMetadataMapping(_MappingBase):
    type: Literal["sync_metadata"] = "sync_metadata"
    sync_metadata_key: str


class SegmentMembershipMapping(_MappingBase):
    type: Literal["segment_membership"] = "segment_membership"
    segment_identify_by: str


class LiquidTemplateMapping(_MappingBase):
    type: Literal["liquid_template"] = "liquid_template"
    liquid_template: str


def _mapping_tag(value: Any) -> str:
    if isinstance(value, dict):
        return value.get("type") or "direct"
    return getattr(value, "type", "direct")


FieldMapping = Annotated[
    Union[
        Annotated[DirectMapping, Tag("direct")],
        Annotated[HashMapping, Tag("hash")],
        Annotated[ConstantMapping, Tag("constant")],
        Annotated[SyncMetadataMapping, Tag("sync_metadata")],
        Annotated[SegmentMembershipMapping, Tag("segment_membership")],
        Annotated[LiquidTemplateMapping, Tag("liquid_template")],
    ],
    Discriminator(_mapping_tag),
]

FIELD_MAPPING_CLASSES: tuple[type[_MappingBase], ...] = (
    DirectMapping,
    HashMapping,
    ConstantMapping,
    SyncMetadataMapping,
    SegmentMembershipMapping,
    LiquidTemplateMapping,
)


class MappingFrom(TypedDict):
    """Wire form of a mapping source: a tag plus a type-dependent payload."""

    type: str
    data: Any


class MappingAttribute(TypedDict, total=False):
    """Wire form of one entry in a sync's `mappings` list."""

    # "from" is a keyword; callers index it as a plain dict key.
    to: str
    is_primary_identifier: bool
    lookup_object: str
    lookup_field: str
    preserve_values: bool
    generate_field: bool
    sync_null_values: bool
    array_field: bool
    field_type: str
    follow_source_type: bool


# ============================================================================
# Source / destination object descriptors
# ============================================================================


class _ObjectBase(BaseModel):
    model_config = ConfigDict(extra="forbid")

    @field_validator("id", "dataset_id", mode="before", check_fields=False)
    @classmethod
    def _coerce_identifier(cls, value: Any) -> Any:
        if value is None:
            return value
        return to_str(value)


class TableObject(_ObjectBase):
    type: Literal["table"] = "table"
    table_name: str | None = None
    table_schema: str | None = None
    table_catalog: str | None = None

    @field_validator("table_name", "table_schema", "table_catalog", mode="before")
    @classmethod
    def _blank_is_unset(cls, value: Any) -> Any:
        return empty_to_none(value)


class DatasetObject(_ObjectBase):
    type: Literal["dataset"] = "dataset"
    id: str


class ModelObject(_ObjectBase):
    type: Literal["model"] = "model"
    id: str


class TopicObject(_ObjectBase):
    type: Literal["topic"] = "topic"
    id: str


class SegmentObject(_ObjectBase):
    """A filter segment of a dataset. `id` is the segment, `dataset_id` its dataset."""

    type: Literal["segment"] = "segment"
    id: str
    dataset_id: str


class CohortObject(_ObjectBase):
    """A cohort of a dataset. `id` is the cohort, `dataset_id` its dataset."""

    type: Literal["cohort"] = "cohort"
    id: str
    dataset_id: str


ObjectDescriptor = Annotated[
    Union[TableObject, DatasetObject, ModelObject, TopicObject, SegmentObject, CohortObject],
    Field(discriminator="type"),
]


class SourceAttributes(BaseModel):
    model_config = ConfigDict(extra="forbid")

    connection_id: int
    object: ObjectDescriptor


class DestinationAttributes(BaseModel):
    model_config = ConfigDict(extra="forbid")

    connection_id: int
    object: str
    lead_union_insert_to: str | None = None

    @field_validator("lead_union_insert_to", mode="before")
    @classmethod
    def _blank_is_unset(cls, value: Any) -> Any:
        return empty_to_none(value)


# ============================================================================
# Alerts and run mode
# ============================================================================


class AlertSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: AlertType
    send_for: AlertSendFor = "first_time"
    should_send_recovery: bool = True
    options: dict[str, str] = Field(default_factory=dict)

    @field_validator("options", mode="before")
    @classmethod
    def _stringify_options(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(k): to_str(v) for k, v in value.items()}
        return value


class ScheduleTrigger(BaseModel):
    model_config = ConfigDict(extra="forbid")

    frequency: ScheduleFrequency
    day: Weekday | None = None
    hour: int | None = Field(default=None, ge=0, le=24)
    minute: int | None = Field(default=None, ge=0, le=59)
    cron_expression: str | None = None

    @model_validator(mode="after")
    def _cron_needs_expression_frequency(self) -> "ScheduleTrigger":
        if self.cron_expression and self.frequency != "expression":
            raise ValueError("cron_expression is only valid when frequency is 'expression'")
        return self


class DbtCloudTrigger(BaseModel):
    model_config = ConfigDict(extra="forbid")

    project_id: str
    job_id: str

    @field_validator("project_id", "job_id", mode="before")
    @classmethod
    def _coerce_identifier(cls, value: Any) -> Any:
        return to_str(value) if value is not None else value


class FivetranTrigger(BaseModel):
    model_config = ConfigDict(extra="forbid")

    job_id: str
    job_name: str

    @field_validator("job_id", mode="before")
    @classmethod
    def _coerce_identifier(cls, value: Any) -> Any:
        return to_str(value) if value is not None else value


class SyncSequenceTrigger(BaseModel):
    model_config = ConfigDict(extra="forbid")

    sync_id: int


class Triggers(BaseModel):
    model_config = ConfigDict(extra="forbid")

    schedule: ScheduleTrigger | None = None
    dbt_cloud: DbtCloudTrigger | None = None
    fivetran: FivetranTrigger | None = None
    sync_sequence: SyncSequenceTrigger | None = None


class RunMode(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Literal["live", "triggered"]
    triggers: Triggers | None = None

    @model_validator(mode="after")
    def _triggers_only_when_triggered(self) -> "RunMode":
        if self.type == "live" and self.triggers is not None:
            raise ValueError("triggers are only valid for run_mode type 'triggered'")
        return self


# ============================================================================
# Syncs and blueprints
# ============================================================================


class SyncSpec(BaseModel):
    """One declared Census sync."""

    model_config = ConfigDict(extra="forbid")

    name: str
    workspace_id: str
    label: str
    operation: Operation
    source: SourceAttributes
    destination: DestinationAttributes
    field_mappings: list[FieldMapping] = Field(default_factory=list)
    paused: bool = False
    field_behavior: FieldBehavior | None = None
    field_normalization: FieldNormalization | None = None
    field_order: FieldOrder | None = None
    sync_behavior_family: SyncBehaviorFamily | None = None
    advanced_configuration: dict[str, Any] | None = None
    high_water_mark_attribute: str | None = None
    historical_sync_operation: HistoricalSyncOperation | None = None
    mirror_strategy: MirrorStrategy | None = None
    alerts: list[AlertSpec] = Field(default_factory=list)
    run_mode: RunMode | None = None
    # Remote identity, recorded once the sync exists in Census.
    sync_id: int | None = None

    @field_validator("workspace_id", mode="before")
    @classmethod
    def _coerce_workspace_id(cls, value: Any) -> Any:
        if value is None:
            return value
        return to_str(value)

    @field_validator("high_water_mark_attribute", mode="before")
    @classmethod
    def _blank_is_unset(cls, value: Any) -> Any:
        return empty_to_none(value)


class SyncStatus(BaseModel):
    """Server-owned attributes of a sync; never part of a blueprint."""

    id: int
    status: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    last_run_at: str | None = None
    next_run_at: str | None = None
    last_run_id: int | None = None


class BlueprintMetadata(BaseModel):
    name: str = "Unnamed Blueprint"
    version: int = 1
    description: str = ""
    created_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class SyncBlueprint(BaseModel):
    metadata: BlueprintMetadata = Field(default_factory=BlueprintMetadata)
    syncs: list[SyncSpec] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_names(self) -> "SyncBlueprint":
        seen: set[str] = set()
        for spec in self.syncs:
            if spec.name in seen:
                raise ValueError(f"duplicate sync name: {spec.name!r}")
            seen.add(spec.name)
        return self

    def get(self, name: str) -> SyncSpec | None:
        for spec in self.syncs:
            if spec.name == name:
                return spec
        return None
