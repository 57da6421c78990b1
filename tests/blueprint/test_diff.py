"""Tests for sync drift detection and plan rendering."""

from __future__ import annotations

from io import StringIO

from rich.console import Console

from census_provider.blueprint.diff import diff_sync, render_plan
from census_provider.blueprint.engine import PlanAction, PlanResult
from census_provider.codec.sync import decode_sync
from census_provider.models import SyncSpec


def test_no_drift_after_read(sync_spec, sync_wire):
    live, _ = decode_sync(sync_wire, prior=sync_spec)
    assert diff_sync(sync_spec, live) == []


def test_server_defaults_are_not_drift(sync_spec, sync_wire):
    # Import-style decode adopts server defaults the blueprint never set.
    live, _ = decode_sync(sync_wire, workspace_id="69962")
    live.name = sync_spec.name
    assert live.field_behavior == "specific_properties"
    assert diff_sync(sync_spec, live) == []


def test_label_and_paused_drift(sync_spec):
    live = sync_spec.model_copy(update={"label": "Old label", "paused": True})
    drift = diff_sync(sync_spec, live)
    assert "label: 'Old label' -> 'Users to Salesforce'" in drift
    assert "paused: True -> False" in drift


def test_configured_setting_drift(sync_config):
    desired = SyncSpec.model_validate(sync_config(field_order="alphabetical_column_name"))
    live = desired.model_copy(update={"field_order": "mapping_order"})
    assert diff_sync(desired, live) == [
        "field_order: 'mapping_order' -> 'alphabetical_column_name'"
    ]


def test_mapping_drift_names_index_and_destination(sync_config):
    desired = SyncSpec.model_validate(sync_config())
    live = SyncSpec.model_validate(sync_config(field_mappings=[
        {"from": "email", "to": "Email", "is_primary_identifier": True},
        {"to": "LeadSource", "type": "constant", "constant": "Old"},
    ]))
    assert diff_sync(desired, live) == [
        "field_mapping[1] (LeadSource): constant: 'Old' -> 'Terraform Test'"
    ]


def test_mapping_type_change(sync_config):
    desired = SyncSpec.model_validate(sync_config())
    live = SyncSpec.model_validate(sync_config(field_mappings=[
        {"from": "email", "to": "Email", "is_primary_identifier": True},
        {"from": "source", "to": "LeadSource"},
    ]))
    assert diff_sync(desired, live) == ["field_mapping[1] (LeadSource): type: direct -> constant"]


def test_unset_sync_null_values_is_not_drift(sync_config):
    desired = SyncSpec.model_validate(sync_config())
    live = SyncSpec.model_validate(sync_config(field_mappings=[
        {"from": "email", "to": "Email", "is_primary_identifier": True, "sync_null_values": True},
        {"to": "LeadSource", "type": "constant", "constant": "Terraform Test"},
    ]))
    assert diff_sync(desired, live) == []


def test_explicit_sync_null_values_is_compared(sync_config):
    desired = SyncSpec.model_validate(sync_config(field_mappings=[
        {"from": "email", "to": "Email", "is_primary_identifier": True, "sync_null_values": False},
    ]))
    live = SyncSpec.model_validate(sync_config(field_mappings=[
        {"from": "email", "to": "Email", "is_primary_identifier": True, "sync_null_values": True},
    ]))
    assert diff_sync(desired, live) == ["field_mapping[0] (Email): sync_null_values: True -> False"]


def test_mapping_count_change(sync_config):
    desired = SyncSpec.model_validate(sync_config())
    live = SyncSpec.model_validate(sync_config(field_mappings=[
        {"from": "email", "to": "Email", "is_primary_identifier": True},
    ]))
    assert diff_sync(desired, live) == [
        "field_mappings: 1 -> 2 entries",
        "field_mapping[1] (LeadSource): not present in Census",
    ]


def test_mapping_only_in_census_is_drift(sync_config):
    desired = SyncSpec.model_validate(sync_config(field_mappings=[
        {"from": "email", "to": "Email", "is_primary_identifier": True},
    ]))
    live = SyncSpec.model_validate(sync_config())
    assert diff_sync(desired, live) == [
        "field_mappings: 2 -> 1 entries",
        "field_mapping (LeadSource): not in blueprint",
    ]


def test_reordered_mappings_are_not_drift(sync_spec, sync_wire):
    sync_wire["mappings"].reverse()
    live, _ = decode_sync(sync_wire, prior=sync_spec)
    assert [m.to for m in live.field_mappings] == ["LeadSource", "Email"]
    assert diff_sync(sync_spec, live) == []


def test_reordered_mappings_still_report_content_drift(sync_config):
    desired = SyncSpec.model_validate(sync_config())
    live = SyncSpec.model_validate(sync_config(field_mappings=[
        {"to": "LeadSource", "type": "constant", "constant": "Old"},
        {"from": "email", "to": "Email", "is_primary_identifier": True},
    ]))
    assert diff_sync(desired, live) == [
        "field_mapping[1] (LeadSource): constant: 'Old' -> 'Terraform Test'"
    ]


def test_advanced_configuration_compared_semantically(sync_config):
    desired = SyncSpec.model_validate(sync_config(advanced_configuration={"a": 1, "b": {"c": 2}}))
    same = desired.model_copy(update={"advanced_configuration": {"b": {"c": 2}, "a": 1}})
    changed = desired.model_copy(update={"advanced_configuration": {"a": 2, "b": {"c": 2}}})
    assert diff_sync(desired, same) == []
    assert diff_sync(desired, changed) == ["advanced_configuration changed"]


def test_alerts_compared_as_set(sync_config):
    alerts = [
        {"type": "FailureAlertConfiguration"},
        {"type": "InvalidRecordPercentAlertConfiguration", "options": {"threshold": "50"}},
    ]
    desired = SyncSpec.model_validate(sync_config(alerts=alerts))
    reordered = SyncSpec.model_validate(sync_config(alerts=list(reversed(alerts))))
    fewer = SyncSpec.model_validate(sync_config(alerts=alerts[:1]))
    assert diff_sync(desired, reordered) == []
    assert diff_sync(desired, fewer) == ["alerts: 1 -> 2 configured"]


def test_source_drift(sync_config):
    desired = SyncSpec.model_validate(sync_config())
    live = SyncSpec.model_validate(sync_config(source={
        "connection_id": 11,
        "object": {"type": "model", "id": "3"},
    }))
    drift = diff_sync(desired, live)
    assert len(drift) == 1
    assert drift[0].startswith("source: ")


def test_render_plan():
    plan = PlanResult(
        actions=[
            PlanAction(name="new_sync", action="CREATE", details="upsert table:users -> Contact"),
            PlanAction(name="changed_sync", action="UPDATE", details="label: 'a' -> 'b'", sync_id=7),
            PlanAction(name="same_sync", action="OK", sync_id=8),
            PlanAction(name="broken_sync", action="ERROR", details="field_mapping[0]: to: Field required"),
        ],
        created=1,
        updated=1,
        skipped=1,
        errors=["sync/broken_sync: field_mapping[0]: to: Field required"],
    )
    buffer = StringIO()
    render_plan(plan, Console(file=buffer, width=200, color_system=None))
    output = buffer.getvalue()

    assert "Census Sync Plan" in output
    assert "+ new_sync" in output
    assert "~ changed_sync [7]" in output
    assert "= same_sync" in output
    assert "! broken_sync" in output
    assert "1 to create" in output
    assert "1 errors" in output
