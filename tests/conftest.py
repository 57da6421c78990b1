"""Shared test fixtures for the census_provider test suite."""

import copy

import pytest
from unittest.mock import AsyncMock, MagicMock
from typing import Any

# Sample IDs used across tests
SAMPLE_WORKSPACE_ID = "69962"
SAMPLE_SYNC_ID = 123
SAMPLE_SOURCE_CONNECTION_ID = 11
SAMPLE_DESTINATION_CONNECTION_ID = 22


# ============================================================================
# Mock Response Data
# ============================================================================

MOCK_SYNC = {
    "id": SAMPLE_SYNC_ID,
    "workspace_id": SAMPLE_WORKSPACE_ID,
    "label": "Users to Salesforce",
    "status": "Ready",
    "operation": "upsert",
    "paused": False,
    "created_at": "2024-01-15T10:00:00Z",
    "updated_at": "2024-01-15T10:00:00Z",
    "source_attributes": {
        "connection_id": 11.0,
        "object": {"type": "table", "table_name": "users", "table_schema": "public"},
    },
    "destination_attributes": {
        "connection_id": 22.0,
        "object": "Contact",
    },
    "mappings": [
        {
            "from": {"type": "column", "data": "email"},
            "to": "Email",
            "is_primary_identifier": True,
        },
        {
            "from": {"type": "constant_value", "data": {"basic_type": "text", "value": "Terraform Test"}},
            "to": "LeadSource",
            "is_primary_identifier": False,
        },
    ],
    "field_behavior": "specific_properties",
    "field_normalization": "match_source_names",
    "field_order": "mapping_order",
    "mode": {
        "type": "triggered",
        "triggers": {"schedule": {"frequency": "daily", "hour": 6.0, "minute": 30.0}},
    },
    "alert_attributes": [
        {
            "id": 901,
            "type": "FailureAlertConfiguration",
            "send_for": "first_time",
            "should_send_recovery": True,
            "options": {},
        },
    ],
}


def _sync_config(**overrides: Any) -> dict[str, Any]:
    """A valid SyncSpec input dict matching MOCK_SYNC."""
    config: dict[str, Any] = {
        "name": "users_to_salesforce",
        "workspace_id": SAMPLE_WORKSPACE_ID,
        "label": "Users to Salesforce",
        "operation": "upsert",
        "source": {
            "connection_id": SAMPLE_SOURCE_CONNECTION_ID,
            "object": {"type": "table", "table_name": "users", "table_schema": "public"},
        },
        "destination": {
            "connection_id": SAMPLE_DESTINATION_CONNECTION_ID,
            "object": "Contact",
        },
        "field_mappings": [
            {"from": "email", "to": "Email", "is_primary_identifier": True},
            {"to": "LeadSource", "type": "constant", "constant": "Terraform Test"},
        ],
        "run_mode": {
            "type": "triggered",
            "triggers": {"schedule": {"frequency": "daily", "hour": 6, "minute": 30}},
        },
        "alerts": [{"type": "FailureAlertConfiguration"}],
    }
    config.update(overrides)
    return config


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def sync_config():
    return _sync_config


@pytest.fixture
def sync_wire():
    return copy.deepcopy(MOCK_SYNC)


@pytest.fixture
def sync_spec():
    from census_provider.models import SyncSpec
    return SyncSpec.model_validate(_sync_config())


@pytest.fixture
def mock_config():
    from census_provider.api.client import CensusConfig
    return CensusConfig(token="test_token_abc123", base_url="https://census.test/api/v1")


@pytest.fixture
def mock_http_client():
    client = AsyncMock()

    # Default successful response
    response = MagicMock()
    response.status_code = 200
    response.json.return_value = {}
    response.raise_for_status = MagicMock()

    client.get = AsyncMock(return_value=response)
    client.post = AsyncMock(return_value=response)
    client.patch = AsyncMock(return_value=response)
    client.delete = AsyncMock(return_value=response)

    return client


@pytest.fixture
def mock_census_client(mock_config, mock_http_client):
    from census_provider.api.client import CensusClient
    from census_provider.api.syncs import SyncsAPI

    client = CensusClient(mock_config)
    client._client = mock_http_client
    client._syncs = SyncsAPI(client)

    return client


@pytest.fixture
def mock_response():
    def _create_response(data: dict[str, Any], status_code: int = 200):
        response = MagicMock()
        response.status_code = status_code
        response.json.return_value = data
        response.content = b"{}"
        response.raise_for_status = MagicMock()
        if status_code >= 400:
            from httpx import HTTPStatusError
            response.raise_for_status.side_effect = HTTPStatusError(
                f"HTTP {status_code}", request=MagicMock(), response=response
            )
        return response
    return _create_response


@pytest.fixture
def mock_error_response():
    def _create_error(error_type: str):
        from httpx import HTTPStatusError

        error_configs = {
            "not_found": {
                "status_code": 404,
                "data": {"status": "not_found", "message": "Sync not found"},
            },
            "validation": {
                "status_code": 400,
                "data": {"status": "error", "message": "Invalid request data"},
            },
            "unauthorized": {
                "status_code": 401,
                "data": {"status": "error", "message": "Invalid or expired token"},
            },
            "rate_limit": {
                "status_code": 429,
                "data": {"status": "error", "message": "Too many requests"},
            },
            "server_error": {
                "status_code": 500,
                "data": {"status": "error", "message": "An unexpected error occurred"},
            },
        }

        config = error_configs.get(error_type, error_configs["server_error"])
        response = MagicMock()
        response.status_code = config["status_code"]
        response.json.return_value = config["data"]
        response.text = str(config["data"])
        response.raise_for_status = MagicMock(
            side_effect=HTTPStatusError(
                f"HTTP {config['status_code']}",
                request=MagicMock(),
                response=response
            )
        )
        return response
    return _create_error
