"""Tests for API error handling."""

import pytest
from unittest.mock import AsyncMock
from httpx import HTTPStatusError

from census_provider.api.client import is_not_found


class TestSyncsErrorHandling:
    """HTTP failures propagate as HTTPStatusError, except 404 on read."""

    @pytest.mark.asyncio
    async def test_get_server_error(self, mock_census_client, mock_error_response):
        """Test 500 error raises appropriate exception."""
        mock_census_client._client.get = AsyncMock(
            return_value=mock_error_response("server_error")
        )

        with pytest.raises(HTTPStatusError) as exc_info:
            await mock_census_client.syncs.get(123)

        assert exc_info.value.response.status_code == 500

    @pytest.mark.asyncio
    async def test_get_unauthorized(self, mock_census_client, mock_error_response):
        """Test 401 error handling."""
        mock_census_client._client.get = AsyncMock(
            return_value=mock_error_response("unauthorized")
        )

        with pytest.raises(HTTPStatusError) as exc_info:
            await mock_census_client.syncs.get(123)

        assert exc_info.value.response.status_code == 401

    @pytest.mark.asyncio
    async def test_create_validation_error(self, mock_census_client, mock_error_response):
        """Test 400 error for invalid payload."""
        mock_census_client._client.post = AsyncMock(
            return_value=mock_error_response("validation")
        )

        with pytest.raises(HTTPStatusError) as exc_info:
            await mock_census_client.syncs.create({"operation": "upsert"})

        assert exc_info.value.response.status_code == 400

    @pytest.mark.asyncio
    async def test_update_not_found(self, mock_census_client, mock_error_response):
        """Test 404 on update is not swallowed."""
        mock_census_client._client.patch = AsyncMock(
            return_value=mock_error_response("not_found")
        )

        with pytest.raises(HTTPStatusError) as exc_info:
            await mock_census_client.syncs.update(999, {})

        assert is_not_found(exc_info.value)

    @pytest.mark.asyncio
    async def test_trigger_rate_limit(self, mock_census_client, mock_error_response):
        """Test 429 rate limit handling."""
        mock_census_client._client.post = AsyncMock(
            return_value=mock_error_response("rate_limit")
        )

        with pytest.raises(HTTPStatusError) as exc_info:
            await mock_census_client.syncs.trigger(123)

        assert exc_info.value.response.status_code == 429

    @pytest.mark.asyncio
    async def test_delete_not_found(self, mock_census_client, mock_error_response):
        """Test 404 error when deleting a missing sync."""
        mock_census_client._client.delete = AsyncMock(
            return_value=mock_error_response("not_found")
        )

        with pytest.raises(HTTPStatusError):
            await mock_census_client.syncs.delete(999)

    def test_is_not_found_ignores_other_errors(self):
        assert not is_not_found(ValueError("boom"))
