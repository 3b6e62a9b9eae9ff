"""
Unit tests for the api_adapter module.

Tests for APIAdapterConfig and APIAdapter classes.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from src.ingestion.adapters.api_adapter import (
    APIAdapter,
    APIAdapterConfig,
)
from src.ingestion.adapters.base_adapter import SourceType, UpstreamError

# =============================================================================
# TEST DATA
# =============================================================================


BASE_URL = "https://api.example.com/events"

MOCK_API_RESPONSE = {
    "data": [
        {"id": 1, "name": "Event 1"},
        {"id": 2, "name": "Event 2"},
    ],
    "totalResults": 2,
}


def make_response(status_code=200, json=None, text=None):
    """Build an httpx.Response bound to a GET request."""
    request = httpx.Request("GET", BASE_URL)
    if json is not None:
        return httpx.Response(status_code, json=json, request=request)
    return httpx.Response(status_code, text=text or "", request=request)


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def api_config():
    """Create a basic API adapter config."""
    return APIAdapterConfig(source_id="test_api", base_url=BASE_URL)


@pytest.fixture
def client():
    """Async client double whose get() is an AsyncMock."""
    mock_client = AsyncMock()
    mock_client.get = AsyncMock(return_value=make_response(json=MOCK_API_RESPONSE))
    return mock_client


# =============================================================================
# TEST CLASSES
# =============================================================================


class TestAPIAdapterConfig:
    """Tests for APIAdapterConfig dataclass."""

    def test_default_values(self):
        """No key, no retries, 10s timeout by default."""
        config = APIAdapterConfig(source_id="test", base_url=BASE_URL)
        assert config.api_key is None
        assert config.api_key_param is None
        assert config.headers == {}
        assert config.max_retries == 0
        assert config.request_timeout == 10.0

    def test_source_type_set(self):
        """Should have source_type set to API."""
        config = APIAdapterConfig(source_id="test", base_url=BASE_URL)
        assert config.source_type == SourceType.API


class TestAPIAdapterInit:
    """Tests for APIAdapter initialization."""

    def test_init_with_base_url(self, api_config):
        adapter = APIAdapter(api_config)
        assert adapter.api_config.base_url == BASE_URL
        assert adapter._client is None
        assert adapter.source_id == "test_api"

    def test_validate_config_requires_url(self):
        """Should raise ValueError if no URL provided."""
        config = APIAdapterConfig(source_id="test")
        with pytest.raises(ValueError, match="requires base_url"):
            APIAdapter(config)


class TestAPIAdapterGetClient:
    """Tests for APIAdapter._get_client method."""

    def test_returns_same_client(self, api_config):
        adapter = APIAdapter(api_config)
        client1 = adapter._get_client()
        client2 = adapter._get_client()

        assert isinstance(client1, httpx.AsyncClient)
        assert client1 is client2

    def test_sets_default_headers(self, api_config):
        adapter = APIAdapter(api_config)
        client = adapter._get_client()

        # httpx Headers is case-insensitive
        assert "user-agent" in client.headers
        assert client.headers["accept"] == "application/json"

    def test_sets_bearer_authorization_with_api_key(self):
        config = APIAdapterConfig(source_id="test", base_url=BASE_URL, api_key="test-key")
        client = APIAdapter(config)._get_client()

        assert client.headers["authorization"] == "Bearer test-key"

    def test_no_authorization_header_for_query_param_key(self):
        config = APIAdapterConfig(
            source_id="test", base_url=BASE_URL, api_key="test-key", api_key_param="apikey"
        )
        client = APIAdapter(config)._get_client()

        assert "authorization" not in client.headers


class TestAPIAdapterFetch:
    """Tests for APIAdapter.fetch method."""

    def test_fetch_success(self, api_config):
        adapter = APIAdapter(api_config)
        with patch.object(
            adapter, "_make_request", new=AsyncMock(return_value=MOCK_API_RESPONSE)
        ):
            result = asyncio.run(adapter.fetch())

        assert result.success is True
        assert result.source_type == SourceType.API
        assert len(result.raw_data) == 2
        assert result.total_fetched == 2
        assert result.metadata["total_available"] == 2

    def test_fetch_with_custom_query_builder(self, api_config):
        builder = MagicMock(return_value={"custom": "query"})
        adapter = APIAdapter(api_config, query_builder=builder)

        with patch.object(
            adapter, "_make_request", new=AsyncMock(return_value=MOCK_API_RESPONSE)
        ) as request:
            asyncio.run(adapter.fetch(param1="value1"))

        builder.assert_called_once_with(param1="value1")
        assert request.call_args.args[1:] == (BASE_URL, {"custom": "query"})

    def test_fetch_adds_api_key_param(self):
        config = APIAdapterConfig(
            source_id="test", base_url=BASE_URL, api_key="k", api_key_param="apikey"
        )
        adapter = APIAdapter(config)

        with patch.object(
            adapter, "_make_request", new=AsyncMock(return_value=MOCK_API_RESPONSE)
        ) as request:
            asyncio.run(adapter.fetch(city="Austin"))

        assert request.call_args.args[2] == {"apikey": "k", "city": "Austin"}

    def test_fetch_with_custom_response_parser(self, api_config):
        parser = MagicMock(return_value=[{"parsed": "data"}])
        adapter = APIAdapter(api_config, response_parser=parser)

        with patch.object(
            adapter, "_make_request", new=AsyncMock(return_value={"custom": "response"})
        ):
            result = asyncio.run(adapter.fetch())

        parser.assert_called_once_with({"custom": "response"})
        assert result.raw_data == [{"parsed": "data"}]

    def test_fetch_upstream_error_returns_failed_result(self, api_config):
        """Failures carry errors and status, never partial data."""
        adapter = APIAdapter(api_config)
        error = UpstreamError("test_api request failed", status_code=503, details="busy")

        with patch.object(adapter, "_make_request", new=AsyncMock(side_effect=error)):
            result = asyncio.run(adapter.fetch())

        assert result.success is False
        assert result.raw_data == []
        assert result.status_code == 503
        assert result.metadata["details"] == "busy"
        assert "test_api request failed" in result.errors

    def test_fetch_empty_list_is_success(self, api_config):
        adapter = APIAdapter(api_config)

        with patch.object(adapter, "_make_request", new=AsyncMock(return_value={"data": []})):
            result = asyncio.run(adapter.fetch())

        assert result.success is True
        assert result.total_fetched == 0

    def test_fetch_tracks_timestamps(self, api_config):
        adapter = APIAdapter(api_config)

        with patch.object(
            adapter, "_make_request", new=AsyncMock(return_value=MOCK_API_RESPONSE)
        ):
            result = asyncio.run(adapter.fetch())

        assert result.fetch_started_at <= result.fetch_ended_at
        assert result.duration_seconds >= 0


class TestAPIAdapterMakeRequest:
    """Tests for APIAdapter._make_request method."""

    def test_make_get_request(self, api_config, client):
        adapter = APIAdapter(api_config)

        result = asyncio.run(adapter._make_request(client, BASE_URL, {"param": "value"}))

        client.get.assert_called_once_with(
            BASE_URL, params={"param": "value"}, timeout=10.0
        )
        assert result == MOCK_API_RESPONSE

    def test_no_retry_by_default(self, api_config, client):
        adapter = APIAdapter(api_config)
        client.get = AsyncMock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(UpstreamError) as exc_info:
            asyncio.run(adapter._make_request(client, BASE_URL, {}))

        assert client.get.call_count == 1
        assert exc_info.value.status_code is None

    def test_retry_on_failure(self, client):
        config = APIAdapterConfig(source_id="test", base_url=BASE_URL, max_retries=1)
        adapter = APIAdapter(config)
        client.get = AsyncMock(
            side_effect=[
                httpx.ConnectError("Failed"),
                make_response(json={"data": "success"}),
            ]
        )

        with patch("asyncio.sleep", new=AsyncMock()):
            result = asyncio.run(adapter._make_request(client, BASE_URL, {}))

        assert client.get.call_count == 2
        assert result == {"data": "success"}

    def test_max_retries_exceeded(self, client):
        config = APIAdapterConfig(source_id="test", base_url=BASE_URL, max_retries=2)
        adapter = APIAdapter(config)
        client.get = AsyncMock(side_effect=httpx.ConnectError("Failed"))

        with patch("asyncio.sleep", new=AsyncMock()):
            with pytest.raises(UpstreamError):
                asyncio.run(adapter._make_request(client, BASE_URL, {}))

        assert client.get.call_count == 3  # Initial + 2 retries

    def test_http_status_error_carries_status_and_details(self, api_config, client):
        adapter = APIAdapter(api_config)
        client.get = AsyncMock(return_value=make_response(401, text="Invalid ApiKey"))

        with pytest.raises(UpstreamError) as exc_info:
            asyncio.run(adapter._make_request(client, BASE_URL, {}))

        assert exc_info.value.status_code == 401
        assert exc_info.value.details == "Invalid ApiKey"

    def test_timeout_is_upstream_error(self, api_config, client):
        adapter = APIAdapter(api_config)
        client.get = AsyncMock(side_effect=httpx.ReadTimeout("timed out"))

        with pytest.raises(UpstreamError):
            asyncio.run(adapter._make_request(client, BASE_URL, {}))

    def test_invalid_json(self, api_config, client):
        adapter = APIAdapter(api_config)
        client.get = AsyncMock(return_value=make_response(text="<html>oops</html>"))

        with pytest.raises(UpstreamError, match="invalid JSON"):
            asyncio.run(adapter._make_request(client, BASE_URL, {}))

    def test_non_object_payload(self, api_config, client):
        adapter = APIAdapter(api_config)
        client.get = AsyncMock(return_value=make_response(json=[1, 2]))

        with pytest.raises(UpstreamError, match="expected an object"):
            asyncio.run(adapter._make_request(client, BASE_URL, {}))

    def test_rate_limiting(self, client):
        config = APIAdapterConfig(
            source_id="test", base_url=BASE_URL, rate_limit_per_second=2.0
        )
        adapter = APIAdapter(config)

        with patch("asyncio.sleep", new=AsyncMock()) as mock_sleep:
            asyncio.run(adapter._make_request(client, BASE_URL, {}))

        mock_sleep.assert_called_once_with(0.5)


class TestAPIAdapterDefaultParsers:
    """Tests for APIAdapter default query builder and response parser."""

    def test_default_query_builder_drops_none(self, api_config):
        adapter = APIAdapter(api_config)
        result = adapter._default_query_builder(key1="val1", key2=None)

        assert result == {"key1": "val1"}

    def test_default_response_parser_with_data_list(self, api_config):
        adapter = APIAdapter(api_config)
        result = adapter._default_response_parser({"data": [{"id": 1}, {"id": 2}]})

        assert result == [{"id": 1}, {"id": 2}]

    def test_default_response_parser_with_data_object(self, api_config):
        adapter = APIAdapter(api_config)
        result = adapter._default_response_parser({"data": {"id": 1}})

        assert result == [{"id": 1}]


class TestAPIAdapterClose:
    """Tests for APIAdapter.close method."""

    def test_close_client(self, api_config):
        adapter = APIAdapter(api_config)
        mock_client = AsyncMock()
        adapter._client = mock_client

        asyncio.run(adapter.close())

        mock_client.aclose.assert_called_once()
        assert adapter._client is None

    def test_async_context_manager_closes(self, api_config):
        adapter = APIAdapter(api_config)
        mock_client = AsyncMock()
        adapter._client = mock_client

        async def run():
            async with adapter:
                pass

        asyncio.run(run())
        mock_client.aclose.assert_called_once()
