"""Unit tests for the Yelp events adapter."""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest

from src.ingestion.adapters.api_adapter import APIAdapterConfig
from src.ingestion.pipelines.apis.yelp import (
    EVENTS_URL,
    MAX_RADIUS_METRES,
    YelpAdapter,
    radius_in_metres,
)
from src.schemas.search import SearchQuery
from src.schemas.taxonomy import CategoryTag


@pytest.fixture
def adapter():
    return YelpAdapter(
        APIAdapterConfig(source_id="yelp", api_key="yelp-key", api_key_param="ignored")
    )


class TestYelpAdapterInit:
    def test_uses_bearer_auth(self, adapter):
        assert adapter.api_config.base_url == EVENTS_URL
        assert adapter.api_config.api_key_param is None
        assert adapter._get_client().headers["authorization"] == "Bearer yelp-key"

    def test_requires_api_key(self):
        with pytest.raises(ValueError, match="API key"):
            YelpAdapter(APIAdapterConfig(source_id="yelp"))


class TestRadius:
    def test_converts_miles(self):
        assert radius_in_metres(10) == 16093

    def test_capped(self):
        assert radius_in_metres(50) == MAX_RADIUS_METRES


class TestBuildQuery:
    def test_coordinate_query(self, adapter):
        start = datetime(2024, 6, 15, tzinfo=timezone.utc)
        query = SearchQuery(
            lat=30.2672,
            lng=-97.7431,
            radius_miles=5,
            start=start,
            end=datetime(2024, 6, 16, tzinfo=timezone.utc),
            category=CategoryTag.NIGHTLIFE,
        )
        params = adapter.build_query(query)

        assert params["latitude"] == 30.2672
        assert params["longitude"] == -97.7431
        assert params["radius"] == 8046
        assert params["start_date"] == int(start.timestamp())
        assert params["end_date"] == params["start_date"] + 86400
        assert params["categories"] == "nightlife"

    def test_city_query_uses_location_text(self, adapter):
        params = adapter.build_query(SearchQuery(city="Austin", state_code="TX"))

        assert params["location"] == "Austin, TX"
        assert "latitude" not in params
        assert params["categories"] == "music"


class TestParseResponse:
    def test_events(self, adapter):
        response = {"events": [{"id": "y1"}, "junk"], "total": 7}
        assert adapter.parse_response(response) == [{"id": "y1"}]
        assert adapter._extract_total_available(response, [{"id": "y1"}]) == 7

    def test_missing_events(self, adapter):
        assert adapter.parse_response({}) == []

    def test_search(self, adapter):
        response = {"events": [{"id": "y1", "name": "Jazz on the Lawn"}], "total": 1}
        with patch.object(adapter, "_make_request", new=AsyncMock(return_value=response)):
            result = asyncio.run(adapter.search(SearchQuery(city="Austin", state_code="TX")))

        assert result.success is True
        assert result.raw_data[0]["id"] == "y1"
