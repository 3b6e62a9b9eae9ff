"""
Yelp Fusion events adapter.

Queries ``/v3/events`` by coordinates or free-text location. Yelp expects the
radius in metres (at most 40 km) and the time window as unix seconds.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from src.ingestion.adapters.api_adapter import APIAdapter, APIAdapterConfig
from src.schemas.search import SearchQuery, as_utc
from src.schemas.taxonomy import CategoryTag

EVENTS_URL = "https://api.yelp.com/v3/events"

METRES_PER_MILE = 1609.344
MAX_RADIUS_METRES = 40_000
DEFAULT_LIMIT = 50

CATEGORY_PARAMS: Mapping[CategoryTag, dict[str, str]] = {
    CategoryTag.MUSIC: {"categories": "music"},
    CategoryTag.SPORTS: {"categories": "sports-active-life"},
    CategoryTag.COMEDY: {"categories": "performing-arts"},
    CategoryTag.FESTIVALS: {"categories": "festivals-fairs"},
    CategoryTag.THEATER: {"categories": "performing-arts"},
    CategoryTag.NIGHTLIFE: {"categories": "nightlife"},
    CategoryTag.FAMILY: {"categories": "kids-family"},
}


def radius_in_metres(miles: float) -> int:
    return min(int(miles * METRES_PER_MILE), MAX_RADIUS_METRES)


class YelpAdapter(APIAdapter):
    """Adapter for the Yelp Fusion events endpoint (bearer-token auth)."""

    def __init__(
        self,
        config: APIAdapterConfig,
        limit: int = DEFAULT_LIMIT,
        category_params: Mapping[CategoryTag, dict[str, str]] | None = None,
    ):
        if not config.base_url:
            config.base_url = EVENTS_URL
        # Yelp only accepts the key as a bearer token.
        config.api_key_param = None
        self.limit = limit
        self.category_params = dict(category_params or CATEGORY_PARAMS)
        super().__init__(
            config,
            query_builder=self.build_query,
            response_parser=self.parse_response,
        )

    def _validate_config(self) -> None:
        super()._validate_config()
        if not self.api_config.api_key:
            raise ValueError("Yelp adapter requires an API key")

    def build_query(self, query: SearchQuery) -> dict[str, Any]:
        params: dict[str, Any] = {
            "limit": self.limit,
            "sort_on": "time_start",
            "sort_by": "asc",
        }

        if query.has_coordinates:
            params["latitude"] = query.lat
            params["longitude"] = query.lng
            params["radius"] = radius_in_metres(query.radius_miles)
        else:
            params["location"] = query.location_label

        if query.start is not None:
            params["start_date"] = int(as_utc(query.start).timestamp())
        if query.end is not None:
            params["end_date"] = int(as_utc(query.end).timestamp())

        params.update(self.category_params.get(query.category, {}))
        return params

    def parse_response(self, response: dict) -> list[dict]:
        events = response.get("events")
        if not isinstance(events, list):
            return []
        return [event for event in events if isinstance(event, dict)]

    def _extract_total_available(self, response: dict, data: list) -> int:
        total = response.get("total")
        return total if isinstance(total, int) else len(data)
