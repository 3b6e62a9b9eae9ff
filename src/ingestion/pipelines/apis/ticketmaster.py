"""
Ticketmaster Discovery API adapter.

Builds Discovery ``/events.json`` queries from a SearchQuery and extracts the
raw event records from ``_embedded.events``. Also serves location suggestions
from the venues endpoint.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from src.ingestion.adapters.api_adapter import APIAdapter, APIAdapterConfig
from src.ingestion.adapters.base_adapter import UpstreamError
from src.schemas.search import SearchQuery, as_utc
from src.schemas.taxonomy import CategoryTag

EVENTS_URL = "https://app.ticketmaster.com/discovery/v2/events.json"
VENUES_URL = "https://app.ticketmaster.com/discovery/v2/venues.json"

DEFAULT_PAGE_SIZE = 100
DEFAULT_SORT = "date,asc"
DEFAULT_COUNTRY_CODE = "US"

SUGGESTION_PAGE_SIZE = 20
SUGGESTION_LIMIT = 10
MIN_SUGGESTION_QUERY_LENGTH = 2

# Server-side narrowing per category; the client-side filters still run.
CATEGORY_PARAMS: Mapping[CategoryTag, dict[str, str]] = {
    CategoryTag.MUSIC: {"segmentName": "Music"},
    CategoryTag.SPORTS: {"segmentName": "Sports"},
    CategoryTag.COMEDY: {"segmentName": "Arts & Theatre", "keyword": "comedy"},
    CategoryTag.FESTIVALS: {"keyword": "festival"},
    CategoryTag.THEATER: {"segmentName": "Arts & Theatre"},
    CategoryTag.NIGHTLIFE: {"segmentName": "Music"},
    CategoryTag.FAMILY: {},
}

# Coordinate searches narrow music by classification name instead of segment.
COORDINATE_CATEGORY_PARAMS: Mapping[CategoryTag, dict[str, str]] = {
    CategoryTag.MUSIC: {"classificationName": "Music"},
}


def format_datetime(value: datetime) -> str:
    """Discovery API datetime format: UTC, second precision, ``Z`` suffix."""
    return as_utc(value).strftime("%Y-%m-%dT%H:%M:%SZ")


class TicketmasterAdapter(APIAdapter):
    """Adapter for the Ticketmaster Discovery API."""

    def __init__(
        self,
        config: APIAdapterConfig,
        venues_url: str = VENUES_URL,
        page_size: int = DEFAULT_PAGE_SIZE,
        sort: str = DEFAULT_SORT,
        country_code: str = DEFAULT_COUNTRY_CODE,
        category_params: Mapping[CategoryTag, dict[str, str]] | None = None,
        coordinate_category_params: Mapping[CategoryTag, dict[str, str]] | None = None,
    ):
        if not config.base_url:
            config.base_url = EVENTS_URL
        if not config.api_key_param:
            config.api_key_param = "apikey"
        self.venues_url = venues_url
        self.page_size = page_size
        self.sort = sort
        self.country_code = country_code
        self.category_params = dict(category_params or CATEGORY_PARAMS)
        self.coordinate_category_params = dict(
            COORDINATE_CATEGORY_PARAMS
            if coordinate_category_params is None
            else coordinate_category_params
        )
        super().__init__(
            config,
            query_builder=self.build_query,
            response_parser=self.parse_response,
        )

    def _validate_config(self) -> None:
        super()._validate_config()
        if not self.api_config.api_key:
            raise ValueError("Ticketmaster adapter requires an API key")

    # ========================================================================
    # QUERY / RESPONSE
    # ========================================================================

    def build_query(self, query: SearchQuery) -> dict[str, Any]:
        """
        Build Discovery API query parameters.

        Coordinates take precedence over city/state when both are present.
        Coordinate searches use ``coordinate_category_params`` for the
        categories it covers.
        """
        params: dict[str, Any] = {
            "size": self.page_size,
            "sort": self.sort,
        }

        if query.has_coordinates:
            params["latlong"] = f"{query.lat},{query.lng}"
            params["radius"] = f"{query.radius_miles:g}"
            params["unit"] = "miles"
        else:
            params["city"] = query.city
            params["stateCode"] = query.state_code
            params["countryCode"] = self.country_code

        if query.start is not None:
            params["startDateTime"] = format_datetime(query.start)
        if query.end is not None:
            params["endDateTime"] = format_datetime(query.end)

        category_params = self.category_params
        if query.has_coordinates and query.category in self.coordinate_category_params:
            category_params = self.coordinate_category_params
        params.update(category_params.get(query.category, {}))
        return params

    def parse_response(self, response: dict) -> list[dict]:
        """Extract event records; a response without ``_embedded`` has none."""
        embedded = response.get("_embedded")
        if not isinstance(embedded, dict):
            return []
        events = embedded.get("events")
        if not isinstance(events, list):
            return []
        return [event for event in events if isinstance(event, dict)]

    def _extract_total_available(self, response: dict, data: list) -> int:
        page = response.get("page")
        if isinstance(page, dict) and isinstance(page.get("totalElements"), int):
            return page["totalElements"]
        return len(data)

    # ========================================================================
    # PUBLIC API
    # ========================================================================

    async def suggest_locations(self, text: str, limit: int = SUGGESTION_LIMIT) -> list[str]:
        """
        Suggest "City, ST" labels for a partial location string.

        Args:
            text: What the user has typed so far
            limit: Maximum number of labels returned

        Returns:
            Distinct labels in provider order; empty for short input or when
            the venues endpoint fails
        """
        keyword = text.strip()
        if len(keyword) < MIN_SUGGESTION_QUERY_LENGTH:
            return []

        params = {
            self.api_config.api_key_param: self.api_config.api_key,
            "keyword": keyword,
            "countryCode": self.country_code,
            "size": SUGGESTION_PAGE_SIZE,
        }
        try:
            response = await self._make_request(self._get_client(), self.venues_url, params)
        except UpstreamError as e:
            self.logger.warning(f"Location suggestions failed for '{keyword}': {e}")
            return []

        embedded = response.get("_embedded")
        venues = embedded.get("venues") if isinstance(embedded, dict) else None
        if not isinstance(venues, list):
            return []

        labels: list[str] = []
        for venue in venues:
            label = _venue_label(venue)
            if label and label not in labels:
                labels.append(label)
            if len(labels) >= limit:
                break
        return labels


def _venue_label(venue: Any) -> str | None:
    if not isinstance(venue, dict):
        return None
    city = venue.get("city")
    state = venue.get("state")
    city = city.get("name") if isinstance(city, dict) else None
    state = state.get("stateCode") if isinstance(state, dict) else None
    if not isinstance(city, str) or not isinstance(state, str) or not city or not state:
        return None
    return f"{city}, {state}"
