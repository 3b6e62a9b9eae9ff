"""
Shared pytest fixtures for the local events test suite.

Provides factory fixtures for NormalizedEvent objects and raw Ticketmaster
records.
"""

import uuid
from datetime import date, datetime, time, timezone
from typing import Optional

import pytest

from src.schemas.event import NormalizedEvent, VenueInfo


@pytest.fixture
def create_event():
    """
    Return a function that creates NormalizedEvent objects with sensible defaults.

    All defaults can be overridden via keyword arguments. ``venue_name=None``
    produces an event without venue.

    Example:
        event = create_event(name="My Event", venue_name="The Parish")
    """

    def _create_event(
        name: str = "Test Event",
        venue_name: Optional[str] = "Test Venue",
        local_date: Optional[date] = date(2024, 6, 15),
        local_time: Optional[time] = time(20, 0),
        **kwargs,
    ) -> NormalizedEvent:
        start_datetime = None
        if local_date is not None:
            start_datetime = datetime.combine(
                local_date, local_time or time(0, 0), tzinfo=timezone.utc
            )

        defaults = {
            "id": str(uuid.uuid4()),
            "name": name,
            "start_datetime": start_datetime,
            "local_date": local_date,
            "local_time": local_time,
            "venue": VenueInfo(name=venue_name, city="Austin", state="TX")
            if venue_name is not None
            else None,
            "source": "ticketmaster",
        }

        # Merge defaults with provided kwargs
        defaults.update(kwargs)

        return NormalizedEvent(**defaults)

    return _create_event


@pytest.fixture
def sample_event(create_event):
    """Return a single default test event."""
    return create_event()


@pytest.fixture
def sample_events(create_event):
    """
    Return a list of varied test events with different attributes.

    Contains 4 unique events at different venues and times.
    """
    return [
        create_event(
            name="Electronic Night",
            venue_name="Club Alpha",
            local_date=date(2024, 6, 15),
            local_time=time(22, 0),
        ),
        create_event(
            name="Jazz Evening",
            venue_name="Jazz Cafe",
            local_date=date(2024, 6, 16),
            local_time=time(20, 0),
        ),
        create_event(
            name="Rock Concert",
            venue_name="Moody Center",
            local_date=date(2024, 6, 17),
            local_time=time(19, 0),
        ),
        create_event(
            name="Comedy Show",
            venue_name="Cap City Comedy Club",
            local_date=date(2024, 6, 18),
            local_time=time(21, 0),
        ),
    ]


@pytest.fixture
def create_tm_event():
    """
    Return a function that builds raw Ticketmaster Discovery event dicts.

    Example:
        raw = create_tm_event(name="Show", venue_name="Stubb's", price=(25, 60))
    """

    def _create_tm_event(
        event_id: Optional[str] = "tm-1",
        name: str = "Test Show",
        local_date: Optional[str] = "2024-06-15",
        local_time: Optional[str] = "20:00:00",
        date_time: Optional[str] = "2024-06-16T01:00:00Z",
        venue_name: Optional[str] = "Stubb's Waller Creek Amphitheater",
        price: Optional[tuple] = (25.0, 60.0),
        segment: Optional[str] = "Music",
        genre: Optional[str] = "Rock",
        sub_genre: Optional[str] = "Alternative Rock",
        **extra,
    ) -> dict:
        start = {}
        if local_date is not None:
            start["localDate"] = local_date
        if local_time is not None:
            start["localTime"] = local_time
        if date_time is not None:
            start["dateTime"] = date_time

        raw = {
            "id": event_id,
            "name": name,
            "url": f"https://www.ticketmaster.com/event/{event_id}",
            "dates": {"start": start, "timezone": "America/Chicago"},
            "images": [{"url": "https://img.example.com/1.jpg", "ratio": "16_9"}],
        }
        if price is not None:
            raw["priceRanges"] = [
                {"type": "standard", "currency": "USD", "min": price[0], "max": price[1]}
            ]
        classification = {}
        for key, value in (("segment", segment), ("genre", genre), ("subGenre", sub_genre)):
            if value is not None:
                classification[key] = {"name": value}
        if classification:
            raw["classifications"] = [classification]
        if venue_name is not None:
            raw["_embedded"] = {
                "venues": [
                    {
                        "name": venue_name,
                        "address": {"line1": "801 Red River St"},
                        "city": {"name": "Austin"},
                        "state": {"name": "Texas", "stateCode": "TX"},
                        "country": {"countryCode": "US"},
                        "postalCode": "78701",
                        "location": {"latitude": "30.2682", "longitude": "-97.7365"},
                    }
                ]
            }
        raw.update(extra)
        return raw

    return _create_tm_event


@pytest.fixture
def tm_response(create_tm_event):
    """Discovery API response body with two distinct events."""
    return {
        "_embedded": {
            "events": [
                create_tm_event(event_id="tm-1", name="Indie Night"),
                create_tm_event(
                    event_id="tm-2",
                    name="Jazz Brunch",
                    local_time="11:00:00",
                    date_time="2024-06-15T16:00:00Z",
                    venue_name="Elephant Room",
                    genre="Jazz",
                    sub_genre=None,
                    price=(10.0, 15.0),
                ),
            ]
        },
        "page": {"size": 100, "totalElements": 2, "totalPages": 1, "number": 0},
    }
