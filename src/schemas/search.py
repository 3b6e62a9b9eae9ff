# src/schemas/search.py
"""
Search request passed to source adapters.

A search targets either a city/state pair or a coordinate + radius, with an
optional time window and the active category (used to narrow the provider
query before client-side filtering).
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.schemas.taxonomy import CategoryTag

DEFAULT_RADIUS_MILES = 20.0


class SearchQuery(BaseModel):
    """Where and when to search."""

    model_config = ConfigDict(frozen=True)

    city: str | None = None
    state_code: str | None = None
    lat: float | None = Field(None, ge=-90, le=90)
    lng: float | None = Field(None, ge=-180, le=180)
    radius_miles: float = Field(DEFAULT_RADIUS_MILES, gt=0)
    start: datetime | None = None
    end: datetime | None = None
    category: CategoryTag = CategoryTag.MUSIC

    @model_validator(mode="after")
    def _check_location(self) -> SearchQuery:
        if not self.has_coordinates and not (self.city and self.state_code):
            raise ValueError("Search needs either city and state_code or lat and lng")
        return self

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lng is not None

    @property
    def location_label(self) -> str:
        if self.city and self.state_code:
            return f"{self.city}, {self.state_code}"
        return f"{self.lat:.4f},{self.lng:.4f}"


def as_utc(value: datetime) -> datetime:
    """Convert to UTC; naive datetimes are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
