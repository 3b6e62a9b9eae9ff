# src/schemas/event.py
"""
Event schemas for local event search.

Two families of models live here:

- Raw provider records (Ticketmaster Discovery, Yelp Fusion events). Every
  nested field is optional and a malformed value degrades to the field
  default instead of failing the whole record. Only a payload that is not a
  mapping at all is rejected.
- NormalizedEvent, the canonical immutable record consumed by the
  deduplicator, classifier and filter pipeline.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)

logger = logging.getLogger(__name__)

VENUE_TBA = "Venue TBA"


# ============================================================================
# RAW PROVIDER RECORDS
# ============================================================================


class RawModel(BaseModel):
    """
    Base for provider-shaped records.

    Unknown keys are ignored. A field whose value does not validate falls back
    to its default (None or an empty list).
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("*", mode="wrap")
    @classmethod
    def _degrade_malformed(
        cls,
        value: Any,
        handler: ValidatorFunctionWrapHandler,
        info: ValidationInfo,
    ) -> Any:
        try:
            return handler(value)
        except ValidationError:
            logger.debug(
                f"{cls.__name__}.{info.field_name}: dropping malformed value {value!r}"
            )
            field_info = cls.model_fields[info.field_name]
            return field_info.get_default(call_default_factory=True)


# ----------------------------------------------------------------------------
# Ticketmaster Discovery API
# ----------------------------------------------------------------------------


class NamedRef(RawModel):
    name: str | None = None


class TicketmasterClassification(RawModel):
    segment: NamedRef | None = None
    genre: NamedRef | None = None
    sub_genre: NamedRef | None = Field(None, alias="subGenre")


class TicketmasterStart(RawModel):
    date_time: str | None = Field(None, alias="dateTime")
    local_date: str | None = Field(None, alias="localDate")
    local_time: str | None = Field(None, alias="localTime")


class TicketmasterDates(RawModel):
    start: TicketmasterStart | None = None
    timezone: str | None = None


class TicketmasterImage(RawModel):
    url: str | None = None
    ratio: str | None = None
    width: int | None = None
    height: int | None = None


class TicketmasterPriceRange(RawModel):
    type: str | None = None
    currency: str | None = None
    min: float | None = None
    max: float | None = None


class TicketmasterAddress(RawModel):
    line1: str | None = None


class TicketmasterState(RawModel):
    name: str | None = None
    state_code: str | None = Field(None, alias="stateCode")


class TicketmasterCountry(RawModel):
    name: str | None = None
    country_code: str | None = Field(None, alias="countryCode")


class TicketmasterGeo(RawModel):
    latitude: float | None = None
    longitude: float | None = None


class TicketmasterVenue(RawModel):
    id: str | None = None
    name: str | None = None
    url: str | None = None
    address: TicketmasterAddress | None = None
    city: NamedRef | None = None
    state: TicketmasterState | None = None
    country: TicketmasterCountry | None = None
    postal_code: str | None = Field(None, alias="postalCode")
    location: TicketmasterGeo | None = None
    timezone: str | None = None


class TicketmasterEmbedded(RawModel):
    venues: list[TicketmasterVenue] = Field(default_factory=list)


class TicketmasterEvent(RawModel):
    """Event record as returned under ``_embedded.events`` by Ticketmaster."""

    id: str | None = None
    name: str | None = None
    url: str | None = None
    info: str | None = None
    description: str | None = None
    please_note: str | None = Field(None, alias="pleaseNote")
    dates: TicketmasterDates | None = None
    images: list[TicketmasterImage] = Field(default_factory=list)
    price_ranges: list[TicketmasterPriceRange] = Field(
        default_factory=list, alias="priceRanges"
    )
    classifications: list[TicketmasterClassification] = Field(default_factory=list)
    embedded: TicketmasterEmbedded | None = Field(None, alias="_embedded")

    @property
    def venue(self) -> TicketmasterVenue | None:
        """First embedded venue, if any."""
        if self.embedded and self.embedded.venues:
            return self.embedded.venues[0]
        return None


# ----------------------------------------------------------------------------
# Yelp Fusion events API
# ----------------------------------------------------------------------------


class YelpLocation(RawModel):
    address1: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    zip_code: str | None = None
    display_address: list[str] = Field(default_factory=list)


class YelpEvent(RawModel):
    """Event record as returned under ``events`` by the Yelp events API."""

    id: str | None = None
    name: str | None = None
    description: str | None = None
    time_start: str | None = None
    time_end: str | None = None
    event_site_url: str | None = None
    tickets_url: str | None = None
    image_url: str | None = None
    cost: float | None = None
    cost_max: float | None = None
    is_free: bool | None = None
    category: str | None = None
    business_id: str | None = None
    location: YelpLocation | None = None
    latitude: float | None = None
    longitude: float | None = None


# ============================================================================
# NORMALIZED EVENT
# ============================================================================


class VenueInfo(BaseModel):
    """Venue details. Every field is optional."""

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    address1: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    postal_code: str | None = None
    url: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    timezone: str | None = None

    @property
    def city_state_zip(self) -> str:
        """Return e.g. ``"Austin TX 78701"``, skipping missing parts."""
        return " ".join(p for p in (self.city, self.state, self.postal_code) if p)

    @property
    def full_address(self) -> str:
        return " ".join(p for p in (self.address1, self.city_state_zip) if p)


class NormalizedEvent(BaseModel):
    """
    Canonical event record.

    Instances are immutable; every search produces a fresh batch.

    ``genre_hints`` and ``free_text`` exist for classification only and are
    not meant to be displayed.
    """

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    name: str = ""
    description: str = ""
    start_datetime: datetime | None = None
    local_date: date | None = None
    local_time: time | None = None
    url: str | None = None
    image_url: str | None = None
    venue: VenueInfo | None = None
    price_min: float | None = None
    price_max: float | None = None
    currency: str | None = None
    genre_hints: tuple[str, ...] = ()
    free_text: tuple[str, ...] = ()
    source: str = "ticketmaster"

    @property
    def venue_name(self) -> str | None:
        return self.venue.name if self.venue else None

    @property
    def venue_label(self) -> str:
        """Venue name for display, ``"Venue TBA"`` when unknown."""
        return self.venue_name or VENUE_TBA

    @property
    def is_free(self) -> bool:
        return self.price_min == 0
