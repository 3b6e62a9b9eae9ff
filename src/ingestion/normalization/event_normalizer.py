"""
Event Normalizer.

Maps provider-shaped raw records into the canonical NormalizedEvent.

All "missing -> None/empty" degradation happens here: a normalizer never
raises on absent or malformed optional fields. Only a payload that is not a
mapping at all is rejected (pydantic ValidationError) so the caller can count
it as a malformed record.

Supported providers:
- ticketmaster: Discovery API ``_embedded.events`` entries
- yelp: Fusion ``/v3/events`` entries
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import ValidationError

from src.schemas.event import (
    NormalizedEvent,
    RawModel,
    TicketmasterEvent,
    TicketmasterPriceRange,
    TicketmasterStart,
    TicketmasterVenue,
    VenueInfo,
    YelpEvent,
)

logger = logging.getLogger(__name__)


# ============================================================================
# PARSING HELPERS
# ============================================================================


def _clean_text(value: str | None) -> str | None:
    """Strip a text value, mapping blank strings to None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def parse_datetime(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp (``Z`` suffix allowed); None if unparseable."""
    value = _clean_text(value)
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Unparseable datetime: {value!r}")
        return None


def parse_date(value: str | None) -> date | None:
    """Parse ``YYYY-MM-DD``; None if unparseable."""
    value = _clean_text(value)
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        logger.debug(f"Unparseable date: {value!r}")
        return None


def parse_time(value: str | None) -> time | None:
    """Parse ``HH:MM[:SS]``; None if unparseable."""
    value = _clean_text(value)
    if not value:
        return None
    try:
        return time.fromisoformat(value)
    except ValueError:
        logger.debug(f"Unparseable time: {value!r}")
        return None


def zone_for(name: str | None) -> ZoneInfo | None:
    """Look up an IANA zone name; None when unknown or blank."""
    name = _clean_text(name)
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.debug(f"Unknown timezone: {name!r}")
        return None


def resolve_start(
    start: TicketmasterStart | None,
    tz: str | None = None,
) -> tuple[datetime | None, date | None, time | None]:
    """
    Resolve start datetime and its local date/time components.

    Precedence for the start datetime:
    1. explicit combined ``dateTime``, converted to ``tz`` when it is aware
       and the zone is known
    2. ``localDate`` + ``localTime`` (midnight when only the date is known)
    3. None

    Provider local fields win for ``local_date``/``local_time``; when absent
    they are derived from the start datetime. The returned datetime always
    falls on ``local_date``: an explicit value on another day (a UTC instant
    with no usable zone) is replaced by the local fields.
    """
    if start is None:
        return None, None, None

    explicit = parse_datetime(start.date_time)
    local_date = parse_date(start.local_date)
    local_time = parse_time(start.local_time)

    if explicit is not None:
        zone = zone_for(tz)
        if zone is not None and explicit.tzinfo is not None:
            explicit = explicit.astimezone(zone)
        if local_date is None or local_date == explicit.date():
            return explicit, explicit.date(), local_time or explicit.time()

    if local_date is not None:
        return datetime.combine(local_date, local_time or time(0, 0)), local_date, local_time

    return None, None, local_time


def ordered_prices(
    low: float | None, high: float | None
) -> tuple[float | None, float | None]:
    """Return (min, max), swapping a reversed pair."""
    if low is not None and high is not None and low > high:
        logger.debug(f"Swapping reversed price range {low} > {high}")
        return high, low
    return low, high


# ============================================================================
# NORMALIZERS
# ============================================================================


@dataclass
class NormalizationBatch:
    """Normalized events plus the count of rejected raw payloads."""

    events: list[NormalizedEvent] = field(default_factory=list)
    malformed_records: int = 0


class EventNormalizer(ABC):
    """
    Abstract base for provider normalizers.

    Subclasses declare the raw model they accept and implement
    ``_normalize`` over a validated raw record.
    """

    source: str = ""
    raw_model: type[RawModel] = RawModel

    def parse(self, raw: Mapping[str, Any] | RawModel) -> RawModel:
        """
        Validate a raw payload into the provider model.

        Raises:
            ValidationError: If the payload is not a mapping
        """
        if isinstance(raw, self.raw_model):
            return raw
        return self.raw_model.model_validate(raw)

    def normalize(self, raw: Mapping[str, Any] | RawModel) -> NormalizedEvent:
        """Normalize a single raw record."""
        return self._normalize(self.parse(raw))

    def normalize_batch(
        self, raw_events: Iterable[Mapping[str, Any] | RawModel]
    ) -> NormalizationBatch:
        """
        Normalize a batch, skipping payloads that are not records at all.

        Returns:
            NormalizationBatch with events in input order
        """
        batch = NormalizationBatch()
        for idx, raw in enumerate(raw_events):
            try:
                batch.events.append(self.normalize(raw))
            except ValidationError as e:
                batch.malformed_records += 1
                logger.warning(
                    f"Skipping malformed {self.source} record {idx}: "
                    f"{e.error_count()} validation error(s)"
                )
        return batch

    @abstractmethod
    def _normalize(self, record: Any) -> NormalizedEvent:
        """Map a validated raw record to a NormalizedEvent."""
        pass


class TicketmasterNormalizer(EventNormalizer):
    """Normalizer for Ticketmaster Discovery API events."""

    source = "ticketmaster"
    raw_model = TicketmasterEvent

    def _normalize(self, record: TicketmasterEvent) -> NormalizedEvent:
        start = record.dates.start if record.dates else None
        tz = record.dates.timezone if record.dates else None
        if not tz and record.venue is not None:
            tz = record.venue.timezone
        start_datetime, local_date, local_time = resolve_start(start, tz)
        price_min, price_max, currency = self._price(record.price_ranges)

        return NormalizedEvent(
            id=_clean_text(record.id),
            name=record.name or "",
            description=_clean_text(record.info)
            or _clean_text(record.please_note)
            or "",
            start_datetime=start_datetime,
            local_date=local_date,
            local_time=local_time,
            url=_clean_text(record.url),
            image_url=next((img.url for img in record.images if img.url), None),
            venue=self._venue(record.venue),
            price_min=price_min,
            price_max=price_max,
            currency=currency,
            genre_hints=self._genre_hints(record),
            free_text=tuple(
                text
                for text in (
                    _clean_text(record.info),
                    _clean_text(record.description),
                    _clean_text(record.please_note),
                )
                if text
            ),
            source=self.source,
        )

    @staticmethod
    def _price(
        price_ranges: list[TicketmasterPriceRange],
    ) -> tuple[float | None, float | None, str | None]:
        if not price_ranges:
            return None, None, None
        first = price_ranges[0]
        low, high = ordered_prices(first.min, first.max)
        return low, high, first.currency

    @staticmethod
    def _genre_hints(record: TicketmasterEvent) -> tuple[str, ...]:
        if not record.classifications:
            return ()
        first = record.classifications[0]
        names = (
            ref.name if ref else None
            for ref in (first.segment, first.genre, first.sub_genre)
        )
        return tuple(
            name.strip().lower() for name in names if name and name.strip()
        )

    @staticmethod
    def _venue(venue: TicketmasterVenue | None) -> VenueInfo | None:
        if venue is None:
            return None
        return VenueInfo(
            name=venue.name,
            address1=venue.address.line1 if venue.address else None,
            city=venue.city.name if venue.city else None,
            state=venue.state.state_code if venue.state else None,
            country=venue.country.country_code if venue.country else None,
            postal_code=venue.postal_code,
            url=venue.url,
            latitude=venue.location.latitude if venue.location else None,
            longitude=venue.location.longitude if venue.location else None,
            timezone=venue.timezone,
        )


class YelpNormalizer(EventNormalizer):
    """Normalizer for Yelp Fusion events."""

    source = "yelp"
    raw_model = YelpEvent

    def _normalize(self, record: YelpEvent) -> NormalizedEvent:
        start_datetime = parse_datetime(record.time_start)

        if record.is_free:
            price_min, price_max = 0.0, record.cost_max
        else:
            price_min, price_max = ordered_prices(record.cost, record.cost_max)

        description = _clean_text(record.description)
        category = _clean_text(record.category)

        return NormalizedEvent(
            id=_clean_text(record.id),
            name=record.name or "",
            description=description or "",
            start_datetime=start_datetime,
            local_date=start_datetime.date() if start_datetime else None,
            local_time=(
                start_datetime.time() if start_datetime else None
            ),
            url=_clean_text(record.event_site_url) or _clean_text(record.tickets_url),
            image_url=_clean_text(record.image_url),
            venue=self._venue(record),
            price_min=price_min,
            price_max=price_max,
            genre_hints=(category.lower(),) if category else (),
            free_text=(description,) if description else (),
            source=self.source,
        )

    @staticmethod
    def _venue(record: YelpEvent) -> VenueInfo | None:
        location = record.location
        if location is None and record.latitude is None and record.longitude is None:
            return None
        return VenueInfo(
            address1=location.address1 if location else None,
            city=location.city if location else None,
            state=location.state if location else None,
            country=location.country if location else None,
            postal_code=location.zip_code if location else None,
            latitude=record.latitude,
            longitude=record.longitude,
        )


# ============================================================================
# REGISTRY
# ============================================================================

_NORMALIZERS: dict[str, EventNormalizer] = {
    TicketmasterNormalizer.source: TicketmasterNormalizer(),
    YelpNormalizer.source: YelpNormalizer(),
}


def get_normalizer(source: str) -> EventNormalizer:
    """
    Return the normalizer for a provider.

    Raises:
        ValueError: If no normalizer is registered for the source
    """
    try:
        return _NORMALIZERS[source]
    except KeyError:
        raise ValueError(
            f"No normalizer for source '{source}'. "
            f"Available: {sorted(_NORMALIZERS)}"
        ) from None


def normalize(
    raw: Mapping[str, Any] | RawModel, source: str = "ticketmaster"
) -> NormalizedEvent:
    """Normalize one raw provider record."""
    return get_normalizer(source).normalize(raw)
