"""
Filter pipeline over normalized events.

Stages run in a fixed order:
1. exact local date
2. sub-filters of the active category
3. time of day
4. price bucket

Every stage is a pure function ``list -> list``. An empty input is returned
unchanged without evaluating any predicate.

Missing-data policy differs per stage: music genre matching passes events
without genre hints (fail-open) while time-of-day and price buckets reject
events with unknown time or price (fail-closed).
"""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Callable, Sequence

from src.ingestion.normalization.classifier import (
    get_classifier,
    matches_sports_level,
    venue_size,
)
from src.schemas.event import NormalizedEvent
from src.schemas.filters import SearchFilters
from src.schemas.taxonomy import CategoryTag, PriceBucket, TimeOfDay

logger = logging.getLogger(__name__)

Predicate = Callable[[NormalizedEvent], bool]

EVENING_START_HOUR = 18
LATE_NIGHT_START_HOUR = 21


def _keep(events: Sequence[NormalizedEvent], predicate: Predicate) -> list[NormalizedEvent]:
    if not events:
        return list(events)
    return [event for event in events if predicate(event)]


# ============================================================================
# BUCKETS
# ============================================================================


def time_of_day(local_time: dt.time | None) -> TimeOfDay | None:
    """Bucket a local start time; None when the time is unknown."""
    if local_time is None:
        return None
    if local_time.hour < EVENING_START_HOUR:
        return TimeOfDay.AFTERNOON
    if local_time.hour < LATE_NIGHT_START_HOUR:
        return TimeOfDay.EVENING
    return TimeOfDay.LATE_NIGHT


def matches_time_of_day(event: NormalizedEvent, bucket: TimeOfDay) -> bool:
    if bucket is TimeOfDay.ANY:
        return True
    return time_of_day(event.local_time) is bucket


def matches_price(event: NormalizedEvent, bucket: PriceBucket) -> bool:
    """Price bucket check against the minimum price."""
    if bucket is PriceBucket.ANY:
        return True
    price = event.price_min
    if price is None:
        return False
    if bucket is PriceBucket.FREE:
        return price == 0
    if bucket is PriceBucket.UNDER_20:
        return 0 < price <= 20
    if bucket is PriceBucket.UNDER_50:
        return 0 < price <= 50
    raise ValueError(f"Unknown price bucket: {bucket!r}")


# ============================================================================
# STAGES
# ============================================================================


def filter_by_date(
    events: Sequence[NormalizedEvent], day: dt.date | None
) -> list[NormalizedEvent]:
    """Keep events whose local date equals ``day``; no-op when day is None."""
    if day is None:
        return list(events)
    return _keep(events, lambda e: e.local_date == day)


def filter_by_category(
    events: Sequence[NormalizedEvent], filters: SearchFilters
) -> list[NormalizedEvent]:
    """Apply the sub-filters of the active category only."""
    category = filters.category
    classifier = get_classifier(category)
    selected = filters.selected_sub_tags(category)

    out = _keep(events, lambda e: classifier.matches(e, selected))

    if category is CategoryTag.MUSIC and filters.venue_size is not None:
        out = _keep(out, lambda e: venue_size(e) is filters.venue_size)
    elif category is CategoryTag.SPORTS:
        out = _keep(out, lambda e: matches_sports_level(e, filters.sports_level))

    return out


def filter_by_time_of_day(
    events: Sequence[NormalizedEvent], bucket: TimeOfDay
) -> list[NormalizedEvent]:
    if bucket is TimeOfDay.ANY:
        return list(events)
    return _keep(events, lambda e: matches_time_of_day(e, bucket))


def filter_by_price(
    events: Sequence[NormalizedEvent], bucket: PriceBucket
) -> list[NormalizedEvent]:
    if bucket is PriceBucket.ANY:
        return list(events)
    return _keep(events, lambda e: matches_price(e, bucket))


def apply_filters(
    events: Sequence[NormalizedEvent],
    filters: SearchFilters | None = None,
) -> list[NormalizedEvent]:
    """
    Run every filter stage in order.

    Args:
        events: Normalized (and usually deduplicated) events
        filters: User selections; None applies no restriction

    Returns:
        New list of the events that passed every stage
    """
    filters = filters or SearchFilters()

    out = filter_by_date(events, filters.date)
    out = filter_by_category(out, filters)
    out = filter_by_time_of_day(out, filters.time_of_day)
    out = filter_by_price(out, filters.price_bucket)

    logger.debug(
        f"Filters ({filters.category.value}): {len(events)} -> {len(out)} events"
    )
    return out
