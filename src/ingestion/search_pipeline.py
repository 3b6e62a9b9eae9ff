"""
Event Search Pipeline.

Runs one user search end to end:

    SourceAdapter.search → EventNormalizer → Deduplicator → apply_filters

Each call to ``search`` takes a new generation number. A search that finishes
after a newer one has started is reported as ``superseded`` with no events,
so callers never render results for a query the user has already replaced.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from src.configs.logging import with_context
from src.ingestion.adapters import BaseSourceAdapter
from src.ingestion.deduplication import (
    DeduplicationStrategy,
    EventDeduplicator,
    get_deduplicator,
)
from src.ingestion.filters import apply_filters
from src.ingestion.normalization.classifier import classify
from src.ingestion.normalization.event_normalizer import EventNormalizer, get_normalizer
from src.schemas.event import NormalizedEvent
from src.schemas.filters import SearchFilters
from src.schemas.search import SearchQuery

logger = logging.getLogger(__name__)

# Used for keyword matching only, never shown to users
CLASSIFICATION_FIELDS = frozenset({"genre_hints", "free_text"})


def event_payload(event: NormalizedEvent) -> dict[str, Any]:
    """
    JSON-ready view of an event for display.

    Adds the venue label ("Venue TBA" without venue), the one-line address
    and the classifier tags; drops the classification-only fields.
    """
    payload = event.model_dump(mode="json", exclude=set(CLASSIFICATION_FIELDS))
    payload["venue_label"] = event.venue_label
    payload["address"] = event.venue.full_address if event.venue else ""
    payload["is_free"] = event.is_free
    payload["tags"] = classify(event).to_dict()
    return payload


class SearchStatus(str, Enum):
    """Outcome of a search."""

    SUCCESS = "success"
    NO_EVENTS = "no_events"
    NO_MATCHES = "no_matches"
    FAILED = "failed"
    SUPERSEDED = "superseded"


@dataclass
class SearchResult:
    """Result of one search, including the counts behind each stage."""

    status: SearchStatus
    search_id: int
    source_id: str
    query: SearchQuery
    filters: SearchFilters
    started_at: datetime
    ended_at: datetime
    events: list[NormalizedEvent] = field(default_factory=list)
    total_fetched: int = 0
    total_unique: int = 0
    malformed_records: int = 0
    errors: list[str] = field(default_factory=list)
    status_code: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_seconds(self) -> float:
        """Calculate search duration."""
        return (self.ended_at - self.started_at).total_seconds()

    @property
    def message(self) -> str:
        """Short status line for the user."""
        label = self.filters.category.label
        if self.status is SearchStatus.SUCCESS:
            return f"Found {len(self.events)} {label} event(s)."
        if self.status is SearchStatus.NO_EVENTS:
            return "No events found. Try another city."
        if self.status is SearchStatus.NO_MATCHES:
            if self.filters.date is not None:
                return (
                    "No events match those filters on that date. "
                    "Try adjusting your filters or clearing the date."
                )
            return "No events match those filters. Try adjusting your filters."
        if self.status is SearchStatus.SUPERSEDED:
            return "Search replaced by a newer one."
        return "We couldn't load events right now. Please try again in a moment."

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "message": self.message,
            "search_id": self.search_id,
            "source": self.source_id,
            "location": self.query.location_label,
            "category": self.filters.category.value,
            "total_fetched": self.total_fetched,
            "total_unique": self.total_unique,
            "malformed_records": self.malformed_records,
            "events": [event_payload(event) for event in self.events],
            "errors": list(self.errors),
        }


class EventSearchPipeline:
    """
    Fetch → normalize → dedupe → filter for a single source adapter.

    The pipeline holds no per-search state apart from the generation
    counter; filters travel with each call. Callers that share one pipeline
    across overlapping searches (a UI session, a notebook) get only the
    newest result; older ones come back SUPERSEDED. The HTTP handlers build a
    pipeline per request, so requests never supersede each other.
    """

    def __init__(
        self,
        adapter: BaseSourceAdapter,
        normalizer: EventNormalizer | None = None,
        deduplicator: EventDeduplicator | None = None,
    ):
        """
        Initialize the pipeline.

        Args:
            adapter: Source adapter used for fetching
            normalizer: Normalizer for the adapter's records; defaults to the
                one registered for ``adapter.source_id``
            deduplicator: Defaults to the identity deduplicator
        """
        self.adapter = adapter
        self.normalizer = normalizer or get_normalizer(adapter.source_id)
        self.deduplicator = deduplicator or get_deduplicator(
            DeduplicationStrategy.IDENTITY
        )
        self._generation = 0

    @property
    def source_id(self) -> str:
        return self.adapter.source_id

    @property
    def current_search_id(self) -> int:
        """Generation number of the most recently started search."""
        return self._generation

    def _begin(self) -> int:
        self._generation += 1
        return self._generation

    def is_current(self, search_id: int) -> bool:
        return search_id == self._generation

    # ========================================================================
    # SEARCH
    # ========================================================================

    async def search(
        self,
        query: SearchQuery,
        filters: SearchFilters | None = None,
    ) -> SearchResult:
        """
        Run a search.

        Args:
            query: Location, time window and category sent to the provider
            filters: Client-side selections; the category defaults to the
                query's category

        Returns:
            SearchResult; provider failures are reported through the status,
            never raised
        """
        filters = filters or SearchFilters(category=query.category)
        search_id = self._begin()
        started_at = datetime.now(UTC)
        log = with_context(logger, search_id=search_id, source_id=self.source_id)

        def result(status: SearchStatus, **kwargs) -> SearchResult:
            return SearchResult(
                status=status,
                search_id=search_id,
                source_id=self.source_id,
                query=query,
                filters=filters,
                started_at=started_at,
                ended_at=datetime.now(UTC),
                **kwargs,
            )

        log.info(
            f"Starting search for {query.category.value} near {query.location_label}",
            extra={"stage": "fetch"},
        )
        fetch_result = await self.adapter.search(query)

        if not self.is_current(search_id):
            log.info(
                f"Discarding results; search {self.current_search_id} is newer",
                extra={"stage": "fetch"},
            )
            return result(SearchStatus.SUPERSEDED)

        if not fetch_result.success:
            log.error(f"Fetch failed: {fetch_result.errors}", extra={"stage": "fetch"})
            return result(
                SearchStatus.FAILED,
                errors=list(fetch_result.errors),
                status_code=fetch_result.status_code,
                metadata=dict(fetch_result.metadata),
            )

        log.info(
            f"Fetched {fetch_result.total_fetched} raw events "
            f"in {fetch_result.duration_seconds:.2f}s",
            extra={"stage": "fetch"},
        )

        batch = self.normalizer.normalize_batch(fetch_result.raw_data)
        if batch.malformed_records:
            log.warning(
                f"Skipped {batch.malformed_records} malformed record(s)",
                extra={"stage": "normalize"},
            )

        unique = self.deduplicator.deduplicate(batch.events)
        log.info(
            f"Deduplication: {len(batch.events)} -> {len(unique)} events",
            extra={"stage": "dedupe"},
        )

        counts = {
            "total_fetched": fetch_result.total_fetched,
            "total_unique": len(unique),
            "malformed_records": batch.malformed_records,
            "metadata": dict(fetch_result.metadata),
        }

        if not unique:
            return result(SearchStatus.NO_EVENTS, **counts)

        filtered = apply_filters(unique, filters)
        log.info(
            f"Filters kept {len(filtered)}/{len(unique)} events",
            extra={"stage": "filter"},
        )

        status = SearchStatus.SUCCESS if filtered else SearchStatus.NO_MATCHES
        return result(status, events=filtered, **counts)

    async def close(self) -> None:
        await self.adapter.close()
