"""
Module for event deduplication strategies.

Provides deduplication strategies using the Strategy pattern:
- IdentityDeduplicator: provider id, falling back to name + date + venue
- CompositeKeyDeduplicator: always name + date + venue, ignoring provider
  ids (useful when merging batches from different providers)

All strategies keep the first occurrence and preserve input order, and are
idempotent: deduplicating an already unique list returns it unchanged.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Hashable, Iterable
from enum import Enum

from src.schemas.event import NormalizedEvent

# ASCII unit separator; does not occur in names, dates or venue names
KEY_DELIMITER = "\x1f"


class DeduplicationStrategy(str, Enum):
    """Available deduplication strategies."""

    IDENTITY = "identity"
    COMPOSITE_KEY = "composite_key"


def composite_key(event: NormalizedEvent) -> str:
    """Name, local date and venue name joined by KEY_DELIMITER."""
    name = (event.name or "").strip()
    day = event.local_date.isoformat() if event.local_date else ""
    venue_name = (event.venue_name or "").strip()
    return KEY_DELIMITER.join((name, day, venue_name))


def identity_key(event: NormalizedEvent) -> str:
    """Provider id when present and non-empty, else the composite key."""
    if event.id and event.id.strip():
        return event.id
    return composite_key(event)


class EventDeduplicator(ABC):
    """Abstract base for deduplication strategies."""

    @abstractmethod
    def key(self, event: NormalizedEvent) -> Hashable:
        """Identity key; events sharing a key are duplicates."""
        pass

    def deduplicate(self, events: Iterable[NormalizedEvent]) -> list[NormalizedEvent]:
        """
        Drop repeated events.

        Returns:
            List of unique events (first occurrence kept, order preserved)
        """
        seen: set[Hashable] = set()
        unique_events = []

        for event in events:
            key = self.key(event)
            if key not in seen:
                seen.add(key)
                unique_events.append(event)

        return unique_events


class IdentityDeduplicator(EventDeduplicator):
    """Match by provider id, or by name + date + venue when the id is missing."""

    def key(self, event: NormalizedEvent) -> Hashable:
        return identity_key(event)


class CompositeKeyDeduplicator(EventDeduplicator):
    """Match by name + date + venue only."""

    def key(self, event: NormalizedEvent) -> Hashable:
        return composite_key(event)


def get_deduplicator(
    strategy: DeduplicationStrategy = DeduplicationStrategy.IDENTITY,
) -> EventDeduplicator:
    """
    Create a deduplicator instance for the given strategy.

    Args:
        strategy: DeduplicationStrategy enum value

    Returns:
        Configured EventDeduplicator instance
    """
    if strategy == DeduplicationStrategy.COMPOSITE_KEY:
        return CompositeKeyDeduplicator()
    return IdentityDeduplicator()


def dedupe(events: Iterable[NormalizedEvent]) -> list[NormalizedEvent]:
    """Deduplicate with the default identity strategy."""
    return IdentityDeduplicator().deduplicate(events)
