"""
Keyword classifier for normalized events.

Derives coarse category tags from an event's genre hints, free text and
venue name using the static keyword tables in ``src.schemas.taxonomy``.

Matching is case-insensitive substring containment with no tokenization or
word boundaries. Short keywords therefore produce false positives ("fc"
inside "fcfs", "play" inside "playoffs").

Search surfaces per category:
- music: genre hints only; an event without hints is never filtered out
- sports, comedy, festivals, theater: text blob (name + free text)
- nightlife, family: text blob plus venue name
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from src.schemas.event import NormalizedEvent
from src.schemas.taxonomy import (
    BIG_VENUE_KEYWORDS,
    COMEDY_KEYWORDS,
    FAMILY_KEYWORDS,
    FESTIVAL_KEYWORDS,
    GENRE_KEYWORDS,
    NIGHTLIFE_KEYWORDS,
    SMALL_VENUE_KEYWORDS,
    SPORT_KEYWORDS,
    SPORTS_LEVEL_KEYWORDS,
    THEATER_KEYWORDS,
    CategoryTag,
    SportsLevel,
    SportType,
    VenueSize,
)

TEXT_SEPARATOR = " | "


class TextSurface(str, Enum):
    """Which part of an event a category's keywords are matched against."""

    GENRE_HINTS = "genre_hints"
    TEXT = "text"
    TEXT_WITH_VENUE = "text_with_venue"


# ============================================================================
# TEXT HELPERS
# ============================================================================


def text_blob(event: NormalizedEvent, include_venue: bool = False) -> str:
    """Lowercased name + free text (+ venue name) joined with `` | ``."""
    chunks = [event.name, *event.free_text]
    if include_venue and event.venue_name:
        chunks.append(event.venue_name)
    return TEXT_SEPARATOR.join(c for c in chunks if c).lower()


def genre_text(event: NormalizedEvent) -> str:
    return TEXT_SEPARATOR.join(event.genre_hints).lower()


def contains_any(text: str, keywords: Collection[str]) -> bool:
    return any(kw in text for kw in keywords)


def surface_text(event: NormalizedEvent, surface: TextSurface) -> str:
    if surface is TextSurface.GENRE_HINTS:
        return genre_text(event)
    return text_blob(event, include_venue=surface is TextSurface.TEXT_WITH_VENUE)


# ============================================================================
# VENUE SIZE
# ============================================================================


def venue_size_for_name(venue_name: str | None) -> VenueSize:
    """
    Tri-state venue size from a venue name.

    small: a small-venue keyword and no big-venue keyword
    big:   a big-venue keyword and no small-venue keyword
    mid:   neither, both, or no name at all
    """
    if not venue_name:
        return VenueSize.MID
    name = venue_name.lower()
    has_small = contains_any(name, SMALL_VENUE_KEYWORDS)
    has_big = contains_any(name, BIG_VENUE_KEYWORDS)
    if has_small and not has_big:
        return VenueSize.SMALL
    if has_big and not has_small:
        return VenueSize.BIG
    return VenueSize.MID


def venue_size(event: NormalizedEvent) -> VenueSize:
    return venue_size_for_name(event.venue_name)


def is_small_venue(event: NormalizedEvent) -> bool:
    return venue_size(event) is VenueSize.SMALL


# ============================================================================
# CATEGORY CLASSIFIERS
# ============================================================================


@dataclass(frozen=True)
class KeywordClassifier:
    """
    Sub-tag matcher for one category.

    Attributes:
        category: Category this classifier belongs to
        keywords: Sub-tag -> keyword phrases
        surface: Text the keywords are matched against
        fail_open: Pass events whose search surface is empty
        complement_tag: Sub-tag matching events that match no keyword set
    """

    category: CategoryTag
    keywords: Mapping[Enum, tuple[str, ...]]
    surface: TextSurface = TextSurface.TEXT
    fail_open: bool = False
    complement_tag: Enum | None = None

    def matched_tags(self, event: NormalizedEvent) -> frozenset[Enum]:
        """All sub-tags whose keywords occur in the event's search surface."""
        text = surface_text(event, self.surface)
        matched = {tag for tag, kws in self.keywords.items() if contains_any(text, kws)}
        if self.complement_tag is not None and not matched:
            matched.add(self.complement_tag)
        return frozenset(matched)

    def matches(self, event: NormalizedEvent, selected: Collection[Enum]) -> bool:
        """
        Check an event against the selected sub-tags.

        An empty selection always passes.
        """
        if not selected:
            return True
        if self.fail_open and not surface_text(event, self.surface):
            return True
        return not self.matched_tags(event).isdisjoint(selected)


CLASSIFIERS: Mapping[CategoryTag, KeywordClassifier] = MappingProxyType(
    {
        CategoryTag.MUSIC: KeywordClassifier(
            CategoryTag.MUSIC,
            GENRE_KEYWORDS,
            surface=TextSurface.GENRE_HINTS,
            fail_open=True,
        ),
        CategoryTag.SPORTS: KeywordClassifier(
            CategoryTag.SPORTS,
            SPORT_KEYWORDS,
            complement_tag=SportType.OTHER,
        ),
        CategoryTag.COMEDY: KeywordClassifier(CategoryTag.COMEDY, COMEDY_KEYWORDS),
        CategoryTag.FESTIVALS: KeywordClassifier(
            CategoryTag.FESTIVALS, FESTIVAL_KEYWORDS
        ),
        CategoryTag.THEATER: KeywordClassifier(CategoryTag.THEATER, THEATER_KEYWORDS),
        CategoryTag.NIGHTLIFE: KeywordClassifier(
            CategoryTag.NIGHTLIFE,
            NIGHTLIFE_KEYWORDS,
            surface=TextSurface.TEXT_WITH_VENUE,
        ),
        CategoryTag.FAMILY: KeywordClassifier(
            CategoryTag.FAMILY,
            FAMILY_KEYWORDS,
            surface=TextSurface.TEXT_WITH_VENUE,
        ),
    }
)


def get_classifier(category: CategoryTag | str) -> KeywordClassifier:
    """
    Return the classifier for a category.

    Raises:
        ValueError: If category is not a CategoryTag value
    """
    return CLASSIFIERS[CategoryTag(category)]


def matches_sports_level(event: NormalizedEvent, level: SportsLevel) -> bool:
    """Pro/college level check over the text blob; ANY always passes."""
    if level is SportsLevel.ANY:
        return True
    return contains_any(text_blob(event), SPORTS_LEVEL_KEYWORDS[level])


def sports_levels(event: NormalizedEvent) -> frozenset[SportsLevel]:
    text = text_blob(event)
    return frozenset(
        level for level, kws in SPORTS_LEVEL_KEYWORDS.items() if contains_any(text, kws)
    )


# ============================================================================
# EVENT TAGS
# ============================================================================


@dataclass(frozen=True)
class EventTags:
    """Every tag the classifier derives for one event."""

    venue_size: VenueSize
    sub_tags: Mapping[CategoryTag, frozenset[Enum]] = field(default_factory=dict)
    sports_levels: frozenset[SportsLevel] = frozenset()

    @property
    def categories(self) -> frozenset[CategoryTag]:
        """
        Categories with at least one keyword hit.

        Sports counts only when a named sport matched, since OTHER is the
        complement and would otherwise tag every event.
        """
        hits = set()
        for category, tags in self.sub_tags.items():
            if category is CategoryTag.SPORTS:
                tags = tags - {SportType.OTHER}
            if tags:
                hits.add(category)
        return frozenset(hits)

    def to_dict(self) -> dict[str, object]:
        return {
            "venue_size": self.venue_size.value,
            "categories": sorted(c.value for c in self.categories),
            "sub_tags": {
                category.value: sorted(tag.value for tag in tags)
                for category, tags in self.sub_tags.items()
                if tags
            },
            "sports_levels": sorted(level.value for level in self.sports_levels),
        }


def classify(event: NormalizedEvent) -> EventTags:
    """Derive venue size and per-category sub-tags for an event."""
    return EventTags(
        venue_size=venue_size(event),
        sub_tags={
            category: classifier.matched_tags(event)
            for category, classifier in CLASSIFIERS.items()
        },
        sports_levels=sports_levels(event),
    )
