# src/schemas/filters.py
"""
Search filter value object.

SearchFilters carries every user selection into the filter pipeline so the
pipeline itself stays stateless. Unknown categories or sub-tags are caller
bugs and raise a pydantic ValidationError (a ValueError subclass).
"""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from src.schemas.taxonomy import (
    CategoryTag,
    ComedyType,
    FamilyType,
    FestivalType,
    MusicGenre,
    NightlifeType,
    PriceBucket,
    SportsLevel,
    SportType,
    TheaterType,
    TimeOfDay,
    VenueSize,
)


class SearchFilters(BaseModel):
    """
    User selections for one search.

    Multi-select sub-tags are sets; an empty set means "no restriction".
    Single-select fields default to "any" (``venue_size`` uses None for any).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    category: CategoryTag = CategoryTag.MUSIC
    date: dt.date | None = None

    # music
    music_genres: frozenset[MusicGenre] = frozenset()
    venue_size: VenueSize | None = None

    # sports
    sports: frozenset[SportType] = frozenset()
    sports_level: SportsLevel = SportsLevel.ANY

    comedy_types: frozenset[ComedyType] = frozenset()
    festival_types: frozenset[FestivalType] = frozenset()
    theater_types: frozenset[TheaterType] = frozenset()
    nightlife_types: frozenset[NightlifeType] = frozenset()
    family_types: frozenset[FamilyType] = frozenset()

    # cross-category
    time_of_day: TimeOfDay = TimeOfDay.ANY
    price_bucket: PriceBucket = PriceBucket.ANY

    @field_validator("venue_size", mode="before")
    @classmethod
    def _any_venue_size(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip().lower() in ("", "any"):
            return None
        return value

    @field_validator("date", mode="before")
    @classmethod
    def _blank_date(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def selected_sub_tags(self, category: CategoryTag | None = None) -> frozenset[Enum]:
        """Return the multi-select sub-tags chosen for a category."""
        category = CategoryTag(category or self.category)
        return {
            CategoryTag.MUSIC: self.music_genres,
            CategoryTag.SPORTS: self.sports,
            CategoryTag.COMEDY: self.comedy_types,
            CategoryTag.FESTIVALS: self.festival_types,
            CategoryTag.THEATER: self.theater_types,
            CategoryTag.NIGHTLIFE: self.nightlife_types,
            CategoryTag.FAMILY: self.family_types,
        }[category]
