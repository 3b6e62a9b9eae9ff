# src/schemas/taxonomy.py
"""
Closed category vocabulary for local event search.

Defines:
- CategoryTag: the coarse event kinds a user can search for
- One sub-tag enum per category (music genre, sport type, ...)
- Venue size, time-of-day and price bucket vocabularies
- The static keyword tables used by the classifier

Keyword phrases are lowercase and matched by plain substring containment.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping


# =============================================================================
# CATEGORIES
# =============================================================================


class CategoryTag(str, Enum):
    """Coarse event categories."""

    MUSIC = "music"
    SPORTS = "sports"
    COMEDY = "comedy"
    FESTIVALS = "festivals"
    THEATER = "theater"
    NIGHTLIFE = "nightlife"
    FAMILY = "family"

    @property
    def label(self) -> str:
        """Human readable label used in result summaries."""
        return CATEGORY_LABELS[self]


CATEGORY_LABELS: Mapping[CategoryTag, str] = MappingProxyType(
    {
        CategoryTag.MUSIC: "live music",
        CategoryTag.SPORTS: "sports",
        CategoryTag.COMEDY: "comedy",
        CategoryTag.FESTIVALS: "festivals",
        CategoryTag.THEATER: "theater",
        CategoryTag.NIGHTLIFE: "nightlife",
        CategoryTag.FAMILY: "family & kids",
    }
)


# =============================================================================
# SUB-TAGS
# =============================================================================


class MusicGenre(str, Enum):
    POP = "pop"
    ROCK = "rock"
    HIPHOP = "hiphop"
    RNB = "rnb"
    COUNTRY = "country"
    EDM = "edm"
    INDIE = "indie"
    JAZZ = "jazz"
    LATIN = "latin"


class SportType(str, Enum):
    """
    Sport sub-tags.

    OTHER has no keywords of its own: it matches events that match none of
    the other sport keyword sets.
    """

    BASKETBALL = "basketball"
    FOOTBALL = "football"
    BASEBALL = "baseball"
    HOCKEY = "hockey"
    SOCCER = "soccer"
    OTHER = "other"


class SportsLevel(str, Enum):
    ANY = "any"
    PRO = "pro"
    COLLEGE = "college"


class ComedyType(str, Enum):
    STANDUP = "standup"
    IMPROV = "improv"
    CLUB = "club"


class FestivalType(str, Enum):
    MUSIC = "music"
    FOOD = "food"
    CULTURAL = "cultural"


class TheaterType(str, Enum):
    MUSICAL = "musical"
    PLAY = "play"
    FAMILY = "family"


class NightlifeType(str, Enum):
    BARS = "bars"
    CLUBS = "clubs"
    LIVE_MUSIC_BARS = "livemusicbars"
    ROOFTOP = "rooftop"
    LATE_NIGHT = "latenight"


class FamilyType(str, Enum):
    FAMILY_SHOWS = "familyshows"
    KIDS_ACTIVITIES = "kidsactivities"
    FAIRS = "fairs"
    SPORTS = "sports"


class VenueSize(str, Enum):
    """Coarse venue size derived from the venue name."""

    SMALL = "small"
    MID = "mid"
    BIG = "big"


class TimeOfDay(str, Enum):
    """Start time buckets, derived from the local start hour."""

    ANY = "any"
    AFTERNOON = "afternoon"  # before 18:00
    EVENING = "evening"  # 18:00 - 20:59
    LATE_NIGHT = "latenight"  # 21:00 onwards


class PriceBucket(str, Enum):
    """Price buckets, evaluated against the minimum price."""

    ANY = "any"
    FREE = "free"
    UNDER_20 = "under20"
    UNDER_50 = "under50"


# Sub-tag enum owned by each category
SUB_TAG_TYPES: Mapping[CategoryTag, type[Enum]] = MappingProxyType(
    {
        CategoryTag.MUSIC: MusicGenre,
        CategoryTag.SPORTS: SportType,
        CategoryTag.COMEDY: ComedyType,
        CategoryTag.FESTIVALS: FestivalType,
        CategoryTag.THEATER: TheaterType,
        CategoryTag.NIGHTLIFE: NightlifeType,
        CategoryTag.FAMILY: FamilyType,
    }
)


# =============================================================================
# KEYWORD TABLES
# =============================================================================

GENRE_KEYWORDS: Mapping[MusicGenre, tuple[str, ...]] = MappingProxyType(
    {
        MusicGenre.POP: ("pop",),
        MusicGenre.ROCK: ("rock",),
        MusicGenre.HIPHOP: ("hip hop", "hip-hop", "rap"),
        MusicGenre.RNB: ("r&b", "rnb", "soul"),
        MusicGenre.COUNTRY: ("country",),
        MusicGenre.EDM: ("edm", "electronic", "dance"),
        MusicGenre.INDIE: ("indie", "alternative", "alt rock", "alt-pop", "alt pop"),
        MusicGenre.JAZZ: ("jazz",),
        MusicGenre.LATIN: ("latin",),
    }
)

SPORT_KEYWORDS: Mapping[SportType, tuple[str, ...]] = MappingProxyType(
    {
        SportType.BASKETBALL: ("basketball", "nba", "wnba", "ncaa", "march madness"),
        SportType.FOOTBALL: ("football", "nfl", "cfb", "ncaa football"),
        SportType.BASEBALL: ("baseball", "mlb"),
        SportType.HOCKEY: ("hockey", "nhl"),
        SportType.SOCCER: ("soccer", "mls", "premier league", "fc"),
    }
)

SPORTS_LEVEL_KEYWORDS: Mapping[SportsLevel, tuple[str, ...]] = MappingProxyType(
    {
        SportsLevel.PRO: ("nba", "nfl", "mlb", "nhl", "mls", "premier league", "fc"),
        SportsLevel.COLLEGE: ("ncaa", "college", "university", "state university"),
    }
)

COMEDY_KEYWORDS: Mapping[ComedyType, tuple[str, ...]] = MappingProxyType(
    {
        ComedyType.STANDUP: ("stand-up", "stand up", "standup"),
        ComedyType.IMPROV: ("improv",),
        ComedyType.CLUB: ("comedy club", "improv theatre", "improv theater"),
    }
)

FESTIVAL_KEYWORDS: Mapping[FestivalType, tuple[str, ...]] = MappingProxyType(
    {
        FestivalType.MUSIC: ("music festival", "fest", "music fest"),
        FestivalType.FOOD: (
            "food festival",
            "wine festival",
            "beer festival",
            "bbq",
            "bbq festival",
            "brew fest",
        ),
        FestivalType.CULTURAL: ("fair", "carnival", "parade", "cultural festival"),
    }
)

THEATER_KEYWORDS: Mapping[TheaterType, tuple[str, ...]] = MappingProxyType(
    {
        TheaterType.MUSICAL: ("musical",),
        TheaterType.PLAY: ("play", "drama"),
        TheaterType.FAMILY: ("family", "kids", "children"),
    }
)

NIGHTLIFE_KEYWORDS: Mapping[NightlifeType, tuple[str, ...]] = MappingProxyType(
    {
        NightlifeType.BARS: ("bar", "pub", "tavern", "saloon", "taproom", "lounge"),
        NightlifeType.CLUBS: ("club", "nightclub", "dj", "discotheque"),
        NightlifeType.LIVE_MUSIC_BARS: (
            "live music",
            "music hall",
            "bar",
            "club",
            "lounge",
        ),
        NightlifeType.ROOFTOP: ("rooftop", "roof", "sky bar"),
        NightlifeType.LATE_NIGHT: ("late night", "after party", "afterparty"),
    }
)

FAMILY_KEYWORDS: Mapping[FamilyType, tuple[str, ...]] = MappingProxyType(
    {
        FamilyType.FAMILY_SHOWS: (
            "family",
            "kids",
            "children",
            "all ages",
            "family-friendly",
            "family friendly",
        ),
        FamilyType.KIDS_ACTIVITIES: (
            "kids",
            "children",
            "family fun",
            "family activity",
            "kid zone",
        ),
        FamilyType.FAIRS: ("fair", "carnival", "festival", "fun day"),
        FamilyType.SPORTS: ("youth", "little league", "family day", "kids day"),
    }
)

# Venue name heuristics shared by the venue size classifier
SMALL_VENUE_KEYWORDS: tuple[str, ...] = (
    "bar",
    "pub",
    "club",
    "lounge",
    "tavern",
    "saloon",
    "grill",
    "taproom",
    "brewing",
    "brewery",
    "cafe",
    "café",
    "music hall",
)

BIG_VENUE_KEYWORDS: tuple[str, ...] = (
    "stadium",
    "arena",
    "center",
    "centre",
    "coliseum",
    "ampitheatre",
    "amphitheatre",
    "amphitheater",
    "ballpark",
    "field",
    "pavilion",
)


def sub_tag_type(category: CategoryTag) -> type[Enum]:
    """
    Return the sub-tag enum for a category.

    Raises:
        ValueError: If category is not a CategoryTag value
    """
    return SUB_TAG_TYPES[CategoryTag(category)]
