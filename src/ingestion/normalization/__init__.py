"""
Normalization module for event data.

This package provides:
- EventNormalizer implementations for each provider
- Keyword classification of categories, sub-tags and venue size
- Parsing of user-typed "City, ST" locations
"""

from .classifier import (
    CLASSIFIERS,
    EventTags,
    KeywordClassifier,
    classify,
    get_classifier,
    venue_size,
)
from .event_normalizer import (
    EventNormalizer,
    NormalizationBatch,
    TicketmasterNormalizer,
    YelpNormalizer,
    get_normalizer,
    normalize,
)
from .location_parser import CityState, parse_city_state

__all__ = [
    # Normalizers
    "EventNormalizer",
    "NormalizationBatch",
    "TicketmasterNormalizer",
    "YelpNormalizer",
    "get_normalizer",
    "normalize",
    # Classification
    "CLASSIFIERS",
    "EventTags",
    "KeywordClassifier",
    "classify",
    "get_classifier",
    "venue_size",
    # Locations
    "CityState",
    "parse_city_state",
]
