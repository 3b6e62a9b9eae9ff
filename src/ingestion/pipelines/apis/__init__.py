"""
Provider adapters for event APIs.

Each adapter turns a SearchQuery into a provider request and returns the raw
event records in a FetchResult.
"""

from .ticketmaster import TicketmasterAdapter
from .yelp import YelpAdapter

__all__ = [
    "TicketmasterAdapter",
    "YelpAdapter",
]
