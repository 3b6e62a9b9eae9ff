"""
Base Source Adapter.

Abstract base class defining the interface for all event source adapters.
Implements the Strategy pattern for different providers (Ticketmaster, Yelp).

A fetch either succeeds with the complete provider batch (possibly empty) or
fails with errors and no data; partial batches are never returned.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from src.schemas.search import SearchQuery


class SourceType(str, Enum):
    """Type of data source."""

    API = "api"


class UpstreamError(Exception):
    """
    Transport failure or non-2xx answer from a provider.

    Attributes:
        status_code: HTTP status returned by the provider, None for transport
            errors and timeouts
        details: Short excerpt of the provider response body
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: str = "",
    ):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


@dataclass
class FetchResult:
    """
    Result of a data fetch operation.

    ``success`` is False whenever the provider could not be reached or
    answered with an error; in that case ``raw_data`` is always empty.
    """

    success: bool
    source_type: SourceType
    raw_data: list[dict[str, Any]] = field(default_factory=list)
    total_fetched: int = 0
    errors: list[str] = field(default_factory=list)
    status_code: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    fetch_started_at: datetime | None = None
    fetch_ended_at: datetime | None = None

    @property
    def duration_seconds(self) -> float:
        """Calculate fetch duration."""
        if self.fetch_started_at and self.fetch_ended_at:
            return (self.fetch_ended_at - self.fetch_started_at).total_seconds()
        return 0.0


@dataclass
class AdapterConfig:
    """
    Base configuration for source adapters.

    Extended by specific adapter types.
    """

    source_id: str
    source_type: SourceType = SourceType.API
    request_timeout: float = 10.0
    max_retries: int = 0
    rate_limit_per_second: float = 0.0
    custom_config: dict[str, Any] = field(default_factory=dict)


class BaseSourceAdapter(ABC):
    """
    Abstract base class for source adapters.

    Adapters encapsulate the logic for fetching raw event records from a
    provider and give the search pipeline a single interface regardless of
    the underlying API.

    Subclasses must implement:
        - fetch(): Fetch raw records from the source
        - _validate_config(): Validate adapter-specific configuration
    """

    def __init__(self, config: AdapterConfig):
        """
        Initialize the adapter.

        Args:
            config: AdapterConfig with source-specific settings
        """
        self.config = config
        self.logger = logging.getLogger(f"adapter.{config.source_id}")
        self._validate_config()

    @property
    def source_type(self) -> SourceType:
        """Get the source type."""
        return self.config.source_type

    @property
    def source_id(self) -> str:
        """Get the source identifier."""
        return self.config.source_id

    @abstractmethod
    async def fetch(self, **kwargs) -> FetchResult:
        """
        Fetch raw records from the source.

        Args:
            **kwargs: Source-specific fetch parameters
                (city, state_code, lat, lng, radius, start, end, category)

        Returns:
            FetchResult with raw records and metadata
        """
        pass

    @abstractmethod
    def _validate_config(self) -> None:
        """
        Validate adapter-specific configuration.

        Raises:
            ValueError: If configuration is invalid
        """
        pass

    async def search(self, query: SearchQuery) -> FetchResult:
        """
        Fetch raw events for a search query.

        Adapters receive the query as the ``query`` keyword of fetch().
        """
        self.logger.info(
            f"Searching {query.category.value} events near {query.location_label}"
        )
        return await self.fetch(query=query)

    async def close(self) -> None:
        """
        Release any resources held by the adapter.

        Override in subclasses that hold resources (e.g., HTTP clients).
        """
        pass

    async def __aenter__(self) -> BaseSourceAdapter:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
