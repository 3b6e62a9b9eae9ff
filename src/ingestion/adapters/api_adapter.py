"""
API Source Adapter.

Adapter for fetching event records from REST APIs.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import httpx

from .base_adapter import (
    AdapterConfig,
    BaseSourceAdapter,
    FetchResult,
    SourceType,
    UpstreamError,
)

logger = logging.getLogger(__name__)

ERROR_DETAILS_LIMIT = 200


@dataclass
class APIAdapterConfig(AdapterConfig):
    """
    Configuration for API-based adapters.

    When ``api_key_param`` is set the key is sent as that query parameter,
    otherwise as a bearer token.
    """

    base_url: str = ""
    api_key: str | None = None
    api_key_param: str | None = None
    headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        """Set source type to API."""
        self.source_type = SourceType.API


class APIAdapter(BaseSourceAdapter):
    """
    Adapter for REST event APIs.

    Supports:
    - Custom query builders and response parsers
    - Optional rate limiting
    - Optional retries with exponential backoff (off by default)
    - Query-parameter or bearer-token authentication
    """

    def __init__(
        self,
        config: APIAdapterConfig,
        query_builder: Callable[..., dict] | None = None,
        response_parser: Callable[[dict], list[dict]] | None = None,
    ):
        """
        Initialize the API adapter.

        Args:
            config: APIAdapterConfig with API settings
            query_builder: Function to build query params from kwargs
            response_parser: Function to extract the record list from a response
        """
        self.query_builder = query_builder
        self.response_parser = response_parser
        self._client: httpx.AsyncClient | None = None
        super().__init__(config)

    @property
    def api_config(self) -> APIAdapterConfig:
        """Get typed config."""
        return self.config  # type: ignore[return-value]

    def _validate_config(self) -> None:
        """Validate API configuration."""
        if not self.api_config.base_url:
            raise ValueError("API adapter requires base_url")

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None:
            headers = {
                "User-Agent": "local-events/0.1",
                "Accept": "application/json",
                **self.api_config.headers,
            }
            if self.api_config.api_key and not self.api_config.api_key_param:
                headers["Authorization"] = f"Bearer {self.api_config.api_key}"
            self._client = httpx.AsyncClient(headers=headers)
        return self._client

    async def fetch(self, **kwargs) -> FetchResult:
        """
        Fetch records from the API.

        Args:
            **kwargs: Parameters passed to query_builder

        Returns:
            FetchResult with raw records, or with errors and no records
        """
        return await self.fetch_from(self.api_config.base_url, **kwargs)

    async def fetch_from(self, url: str, **kwargs) -> FetchResult:
        """Fetch records from a specific endpoint of the API."""
        fetch_started = datetime.now(UTC)
        metadata: dict[str, Any] = {"api_calls": 0}

        try:
            client = self._get_client()

            if self.query_builder:
                query_data = self.query_builder(**kwargs)
            else:
                query_data = self._default_query_builder(**kwargs)

            if self.api_config.api_key and self.api_config.api_key_param:
                query_data = {
                    self.api_config.api_key_param: self.api_config.api_key,
                    **query_data,
                }

            response = await self._make_request(client, url, query_data)
            metadata["api_calls"] += 1

            if self.response_parser:
                data = self.response_parser(response)
            else:
                data = self._default_response_parser(response)
            metadata["total_available"] = self._extract_total_available(response, data)

        except UpstreamError as e:
            logger.error(f"API fetch failed for {self.source_id}: {e}")
            return FetchResult(
                success=False,
                source_type=SourceType.API,
                errors=[str(e)],
                status_code=e.status_code,
                metadata={**metadata, "details": e.details},
                fetch_started_at=fetch_started,
                fetch_ended_at=datetime.now(UTC),
            )

        return FetchResult(
            success=True,
            source_type=SourceType.API,
            raw_data=data,
            total_fetched=len(data),
            metadata=metadata,
            fetch_started_at=fetch_started,
            fetch_ended_at=datetime.now(UTC),
        )

    async def _make_request(
        self,
        client: httpx.AsyncClient,
        url: str,
        query_data: dict,
        retry_count: int = 0,
    ) -> dict:
        """
        Make HTTP GET request with optional retry logic.

        Args:
            client: Async HTTP client
            url: Endpoint URL
            query_data: Query parameters
            retry_count: Current retry attempt

        Returns:
            Response JSON

        Raises:
            UpstreamError: On transport failure, timeout, non-2xx status or a
                body that is not JSON
        """
        try:
            if self.api_config.rate_limit_per_second > 0:
                await asyncio.sleep(1.0 / self.api_config.rate_limit_per_second)

            response = await client.get(
                url,
                params=query_data,
                timeout=self.api_config.request_timeout,
            )
            response.raise_for_status()
            payload = response.json()

        except httpx.HTTPError as e:
            if retry_count < self.api_config.max_retries:
                wait_time = 2**retry_count
                logger.warning(f"Request failed, retrying in {wait_time}s: {e}")
                await asyncio.sleep(wait_time)
                return await self._make_request(client, url, query_data, retry_count + 1)

            status_code = None
            details = ""
            if isinstance(e, httpx.HTTPStatusError):
                status_code = e.response.status_code
                details = e.response.text[:ERROR_DETAILS_LIMIT]
            logger.error(f"Request failed after {retry_count} retries: {e}")
            raise UpstreamError(
                f"{self.source_id} request failed: {e}",
                status_code=status_code,
                details=details,
            ) from e

        except ValueError as e:
            raise UpstreamError(f"{self.source_id} returned invalid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise UpstreamError(
                f"{self.source_id} returned {type(payload).__name__}, expected an object"
            )
        return payload

    def _extract_total_available(self, response: dict, data: list) -> int:
        """
        Extract total available count from the API response.

        Override in subclasses to navigate source-specific response structures.
        """
        return response.get("totalResults", len(data))

    def _default_query_builder(self, **kwargs) -> dict:
        """Build a default query from keyword arguments."""
        return {k: v for k, v in kwargs.items() if v is not None}

    def _default_response_parser(self, response: dict) -> list[dict]:
        """Parse a default response structure into a list of dicts."""
        if "data" in response:
            return response["data"] if isinstance(response["data"], list) else [response["data"]]
        return [response]

    async def close(self) -> None:
        """Close async HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
