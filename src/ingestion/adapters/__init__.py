"""
Source Adapters for Event Search.

Adapters provide a unified interface for fetching raw event records from
external providers.

Usage:
    from src.ingestion.adapters import APIAdapter, APIAdapterConfig

    adapter = APIAdapter(APIAdapterConfig(source_id="tm", base_url=url))
    result = await adapter.fetch(city="Austin", stateCode="TX")
"""

from .api_adapter import APIAdapter, APIAdapterConfig
from .base_adapter import (
    AdapterConfig,
    BaseSourceAdapter,
    FetchResult,
    SourceType,
    UpstreamError,
)

__all__ = [
    "AdapterConfig",
    "BaseSourceAdapter",
    "SourceType",
    "FetchResult",
    "UpstreamError",
    "APIAdapter",
    "APIAdapterConfig",
]
