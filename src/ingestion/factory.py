"""
Adapter Factory for config-driven adapter creation.

Builds source adapters from YAML configuration, taking API keys and the
request timeout from Settings.

Usage:
    from src.ingestion.factory import create_adapter, AdapterFactory

    # Create a single adapter
    ticketmaster = create_adapter("ticketmaster")
    result = await ticketmaster.search(query)

    # Create all enabled adapters
    factory = AdapterFactory()
    adapters = factory.create_all_enabled_adapters()
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml

from src.configs.settings import Settings, get_settings
from src.ingestion.adapters.api_adapter import APIAdapter, APIAdapterConfig
from src.ingestion.pipelines.apis.ticketmaster import TicketmasterAdapter
from src.ingestion.pipelines.apis.yelp import YelpAdapter
from src.schemas.taxonomy import CategoryTag

logger = logging.getLogger(__name__)


class MissingAPIKeyError(ValueError):
    """Raised when a source is requested but its API key is not configured."""


def _category_params(raw: dict | None) -> dict[CategoryTag, dict[str, str]] | None:
    """Convert YAML ``category_params`` keys into CategoryTag members."""
    if raw is None:
        return None
    return {
        CategoryTag(name): {k: str(v) for k, v in (params or {}).items()}
        for name, params in raw.items()
    }


def _build_ticketmaster(config: APIAdapterConfig, source: dict) -> APIAdapter:
    kwargs: dict[str, Any] = {}
    if source.get("venues_endpoint"):
        kwargs["venues_url"] = source["venues_endpoint"]
    for key in ("page_size", "sort", "country_code"):
        if key in source:
            kwargs[key] = source[key]
    coordinate_params = _category_params(source.get("coordinate_category_params"))
    if coordinate_params is not None:
        kwargs["coordinate_category_params"] = coordinate_params
    category_params = _category_params(source.get("category_params"))
    if category_params is not None:
        kwargs["category_params"] = category_params
    return TicketmasterAdapter(config, **kwargs)


def _build_yelp(config: APIAdapterConfig, source: dict) -> APIAdapter:
    kwargs: dict[str, Any] = {}
    if "limit" in source:
        kwargs["limit"] = source["limit"]
    category_params = _category_params(source.get("category_params"))
    if category_params is not None:
        kwargs["category_params"] = category_params
    return YelpAdapter(config, **kwargs)


ADAPTER_BUILDERS: dict[str, Callable[[APIAdapterConfig, dict], APIAdapter]] = {
    "ticketmaster": _build_ticketmaster,
    "yelp": _build_yelp,
}


class AdapterFactory:
    """
    Factory for creating source adapters from YAML configuration.

    Reads source configurations from ingestion.yaml and creates the matching
    adapter instances.
    """

    def __init__(
        self,
        config_path: str | Path | None = None,
        settings: Settings | None = None,
    ):
        """
        Initialize the factory.

        Args:
            config_path: Path to ingestion.yaml. If not provided, uses the
                path from settings.
            settings: Settings instance; defaults to the cached one.
        """
        self.settings = settings or get_settings()
        self.config_path = (
            Path(config_path) if config_path else self.settings.INGESTION_CONFIG_PATH
        )
        self._config: dict | None = None

    @property
    def config(self) -> dict:
        """Load and cache configuration."""
        if self._config is None:
            self._config = self._load_config()
        return self._config

    def _load_config(self) -> dict:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config not found: {self.config_path}")

        with open(self.config_path, encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    def get_source_config(self, source_name: str) -> dict | None:
        """
        Get configuration for a specific source.

        Args:
            source_name: Name of the source (e.g., "ticketmaster")

        Returns:
            Source configuration dict or None if not found
        """
        sources = self.config.get("sources", {})
        return sources.get(source_name)

    def list_sources(self) -> dict[str, dict]:
        """
        List all configured sources with their status.

        Returns:
            Dict mapping source_name -> {enabled: bool, adapter: str}
        """
        sources = self.config.get("sources", {})
        return {
            name: {
                "enabled": cfg.get("enabled", True),
                "adapter": cfg.get("adapter", name),
            }
            for name, cfg in sources.items()
        }

    def list_enabled_sources(self) -> list[str]:
        """List names of all enabled sources."""
        return [name for name, info in self.list_sources().items() if info["enabled"]]

    def create_adapter(self, source_name: str) -> APIAdapter:
        """
        Create an adapter for the specified source.

        Args:
            source_name: Name of the source (e.g., "ticketmaster", "yelp")

        Returns:
            Configured adapter instance

        Raises:
            ValueError: If source not found, not enabled or of unknown type
            MissingAPIKeyError: If the source's API key is not set
        """
        source_config = self.get_source_config(source_name)
        if not source_config:
            raise ValueError(f"Source '{source_name}' not found in configuration")

        if not source_config.get("enabled", True):
            raise ValueError(f"Source '{source_name}' is not enabled")

        adapter_type = source_config.get("adapter", source_name)
        builder = ADAPTER_BUILDERS.get(adapter_type)
        if builder is None:
            raise ValueError(f"Unknown adapter type: {adapter_type}")

        api_key = self.settings.api_key(source_name)
        if not api_key:
            raise MissingAPIKeyError(f"API key for '{source_name}' is not configured")

        defaults = self.config.get("defaults", {})
        api_config = APIAdapterConfig(
            source_id=source_name,
            base_url=source_config.get("endpoint", ""),
            api_key=api_key,
            request_timeout=float(
                source_config.get(
                    "request_timeout_seconds", self.settings.REQUEST_TIMEOUT_SECONDS
                )
            ),
            max_retries=int(source_config.get("max_retries", defaults.get("max_retries", 0))),
            rate_limit_per_second=float(
                source_config.get(
                    "rate_limit_per_second", defaults.get("rate_limit_per_second", 0)
                )
            ),
        )

        logger.info(f"Creating {adapter_type} adapter for {source_name}")
        return builder(api_config, source_config)

    def create_all_enabled_adapters(self) -> dict[str, APIAdapter]:
        """
        Create adapters for all enabled sources.

        Sources whose key is missing are skipped with a warning.

        Returns:
            Dict mapping source_name -> adapter
        """
        adapters = {}
        for source_name in self.list_enabled_sources():
            try:
                adapters[source_name] = self.create_adapter(source_name)
            except MissingAPIKeyError as e:
                logger.warning(f"Skipping {source_name}: {e}")
        return adapters


def create_adapter(source_name: str, config_path: str | Path | None = None) -> APIAdapter:
    """
    Create an adapter for a source.

    Convenience function that creates a factory and builds one adapter.
    """
    return AdapterFactory(config_path).create_adapter(source_name)
