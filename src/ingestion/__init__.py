"""
Ingestion Layer for local event search.

This package fetches raw events from external providers and turns them into
a deduplicated, filtered list of NormalizedEvent records.

Key Components:
- Source adapters: TicketmasterAdapter, YelpAdapter
- AdapterFactory: Builds adapters from ingestion.yaml
- EventSearchPipeline: fetch → normalize → dedupe → filter
"""
