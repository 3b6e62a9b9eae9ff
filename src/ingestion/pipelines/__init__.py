"""Provider-specific ingestion pipelines."""
