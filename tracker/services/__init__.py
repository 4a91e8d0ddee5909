"""Services Layer - the event ingestion pipeline."""
