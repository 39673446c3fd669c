"""Ingestion layer.

This package contains adapters that fetch snapshot records, parse them into
typed models and enrich them through the trip lookup.
"""

__all__: list[str] = []
