"""
PHIVOLCS Earthquake Aggregator

Scrapes the PHIVOLCS monthly earthquake listings (current and previous month),
enriches each event with its highest reported intensity and serves the merged
result as a GeoJSON-style collection with conditional-request caching.

Usage:
    from quake_aggregator import AggregationPipeline, MonthListingFetcher
    from quake_aggregator.scraper.http_client import with_client

    async with with_client() as client:
        pipeline = AggregationPipeline(MonthListingFetcher(client))
        response = await pipeline.respond(if_modified_since=None)

CLI Usage:
    python -m quake_aggregator.main --output quakes.json
"""

__version__ = "0.1.0"

from quake_aggregator.cache import CacheSlot, CacheStore, MonthCache, SlotState
from quake_aggregator.pipeline import (
    AggregationPipeline,
    ClientNotModified,
    Dataset,
    QuakeResponse,
    build_response,
)
from quake_aggregator.scraper.detail_fetcher import DetailPageFetcher
from quake_aggregator.scraper.month_fetcher import MonthListingFetcher

__all__ = [
    "AggregationPipeline",
    "CacheSlot",
    "CacheStore",
    "ClientNotModified",
    "Dataset",
    "DetailPageFetcher",
    "MonthCache",
    "MonthListingFetcher",
    "QuakeResponse",
    "SlotState",
    "build_response",
]
