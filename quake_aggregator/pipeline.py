"""
Aggregation of the current and previous PHIVOLCS listing months.

One ``handle`` call refreshes both month caches concurrently, merges what they
hold and answers the caller's ``If-Modified-Since`` check.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Optional, Tuple, Union

from quake_aggregator import config
from quake_aggregator.cache import CacheSlot, CacheStore, MonthCache
from quake_aggregator.errors import ServiceUnavailable
from quake_aggregator.io import dedupe, feature_collection
from quake_aggregator.scraper import parse_utils
from quake_aggregator.scraper.models import EarthquakeEvent
from quake_aggregator.scraper.month_fetcher import MonthListingFetcher

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ClientNotModified:
    """The caller's copy is at least as new as the combined token."""

    token: str


@dataclass(slots=True, frozen=True)
class Dataset:
    events: Tuple[EarthquakeEvent, ...]
    combined_token: Optional[str]
    count: int


PipelineResult = Union[ClientNotModified, Dataset]


@dataclass(slots=True)
class QuakeResponse:
    """Transport-neutral HTTP response for a routing layer to emit."""

    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[Any] = None


def _source_today() -> date:
    return datetime.now(parse_utils.source_tz()).date()


class AggregationPipeline:
    def __init__(
        self,
        fetcher: MonthListingFetcher,
        store: Optional[CacheStore] = None,
        *,
        base_url: Optional[str] = None,
        today: Callable[[], date] = _source_today,
    ):
        self._fetcher = fetcher
        self.store = store or CacheStore()
        self._base_url = (base_url or config.PHIVOLCS_BASE_URL).rstrip("/")
        self._today = today

    def month_urls(self) -> Tuple[str, str]:
        """Return ``(current_url, previous_url)``; the site root lists the current month."""
        year, month = parse_utils.previous_calendar_month(self._today())
        return self._base_url, parse_utils.monthly_listing_url(year, month, self._base_url)

    async def handle(self, if_modified_since: Optional[str] = None) -> PipelineResult:
        current_url, previous_url = self.month_urls()

        # All-settled: one month failing never cancels the other.
        results = await asyncio.gather(
            self.store.current.refresh(self._fetcher, current_url),
            self.store.previous.refresh(self._fetcher, previous_url),
            return_exceptions=True,
        )
        current = self._settled(self.store.current, results[0])
        previous = self._settled(self.store.previous, results[1])

        if not current.has_data and not previous.has_data:
            logger.error("PHIVOLCS: No data available (fresh or cached)")
            raise ServiceUnavailable()

        combined_token = parse_utils.newest_token(current.token, previous.token)

        client_dt = parse_utils.parse_http_date(if_modified_since)
        server_dt = parse_utils.parse_http_date(combined_token)
        if client_dt is not None and server_dt is not None and client_dt >= server_dt:
            logger.info("Client copy is current (If-Modified-Since %s)", if_modified_since)
            return ClientNotModified(token=combined_token)

        previous_events = previous.events or ()
        current_events = current.events or ()
        merged = previous_events + current_events
        unique = dedupe.dedupe_events(merged)
        if len(unique) != len(merged):
            logger.warning(
                "Dropped %d events present in both months", len(merged) - len(unique)
            )
        return Dataset(events=tuple(unique), combined_token=combined_token, count=len(unique))

    @staticmethod
    def _settled(cache: MonthCache, result: Union[CacheSlot, BaseException]) -> CacheSlot:
        if isinstance(result, BaseException):
            logger.error("Refreshing %s month failed: %s", cache.key, result)
            return cache.slot
        return result

    async def respond(self, if_modified_since: Optional[str] = None) -> QuakeResponse:
        """Run ``handle`` and shape the outcome as an HTTP response."""
        try:
            result = await self.handle(if_modified_since)
        except ServiceUnavailable as exc:
            return QuakeResponse(
                status=exc.status_code,
                headers={"Content-Type": "text/plain; charset=utf-8"},
                body=str(exc),
            )
        return build_response(result)


def build_response(result: PipelineResult, now: Optional[datetime] = None) -> QuakeResponse:
    now = now or datetime.now(timezone.utc)
    if isinstance(result, ClientNotModified):
        return QuakeResponse(
            status=304,
            headers={
                "Last-Modified": result.token,
                "Cache-Control": config.CACHE_CONTROL_HEADER,
            },
        )

    return QuakeResponse(
        status=200,
        headers={
            "Last-Modified": result.combined_token or parse_utils.format_http_date(now),
            "Cache-Control": config.CACHE_CONTROL_HEADER,
            "Content-Type": "application/json",
        },
        body=feature_collection.events_to_collection(result.events, generated=now, count=result.count),
    )
