"""Conditional fetch and enrichment of one monthly listing page."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Tuple

import httpx

from quake_aggregator import config
from quake_aggregator.errors import FormatError, SchemaError, UpstreamUnavailable
from quake_aggregator.io import dedupe, feature_collection
from quake_aggregator.scraper import listing_html, parse_utils
from quake_aggregator.scraper.detail_fetcher import DetailPageFetcher
from quake_aggregator.scraper.http_client import NOT_MODIFIED, conditional_get
from quake_aggregator.scraper.models import (
    EarthquakeEvent,
    Failed,
    FetchOutcome,
    FetchStats,
    Fresh,
    IntensityResult,
    IntensityUnavailable,
    IntensityUnchanged,
    IntensityValue,
    ListingRow,
    MonthListingPage,
    NotModified,
)

if TYPE_CHECKING:
    from quake_aggregator.cache import CacheSlot

logger = logging.getLogger(__name__)

# (event, detail token) for a kept row, None for a dropped one
RowResult = Optional[Tuple[EarthquakeEvent, Optional[str]]]


def _self_cancelling() -> bool:
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0


class MonthListingFetcher:
    """Fetch a listing page, parse its rows and enrich each row with its intensity."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        detail_fetcher: Optional[DetailPageFetcher] = None,
        *,
        base_url: Optional[str] = None,
        parse_listing: Callable[[str, str], MonthListingPage] = listing_html.parse_listing_html,
    ):
        self._client = client
        self._detail_fetcher = detail_fetcher or DetailPageFetcher(client)
        self._base_url = base_url or config.PHIVOLCS_BASE_URL
        self._parse_listing = parse_listing

    async def fetch(self, url: str, slot: Optional["CacheSlot"] = None) -> FetchOutcome:
        token = slot.token if slot is not None and slot.has_data and slot.url == url else None

        try:
            response = await conditional_get(self._client, url, token)
        except UpstreamUnavailable as exc:
            logger.warning("Listing fetch failed, keeping cached data: %s", exc)
            return Failed(str(exc))

        if response.status_code == NOT_MODIFIED:
            logger.info("Listing not modified since %s: %s", token, url)
            return NotModified()

        page = self._parse_listing(response.text, url)
        previous = slot if slot is not None and slot.has_data else None
        events, detail_tokens, stats = await self._enrich(page, previous)

        try:
            feature_collection.validate(feature_collection.events_to_collection(events))
        except SchemaError as exc:
            logger.warning("Parsed listing failed schema validation for %s: %s", url, exc)
            return Failed(str(exc))

        logger.info("Parsed %d events from %s (%s)", len(events), url, stats.as_dict())
        return Fresh(
            events=tuple(events),
            token=response.headers.get("last-modified"),
            detail_tokens=detail_tokens,
            stats=stats,
        )

    async def _enrich(
        self,
        page: MonthListingPage,
        previous: Optional["CacheSlot"],
    ) -> Tuple[List[EarthquakeEvent], Dict[str, str], FetchStats]:
        stats = FetchStats()
        known_intensity: Dict[str, Optional[int]] = {}
        known_tokens: Dict[str, str] = {}
        if previous is not None:
            known_intensity = {event.identifier: event.intensity for event in previous.events}
            known_tokens = dict(previous.detail_tokens)

        # Completion order is arbitrary; gather hands results back in row order.
        results = await asyncio.gather(
            *(self._build_event(row, known_intensity, known_tokens, stats) for row in page.rows),
            return_exceptions=True,
        )

        kept: List[Tuple[EarthquakeEvent, Optional[str]]] = []
        for row, result in zip(page.rows, results):
            if isinstance(result, BaseException):
                logger.warning("Dropping row %r: %s", row.href, result)
                stats.rows_dropped += 1
                continue
            if result is not None:
                kept.append(result)

        unique = dedupe.dedupe_by_key(kept, key=lambda pair: pair[0].identifier)
        stats.duplicates_dropped = len(kept) - len(unique)
        stats.rows_parsed = len(unique)

        events = [event for event, _ in unique]
        detail_tokens = {event.identifier: token for event, token in unique if token}
        return events, detail_tokens, stats

    async def _build_event(
        self,
        row: ListingRow,
        known_intensity: Dict[str, Optional[int]],
        known_tokens: Dict[str, str],
        stats: FetchStats,
    ) -> RowResult:
        identifier = parse_utils.normalize_detail_href(row.href, self._base_url)
        if not identifier:
            return None

        try:
            occurred_at = parse_utils.parse_listing_timestamp(row.raw_date)
            latitude = parse_utils.parse_float_field(row.latitude, "latitude")
            longitude = parse_utils.parse_float_field(row.longitude, "longitude")
            depth_km = parse_utils.parse_float_field(row.depth_km, "depth")
            magnitude = parse_utils.parse_float_field(row.magnitude, "magnitude")
        except FormatError as exc:
            logger.warning("Dropping row %s: %s", identifier, exc)
            stats.rows_dropped += 1
            return None

        intensity: Optional[int] = None
        detail_token: Optional[str] = None
        if not row.has_intensity:
            logger.debug("No intensity recorded for %s", identifier)
            stats.detail_skipped += 1
        else:
            stored_token = known_tokens.get(identifier) if identifier in known_intensity else None
            result = await self._lookup_intensity(identifier, stored_token)
            if isinstance(result, IntensityValue):
                stats.detail_fetched += 1
                intensity, detail_token = result.value, result.token
            elif isinstance(result, IntensityUnchanged):
                stats.detail_unchanged += 1
                intensity, detail_token = known_intensity.get(identifier), stored_token
            else:
                stats.detail_unavailable += 1

        event = EarthquakeEvent(
            identifier=identifier,
            occurred_at=occurred_at,
            latitude=latitude,
            longitude=longitude,
            depth_km=depth_km,
            magnitude=magnitude,
            location=row.location or "",
            intensity=intensity,
        )
        return event, detail_token

    async def _lookup_intensity(self, url: str, token: Optional[str]) -> IntensityResult:
        """Run one detail fetch as its own task so it can be cancelled on its own."""
        task = asyncio.ensure_future(self._detail_fetcher.fetch(url, token))
        try:
            return await task
        except asyncio.CancelledError:
            if _self_cancelling():
                raise
            logger.warning("Detail fetch cancelled for %s", url)
            return IntensityUnavailable("cancelled")
        except Exception as exc:  # noqa: BLE001
            logger.warning("Error getting intensity for %s: %s", url, exc)
            return IntensityUnavailable(str(exc))
