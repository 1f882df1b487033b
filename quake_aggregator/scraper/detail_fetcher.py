"""Per-event detail page lookups for the highest reported intensity."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

import httpx

from quake_aggregator import config
from quake_aggregator.errors import UnrecognizedIntensityError, UpstreamUnavailable
from quake_aggregator.scraper import detail_html
from quake_aggregator.scraper.http_client import NOT_MODIFIED, conditional_get
from quake_aggregator.scraper.models import (
    IntensityResult,
    IntensityUnavailable,
    IntensityUnchanged,
    IntensityValue,
)

logger = logging.getLogger(__name__)


class DetailPageFetcher:
    """Fetch a detail page and reduce it to one intensity result.

    Every failure below cancellation (bad status, transport error, timeout,
    missing section, unknown code) becomes ``IntensityUnavailable``.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        timeout: Optional[float] = None,
        parse_intensity: Callable[[str], Optional[int]] = detail_html.parse_highest_intensity,
    ):
        self._client = client
        self._timeout = config.DETAIL_TIMEOUT_SECONDS if timeout is None else timeout
        self._parse_intensity = parse_intensity

    async def fetch(self, url: str, token: Optional[str] = None) -> IntensityResult:
        try:
            response = await asyncio.wait_for(
                conditional_get(self._client, url, token, timeout=self._timeout),
                timeout=self._timeout,
            )
        except UpstreamUnavailable as exc:
            logger.warning("Detail fetch failed for %s: %s", url, exc)
            return IntensityUnavailable(str(exc))
        except asyncio.TimeoutError:
            logger.warning("Detail fetch timed out after %.1fs: %s", self._timeout, url)
            return IntensityUnavailable("timeout")

        if response.status_code == NOT_MODIFIED:
            return IntensityUnchanged()

        try:
            value = self._parse_intensity(response.text)
        except UnrecognizedIntensityError as exc:
            logger.warning("Discarding intensities for %s: %s", url, exc)
            return IntensityUnavailable(str(exc))

        if value is None:
            return IntensityUnavailable("no reported intensities")
        return IntensityValue(value, token=response.headers.get("last-modified"))
