"""
In-process cache for the two tracked listing months.

Each month owns one ``CacheSlot``. A slot is an immutable snapshot; a refresh
computes the next snapshot with ``choose_servable`` and swaps it in with a
single assignment, so events, token and timestamps always change together.
Concurrent refreshes of the same month are last-write-wins.
"""

from __future__ import annotations

import dataclasses
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, Optional, Tuple

from quake_aggregator import config
from quake_aggregator.scraper.models import EarthquakeEvent, Failed, FetchOutcome, Fresh, NotModified

if TYPE_CHECKING:
    from quake_aggregator.scraper.month_fetcher import MonthListingFetcher

logger = logging.getLogger(__name__)

CURRENT = "current"
PREVIOUS = "previous"


class SlotState(str, Enum):
    EMPTY = "empty"
    STALE = "stale"
    FRESH = "fresh"


@dataclass(slots=True, frozen=True)
class CacheSlot:
    """Snapshot of one month's last good listing."""

    events: Optional[Tuple[EarthquakeEvent, ...]] = None
    token: Optional[str] = None
    url: Optional[str] = None
    fetched_at: Optional[float] = None
    expires_at: Optional[float] = None
    detail_tokens: Dict[str, str] = field(default_factory=dict)

    @property
    def has_data(self) -> bool:
        return self.events is not None

    def state(self, now: float) -> SlotState:
        if not self.has_data:
            return SlotState.EMPTY
        if self.expires_at is not None and now < self.expires_at:
            return SlotState.FRESH
        return SlotState.STALE


EMPTY_SLOT = CacheSlot()


def choose_servable(outcome: FetchOutcome, slot: CacheSlot, *, url: str, now: float, ttl: float) -> CacheSlot:
    """Return the slot to keep after ``outcome``.

    Fresh content replaces the slot, 304 only renews its timestamps, and a
    failure leaves it untouched (stale or empty).
    """
    if isinstance(outcome, Fresh):
        return CacheSlot(
            events=outcome.events,
            token=outcome.token,
            url=url,
            fetched_at=now,
            expires_at=now + ttl,
            detail_tokens=dict(outcome.detail_tokens),
        )
    if isinstance(outcome, NotModified):
        if not slot.has_data:
            return slot
        return dataclasses.replace(slot, fetched_at=now, expires_at=now + ttl)
    if isinstance(outcome, Failed):
        return slot
    raise TypeError(f"Unknown fetch outcome: {outcome!r}")


class MonthCache:
    """Cache slot for one tracked month plus its freshness policy.

    Within ``ttl`` seconds of the last successful fetch or revalidation the
    slot is served without contacting upstream; after that every refresh
    revalidates with ``If-Modified-Since``. ``ttl=0`` always revalidates.
    """

    def __init__(self, key: str, ttl: Optional[float] = None, clock: Callable[[], float] = time.time):
        self.key = key
        self.ttl = config.CACHE_TTL_SECONDS if ttl is None else ttl
        self._clock = clock
        self._slot = EMPTY_SLOT

    @property
    def slot(self) -> CacheSlot:
        return self._slot

    def state(self) -> SlotState:
        return self._slot.state(self._clock())

    def is_servable(self, url: str) -> bool:
        """True when the slot can answer for ``url`` without an upstream request."""
        return self._slot.url == url and self.state() is SlotState.FRESH

    def apply(self, outcome: FetchOutcome, url: str) -> CacheSlot:
        self._slot = choose_servable(outcome, self._slot, url=url, now=self._clock(), ttl=self.ttl)
        return self._slot

    async def refresh(self, fetcher: "MonthListingFetcher", url: str) -> CacheSlot:
        """Bring the slot up to date from ``url`` and return whatever is servable."""
        if self.is_servable(url):
            logger.info("Cache hit for %s month (%s)", self.key, url)
            return self._slot

        try:
            outcome = await fetcher.fetch(url, self._slot)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error fetching %s month from %s", self.key, url)
            outcome = Failed(f"{type(exc).__name__}: {exc}")

        if isinstance(outcome, Failed) and self._slot.has_data:
            logger.warning("Serving stale %s month data: %s", self.key, outcome.reason)
        return self.apply(outcome, url)


class CacheStore:
    """Owns the current-month and previous-month caches for the process."""

    def __init__(self, ttl: Optional[float] = None, clock: Callable[[], float] = time.time):
        self.current = MonthCache(CURRENT, ttl=ttl, clock=clock)
        self.previous = MonthCache(PREVIOUS, ttl=ttl, clock=clock)
