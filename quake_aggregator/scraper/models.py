"""Shared data models for the PHIVOLCS listing scraper."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple, Union


@dataclass(slots=True, frozen=True)
class EarthquakeEvent:
    """Normalised representation of one listed earthquake.

    ``identifier`` is the resolved detail-page URL and is the event's identity.
    """

    identifier: str
    occurred_at: datetime
    latitude: float
    longitude: float
    depth_km: float
    magnitude: float
    location: str
    intensity: Optional[int] = None

    @property
    def epicenter(self) -> Tuple[float, float, float]:
        return (self.latitude, self.longitude, self.depth_km)


@dataclass(slots=True)
class ListingRow:
    """A listing table row before coercion; numeric fields are still text."""

    href: str
    raw_date: str
    latitude: Optional[str] = None
    longitude: Optional[str] = None
    depth_km: Optional[str] = None
    magnitude: Optional[str] = None
    location: Optional[str] = None
    has_intensity: bool = True


@dataclass(slots=True)
class MonthListingPage:
    """One parsed listing page, rows in document order."""

    url: str
    rows: List[ListingRow] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Detail page results
# ---------------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class IntensityUnchanged:
    """The detail page answered 304 for the stored token."""


@dataclass(slots=True, frozen=True)
class IntensityValue:
    value: int
    token: Optional[str] = None


@dataclass(slots=True, frozen=True)
class IntensityUnavailable:
    reason: str = ""


IntensityResult = Union[IntensityUnchanged, IntensityValue, IntensityUnavailable]


# ---------------------------------------------------------------------------
# Listing fetch outcomes
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class FetchStats:
    """Per-fetch counters for degraded rows and detail lookups."""

    rows_parsed: int = 0
    rows_dropped: int = 0
    duplicates_dropped: int = 0
    detail_fetched: int = 0
    detail_unchanged: int = 0
    detail_unavailable: int = 0
    detail_skipped: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {
            "rows_parsed": self.rows_parsed,
            "rows_dropped": self.rows_dropped,
            "duplicates_dropped": self.duplicates_dropped,
            "detail_fetched": self.detail_fetched,
            "detail_unchanged": self.detail_unchanged,
            "detail_unavailable": self.detail_unavailable,
            "detail_skipped": self.detail_skipped,
        }


@dataclass(slots=True, frozen=True)
class NotModified:
    """The listing page answered 304 for the slot's token."""


@dataclass(slots=True, frozen=True)
class Fresh:
    events: Tuple[EarthquakeEvent, ...]
    token: Optional[str] = None
    detail_tokens: Dict[str, str] = field(default_factory=dict)
    stats: FetchStats = field(default_factory=FetchStats)


@dataclass(slots=True, frozen=True)
class Failed:
    reason: str


FetchOutcome = Union[NotModified, Fresh, Failed]
