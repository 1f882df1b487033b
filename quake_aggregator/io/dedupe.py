"""Utilities for deduplicating earthquake events."""

from __future__ import annotations

from typing import Callable, Hashable, Iterable, List, TypeVar

from quake_aggregator.scraper.models import EarthquakeEvent

T = TypeVar("T")


def dedupe_by_key(items: Iterable[T], key: Callable[[T], Hashable]) -> List[T]:
    """Keep the first item for every distinct ``key(item)``, preserving order."""
    seen: set[Hashable] = set()
    unique_items: List[T] = []
    for item in items:
        marker = key(item)
        if marker in seen:
            continue
        seen.add(marker)
        unique_items.append(item)
    return unique_items


def dedupe_events(events: Iterable[EarthquakeEvent]) -> List[EarthquakeEvent]:
    """Deduplicate events by identifier, first occurrence wins."""
    return dedupe_by_key(events, key=lambda event: event.identifier)
