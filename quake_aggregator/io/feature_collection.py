"""
Canonical earthquake collection schema and encoder.

The collection mirrors the structured (GeoJSON) feed so both sources can be
rendered by the same consumer; PHIVOLCS events leave the feed-only properties
empty.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, ValidationError

from quake_aggregator import config
from quake_aggregator.errors import SchemaError
from quake_aggregator.scraper.models import EarthquakeEvent


# ============================================================================
# Schema
# ============================================================================

class Geometry(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    type: Literal["Point"]
    coordinates: Tuple[float, float, float]  # longitude, latitude, depth


class Properties(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    mag: Optional[float]
    place: str
    time: int
    updated: Optional[int] = None
    tz: Optional[int] = None
    url: str
    detail: Optional[str] = None
    felt: Optional[int] = None
    cdi: Optional[float] = None
    mmi: Optional[float] = None
    alert: Optional[str] = None
    status: Optional[str] = None
    tsunami: Optional[int] = None
    sig: Optional[int] = None
    net: Optional[str] = None
    code: Optional[str] = None
    ids: Optional[str] = None
    sources: Optional[str] = None
    types: Optional[str] = None
    nst: Optional[int] = None
    dmin: Optional[float] = None
    rms: Optional[float] = None
    gap: Optional[float] = None
    magType: Optional[str] = None
    type: str
    title: str


class Feature(BaseModel):
    type: Literal["Feature"]
    properties: Properties
    geometry: Geometry
    id: str


class Metadata(BaseModel):
    generated: int
    url: str
    title: str
    status: int
    api: str
    count: int


class FeatureCollection(BaseModel):
    type: Literal["FeatureCollection"]
    metadata: Metadata
    features: List[Feature]


def validate(raw: Any) -> FeatureCollection:
    """Validate a decoded JSON payload against the canonical schema."""
    try:
        return FeatureCollection.model_validate(raw)
    except ValidationError as exc:
        raise SchemaError(f"Collection does not match schema: {exc.error_count()} error(s)", exc.errors()) from exc


# ============================================================================
# Encoding
# ============================================================================

def _epoch_ms(dt: datetime) -> int:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def event_to_feature(event: EarthquakeEvent) -> Dict[str, Any]:
    return {
        "type": "Feature",
        "properties": {
            "mag": event.magnitude,
            "place": event.location,
            "time": _epoch_ms(event.occurred_at),
            "updated": None,
            "tz": None,
            "url": event.identifier,
            "detail": None,
            "felt": None,
            "cdi": None,
            "mmi": event.intensity,
            "alert": None,
            "status": None,
            "tsunami": None,
            "sig": None,
            "net": None,
            "code": None,
            "ids": None,
            "sources": config.COLLECTION_SOURCES,
            "types": None,
            "nst": None,
            "dmin": None,
            "rms": None,
            "gap": None,
            "magType": None,
            "type": "earthquake",
            "title": event.location,
        },
        "geometry": {
            "type": "Point",
            "coordinates": [event.longitude, event.latitude, event.depth_km],
        },
        "id": event.identifier,
    }


def events_to_collection(
    events: Iterable[EarthquakeEvent],
    generated: Optional[datetime] = None,
    count: Optional[int] = None,
) -> Dict[str, Any]:
    """Encode events as a JSON-ready feature collection, preserving order."""
    features = [event_to_feature(event) for event in events]
    generated = generated or datetime.now(timezone.utc)
    return {
        "type": "FeatureCollection",
        "metadata": {
            "generated": _epoch_ms(generated),
            "url": config.PHIVOLCS_BASE_URL,
            "title": config.COLLECTION_TITLE,
            "status": 200,
            "api": config.COLLECTION_API_VERSION,
            "count": len(features) if count is None else count,
        },
        "features": features,
    }
