"""Parsing helpers for PHIVOLCS listing text and HTTP revalidation tokens."""

from __future__ import annotations

import math
from datetime import date, datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime
from typing import Optional, Tuple
from urllib.parse import urljoin

from dateutil import tz

from quake_aggregator import config
from quake_aggregator.errors import FormatError

_MONTH_LOOKUP = {name.lower(): index for index, name in enumerate(config.MONTH_NAMES, start=1)}


def clean_text(value: Optional[str]) -> Optional[str]:
    """Normalize whitespace and strip strings."""
    if value is None:
        return None
    return " ".join(value.split()).strip() or None


def source_tz():
    """Return the listing site's fixed UTC+8 zone."""
    return tz.gettz(config.SOURCE_TIMEZONE) or tz.tzoffset(
        config.SOURCE_TIMEZONE, config.SOURCE_UTC_OFFSET_HOURS * 3600
    )


def parse_listing_timestamp(raw_text: Optional[str]) -> datetime:
    """Parse ``"<day> <Month> <year> - <h>:<mm> <AM|PM>"`` into an aware UTC datetime.

    The wall-clock values are read in the source's UTC+8 zone. Raises
    ``FormatError`` on any unrecognised month name or non-numeric field.
    """
    text = clean_text(raw_text)
    if not text:
        raise FormatError("Empty listing timestamp", raw_text)

    date_part, sep, time_part = text.partition(" - ")
    if not sep:
        raise FormatError(f"Missing ' - ' separator in {text!r}", raw_text)

    date_tokens = date_part.split()
    time_tokens = time_part.split()
    if len(date_tokens) != 3 or len(time_tokens) != 2:
        raise FormatError(f"Unexpected listing timestamp layout: {text!r}", raw_text)

    day_text, month_text, year_text = date_tokens
    clock_text, meridiem = time_tokens

    month = _MONTH_LOOKUP.get(month_text.lower())
    if month is None:
        raise FormatError(f"Unrecognised month name {month_text!r}", raw_text)

    hour_text, _, minute_text = clock_text.partition(":")
    try:
        day = int(day_text)
        year = int(year_text)
        hour = int(hour_text)
        minute = int(minute_text)
    except ValueError as exc:
        raise FormatError(f"Non-numeric field in {text!r}", raw_text) from exc

    meridiem = meridiem.upper()
    if meridiem not in {"AM", "PM"}:
        raise FormatError(f"Expected AM/PM, got {meridiem!r}", raw_text)
    if meridiem == "AM" and hour == 12:
        hour = 0
    elif meridiem == "PM" and hour < 12:
        hour += 12

    try:
        local_dt = datetime(year, month, day, hour, minute, tzinfo=source_tz())
    except ValueError as exc:
        raise FormatError(f"Out-of-range field in {text!r}", raw_text) from exc
    return local_dt.astimezone(timezone.utc)


def to_source_local(dt_utc: Optional[datetime]) -> Optional[datetime]:
    """Convert a UTC datetime to the listing site's local time."""
    if dt_utc is None:
        return None
    return dt_utc.astimezone(source_tz())


def previous_calendar_month(reference: date) -> Tuple[int, int]:
    """Return ``(year, month)`` of the month before ``reference``."""
    year, month = reference.year, reference.month - 1
    if month < 1:
        month = 12
        year -= 1
    return year, month


def monthly_listing_url(year: int, month: int, base_url: Optional[str] = None) -> str:
    """Build the archived listing URL for a given month."""
    base = (base_url or config.PHIVOLCS_BASE_URL).rstrip("/") + "/"
    path = config.MONTHLY_PATH_TEMPLATE.format(year=year, month_name=config.MONTH_NAMES[month - 1])
    return urljoin(base, path)


def normalize_detail_href(href: Optional[str], base_url: Optional[str] = None) -> str:
    """Resolve a listing anchor's href into an absolute detail-page URL.

    The site writes Windows-style paths (``..\\2025_Earthquake_Information\\...``)
    so backslashes are flipped and one leading slash is dropped before joining.
    """
    if not href:
        return ""
    href = href.strip().replace("\\", "/")
    if href.startswith("/"):
        href = href[1:]
    if not href:
        return ""
    base = (base_url or config.PHIVOLCS_BASE_URL).rstrip("/") + "/"
    return urljoin(base, href)


def parse_float_field(raw_text: Optional[str], field_name: str) -> float:
    text = clean_text(raw_text)
    if text is None:
        raise FormatError(f"Missing {field_name}", raw_text)
    try:
        value = float(text)
    except ValueError as exc:
        raise FormatError(f"Invalid {field_name}: {text!r}", raw_text) from exc
    if not math.isfinite(value):
        raise FormatError(f"Non-finite {field_name}: {text!r}", raw_text)
    return value


# ---------------------------------------------------------------------------
# Revalidation tokens (HTTP-date wire form)
# ---------------------------------------------------------------------------


def parse_http_date(token: Optional[str]) -> Optional[datetime]:
    """Parse a Last-Modified / If-Modified-Since value; ``None`` when unusable.

    Only full HTTP-date forms are accepted. Partial values such as ``"2099"``
    are rejected rather than completed from the current date.
    """
    text = clean_text(token)
    if not text:
        return None
    try:
        parsed = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError, OverflowError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_http_date(dt: datetime) -> str:
    """Render an aware datetime as an RFC 7231 HTTP-date."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return format_datetime(dt.astimezone(timezone.utc).replace(microsecond=0), usegmt=True)


def newest_token(*tokens: Optional[str]) -> Optional[str]:
    """Return the chronologically latest token in canonical HTTP-date form."""
    parsed = [dt for dt in (parse_http_date(token) for token in tokens) if dt is not None]
    if not parsed:
        return None
    return format_http_date(max(parsed))
