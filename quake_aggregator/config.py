"""Configuration constants and selectors for the PHIVOLCS earthquake aggregator."""

from __future__ import annotations

import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parent

# ---------------------------------------------------------------------------
# Upstream listing site
# ---------------------------------------------------------------------------

PHIVOLCS_BASE_URL = os.getenv("PHIVOLCS_BASE_URL", "https://earthquake.phivolcs.dost.gov.ph")
MONTHLY_PATH_TEMPLATE = "EQLatest-Monthly/{year}/{year}_{month_name}.html"

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

# The listing site prints wall-clock times in Philippine Standard Time (UTC+8, no DST)
SOURCE_TIMEZONE = "Asia/Manila"
SOURCE_UTC_OFFSET_HOURS = 8

# Selectors discovered by inspecting the listing and detail pages
DETAIL_LINK_PATTERN = "Earthquake_Information"
NO_INTENSITY_MARKER_SEL = "span"  # anchors wrapping a <span> are rendered pink: no intensity
REPORTED_INTENSITIES_PHRASE = "reported intensities"

# ---------------------------------------------------------------------------
# HTTP settings
# ---------------------------------------------------------------------------

REQUEST_TIMEOUT_SECONDS = float(os.getenv("QUAKE_REQUEST_TIMEOUT_SECONDS", "30"))
DETAIL_TIMEOUT_SECONDS = float(os.getenv("QUAKE_DETAIL_TIMEOUT_SECONDS", "20"))

REQUEST_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/123.0.0.0 Safari/537.36"
)
DEFAULT_HEADERS = {
    "User-Agent": REQUEST_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}

# ---------------------------------------------------------------------------
# Caching
# ---------------------------------------------------------------------------

CACHE_TTL_SECONDS = float(os.getenv("QUAKE_CACHE_TTL_SECONDS", "300"))
RESPONSE_MAX_AGE_SECONDS = 300
CACHE_CONTROL_HEADER = f"public, max-age={RESPONSE_MAX_AGE_SECONDS}"

# ---------------------------------------------------------------------------
# Canonical collection metadata
# ---------------------------------------------------------------------------

COLLECTION_TITLE = "PHIVOLCS Latest Earthquake Information"
COLLECTION_API_VERSION = "1.0.0"
COLLECTION_SOURCES = ",phivolcs,"

# Output (CLI snapshots only)
OUTPUT_DIR = Path(os.getenv("QUAKE_OUTPUT_DIR", str(PROJECT_ROOT / "output")))
