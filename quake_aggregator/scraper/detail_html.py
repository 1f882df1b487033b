"""HTML parsing for PHIVOLCS per-event detail pages."""

from __future__ import annotations

import re
from typing import List, Optional

from bs4 import BeautifulSoup

from quake_aggregator import config
from quake_aggregator.scraper import intensity, parse_utils

_INTENSITY_PATTERN = re.compile(r"Intensity (\w+)")


def reported_intensity_codes(html: str) -> List[str]:
    """Return the intensity codes listed next to the first "Reported Intensities" label."""
    soup = BeautifulSoup(html, "lxml")
    for cell in soup.find_all("td"):
        if cell.find("table") is not None:
            continue
        label = (parse_utils.clean_text(cell.get_text(" ")) or "").lower()
        if config.REPORTED_INTENSITIES_PHRASE not in label:
            continue
        value_cell = cell.find_next_sibling("td")
        if value_cell is None:
            continue
        text = parse_utils.clean_text(value_cell.get_text(" ")) or ""
        codes = _INTENSITY_PATTERN.findall(text)
        if codes:
            return codes
    return []


def parse_highest_intensity(html: str) -> Optional[int]:
    """Return the highest reported intensity on a detail page, or ``None``.

    An unrecognised code anywhere in the cell raises ``UnrecognizedIntensityError``.
    """
    return intensity.highest(reported_intensity_codes(html))
