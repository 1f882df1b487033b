"""HTML parsing for the PHIVOLCS monthly listing table."""

from __future__ import annotations

from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from quake_aggregator import config
from quake_aggregator.scraper import parse_utils
from quake_aggregator.scraper.models import ListingRow, MonthListingPage


def _is_detail_href(href: Optional[str]) -> bool:
    return bool(href) and config.DETAIL_LINK_PATTERN in href


def parse_listing_html(html: str, url: str = "") -> MonthListingPage:
    """Parse a listing page into raw rows, preserving document order.

    Rows without a detail anchor are kept with an empty ``href`` so the caller
    can drop them by identifier.
    """
    soup = BeautifulSoup(html, "lxml")
    page = MonthListingPage(url=url)

    for table in _listing_tables(soup):
        for tr in table.find_all("tr"):
            cells = tr.find_all("td", recursive=False)
            if not cells:
                continue
            page.rows.append(_parse_row(cells))

    return page


def _listing_tables(soup: BeautifulSoup) -> List[Tag]:
    """Return the innermost tables holding detail links (the page nests layout tables)."""
    tables = []
    for table in soup.find_all("table"):
        if table.find("a", href=_is_detail_href) is None:
            continue
        nested = any(inner.find("a", href=_is_detail_href) for inner in table.find_all("table"))
        if not nested:
            tables.append(table)
    return tables


def _parse_row(cells: List[Tag]) -> ListingRow:
    anchor = cells[0].find("a")
    href = (anchor.get("href") or "") if anchor is not None else ""
    raw_date = anchor.get_text(" ", strip=True) if anchor is not None else ""
    # Pink anchors (wrapping a <span>) mean no intensity was reported.
    has_intensity = anchor is not None and anchor.find(config.NO_INTENSITY_MARKER_SEL) is None

    return ListingRow(
        href=href,
        raw_date=raw_date,
        latitude=_cell_text(cells, 1),
        longitude=_cell_text(cells, 2),
        depth_km=_cell_text(cells, 3),
        magnitude=_cell_text(cells, 4),
        location=_cell_text(cells, 5),
        has_intensity=has_intensity,
    )


def _cell_text(cells: List[Tag], index: int) -> Optional[str]:
    if index < len(cells):
        return parse_utils.clean_text(cells[index].get_text(" "))
    return None
