"""Tests for intensity decoding and detail/listing HTML parsing."""

import pytest

from conftest import detail_href, detail_page, listing_page, listing_row
from quake_aggregator.errors import UnrecognizedIntensityError
from quake_aggregator.scraper import detail_html, intensity, listing_html

CODES = ["i", "ii", "iii", "iv", "v", "vi", "vii", "viii", "ix", "x"]


@pytest.mark.parametrize("value, code", list(enumerate(CODES, start=1)))
def test_decode_is_total_and_case_insensitive(value, code):
    assert intensity.decode(code) == value
    assert intensity.decode(code.upper()) == value
    assert intensity.decode(code.capitalize()) == value


@pytest.mark.parametrize("code", ["xi", "", "3", "iiii", "v ", "intensity"])
def test_decode_rejects_unknown_codes(code):
    with pytest.raises(UnrecognizedIntensityError):
        intensity.decode(code)


def test_highest_discards_whole_set_on_bad_code():
    assert intensity.highest(["III", "V", "II"]) == 5
    assert intensity.highest([]) is None
    with pytest.raises(UnrecognizedIntensityError):
        intensity.highest(["III", "XII"])


def test_detail_page_highest_intensity():
    html = detail_page("Intensity V - Calatagan, Batangas; Intensity III - Lipa City; Intensity VII - Nasugbu")
    assert detail_html.parse_highest_intensity(html) == 7


def test_detail_page_without_section():
    assert detail_html.parse_highest_intensity(detail_page(None)) is None


def test_detail_page_with_unknown_code_raises():
    with pytest.raises(UnrecognizedIntensityError):
        detail_html.parse_highest_intensity(detail_page("Intensity IV - Lipa City; Intensity XIII - Taal"))


def test_detail_page_label_is_case_insensitive():
    html = detail_page("Intensity II - Batangas City").replace("Reported Intensities", "REPORTED INTENSITIES:")
    assert detail_html.reported_intensity_codes(html) == ["II"]


def test_listing_rows_keep_document_order_and_markers():
    html = listing_page(
        listing_row(detail_href("A"), "19 October 2026 - 03:15 PM"),
        listing_row(detail_href("B"), "19 October 2026 - 01:00 PM", pink=True, location="Somewhere\n  far"),
        "<tr><td>Note: times are in Philippine Standard Time</td></tr>",
    )
    page = listing_html.parse_listing_html(html, "https://example.test")

    assert [row.href for row in page.rows] == [detail_href("A"), detail_href("B"), ""]
    first, second, note = page.rows
    assert first.raw_date == "19 October 2026 - 03:15 PM"
    assert first.has_intensity is True
    assert (first.latitude, first.longitude, first.depth_km, first.magnitude) == ("14.05", "120.50", "010", "4.5")
    assert second.has_intensity is False
    assert second.raw_date == "19 October 2026 - 01:00 PM"
    assert second.location == "Somewhere far"
    assert note.has_intensity is False


def test_listing_ignores_tables_without_detail_links():
    html = "<table><tr><td><a href='/about.html'>About</a></td></tr></table>"
    assert listing_html.parse_listing_html(html).rows == []
