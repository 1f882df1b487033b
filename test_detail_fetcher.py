"""Tests for detail-page intensity lookups."""

import httpx

from conftest import detail_page, detail_url, run
from quake_aggregator.scraper.detail_fetcher import DetailPageFetcher
from quake_aggregator.scraper.models import IntensityUnavailable, IntensityUnchanged, IntensityValue

LAST_MODIFIED = "Mon, 19 Oct 2026 07:20:00 GMT"


def _fetch(upstream, url, token=None, timeout=None):
    async def go():
        async with upstream.client() as client:
            return await DetailPageFetcher(client, timeout=timeout).fetch(url, token)

    return run(go())


def test_value_carries_highest_intensity_and_token(upstream):
    url = detail_url("A")
    upstream.add(url, detail_page("Intensity IV - Lipa; Intensity VI - Calatagan"), last_modified=LAST_MODIFIED)

    assert _fetch(upstream, url) == IntensityValue(6, token=LAST_MODIFIED)


def test_revalidation_returns_unchanged(upstream):
    url = detail_url("A")
    upstream.add(url, detail_page("Intensity IV - Lipa"), last_modified=LAST_MODIFIED)

    assert _fetch(upstream, url, token=LAST_MODIFIED) == IntensityUnchanged()
    assert upstream.sent_headers(url)[0]["if-modified-since"] == LAST_MODIFIED


def test_error_status_is_unavailable(upstream):
    url = detail_url("A")
    upstream.add(url, "oops", status=500)

    assert isinstance(_fetch(upstream, url), IntensityUnavailable)


def test_missing_page_is_unavailable(upstream):
    assert isinstance(_fetch(upstream, detail_url("missing")), IntensityUnavailable)


def test_transport_error_is_unavailable(upstream):
    url = detail_url("A")
    upstream.add(url, error=httpx.ConnectError("connection refused"))

    assert isinstance(_fetch(upstream, url), IntensityUnavailable)


def test_page_without_section_is_unavailable(upstream):
    url = detail_url("A")
    upstream.add(url, detail_page(None))

    result = _fetch(upstream, url)
    assert isinstance(result, IntensityUnavailable)
    assert result.reason == "no reported intensities"


def test_unknown_code_discards_the_cell(upstream):
    url = detail_url("A")
    upstream.add(url, detail_page("Intensity IV - Lipa; Intensity Z - Taal"))

    assert isinstance(_fetch(upstream, url), IntensityUnavailable)


def test_slow_page_times_out(upstream):
    url = detail_url("A")
    upstream.add(url, detail_page("Intensity IV - Lipa"), delay=1.0)

    result = _fetch(upstream, url, timeout=0.05)
    assert isinstance(result, IntensityUnavailable)
