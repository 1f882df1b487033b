import asyncio
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import httpx
import pytest

from quake_aggregator.scraper import parse_utils

BASE_URL = "https://earthquake.phivolcs.dost.gov.ph"


def listing_row(
    href: str,
    when: str,
    lat: str = "14.05",
    lon: str = "120.50",
    depth: str = "010",
    mag: str = "4.5",
    location: str = "012 km N 45° W of Calatagan (Batangas)",
    pink: bool = False,
) -> str:
    anchor_text = f"<span>{when}</span>" if pink else when
    return (
        "<tr>"
        f'<td><a href="{href}">{anchor_text}</a></td>'
        f"<td>{lat}</td><td>{lon}</td><td>{depth}</td><td>{mag}</td>"
        f"<td>\n   {location}\n  </td>"
        "</tr>"
    )


def listing_page(*rows: str) -> str:
    return (
        "<html><body>"
        '<table class="MsoNormalTable"><tr><td>'
        '<table class="MsoNormalTable"><tbody>'
        "<tr><th>Date - Time (Philippine Time)</th><th>Latitude</th><th>Longitude</th>"
        "<th>Depth</th><th>Mag</th><th>Location</th></tr>"
        + "".join(rows)
        + "</tbody></table>"
        "</td></tr></table>"
        "</body></html>"
    )


def detail_page(intensities: Optional[str]) -> str:
    rows = (
        '<tr><td><p class="MsoNormal"><b>Depth of Focus (Km)</b></p></td><td>010</td></tr>'
    )
    if intensities is not None:
        rows += (
            '<tr><td><p class="MsoNormal"><b>Reported Intensities</b></p></td>'
            f"<td><p>{intensities}</p></td></tr>"
        )
    return (
        "<html><body>"
        '<table class="MsoNormalTable"><tr><td>'
        f'<table class="MsoNormalTable"><tbody>{rows}</tbody></table>'
        "</td></tr></table>"
        "</body></html>"
    )


def detail_url(name: str) -> str:
    return f"{BASE_URL}/2026_Earthquake_Information/October/{name}.html"


def detail_href(name: str) -> str:
    return f"2026_Earthquake_Information\\October\\{name}.html"


@dataclass
class FakePage:
    body: str = ""
    status: int = 200
    last_modified: Optional[str] = None
    delay: float = 0.0
    error: Optional[Exception] = None


def _key(url) -> Tuple[str, str]:
    parsed = httpx.URL(str(url))
    return parsed.host, parsed.path or "/"


class FakeUpstream:
    """In-memory stand-in for the PHIVOLCS site honouring If-Modified-Since."""

    def __init__(self):
        self.pages: Dict[Tuple[str, str], FakePage] = {}
        self.requests: List[httpx.Request] = []

    def add(self, url: str, body: str = "", **kwargs) -> FakePage:
        page = FakePage(body=body, **kwargs)
        self.pages[_key(url)] = page
        return page

    def hits(self, url: str) -> int:
        return sum(1 for request in self.requests if _key(request.url) == _key(url))

    def sent_headers(self, url: str) -> List[httpx.Headers]:
        return [request.headers for request in self.requests if _key(request.url) == _key(url)]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        page = self.pages.get(_key(request.url))
        if page is None:
            return httpx.Response(404, text="Not Found")
        if page.delay:
            await asyncio.sleep(page.delay)
        if page.error is not None:
            raise page.error

        headers = {"last-modified": page.last_modified} if page.last_modified else {}
        client_dt = parse_utils.parse_http_date(request.headers.get("if-modified-since"))
        server_dt = parse_utils.parse_http_date(page.last_modified)
        if client_dt is not None and server_dt is not None and client_dt >= server_dt:
            return httpx.Response(304, headers=headers)
        return httpx.Response(page.status, text=page.body, headers=headers)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture()
def upstream():
    return FakeUpstream()


def run(coro):
    return asyncio.run(coro)
