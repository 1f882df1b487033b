"""CLI orchestrator for the PHIVOLCS earthquake aggregator.

Usage:
    # Fetch both months and save the merged collection
    python -m quake_aggregator.main

    # Ask for data newer than a given Last-Modified
    python -m quake_aggregator.main --if-modified-since "Mon, 19 Oct 2026 07:00:00 GMT"
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from quake_aggregator import config
from quake_aggregator.cache import CacheStore
from quake_aggregator.pipeline import AggregationPipeline, QuakeResponse
from quake_aggregator.scraper import http_client, parse_utils
from quake_aggregator.scraper.month_fetcher import MonthListingFetcher

logger = logging.getLogger(__name__)


def default_output_path() -> Path:
    today = datetime.now(parse_utils.source_tz()).date()
    return config.OUTPUT_DIR / f"phivolcs_{today:%Y%m%d}.json"


async def run_once(if_modified_since: Optional[str], ttl: Optional[float]) -> QuakeResponse:
    async with http_client.with_client() as client:
        pipeline = AggregationPipeline(MonthListingFetcher(client), CacheStore(ttl=ttl))
        return await pipeline.respond(if_modified_since)


def save_collection(body: dict, output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(body, ensure_ascii=False, indent=2), encoding="utf-8")
    return output_path


def print_summary(response: QuakeResponse) -> None:
    print(f"Status: {response.status}")
    for name in ("Last-Modified", "Cache-Control"):
        if name in response.headers:
            print(f"{name}: {response.headers[name]}")
    if response.status != 200:
        return

    features = response.body["features"]
    print(f"Events: {response.body['metadata']['count']}")
    intensity_counter = Counter(
        feature["properties"]["mmi"] for feature in features if feature["properties"]["mmi"]
    )
    print("Intensity distribution:", dict(sorted(intensity_counter.items())))


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument(
        "--if-modified-since",
        default=None,
        help="HTTP-date of the copy you already hold.",
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Where to write the JSON collection (default: output/phivolcs_<date>.json).",
    )
    parser.add_argument(
        "--ttl",
        type=float,
        default=None,
        help="Cache TTL in seconds before revalidating upstream.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )
    return parser.parse_args(argv)


def main(argv: Iterable[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    response = asyncio.run(run_once(args.if_modified_since, args.ttl))
    print_summary(response)

    if response.status == 200:
        output_path = save_collection(response.body, args.output or default_output_path())
        print(f"Saved collection to {output_path}")
        return 0
    if response.status == 304:
        return 0
    logger.error("Aggregation failed: %s", response.body)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
