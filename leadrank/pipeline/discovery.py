"""Coordinate resolution, paginated nearby search and detail retrieval."""

from __future__ import annotations

import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

from leadrank.core.config import Settings
from leadrank.core.errors import ErrorKind, LeadRankError
from leadrank.core.models import Coordinate, DiscoveredPlace, FetchFailure, PlaceRecord
from leadrank.etl.transform import to_coordinate, to_discovered_place, to_place_record
from leadrank.vendors import google_places

logger = logging.getLogger(__name__)


def resolve_location(address: str, settings: Settings) -> Coordinate:
    """Geocode the search center; any failure here aborts the run."""
    payload = google_places.geocode(address, api_key=settings.maps_api_key, timeout=settings.request_timeout)
    coordinate = to_coordinate(payload)
    if coordinate is None:
        raise LeadRankError(ErrorKind.UPSTREAM_REQUEST, f"no geocode results found for {address!r}")
    logger.info("Resolved %r to %s", address, coordinate.as_param())
    return coordinate


def iter_result_pages(
    coordinate: Coordinate,
    keyword: str,
    radius: int,
    settings: Settings,
) -> Iterator[List[DiscoveredPlace]]:
    """Yield one list of places per nearby-search page.

    Each page costs exactly one request. The continuation token of a page is sent
    verbatim for the next one, and iteration stops on the first page without a
    token. Places are passed through as returned, duplicates included.
    """
    page_token: Optional[str] = None
    page_number = 0

    while True:
        if page_token:
            # Google rejects a continuation token until it becomes active.
            time.sleep(settings.page_token_delay)

        response = google_places.nearby_search(
            location=coordinate.as_param(),
            keyword=keyword,
            radius=radius,
            api_key=settings.maps_api_key,
            pagetoken=page_token,
            timeout=settings.request_timeout,
        )
        page_number += 1
        if settings.dev:
            _dump_page(response, page_number, settings)

        results = response.get("results", [])
        places = [place for place in map(to_discovered_place, results) if place is not None]
        logger.info("Fetched %d results on page %d", len(places), page_number)
        yield places

        page_token = response.get("next_page_token")
        if not page_token:
            logger.info("Discovery finished after %d page(s)", page_number)
            return


def discover_places(
    coordinate: Coordinate,
    keyword: str,
    radius: int,
    settings: Settings,
) -> Iterator[DiscoveredPlace]:
    for page in iter_result_pages(coordinate, keyword, radius, settings):
        yield from page


def _dump_page(response: dict, page_number: int, settings: Settings) -> None:
    path = Path(settings.output_dir).joinpath(f"nearby-page-{page_number}.json")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as fh:
            json.dump(response, fh, ensure_ascii=False, indent=2)
        logger.debug("Saved raw nearby-search page to %s", path)
    except OSError as exc:
        logger.warning("Unable to save raw page %d: %s", page_number, exc)


def fetch_place_record(place_id: str, settings: Settings) -> PlaceRecord:
    details = google_places.place_details(place_id=place_id, api_key=settings.maps_api_key, timeout=settings.request_timeout)
    return to_place_record(details, fallback_place_id=place_id)


def fetch_place_records(
    places: Sequence[DiscoveredPlace],
    settings: Settings,
) -> Tuple[List[PlaceRecord], List[FetchFailure]]:
    """Fetch details for a batch of places, at most ``max_in_flight`` at a time.

    Records come back in input order. A failed fetch only drops that place.
    """
    if not places:
        return [], []

    records: List[PlaceRecord] = []
    failures: List[FetchFailure] = []
    workers = min(settings.max_in_flight, len(places))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [(place, pool.submit(fetch_place_record, place.place_id, settings)) for place in places]
        for place, future in futures:
            try:
                records.append(future.result())
            except LeadRankError as exc:
                logger.warning("Failed to fetch details for %s: %s", place.place_id, exc)
                failures.append(FetchFailure(place_id=place.place_id, message=str(exc)))
    return records, failures
