"""Utilities for transforming Google Places responses into pipeline records."""

import logging
from typing import Any, Dict, Iterable, Optional, Tuple

from leadrank.core.models import Coordinate, DiscoveredPlace, PlaceRecord

logger = logging.getLogger(__name__)


def to_coordinate(payload: Dict[str, Any]) -> Optional[Coordinate]:
    results = payload.get("results") or []
    if not results:
        return None
    location = results[0].get("geometry", {}).get("location", {})
    lat, lng = _safe_float(location.get("lat")), _safe_float(location.get("lng"))
    if lat is None or lng is None:
        return None
    return Coordinate(lat=lat, lng=lng)


def to_discovered_place(result: Dict[str, Any]) -> Optional[DiscoveredPlace]:
    place_id = result.get("place_id")
    if not place_id:
        logger.debug("Skipping result without place_id: %s", result)
        return None
    return DiscoveredPlace(
        place_id=place_id,
        name=_strip_or_none(result.get("name")),
        vicinity=_strip_or_none(result.get("vicinity")),
        raw=result,
    )


def _opening_hours(result: Dict[str, Any]) -> Optional[Tuple[str, ...]]:
    hours = result.get("opening_hours")
    if not hours:
        return None
    weekday_text = hours.get("weekday_text") or []
    return tuple(str(line) for line in weekday_text)


def _categories(types: Iterable[str]) -> Tuple[str, ...]:
    return tuple(str(type_name) for type_name in types or [])


def to_place_record(result: Dict[str, Any], fallback_place_id: str) -> PlaceRecord:
    review_count = result.get("user_ratings_total")
    return PlaceRecord(
        place_id=result.get("place_id") or fallback_place_id,
        name=_strip_or_none(result.get("name")),
        address=_strip_or_none(result.get("formatted_address")),
        phone=_strip_or_none(result.get("formatted_phone_number")),
        website=_strip_or_none(result.get("website")),
        opening_hours=_opening_hours(result),
        photo_count=len(result.get("photos") or []),
        rating=_safe_float(result.get("rating")),
        review_count=int(review_count) if isinstance(review_count, (int, float)) else None,
        categories=_categories(result.get("types", [])),
        business_status=result.get("business_status"),
        raw=result,
    )


def _strip_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    value_str = str(value).strip()
    return value_str or None


def _safe_float(value: Any) -> Optional[float]:
    try:
        if value is None:
            return None
        return float(value)
    except (TypeError, ValueError):
        return None
