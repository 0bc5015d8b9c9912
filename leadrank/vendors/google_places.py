"""Client utilities for the Google Maps geocoding and Places APIs."""

import logging
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from leadrank.core.errors import ErrorKind, LeadRankError

logger = logging.getLogger(__name__)
_BASE_URL = "https://maps.googleapis.com/maps/api"
_OK_STATUSES = {"OK", "ZERO_RESULTS"}
DETAIL_FIELDS = (
    "place_id,name,formatted_address,formatted_phone_number,international_phone_number,website,"
    "opening_hours,photos,rating,user_ratings_total,reviews,types,business_status,vicinity,plus_code,url"
)


def _build_session() -> requests.Session:
    session = requests.Session()
    retries = Retry(
        total=3,
        backoff_factor=1,
        status_forcelist=(500, 502, 503, 504),
        allowed_methods=("GET",),
        raise_on_status=False,
    )
    session.mount("https://", HTTPAdapter(max_retries=retries))
    return session


_SESSION = _build_session()


def _get(endpoint: str, params: Dict[str, Any], timeout: float) -> Dict[str, Any]:
    url = f"{_BASE_URL}/{endpoint}"
    try:
        response = _SESSION.get(url, params=params, timeout=timeout)
    except requests.RequestException as exc:
        raise LeadRankError(ErrorKind.UPSTREAM_REQUEST, f"{endpoint} request failed: {exc}") from exc

    if response.status_code >= 400:
        logger.error("%s failed: http_status=%s", endpoint, response.status_code)
        raise LeadRankError(
            ErrorKind.UPSTREAM_REQUEST,
            f"{endpoint} returned HTTP {response.status_code}",
            status=response.status_code,
            raw=response.text,
        )

    try:
        payload = response.json()
    except ValueError as exc:
        raise LeadRankError(
            ErrorKind.UPSTREAM_REQUEST, f"{endpoint} returned a non-JSON body", raw=response.text
        ) from exc
    status = payload.get("status")
    if status not in _OK_STATUSES:
        logger.error("%s failed: status=%s, error_message=%s", endpoint, status, payload.get("error_message"))
        raise LeadRankError(
            ErrorKind.UPSTREAM_REQUEST,
            payload.get("error_message") or f"API status {status}",
            status=response.status_code,
        )
    return payload


def geocode(address: str, api_key: str, timeout: float = 10) -> Dict[str, Any]:
    return _get("geocode/json", {"address": address, "key": api_key}, timeout)


def nearby_search(
    location: str,
    keyword: str,
    radius: int,
    api_key: str,
    pagetoken: Optional[str] = None,
    timeout: float = 10,
) -> Dict[str, Any]:
    params = {"location": location, "radius": radius, "keyword": keyword, "key": api_key}
    if pagetoken:
        params["pagetoken"] = pagetoken
    return _get("place/nearbysearch/json", params, timeout)


def place_details(place_id: str, api_key: str, timeout: float = 10) -> Dict[str, Any]:
    params = {"place_id": place_id, "key": api_key, "fields": DETAIL_FIELDS}
    payload = _get("place/details/json", params, timeout)
    result = payload.get("result")
    if not result:
        raise LeadRankError(ErrorKind.UPSTREAM_REQUEST, f"no details returned for place_id={place_id}")
    return result
