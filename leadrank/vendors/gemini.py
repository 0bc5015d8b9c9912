"""Client for the Google AI Studio ``generateContent`` endpoint."""

import logging
from typing import Any, Dict

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from leadrank.core.config import Settings
from leadrank.core.errors import ErrorKind, LeadRankError

logger = logging.getLogger(__name__)
BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


def _build_session() -> requests.Session:
    session = requests.Session()
    retries = Retry(
        total=2,
        backoff_factor=1,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("POST",),
        raise_on_status=False,
    )
    session.mount("https://", HTTPAdapter(max_retries=retries))
    return session


_SESSION = _build_session()


def build_request_body(prompt: str, settings: Settings) -> Dict[str, Any]:
    return {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": settings.generation.to_payload(),
    }


def generate_content(prompt: str, settings: Settings) -> Dict[str, Any]:
    """POST a single-turn prompt and return the decoded response payload."""
    url = f"{BASE_URL}/models/{settings.model}:generateContent"
    try:
        response = _SESSION.post(
            url,
            headers={"x-goog-api-key": settings.ai_api_key},
            json=build_request_body(prompt, settings),
            timeout=settings.request_timeout,
        )
    except requests.RequestException as exc:
        raise LeadRankError(ErrorKind.UPSTREAM_REQUEST, f"generateContent request failed: {exc}") from exc

    if not (200 <= response.status_code < 300):
        logger.error("generateContent returned %s: %s", response.status_code, response.text[:500])
        raise LeadRankError(
            ErrorKind.UPSTREAM_REQUEST,
            f"generateContent returned HTTP {response.status_code}: {response.text[:500]}",
            status=response.status_code,
            raw=response.text,
        )

    try:
        return response.json()
    except ValueError as exc:
        raise LeadRankError(
            ErrorKind.RESPONSE_SHAPE, "generateContent returned a non-JSON body", raw=response.text
        ) from exc


def first_candidate_text(payload: Dict[str, Any]) -> str:
    """Return the text of the first generated candidate."""
    candidates = payload.get("candidates") if isinstance(payload, dict) else None
    if not candidates:
        raise LeadRankError(ErrorKind.RESPONSE_SHAPE, "response carries no generated candidate")

    try:
        parts = candidates[0]["content"]["parts"]
        texts = [part["text"] for part in parts if isinstance(part, dict) and "text" in part]
    except (KeyError, TypeError, IndexError) as exc:
        raise LeadRankError(ErrorKind.RESPONSE_SHAPE, "first candidate has no content parts") from exc

    if not texts or not isinstance(texts[0], str):
        raise LeadRankError(ErrorKind.RESPONSE_SHAPE, "first candidate has no text part")
    return texts[0].strip()
