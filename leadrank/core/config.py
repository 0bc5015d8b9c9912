"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

from dotenv import load_dotenv

from leadrank.core.errors import ErrorKind, LeadRankError

logger = logging.getLogger(__name__)

DEFAULT_CENTER_ADDRESS = "Av. Lauro de Carvalho, 943 - Centro, Jaguariúna"
DEFAULT_MODEL = "gemini-1.5-pro"


class RankOrder(str, Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


@dataclass(frozen=True)
class GenerationConfig:
    temperature: float = 0.7
    top_k: int = 40
    top_p: float = 0.95
    max_output_tokens: int = 4094

    def to_payload(self) -> dict:
        return {
            "temperature": self.temperature,
            "topK": self.top_k,
            "topP": self.top_p,
            "maxOutputTokens": self.max_output_tokens,
        }


@dataclass(frozen=True)
class Settings:
    maps_api_key: str
    ai_api_key: str
    model: str = DEFAULT_MODEL
    center_address: str = DEFAULT_CENTER_ADDRESS
    radius: int = 500
    dev: bool = False
    rank_order: RankOrder = RankOrder.ASCENDING
    max_in_flight: int = 4
    analysis_workers: int = 8
    request_timeout: float = 30.0
    page_token_delay: float = 2.0
    output_dir: str = "."
    generation: GenerationConfig = GenerationConfig()


def _get_required_env(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise LeadRankError(ErrorKind.CONFIGURATION, f"{name} must be set in the environment.")
    return value


def _get_number(name: str, default, cast, minimum=1):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw.strip())
    except ValueError as exc:
        raise LeadRankError(ErrorKind.CONFIGURATION, f"{name} must be numeric, got {raw!r}") from exc
    if value < minimum:
        raise LeadRankError(ErrorKind.CONFIGURATION, f"{name} must be at least {minimum}, got {raw!r}")
    return value


def _get_rank_order() -> RankOrder:
    raw = os.getenv("RANK_ORDER", RankOrder.ASCENDING.value).strip().lower()
    try:
        return RankOrder(raw)
    except ValueError as exc:
        choices = ", ".join(order.value for order in RankOrder)
        raise LeadRankError(ErrorKind.CONFIGURATION, f"RANK_ORDER must be one of {choices}, got {raw!r}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load, validate and cache settings; raises before any network call is made."""
    load_dotenv()

    maps_api_key = _get_required_env("GOOGLE_MAPS_API_KEY")
    ai_api_key = _get_required_env("GOOGLE_AI_STUDIO_API_KEY")
    dev = os.getenv("DEV", "false").lower() in {"1", "true", "yes"}

    generation = GenerationConfig(
        temperature=float(_get_number("GEN_TEMPERATURE", 0.7, float, minimum=0)),
        top_k=_get_number("GEN_TOP_K", 40, int),
        top_p=float(_get_number("GEN_TOP_P", 0.95, float, minimum=0)),
        max_output_tokens=_get_number("GEN_MAX_OUTPUT_TOKENS", 4094, int),
    )

    settings = Settings(
        maps_api_key=maps_api_key,
        ai_api_key=ai_api_key,
        model=os.getenv("MODEL") or DEFAULT_MODEL,
        center_address=os.getenv("CENTER_ADDRESS") or DEFAULT_CENTER_ADDRESS,
        radius=_get_number("RADIUS", 500, int),
        dev=dev,
        rank_order=_get_rank_order(),
        max_in_flight=_get_number("MAX_IN_FLIGHT", 4, int),
        analysis_workers=_get_number("ANALYSIS_WORKERS", 8, int),
        request_timeout=float(_get_number("REQUEST_TIMEOUT", 30.0, float)),
        page_token_delay=float(_get_number("PAGE_TOKEN_DELAY", 2.0, float, minimum=0)),
        output_dir=os.getenv("OUTPUT_DIR") or ".",
        generation=generation,
    )

    if dev:
        logger.info("Development mode enabled; raw discovery pages will be dumped to %s", settings.output_dir)
    if not os.getenv("CENTER_ADDRESS"):
        logger.warning("CENTER_ADDRESS is not set; searching around %s", settings.center_address)

    return settings
