"""Validation of parsed model output into assessment objects.

Nothing is defaulted or guessed here: a value that does not match the schema
the prompt asked for is rejected as a whole.
"""

from typing import Any, Dict, Optional, Tuple

from leadrank.core.errors import ErrorKind, LeadRankError
from leadrank.core.models import (
    AddressAccuracy,
    AddressAssessment,
    AddressCompleteness,
    AddressFormatting,
    QualityAssessment,
)

RATING_LEVELS = ("good", "fair", "poor")
ABBREVIATION_USAGE = ("consistent", "inconsistent", "none")
CONFIDENCE_LEVELS = ("high", "medium", "low")
OVERALL_QUALITY = ("excellent", "good", "fair", "poor")

# JSON key -> model field
COMPLETENESS_FIELDS = (
    ("street", "street"),
    ("number", "number"),
    ("neighborhood", "neighborhood"),
    ("city", "city"),
    ("state", "state"),
    ("postalCode", "postal_code"),
)


class _Invalid(ValueError):
    pass


def _object(value: Any, path: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise _Invalid(f"{path} must be an object")
    return value


def _score(data: Dict[str, Any]) -> float:
    score = data.get("score")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise _Invalid("score must be a number")
    if not 0 <= score <= 100:
        raise _Invalid(f"score {score} is outside 0-100")
    return score


def _boolean(data: Dict[str, Any], key: str, path: str) -> bool:
    value = data.get(key)
    if not isinstance(value, bool):
        raise _Invalid(f"{path}.{key} must be a boolean")
    return value


def _member(data: Dict[str, Any], key: str, choices: Tuple[str, ...], path: str) -> str:
    value = data.get(key)
    if value not in choices:
        raise _Invalid(f"{path}.{key} must be one of {', '.join(choices)}, got {value!r}")
    return value


def _string_list(value: Any, path: str) -> Tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise _Invalid(f"{path} must be a list of strings")
    return tuple(value)


def _reject(exc: _Invalid, raw_text: str, what: str) -> LeadRankError:
    return LeadRankError(ErrorKind.RESPONSE_PARSE, f"{what} does not match the schema: {exc}", raw=raw_text)


def to_quality_assessment(value: Any, raw_text: str) -> QualityAssessment:
    try:
        data = _object(value, "response")
        score = _score(data)
        feedback: Optional[Tuple[str, ...]] = None
        if data.get("feedback") is not None:
            feedback = _string_list(data["feedback"], "feedback")
        message = data.get("consultingMessage")
        if message is not None and not isinstance(message, str):
            raise _Invalid("consultingMessage must be a string or null")
    except _Invalid as exc:
        raise _reject(exc, raw_text, "quality assessment") from exc

    return QualityAssessment(score=score, feedback=feedback, consulting_message=message or None)


def to_address_assessment(value: Any, raw_text: str) -> AddressAssessment:
    try:
        data = _object(value, "response")
        score = _score(data)

        completeness_data = _object(data.get("completeness"), "completeness")
        completeness = AddressCompleteness(
            **{field: _boolean(completeness_data, key, "completeness") for key, field in COMPLETENESS_FIELDS}
        )

        formatting_data = _object(data.get("formatting"), "formatting")
        formatting = AddressFormatting(
            capitalization=_member(formatting_data, "capitalization", RATING_LEVELS, "formatting"),
            punctuation=_member(formatting_data, "punctuation", RATING_LEVELS, "formatting"),
            abbreviations=_member(formatting_data, "abbreviations", ABBREVIATION_USAGE, "formatting"),
        )

        accuracy_data = _object(data.get("accuracy"), "accuracy")
        accuracy = AddressAccuracy(
            likely_real=_boolean(accuracy_data, "likelyReal", "accuracy"),
            confidence=_member(accuracy_data, "confidence", CONFIDENCE_LEVELS, "accuracy"),
        )

        overall_quality = _member(data, "overallQuality", OVERALL_QUALITY, "response")
        recommendations = _string_list(data.get("recommendations"), "recommendations")
    except _Invalid as exc:
        raise _reject(exc, raw_text, "address assessment") from exc

    return AddressAssessment(
        score=score,
        completeness=completeness,
        formatting=formatting,
        accuracy=accuracy,
        overall_quality=overall_quality,
        recommendations=recommendations,
    )
