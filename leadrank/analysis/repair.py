"""Extraction and repair of the JSON objects embedded in model output.

Models are asked for strict JSON but routinely wrap it in Markdown fences or
emit near-JSON: trailing commas, array items without separators, raw line
breaks inside strings. ``parse_model_json`` strips the fences, tries a direct
parse and then applies the repair passes below in a fixed order, re-parsing
after each one and stopping at the first success. Every pass is a pure text
transformation, so the outcome only depends on the raw text.
"""

import json
import logging
import re
from typing import Any, Callable, List, Tuple

from leadrank.core.errors import ErrorKind, LeadRankError

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_TRAILING_COMMA_RE = re.compile(r",\s*([\]}])")


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text).strip()


def strip_control_characters(text: str) -> str:
    return _CONTROL_CHARS_RE.sub("", text)


def remove_trailing_commas(text: str) -> str:
    return _TRAILING_COMMA_RE.sub(r"\1", text)


def insert_missing_separators(text: str) -> str:
    """Insert a comma wherever a closed string is followed by an opening quote."""
    out: List[str] = []
    in_string = False
    escaped = False
    for index, char in enumerate(text):
        out.append(char)
        if not in_string:
            if char == '"':
                in_string = True
            continue
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == '"':
            in_string = False
            following = index + 1
            while following < len(text) and text[following].isspace():
                following += 1
            if following < len(text) and text[following] == '"':
                out.append(",")
    return "".join(out)


def escape_newlines_in_strings(text: str) -> str:
    out: List[str] = []
    in_string = False
    escaped = False
    for char in text:
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            elif char == "\n":
                out.append("\\n")
                continue
            elif char == "\r":
                out.append("\\r")
                continue
        elif char == '"':
            in_string = True
        out.append(char)
    return "".join(out)


REPAIR_PASSES: Tuple[Tuple[str, Callable[[str], str]], ...] = (
    ("control_characters", strip_control_characters),
    ("trailing_commas", remove_trailing_commas),
    ("missing_separators", insert_missing_separators),
    ("raw_newlines", escape_newlines_in_strings),
)


def parse_model_json(raw_text: str) -> Any:
    """Return the JSON value carried by ``raw_text`` or raise RESPONSE_PARSE.

    The error keeps ``raw_text`` untouched so callers can log what the model said.
    """
    text = strip_code_fences(raw_text)
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        last_error = exc

    for name, repair in REPAIR_PASSES:
        repaired = repair(text)
        if repaired == text:
            continue
        text = repaired
        try:
            value = json.loads(text)
        except json.JSONDecodeError as exc:
            last_error = exc
            continue
        logger.debug("Model output parsed after %s repair", name)
        return value

    raise LeadRankError(
        ErrorKind.RESPONSE_PARSE,
        f"model output is not valid JSON: {last_error}",
        raw=raw_text,
    )
