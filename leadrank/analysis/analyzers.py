"""Gemini-backed assessments of a business listing and of its postal address."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, TypeVar

from leadrank.analysis.repair import parse_model_json
from leadrank.analysis.schemas import to_address_assessment, to_quality_assessment
from leadrank.core.config import Settings
from leadrank.core.errors import ErrorKind, LeadRankError
from leadrank.core.models import AddressAssessment, PlaceRecord, QualityAssessment
from leadrank.vendors import gemini

logger = logging.getLogger(__name__)

T = TypeVar("T")

STRICT_JSON_RULES = """
RETURN ONLY STRICTLY VALID JSON WITH NO ADDITIONAL TEXT. Keys and string values must use
double quotes and there must be no comma after the last element of an array or object.
DO NOT INCLUDE ANY TEXT OUTSIDE THE JSON OBJECT.
"""

QUALITY_PROMPT_TEMPLATE = """
You are an expert in Google Business Profile listings. Evaluate the quality of the
information of one business based on the data below, give it a score from 0 to 100 and
write feedback with concrete improvements. A higher score means complete, up to date and
well presented information; a lower score means missing, outdated, badly formatted or
unclear information.

Analyse these criteria using the JSON data:

* Essential data: name, complete formatted address, phone, own website (not a social
  network) and operating status (`business_status`).
* Opening hours: availability, per-day detail (`weekday_text`) and consistency.
* Reviews: amount (`user_ratings_total`), average (`rating`), recency and text quality.
* Photos: amount (`photos`) and attribution to the owner (`html_attributions`).
* Categories (`types`): relevance and amount.
* `plus_code` and `vicinity`: availability.
* Other attributes (`reservable`, `serves_breakfast`, ...): presence and relevance.

The business is **{name}** and was found by searching for "{keyword}".

Place data from the Google Places API:

```json
{record_json}
```

Only judge what the JSON shows: do not score website quality, photo quality, social media
activity or anything else that needs a manual review, and make no assumptions.

When there is room for improvement, also write a short, friendly WhatsApp message offering
our services. Emphasise updating the Google Business Profile listing (missing or outdated
basic data, average rating below 4.5 or overall score below 70). Mention secondary services
only at the end and only when they apply: customer satisfaction consulting (rating below
3.5), digital marketing (fewer than 5 reviews) and website creation (no website). State how
many improvement points were found, end with a call to action, match the tone to the kind of
business and never mention JSON property names or technical terms.

Output format:

```json
{{
  "score": number,
  "feedback": string[] | null,
  "consultingMessage": string | null
}}
```
""" + STRICT_JSON_RULES

ADDRESS_PROMPT_TEMPLATE = """
Analyse the quality of the following address and return a JSON object with this structure:

{{
  "score": number,
  "completeness": {{
    "street": boolean,
    "number": boolean,
    "neighborhood": boolean,
    "city": boolean,
    "state": boolean,
    "postalCode": boolean
  }},
  "formatting": {{
    "capitalization": "good" | "fair" | "poor",
    "punctuation": "good" | "fair" | "poor",
    "abbreviations": "consistent" | "inconsistent" | "none"
  }},
  "accuracy": {{
    "likelyReal": boolean,
    "confidence": "high" | "medium" | "low"
  }},
  "overallQuality": "excellent" | "good" | "fair" | "poor",
  "recommendations": string[]
}}

Where:

- score: a number between 0 and 100 for the overall quality of the address.
- completeness: whether street, number, neighborhood, city, state and postal code are present.
- formatting: capitalization and punctuation ("good", "fair", "poor") and use of abbreviations
  ("consistent", "inconsistent", or "none" when there are no abbreviations).
- accuracy: "likelyReal" tells whether the address looks real, "confidence" how sure you are.
- overallQuality: overall rating of the address.
- recommendations: list of changes that would improve the address (empty if none).

Address: {address}
""" + STRICT_JSON_RULES


def _run(prompt: str, settings: Settings, convert: Callable[[Any, str], T], what: str) -> T:
    payload = gemini.generate_content(prompt, settings)
    raw_text = gemini.first_candidate_text(payload)
    logger.debug("Model output for %s: %s", what, raw_text)
    try:
        return convert(parse_model_json(raw_text), raw_text)
    except LeadRankError as exc:
        logger.debug("Rejected %s output: %s\n%s", what, exc, exc.raw)
        raise


class QualityAnalyzer:
    """Scores how complete and convincing a place listing is."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def build_prompt(self, record: PlaceRecord, keyword: str) -> str:
        return QUALITY_PROMPT_TEMPLATE.format(
            name=record.name or record.place_id,
            keyword=keyword,
            record_json=json.dumps(record.raw, ensure_ascii=False, indent=2),
        )

    def analyze(self, record: PlaceRecord, keyword: str) -> QualityAssessment:
        prompt = self.build_prompt(record, keyword)
        return _run(prompt, self.settings, to_quality_assessment, f"quality of {record.place_id}")


class AddressAnalyzer:
    """Grades a formatted postal address."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def build_prompt(self, address: str) -> str:
        return ADDRESS_PROMPT_TEMPLATE.format(address=address)

    def analyze(self, address: str) -> AddressAssessment:
        if not address or not address.strip():
            raise LeadRankError(ErrorKind.RESPONSE_PARSE, "an address is required for analysis")
        return _run(self.build_prompt(address), self.settings, to_address_assessment, f"address {address!r}")
