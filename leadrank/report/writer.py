"""Persistence of the ranked leads as a JSON dump and a Markdown report."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from leadrank.core.errors import ErrorKind, LeadRankError
from leadrank.core.models import EnrichedLead
from leadrank.scoring.rules import ordered_services

logger = logging.getLogger(__name__)

NOT_PROVIDED = "Not provided"


def lead_to_dict(lead: EnrichedLead) -> Dict[str, Any]:
    return {
        "record": asdict(lead.record),
        "quality": asdict(lead.quality) if lead.quality is not None else None,
        "address": asdict(lead.address) if lead.address is not None else None,
        "score": lead.score,
        "suggested_services": ordered_services(lead.suggested_services),
        "errors": dict(lead.errors),
    }


def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"


def _address_section(lead: EnrichedLead) -> List[str]:
    assessment = lead.address
    if assessment is None:
        return ["- **Address Analysis:** Not available"]

    completeness = assessment.completeness
    lines = [
        "- **Address Analysis:**",
        f"  - **Score:** {assessment.score}",
        f"  - **Overall Quality:** {assessment.overall_quality}",
        "  - **Completeness:**",
        f"    - Street: {_yes_no(completeness.street)}",
        f"    - Number: {_yes_no(completeness.number)}",
        f"    - Neighborhood: {_yes_no(completeness.neighborhood)}",
        f"    - City: {_yes_no(completeness.city)}",
        f"    - State: {_yes_no(completeness.state)}",
        f"    - Postal Code: {_yes_no(completeness.postal_code)}",
        "  - **Formatting:**",
        f"    - Capitalization: {assessment.formatting.capitalization}",
        f"    - Punctuation: {assessment.formatting.punctuation}",
        f"    - Abbreviations: {assessment.formatting.abbreviations}",
        "  - **Accuracy:**",
        f"    - Likely Real: {_yes_no(assessment.accuracy.likely_real)}",
        f"    - Confidence: {assessment.accuracy.confidence}",
    ]
    if assessment.recommendations:
        lines.append("  - **Recommendations:**")
        lines.extend(f"    - {item}" for item in assessment.recommendations)
    else:
        lines.append("  - **Recommendations:** No specific recommendation.")
    return lines


def _quality_section(lead: EnrichedLead) -> List[str]:
    quality = lead.quality
    if quality is None:
        return ["- **Overall Analysis:** Not available"]

    lines = ["- **Overall Analysis:**", f"  - **Score:** {quality.score}"]
    if quality.feedback:
        lines.append("  - **Feedback:**")
        lines.extend(f"    - {item}" for item in quality.feedback)
    else:
        lines.append("  - **Feedback:** No feedback available.")
    lines.append("  - **Consulting Message:**")
    lines.append(f"    - {quality.consulting_message or 'No consulting message available.'}")
    return lines


def render_markdown(leads: Sequence[EnrichedLead]) -> str:
    lines = ["# Business Report", ""]
    for index, lead in enumerate(leads, start=1):
        record = lead.record
        lines.append(f"## {index}. {record.name or record.place_id}")
        lines.append("")
        lines.append(f"- **Phone:** {record.phone or NOT_PROVIDED}")
        lines.append(f"- **Website:** {record.website or NOT_PROVIDED}")
        lines.append("- **Opening Hours:**")
        if record.opening_hours:
            lines.extend(f"  - {day}" for day in record.opening_hours)
        else:
            lines.append(f"  - {NOT_PROVIDED}")
        rating = record.rating if record.rating is not None else "N/A"
        lines.append(f"- **Reviews:** {record.review_count or 0} reviews, average rating: {rating}")
        lines.append(f"- **Photos:** {record.photo_count or 'None'}")
        lines.append(f"- **Address:** {record.address or NOT_PROVIDED}")
        lines.extend(_address_section(lead))
        lines.extend(_quality_section(lead))
        lines.append("- **Suggested Services:**")
        services = ordered_services(lead.suggested_services)
        if services:
            lines.extend(f"  - {name}" for name in services)
        else:
            lines.append("  - No suggested service")
        lines.append("")
    return "\n".join(lines) + "\n"


def write_results(
    leads: Sequence[EnrichedLead],
    output_dir: str,
    *,
    now: Optional[datetime] = None,
) -> Tuple[Path, Path]:
    """Write ``results-<timestamp>.json`` and ``.md``; any failure is fatal."""
    timestamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%dT%H%M%S%f")
    directory = Path(output_dir)
    json_path = directory.joinpath(f"results-{timestamp}.json").resolve()
    markdown_path = directory.joinpath(f"results-{timestamp}.md").resolve()

    try:
        directory.mkdir(parents=True, exist_ok=True)
        with json_path.open("w", encoding="utf-8") as fh:
            json.dump([lead_to_dict(lead) for lead in leads], fh, ensure_ascii=False, indent=2)
        logger.info("JSON results saved to %s", json_path)

        with markdown_path.open("w", encoding="utf-8") as fh:
            fh.write(render_markdown(leads))
        logger.info("Markdown report saved to %s", markdown_path)
    except (OSError, TypeError, ValueError) as exc:
        raise LeadRankError(ErrorKind.OUTPUT_WRITE, f"unable to write results: {exc}") from exc

    return json_path, markdown_path
