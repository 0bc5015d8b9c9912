"""CLI job that discovers nearby businesses, grades them and writes a ranked report."""

from __future__ import annotations

import argparse
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from leadrank.analysis.analyzers import AddressAnalyzer, QualityAnalyzer
from leadrank.core.config import Settings, get_settings
from leadrank.core.errors import ErrorKind, LeadRankError
from leadrank.core.models import EnrichedLead, FetchFailure, PlaceRecord
from leadrank.pipeline.discovery import fetch_place_records, iter_result_pages, resolve_location
from leadrank.report.writer import write_results
from leadrank.scoring.ranking import rank_leads
from leadrank.scoring.rules import suggest_services

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    leads: List[EnrichedLead]
    failures: List[FetchFailure] = field(default_factory=list)
    json_path: Optional[Path] = None
    markdown_path: Optional[Path] = None


def collect_records(keyword: str, settings: Settings, radius: int, center_address: str) -> Tuple[List[PlaceRecord], List[FetchFailure]]:
    coordinate = resolve_location(center_address, settings)

    records: List[PlaceRecord] = []
    failures: List[FetchFailure] = []
    for page in iter_result_pages(coordinate, keyword, radius, settings):
        page_records, page_failures = fetch_place_records(page, settings)
        records.extend(page_records)
        failures.extend(page_failures)

    logger.info("Collected %d place records (%d detail failures)", len(records), len(failures))
    return records, failures


def enrich_records(
    records: Sequence[PlaceRecord],
    keyword: str,
    settings: Settings,
    quality_analyzer: Optional[QualityAnalyzer] = None,
    address_analyzer: Optional[AddressAnalyzer] = None,
) -> List[EnrichedLead]:
    """Run both analyzers for every record concurrently.

    A failed call leaves that assessment absent and records the reason on the lead.
    """
    quality_analyzer = quality_analyzer or QualityAnalyzer(settings)
    address_analyzer = address_analyzer or AddressAnalyzer(settings)
    if not records:
        return []

    with ThreadPoolExecutor(max_workers=settings.analysis_workers) as pool:
        submitted: List[Tuple[PlaceRecord, Future, Optional[Future]]] = []
        for record in records:
            quality_future = pool.submit(quality_analyzer.analyze, record, keyword)
            address_future = pool.submit(address_analyzer.analyze, record.address) if record.address else None
            submitted.append((record, quality_future, address_future))

        leads: List[EnrichedLead] = []
        for record, quality_future, address_future in submitted:
            errors: Dict[str, str] = {}
            quality = _settle(quality_future, record, "quality", errors)
            if address_future is None:
                errors["address"] = "place has no formatted address"
                address = None
            else:
                address = _settle(address_future, record, "address", errors)
            leads.append(EnrichedLead(record=record, quality=quality, address=address, errors=errors))
    return leads


def _settle(future: Future, record: PlaceRecord, name: str, errors: Dict[str, str]):
    try:
        return future.result()
    except LeadRankError as exc:
        logger.warning("%s analysis failed for %s: %s", name.capitalize(), record.place_id, exc)
        errors[name] = str(exc)
        return None


def run_search_job(
    *,
    keyword: str,
    settings: Settings,
    radius: Optional[int] = None,
    center_address: Optional[str] = None,
) -> RunResult:
    keyword = (keyword or "").strip()
    if not keyword:
        raise ValueError("A search keyword is required")

    radius = radius or settings.radius
    center_address = center_address or settings.center_address
    logger.info("Searching %r within %dm of %r", keyword, radius, center_address)

    records, failures = collect_records(keyword, settings, radius, center_address)
    leads = enrich_records(records, keyword, settings)
    ranked = [replace(lead, suggested_services=suggest_services(lead)) for lead in rank_leads(leads, settings.rank_order)]

    json_path, markdown_path = write_results(ranked, settings.output_dir)
    analysed = sum(1 for lead in ranked if lead.quality is not None)
    logger.info("Completed run: leads=%d analysed=%d detail_failures=%d", len(ranked), analysed, len(failures))
    return RunResult(leads=ranked, failures=failures, json_path=json_path, markdown_path=markdown_path)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Find and rank local business leads by listing quality")
    parser.add_argument("keyword", help="Search keyword, e.g. 'bakery'")
    parser.add_argument("--radius", dest="radius", type=int, help="Search radius in meters (overrides RADIUS)")
    parser.add_argument("--center", dest="center_address", help="Center address (overrides CENTER_ADDRESS)")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")

    try:
        settings = get_settings()
        if settings.dev:
            logging.getLogger().setLevel(logging.DEBUG)
        run_search_job(
            keyword=args.keyword,
            settings=settings,
            radius=args.radius,
            center_address=args.center_address,
        )
    except LeadRankError as exc:
        logger.error("Run aborted: %s", exc)
        raise SystemExit(2 if exc.kind is ErrorKind.CONFIGURATION else 1) from exc
    except ValueError as exc:
        logger.error("Invalid input: %s", exc)
        raise SystemExit(2) from exc


if __name__ == "__main__":
    main()
