"""Ordering of enriched leads by their listing quality score."""

from typing import Iterable, List

from leadrank.core.config import RankOrder
from leadrank.core.models import EnrichedLead


def rank_leads(leads: Iterable[EnrichedLead], order: RankOrder = RankOrder.ASCENDING) -> List[EnrichedLead]:
    """Sort scored leads by score and append unscored ones in their input order.

    ``RankOrder.ASCENDING`` puts the weakest listings, the best sales leads, first.
    Both directions are stable for equal scores.
    """
    scored: List[EnrichedLead] = []
    unscored: List[EnrichedLead] = []
    for lead in leads:
        (unscored if lead.score is None else scored).append(lead)

    scored.sort(key=lambda lead: lead.score, reverse=order is RankOrder.DESCENDING)
    return scored + unscored
