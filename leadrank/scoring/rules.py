"""Rule-based service suggestions attached to each ranked lead."""

from typing import FrozenSet, List, Sequence

from leadrank.core.models import EnrichedLead, ServiceSuggestionRule

WEBSITE_CREATION = "Website Creation"
LISTING_UPDATE = "Listing Update"
CUSTOMER_SATISFACTION = "Customer Satisfaction Consulting"
DIGITAL_MARKETING = "Digital Marketing Boost"

LISTING_SCORE_THRESHOLD = 70
MIN_CATEGORIES = 3
LOW_RATING_THRESHOLD = 3.5
MIN_REVIEWS = 5


def _needs_website(lead: EnrichedLead) -> bool:
    return not lead.record.website


def _needs_listing_update(lead: EnrichedLead) -> bool:
    record = lead.record
    return (
        not record.opening_hours
        or not record.phone
        or record.photo_count == 0
        or not record.address
        or len(record.categories) < MIN_CATEGORIES
        or (lead.score is not None and lead.score < LISTING_SCORE_THRESHOLD)
    )


def _has_low_rating(lead: EnrichedLead) -> bool:
    return lead.record.rating is not None and lead.record.rating < LOW_RATING_THRESHOLD


def _has_few_reviews(lead: EnrichedLead) -> bool:
    return (lead.record.review_count or 0) < MIN_REVIEWS


SERVICE_RULES: Sequence[ServiceSuggestionRule] = (
    ServiceSuggestionRule(WEBSITE_CREATION, _needs_website),
    ServiceSuggestionRule(LISTING_UPDATE, _needs_listing_update),
    ServiceSuggestionRule(CUSTOMER_SATISFACTION, _has_low_rating),
    ServiceSuggestionRule(DIGITAL_MARKETING, _has_few_reviews),
)


def suggest_services(lead: EnrichedLead, rules: Sequence[ServiceSuggestionRule] = SERVICE_RULES) -> FrozenSet[str]:
    return frozenset(rule.name for rule in rules if rule.predicate(lead))


def ordered_services(services: FrozenSet[str], rules: Sequence[ServiceSuggestionRule] = SERVICE_RULES) -> List[str]:
    """Return ``services`` in rule declaration order, for stable reports."""
    known = [rule.name for rule in rules if rule.name in services]
    return known + sorted(services.difference(known))
