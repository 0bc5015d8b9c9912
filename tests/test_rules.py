from dataclasses import replace

from leadrank.core.models import EnrichedLead, PlaceRecord, QualityAssessment, ServiceSuggestionRule
from leadrank.scoring import rules

COMPLETE = PlaceRecord(
    place_id="pid",
    name="Acme",
    address="Main St 1",
    phone="123",
    website="https://example.com",
    opening_hours=("Monday: 8AM-6PM",),
    photo_count=4,
    rating=4.7,
    review_count=120,
    categories=("bakery", "food", "store"),
)


def _lead(record=COMPLETE, score=90):
    return EnrichedLead(record=record, quality=QualityAssessment(score=score) if score is not None else None)


def test_complete_listing_needs_nothing():
    assert rules.suggest_services(_lead()) == frozenset()


def test_missing_website_and_phone_suggest_website_and_listing_update():
    lead = _lead(replace(COMPLETE, website=None, phone=None, rating=None, review_count=None))

    services = rules.suggest_services(lead)

    assert rules.WEBSITE_CREATION in services
    assert rules.LISTING_UPDATE in services


def test_low_quality_score_triggers_listing_update():
    assert rules.suggest_services(_lead(score=69)) == {rules.LISTING_UPDATE}
    assert rules.suggest_services(_lead(score=70)) == frozenset()


def test_missing_quality_assessment_does_not_trigger_listing_update():
    assert rules.suggest_services(_lead(score=None)) == frozenset()


def test_sparse_listing_fields_trigger_listing_update():
    for change in (
        {"opening_hours": None},
        {"photo_count": 0},
        {"address": None},
        {"categories": ("bakery", "food")},
    ):
        assert rules.LISTING_UPDATE in rules.suggest_services(_lead(replace(COMPLETE, **change)))


def test_rating_and_review_rules():
    assert rules.suggest_services(_lead(replace(COMPLETE, rating=3.4))) == {rules.CUSTOMER_SATISFACTION}
    assert rules.suggest_services(_lead(replace(COMPLETE, rating=None))) == frozenset()
    assert rules.suggest_services(_lead(replace(COMPLETE, review_count=4))) == {rules.DIGITAL_MARKETING}
    assert rules.suggest_services(_lead(replace(COMPLETE, review_count=None))) == {rules.DIGITAL_MARKETING}


def test_evaluation_is_pure_and_order_independent():
    lead = _lead(replace(COMPLETE, website=None, rating=2.0), score=30)

    first = rules.suggest_services(lead)
    second = rules.suggest_services(lead)
    reversed_rules = rules.suggest_services(lead, tuple(reversed(rules.SERVICE_RULES)))

    assert first == second == reversed_rules
    assert first == {rules.WEBSITE_CREATION, rules.LISTING_UPDATE, rules.CUSTOMER_SATISFACTION}


def test_custom_rules_and_ordering():
    custom = (
        ServiceSuggestionRule("Always", lambda lead: True),
        ServiceSuggestionRule("Never", lambda lead: False),
    )
    assert rules.suggest_services(_lead(), custom) == {"Always"}
    assert rules.ordered_services(frozenset({rules.DIGITAL_MARKETING, rules.WEBSITE_CREATION, "Zeta"})) == [
        rules.WEBSITE_CREATION,
        rules.DIGITAL_MARKETING,
        "Zeta",
    ]
