"""Tests for the offline rule-based validator and echo enricher."""

from lead_ingest.collaborators.sample import EchoEnricher, RuleBasedValidator
from lead_ingest.models import LeadRecord


def test_rule_based_validator_reports_problems() -> None:
    validator = RuleBasedValidator()
    leads = [
        LeadRecord(id="1", source="t", name="Ada", email="Ada@Example.com", phone="+44 20 7946 0000"),
        LeadRecord(id="2", source="t", name="Bob", email="not-an-email"),
        LeadRecord(id="3", source="t", email="c@example.com", phone="12"),
    ]

    first, second, third = validator.validate(leads)

    assert first.valid
    assert first.updates == {"email": "ada@example.com"}
    assert not second.valid
    assert "invalid email" in second.message
    assert not third.valid
    assert "missing name" in third.message
    assert "invalid phone" in third.message


def test_rule_based_validator_accepts_custom_required_fields() -> None:
    validator = RuleBasedValidator(required_fields=["company"])

    (outcome,) = validator.validate([LeadRecord(id="1", source="t", name="Ada")])

    assert outcome.message == "missing company"


def test_echo_enricher_derives_company_from_business_domain() -> None:
    enricher = EchoEnricher()
    leads = [
        LeadRecord(id="1", source="t", name="Ada", email="ada@analytical-engines.co.uk"),
        LeadRecord(id="2", source="t", name="Bob", email="bob@gmail.com"),
    ]

    business, personal = enricher.enrich(leads)

    assert business.enriched["company"] == "Analytical Engines"
    assert "company" in business.new_fields
    assert business.confidence == 0.5
    assert "company" not in personal.new_fields
    assert personal.enriched["qualificationScore"] == personal.enrichment_score
