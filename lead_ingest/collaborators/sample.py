"""Collaborator implementations that operate on local data only."""
from __future__ import annotations

import re
from typing import Iterable, List, Optional, Sequence

from ..models import CanonicalField, EnrichmentResult, LeadRecord, ValidationOutcome

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[a-z]{2,}$", re.IGNORECASE)
_FREE_MAIL_DOMAINS = {"gmail.com", "yahoo.com", "hotmail.com", "outlook.com", "icloud.com", "aol.com"}


class RuleBasedValidator:
    """Checks required fields and the shape of email addresses and phone numbers."""

    name = "rules"

    def __init__(
        self,
        required_fields: Optional[Iterable[str]] = None,
        min_phone_digits: int = 7,
    ) -> None:
        names = required_fields if required_fields is not None else ("name", "email")
        self._required = [CanonicalField.parse(name) for name in names]
        self._min_phone_digits = min_phone_digits

    def validate(self, leads: Sequence[LeadRecord]) -> List[ValidationOutcome]:
        return [self._validate_one(lead) for lead in leads]

    def _validate_one(self, lead: LeadRecord) -> ValidationOutcome:
        problems: List[str] = []
        for canonical in self._required:
            if not lead.get(canonical):
                problems.append(f"missing {canonical.value}")

        updates = {}
        if lead.email:
            email = lead.email.strip().lower()
            if not _EMAIL_PATTERN.match(email):
                problems.append(f"invalid email '{lead.email}'")
            elif email != lead.email:
                updates["email"] = email

        if lead.phone:
            digits = "".join(char for char in lead.phone if char.isdigit())
            if len(digits) < self._min_phone_digits:
                problems.append(f"invalid phone '{lead.phone}'")

        if problems:
            return ValidationOutcome(lead_id=lead.id, valid=False, message="; ".join(problems))
        return ValidationOutcome(lead_id=lead.id, valid=True, updates=updates)


class EchoEnricher:
    """Derives missing details from data already present on the lead."""

    name = "echo"

    def enrich(self, leads: Sequence[LeadRecord]) -> List[EnrichmentResult]:
        results: List[EnrichmentResult] = []
        for lead in leads:
            original = lead.to_dict()
            enriched = dict(original)
            company = self._company_from_email(lead.email)
            if company and not lead.company:
                enriched[CanonicalField.COMPANY.value] = company

            filled = sum(1 for canonical in CanonicalField if enriched.get(canonical.value))
            score = round(filled / len(CanonicalField), 2)
            enriched["qualificationScore"] = score
            results.append(
                EnrichmentResult.from_snapshots(
                    lead.id,
                    original,
                    enriched,
                    enrichment_score=score,
                    confidence=0.5 if company else 0.0,
                )
            )
        return results

    @staticmethod
    def _company_from_email(email: Optional[str]) -> Optional[str]:
        if not email or "@" not in email:
            return None
        domain = email.rsplit("@", 1)[1].lower()
        if domain in _FREE_MAIL_DOMAINS:
            return None
        label = domain.split(".")[0]
        return label.replace("-", " ").title() or None
