"""Known header aliases for each canonical lead field.

The catalog is an ordered tuple rather than a mapping: when two aliases score
the same similarity against a header, the pair that appears first here wins.
"""
from __future__ import annotations

from typing import Iterator, Tuple

from .models import CanonicalField

FALLBACK_FIELD = CanonicalField.NOTES

FIELD_PATTERNS: Tuple[Tuple[CanonicalField, Tuple[str, ...]], ...] = (
    (
        CanonicalField.NAME,
        (
            "name", "full_name", "fullname", "first_name", "last_name", "contact_name", "person_name",
            "customer_name", "client_name", "lead_name", "contact", "person",
        ),
    ),
    (
        CanonicalField.EMAIL,
        (
            "email", "e_mail", "email_address", "emailaddress", "mail", "contact_email",
            "primary_email", "work_email", "business_email",
        ),
    ),
    (
        CanonicalField.COMPANY,
        (
            "company", "company_name", "organization", "org", "business", "firm", "enterprise",
            "corporation", "corp", "inc", "ltd", "llc", "workplace", "employer",
        ),
    ),
    (
        CanonicalField.PHONE,
        (
            "phone", "telephone", "phone_number", "phonenumber", "mobile", "cell", "cellphone",
            "work_phone", "business_phone", "contact_phone", "tel",
        ),
    ),
    (
        CanonicalField.JOB_TITLE,
        (
            "title", "job_title", "jobtitle", "position", "role", "job", "occupation",
            "designation", "job_role", "work_title", "professional_title",
        ),
    ),
    (
        CanonicalField.INDUSTRY,
        (
            "industry", "sector", "business_type", "vertical", "market", "field",
            "industry_type", "business_sector", "market_sector",
        ),
    ),
    (
        CanonicalField.COMPANY_SIZE,
        (
            "size", "company_size", "employees", "employee_count", "headcount", "team_size",
            "staff_count", "workforce", "company_employees", "employee_number",
        ),
    ),
    (
        CanonicalField.LINKEDIN,
        (
            "linkedin", "linkedin_url", "linkedin_profile", "linkedin_link", "social_linkedin",
            "linkedin_page", "linkedin_account",
        ),
    ),
    (
        CanonicalField.BUDGET,
        (
            "budget", "budget_range", "spending", "investment", "budget_amount",
            "budget_size", "investment_amount",
        ),
    ),
    (
        CanonicalField.AUTHORITY,
        (
            "authority", "decision_maker", "decision_making", "role_level", "seniority",
            "management_level", "decision_power", "authority_level",
        ),
    ),
    (
        CanonicalField.NEED,
        (
            "need", "requirement", "pain_point", "challenge", "problem", "objective",
            "goal", "business_need", "use_case",
        ),
    ),
    (
        CanonicalField.TIMELINE,
        (
            "timeline", "timeframe", "deadline", "urgency", "timeline_requirement",
            "project_timeline", "implementation_timeline", "time_constraint",
        ),
    ),
)

CANONICAL_FIELDS: Tuple[CanonicalField, ...] = tuple(canonical for canonical, _ in FIELD_PATTERNS) + (
    FALLBACK_FIELD,
)


def iter_patterns() -> Iterator[Tuple[CanonicalField, str]]:
    """Yield ``(field, alias)`` pairs in catalog order."""

    for canonical, aliases in FIELD_PATTERNS:
        for alias in aliases:
            yield canonical, alias


def aliases_for(canonical: CanonicalField) -> Tuple[str, ...]:
    for candidate, aliases in FIELD_PATTERNS:
        if candidate is canonical:
            return aliases
    return ()


__all__ = ["CANONICAL_FIELDS", "FALLBACK_FIELD", "FIELD_PATTERNS", "aliases_for", "iter_patterns"]
