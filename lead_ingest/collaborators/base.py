"""Interfaces and error types for the external validation and enrichment services."""
from __future__ import annotations

from typing import Protocol, Sequence

from ..models import EnrichmentResult, LeadRecord, ValidationOutcome


class CollaboratorError(RuntimeError):
    """Raised when an external collaborator cannot produce a response."""


class CollaboratorUnavailableError(CollaboratorError):
    """The collaborator could not be reached at all."""


class CollaboratorTimeoutError(CollaboratorError):
    """The collaborator did not answer in time."""


class ValidatorProtocol(Protocol):
    """Validation service: returns one outcome per submitted lead."""

    name: str

    def validate(self, leads: Sequence[LeadRecord]) -> Sequence[ValidationOutcome]:  # pragma: no cover - runtime protocol
        """Return pass/fail and an optional sparse overlay for every lead."""


class EnricherProtocol(Protocol):
    """Enrichment service: returns results for the leads it could enrich."""

    name: str

    def enrich(self, leads: Sequence[LeadRecord]) -> Sequence[EnrichmentResult]:  # pragma: no cover - runtime protocol
        """Return enrichment payloads keyed by lead id."""
