"""Unified data models for field mapping, import jobs, and lead records."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# --- Enumerations ---

class CanonicalField(str, Enum):
    """Target attributes a lead record can hold.

    Values keep the external (camelCase) names used when records are
    serialised; :attr:`attribute` gives the matching :class:`LeadRecord` slot.
    """

    NAME = "name"
    EMAIL = "email"
    COMPANY = "company"
    PHONE = "phone"
    JOB_TITLE = "jobTitle"
    INDUSTRY = "industry"
    COMPANY_SIZE = "companySize"
    LINKEDIN = "linkedin"
    BUDGET = "budget"
    AUTHORITY = "authority"
    NEED = "need"
    TIMELINE = "timeline"
    NOTES = "notes"

    @property
    def attribute(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, value: str) -> "CanonicalField":
        """Resolve an external name, attribute name, or member name."""

        text = value.strip()
        for member in cls:
            if text in (member.value, member.attribute, member.name):
                return member
        raise ValueError(f"Unknown canonical field '{value}'")


class LeadStatus(str, Enum):
    NEW = "new"
    QUALIFIED = "qualified"
    CONTACTED = "contacted"
    CONVERTED = "converted"
    LOST = "lost"


class JobState(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.COMPLETED, JobState.FAILED)


# --- Field mapping ---

@dataclass(frozen=True)
class FieldMapping:
    """Result of header detection for one ingestion attempt."""

    mapping: Dict[str, CanonicalField] = field(default_factory=dict)
    header_confidence: Dict[str, float] = field(default_factory=dict)
    overall_confidence: float = 0.0
    suggestions: Tuple[CanonicalField, ...] = ()

    def field_for(self, header: str) -> CanonicalField:
        return self.mapping.get(header, CanonicalField.NOTES)

    def fields(self) -> List[CanonicalField]:
        seen: List[CanonicalField] = []
        for canonical in self.mapping.values():
            if canonical not in seen:
                seen.append(canonical)
        return seen

    def with_override(self, header: str, canonical: CanonicalField | str) -> "FieldMapping":
        """Return a copy with ``header`` pinned to ``canonical`` at full confidence."""

        if not isinstance(canonical, CanonicalField):
            canonical = CanonicalField.parse(canonical)
        if header not in self.mapping:
            raise KeyError(f"Header '{header}' is not part of this mapping")

        mapping = dict(self.mapping)
        mapping[header] = canonical
        confidence = dict(self.header_confidence)
        confidence[header] = 1.0
        suggestions = self.suggestions if canonical in self.suggestions else self.suggestions + (canonical,)
        return replace(self, mapping=mapping, header_confidence=confidence, suggestions=suggestions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mapping": {header: canonical.value for header, canonical in self.mapping.items()},
            "perHeaderConfidence": dict(self.header_confidence),
            "overallConfidence": self.overall_confidence,
            "suggestions": [canonical.value for canonical in self.suggestions],
        }


# --- Lead records ---

_EXTERNAL_NAMES = {
    "qualification_score": "qualificationScore",
    "created_at": "createdAt",
}


@dataclass
class LeadRecord:
    """A lead built from one ingested row and updated by merges."""

    id: str
    source: str
    name: Optional[str] = None
    email: Optional[str] = None
    company: Optional[str] = None
    phone: Optional[str] = None
    job_title: Optional[str] = None
    industry: Optional[str] = None
    company_size: Optional[str] = None
    linkedin: Optional[str] = None
    budget: Optional[str] = None
    authority: Optional[str] = None
    need: Optional[str] = None
    timeline: Optional[str] = None
    notes: Optional[str] = None
    status: LeadStatus = LeadStatus.NEW
    qualification_score: Optional[float] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utcnow)

    def get(self, canonical: CanonicalField) -> Optional[str]:
        return getattr(self, canonical.attribute)

    def set(self, canonical: CanonicalField, value: Optional[str]) -> None:
        setattr(self, canonical.attribute, value)

    def display_name(self) -> str:
        return self.name or self.email or f"(Lead {self.id})"

    def to_dict(self) -> Dict[str, Any]:
        """Serialise using the external field names."""

        row: Dict[str, Any] = {"id": self.id, "source": self.source}
        for canonical in CanonicalField:
            row[canonical.value] = self.get(canonical)
        row["status"] = self.status.value
        row["qualificationScore"] = self.qualification_score
        row["createdAt"] = self.created_at.isoformat()
        row.update({f"metadata.{key}": value for key, value in self.metadata.items()})
        return row


def lead_attribute(key: str) -> Optional[str]:
    """Map an overlay key (external or attribute name) to a :class:`LeadRecord` attribute."""

    try:
        return CanonicalField.parse(key).attribute
    except ValueError:
        pass
    for attribute, external in _EXTERNAL_NAMES.items():
        if key in (attribute, external):
            return attribute
    if key in {"status", "source"}:
        return key
    return None


# --- Collaborator payloads ---

@dataclass(slots=True)
class ValidationOutcome:
    """Per-lead verdict returned by a validation collaborator."""

    lead_id: str
    valid: bool
    message: Optional[str] = None
    updates: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class EnrichmentResult:
    """Per-lead enrichment payload returned by an enrichment collaborator."""

    lead_id: str
    original: Dict[str, Any] = field(default_factory=dict)
    enriched: Dict[str, Any] = field(default_factory=dict)
    enrichment_score: float = 0.0
    new_fields: List[str] = field(default_factory=list)
    confidence: float = 0.0

    @classmethod
    def from_snapshots(
        cls,
        lead_id: str,
        original: Mapping[str, Any],
        enriched: Mapping[str, Any],
        *,
        enrichment_score: float = 0.0,
        confidence: float = 0.0,
    ) -> "EnrichmentResult":
        new_fields = [
            key for key, value in enriched.items() if value is not None and original.get(key) in (None, "")
        ]
        return cls(
            lead_id=lead_id,
            original=dict(original),
            enriched=dict(enriched),
            enrichment_score=enrichment_score,
            new_fields=new_fields,
            confidence=confidence,
        )


# --- Import jobs ---

@dataclass
class ImportJob:
    """Counters and lifecycle state of one ingestion attempt."""

    id: str
    source_name: str
    total_records: int = 0
    source_type: str = "csv"
    state: JobState = JobState.PENDING
    processed_records: int = 0
    valid_records: int = 0
    invalid_records: int = 0
    enriched_records: int = 0
    created_at: datetime = field(default_factory=utcnow)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    errors: List[str] = field(default_factory=list)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal

    @property
    def progress(self) -> float:
        """Processed share as a percentage; 100 for an empty job once started."""

        if self.state is JobState.PENDING:
            return 0.0
        if self.total_records == 0:
            return 100.0
        return self.processed_records / self.total_records * 100

    def snapshot(self) -> "ImportJob":
        """Return a consistent copy taken under the job lock."""

        with self._lock:
            values = {item.name: getattr(self, item.name) for item in fields(self) if item.name != "_lock"}
            values["errors"] = list(self.errors)
            return ImportJob(**values)

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "id": self.id,
                "sourceName": self.source_name,
                "sourceType": self.source_type,
                "lifecycleState": self.state.value,
                "totalRecords": self.total_records,
                "processedRecords": self.processed_records,
                "validRecords": self.valid_records,
                "invalidRecords": self.invalid_records,
                "enrichedRecords": self.enriched_records,
                "progress": self.progress,
                "createdAt": self.created_at.isoformat(),
                "completedAt": self.completed_at.isoformat() if self.completed_at else None,
                "errors": list(self.errors),
            }


__all__ = [
    "CanonicalField",
    "EnrichmentResult",
    "FieldMapping",
    "ImportJob",
    "JobState",
    "LeadRecord",
    "LeadStatus",
    "ValidationOutcome",
    "lead_attribute",
    "utcnow",
]
