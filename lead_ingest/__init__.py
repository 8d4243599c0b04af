"""Top-level package for lead field-mapping detection and import jobs."""

from . import collaborators, jobs, models  # noqa: F401
from .detector import DetectorSettings, FieldMappingDetector, detect_field_mapping, normalize_header
from .jobs import ImportJobController, IngestionSurface, run_import
from .merge import merge_results
from .models import (
    CanonicalField,
    EnrichmentResult,
    FieldMapping,
    ImportJob,
    JobState,
    LeadRecord,
    LeadStatus,
    ValidationOutcome,
)
from .similarity import similarity

__all__ = [
    "CanonicalField",
    "DetectorSettings",
    "EnrichmentResult",
    "FieldMapping",
    "FieldMappingDetector",
    "ImportJob",
    "ImportJobController",
    "IngestionSurface",
    "JobState",
    "LeadRecord",
    "LeadStatus",
    "ValidationOutcome",
    "detect_field_mapping",
    "merge_results",
    "normalize_header",
    "run_import",
    "similarity",
    "collaborators",
    "jobs",
    "models",
]
