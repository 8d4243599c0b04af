"""Exceptions raised by import job controllers and ingestion surfaces."""
from __future__ import annotations

from typing import Optional

from ..models import ImportJob


class ImportJobError(RuntimeError):
    """Base class for import job failures."""


class InvalidJobStateError(ImportJobError):
    """Raised when an operation is not allowed in the job's lifecycle state."""


class JobAlreadyRunningError(ImportJobError):
    """Raised when a surface already has a job in ``processing``."""

    def __init__(self, surface: str, active_job_id: str) -> None:
        super().__init__(f"Surface '{surface}' is busy with import job {active_job_id}")
        self.surface = surface
        self.active_job_id = active_job_id


class ImportJobFailedError(ImportJobError):
    """Raised when a job cannot continue and has been marked ``failed``."""

    def __init__(self, message: str, job: Optional[ImportJob] = None) -> None:
        super().__init__(message)
        self.job = job
