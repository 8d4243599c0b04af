"""Single-flight guard for an ingestion entry point."""
from __future__ import annotations

import logging
import threading
from typing import Optional

from ..models import ImportJob, JobState
from .errors import JobAlreadyRunningError

LOGGER = logging.getLogger(__name__)


class IngestionSurface:
    """Allows at most one unfinished import job at a time.

    A second claim before that job reaches a terminal state is rejected rather than queued.
    """

    def __init__(self, name: str = "default") -> None:
        self.name = name
        self._lock = threading.Lock()
        self._active: Optional[ImportJob] = None

    @property
    def active_job(self) -> Optional[ImportJob]:
        with self._lock:
            return self._active

    @property
    def is_busy(self) -> bool:
        with self._lock:
            return self._active is not None and self._active.state is JobState.PROCESSING

    def claim(self, job: ImportJob) -> None:
        with self._lock:
            active = self._active
            if active is not None and active is not job and not active.is_terminal:
                raise JobAlreadyRunningError(self.name, active.id)
            self._active = job
        LOGGER.debug("Surface %s claimed by job %s", self.name, job.id)

    def release(self, job: ImportJob) -> None:
        with self._lock:
            if self._active is job:
                self._active = None
                LOGGER.debug("Surface %s released by job %s", self.name, job.id)
