"""Import job controller that turns raw rows into validated, enriched lead records."""
from __future__ import annotations

import logging
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, MutableMapping, Optional, Sequence, Set

from ..collaborators.base import CollaboratorError, EnricherProtocol, ValidatorProtocol
from ..detector import FieldMappingDetector
from ..merge import merge_result, merge_results
from ..models import EnrichmentResult, FieldMapping, ImportJob, JobState, LeadRecord, ValidationOutcome, utcnow
from .errors import ImportJobFailedError, InvalidJobStateError
from .surface import IngestionSurface

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[ImportJob], None]


@dataclass(frozen=True)
class ImportSettings:
    """Batching and fan-out options for collaborator calls."""

    batch_size: int = 25
    concurrent: bool = False
    max_workers: Optional[int] = None


def _clean_cell(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _batched(items: Sequence[LeadRecord], size: int) -> Iterable[List[LeadRecord]]:
    for start in range(0, len(items), size):
        yield list(items[start : start + size])


class ImportJobController:
    """Owns one :class:`ImportJob` and a reference to the lead working set."""

    def __init__(
        self,
        job: ImportJob,
        *,
        validator: ValidatorProtocol,
        enricher: Optional[EnricherProtocol] = None,
        leads: Optional[MutableMapping[str, LeadRecord]] = None,
        surface: Optional[IngestionSurface] = None,
        settings: Optional[ImportSettings] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> None:
        self._job = job
        self._validator = validator
        self._enricher = enricher
        self._leads = leads if leads is not None else {}
        self._surface = surface or IngestionSurface()
        self._settings = settings or ImportSettings()
        self._progress_callback = progress_callback
        self._row_numbers: Dict[str, int] = {}
        self._valid_ids: List[str] = []
        self._enriched_ids: Set[str] = set()

    @classmethod
    def create(
        cls,
        source_name: str,
        total_records: int,
        *,
        job_id: Optional[str] = None,
        source_type: str = "csv",
        **kwargs: Any,
    ) -> "ImportJobController":
        """Create a controller owning a fresh ``pending`` job."""

        if total_records < 0:
            raise ValueError("total_records cannot be negative")
        job = ImportJob(
            id=job_id or uuid.uuid4().hex[:12],
            source_name=source_name,
            total_records=total_records,
            source_type=source_type,
        )
        LOGGER.info("Created import job %s for %s (%s records)", job.id, source_name, total_records)
        return cls(job, **kwargs)

    # --- Observers ---

    @property
    def job(self) -> ImportJob:
        return self._job

    @property
    def leads(self) -> MutableMapping[str, LeadRecord]:
        return self._leads

    @property
    def surface(self) -> IngestionSurface:
        return self._surface

    def snapshot(self) -> ImportJob:
        return self._job.snapshot()

    def job_leads(self) -> List[LeadRecord]:
        """Leads created by this job that are still in the working set."""

        return [self._leads[lead_id] for lead_id in self._row_numbers if lead_id in self._leads]

    # --- Lifecycle ---

    def start(self) -> None:
        with self._job.lock:
            self._require_state(JobState.PENDING, "start")
            self._surface.claim(self._job)
            self._job.state = JobState.PROCESSING
            self._job.started_at = utcnow()
        LOGGER.info("Import job %s started on surface %s", self._job.id, self._surface.name)

    def complete(self) -> None:
        with self._job.lock:
            self._require_state(JobState.PROCESSING, "complete")
            if self._job.processed_records != self._job.total_records:
                LOGGER.warning(
                    "Import job %s completing with %s of %s records processed",
                    self._job.id,
                    self._job.processed_records,
                    self._job.total_records,
                )
            self._job.state = JobState.COMPLETED
            self._job.completed_at = utcnow()
        self._surface.release(self._job)
        LOGGER.info(
            "Import job %s completed: %s valid, %s invalid, %s enriched",
            self._job.id,
            self._job.valid_records,
            self._job.invalid_records,
            self._job.enriched_records,
        )

    def fail(self, message: str) -> None:
        """Mark the job ``failed`` with one error; counters keep their values."""

        with self._job.lock:
            self._require_state(JobState.PROCESSING, "fail")
            self._job.errors.append(message)
            self._job.state = JobState.FAILED
            self._job.completed_at = utcnow()
        self._surface.release(self._job)
        LOGGER.error("Import job %s failed: %s", self._job.id, message)

    def cancel(self, reason: str = "cancelled") -> None:
        self.fail(f"Import cancelled: {reason}")

    # --- Row handling ---

    def build_lead(self, row_number: int, headers: Sequence[str], row: Sequence[Any], mapping: FieldMapping) -> LeadRecord:
        """Create a lead from one row; the last header mapped to a field wins."""

        lead = LeadRecord(id=f"{self._job.id}-{row_number}", source=self._job.source_name)
        for header, cell in zip(headers, row):
            lead.set(mapping.field_for(header), _clean_cell(cell))
        return lead

    def record_outcome(self, outcome: ValidationOutcome) -> None:
        """Apply one validation verdict to the counters."""

        row_number = self._row_numbers.get(outcome.lead_id)
        label = f"Row {row_number}" if row_number is not None else f"Lead {outcome.lead_id}"
        if outcome.valid:
            if self._apply_outcome(True):
                self._valid_ids.append(outcome.lead_id)
        else:
            self._apply_outcome(False, f"{label}: {outcome.message or 'validation failed'}")

    def _apply_outcome(self, valid: bool, error: Optional[str] = None) -> bool:
        """Count one row; outcomes arriving after the job ended are dropped."""

        with self._job.lock:
            if self._job.is_terminal:
                LOGGER.debug("Dropping outcome for import job %s in state %s", self._job.id, self._job.state.value)
                return False
            self._require_state(JobState.PROCESSING, "record an outcome")
            if self._job.processed_records >= self._job.total_records:
                raise InvalidJobStateError(
                    f"Import job {self._job.id} already processed all {self._job.total_records} records"
                )
            self._job.processed_records += 1
            if valid:
                self._job.valid_records += 1
            else:
                self._job.invalid_records += 1
                self._job.errors.append(error or "invalid record")
            snapshot = self._job.snapshot() if self._progress_callback else None
        if error:
            LOGGER.warning("Import job %s: %s", self._job.id, error)
        if snapshot is not None:
            self._progress_callback(snapshot)
        return True

    def process(self, headers: Sequence[str], rows: Iterable[Sequence[Any]], mapping: FieldMapping) -> ImportJob:
        """Run every row through validation and enrichment, then complete the job.

        Raises :class:`ImportJobFailedError` when the validation collaborator
        cannot be reached before any row has been processed.
        """

        headers = list(headers)
        rows = list(rows)
        remaining = self._job.total_records - self._job.processed_records
        if len(rows) > remaining:
            raise ValueError(f"Import job {self._job.id} expects {remaining} more rows but received {len(rows)}")

        if self._job.state is JobState.PENDING:
            self.start()
        self._require_state(JobState.PROCESSING, "process rows")

        executor: Optional[ThreadPoolExecutor] = None
        futures: List[Future] = []
        validated_once = False
        batch: List[LeadRecord] = []

        def flush() -> None:
            nonlocal executor, validated_once
            pending = list(batch)
            batch.clear()
            if not pending or self._job.is_terminal:
                return
            if self._settings.concurrent and validated_once:
                if executor is None:
                    executor = ThreadPoolExecutor(max_workers=self._settings.max_workers)
                futures.append(executor.submit(self._validate_batch, pending))
                return
            validated_once = True
            self._validate_batch(pending)

        try:
            for row_number, row in enumerate(rows, start=1):
                if self._job.is_terminal:
                    LOGGER.info("Import job %s stopped after %s rows", self._job.id, self._job.processed_records)
                    break
                if len(row) != len(headers):
                    self._apply_outcome(
                        False, f"Row {row_number}: expected {len(headers)} cells but found {len(row)}"
                    )
                    continue
                lead = self.build_lead(row_number, headers, row, mapping)
                self._row_numbers[lead.id] = row_number
                self._leads[lead.id] = lead
                batch.append(lead)
                if len(batch) >= self._settings.batch_size:
                    flush()
            flush()
            for future in futures:
                future.result()
            if self._enricher is not None and not self._job.is_terminal:
                self._enrich_valid_leads()
        except ImportJobFailedError:
            raise
        except Exception as exc:
            if not self._job.is_terminal:
                self.fail(f"Import aborted by unexpected error: {exc}")
            raise
        finally:
            if executor is not None:
                executor.shutdown(wait=True, cancel_futures=True)

        if self._job.is_terminal:
            return self.snapshot()

        self.complete()
        return self.snapshot()

    def _validate_batch(self, batch: List[LeadRecord]) -> None:
        name = getattr(self._validator, "name", self._validator.__class__.__name__)
        LOGGER.debug("Validating %s leads with %s", len(batch), name)
        try:
            outcomes = list(self._validator.validate(batch))
        except CollaboratorError as exc:
            with self._job.lock:
                fatal = self._job.processed_records == 0
            if fatal:
                message = f"Validation service '{name}' could not be reached: {exc}"
                self.fail(message)
                raise ImportJobFailedError(message, self.snapshot()) from exc
            for lead in batch:
                if self._job.is_terminal:
                    return
                self._apply_outcome(
                    False, f"Row {self._row_numbers[lead.id]}: validation service '{name}' failed: {exc}"
                )
            return
        except Exception:
            LOGGER.exception("Validation service %s raised unexpectedly", name)
            raise

        by_id = {outcome.lead_id: outcome for outcome in outcomes}
        batch_ids = {lead.id for lead in batch}
        for unknown in set(by_id) - batch_ids:
            LOGGER.warning("Ignoring validation outcome for unknown lead %s", unknown)

        for lead in batch:
            if self._job.is_terminal:
                return
            outcome = by_id.get(lead.id)
            if outcome is None:
                outcome = ValidationOutcome(lead_id=lead.id, valid=False, message="no validation result returned")
            elif outcome.updates:
                merge_result(lead, outcome)
            self.record_outcome(outcome)

    # --- Enrichment ---

    def _enrich_valid_leads(self) -> None:
        candidates = [self._leads[lead_id] for lead_id in self._valid_ids if lead_id in self._leads]
        if not candidates:
            return
        name = getattr(self._enricher, "name", self._enricher.__class__.__name__)
        for batch in _batched(candidates, self._settings.batch_size):
            try:
                results = self._enricher.enrich(batch)
            except CollaboratorError as exc:
                message = f"Enrichment service '{name}' failed for {len(batch)} leads: {exc}"
                with self._job.lock:
                    self._job.errors.append(message)
                LOGGER.warning("Import job %s: %s", self._job.id, message)
                continue
            self.attach_enrichment(results)

    def attach_enrichment(self, results: Iterable[EnrichmentResult]) -> int:
        """Merge enrichment results for this job's leads; returns newly enriched count.

        Each lead is counted once no matter how often its result is applied.
        Results may still arrive after the job has completed.
        """

        counted = 0
        with self._job.lock:
            if self._job.state not in (JobState.PROCESSING, JobState.COMPLETED):
                raise InvalidJobStateError(
                    f"Cannot attach enrichment: import job {self._job.id} is {self._job.state.value}"
                )
            for result in results:
                if result.lead_id not in self._row_numbers or result.lead_id not in self._leads:
                    LOGGER.debug("Skipping enrichment for lead %s outside job %s", result.lead_id, self._job.id)
                    continue
                merge_results(self._leads, [result])
                if result.enriched and result.lead_id not in self._enriched_ids:
                    self._enriched_ids.add(result.lead_id)
                    self._job.enriched_records += 1
                    counted += 1
        return counted

    def _require_state(self, expected: JobState, action: str) -> None:
        if self._job.state is not expected:
            raise InvalidJobStateError(
                f"Cannot {action}: import job {self._job.id} is {self._job.state.value}, expected {expected.value}"
            )


def run_import(
    headers: Sequence[str],
    rows: Sequence[Sequence[Any]],
    *,
    source_name: str,
    validator: ValidatorProtocol,
    mapping: Optional[FieldMapping] = None,
    detector: Optional[FieldMappingDetector] = None,
    **kwargs: Any,
) -> ImportJobController:
    """Detect a mapping if needed, then create, start and process one import job.

    The returned controller holds the finished job and the lead working set.
    """

    if mapping is None:
        mapping = (detector or FieldMappingDetector()).detect(headers)
        LOGGER.info("Detected mapping for %s headers (confidence %.2f)", len(headers), mapping.overall_confidence)
    controller = ImportJobController.create(source_name, len(rows), validator=validator, **kwargs)
    controller.process(headers, rows, mapping)
    return controller


__all__ = ["ImportJobController", "ImportSettings", "run_import"]
