"""Import job lifecycle: controller, single-flight surface, and errors."""

from .controller import ImportJobController, ImportSettings, run_import
from .errors import ImportJobError, ImportJobFailedError, InvalidJobStateError, JobAlreadyRunningError
from .surface import IngestionSurface

__all__ = [
    "ImportJobController",
    "ImportJobError",
    "ImportJobFailedError",
    "ImportSettings",
    "IngestionSurface",
    "InvalidJobStateError",
    "JobAlreadyRunningError",
    "run_import",
]
