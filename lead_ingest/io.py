"""Input/output helpers for raw tabular lead data, lead records, and job summaries."""
from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, List, MutableMapping, Optional, Sequence, Union

import pandas as pd
from openpyxl import load_workbook

from .models import ImportJob, LeadRecord

LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]

_DELIMITED_SUFFIXES = {".csv": ",", ".tsv": "\t"}
_EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xltx", ".xltm"}


class UnsupportedFileTypeError(ValueError):
    """Raised when an unsupported file format is passed to the reader or exporter."""


@dataclass
class TabularData:
    """Header row plus raw data rows; row lengths are left as found."""

    headers: List[str] = field(default_factory=list)
    rows: List[List[str]] = field(default_factory=list)

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[Any]]) -> "TabularData":
        """Split an ordered row sequence into headers (first row) and data rows."""

        iterator = iter(rows)
        try:
            header_row = next(iterator)
        except StopIteration:
            return cls()
        headers = [_cell_text(cell) for cell in header_row]
        data = [[_cell_text(cell) for cell in row] for row in iterator]
        return cls(headers=headers, rows=[row for row in data if not _row_is_blank(row)])

    def __len__(self) -> int:
        return len(self.rows)


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _row_is_blank(row: Sequence[str]) -> bool:
    return all(not cell for cell in row)


def read_table(path: PathLike, *, encoding: str = "utf-8-sig") -> TabularData:
    """Read a CSV, TSV or Excel file into a :class:`TabularData`."""

    file_path = Path(path)
    suffix = file_path.suffix.lower()
    if suffix in _DELIMITED_SUFFIXES:
        with file_path.open(newline="", encoding=encoding) as handle:
            table = TabularData.from_rows(csv.reader(handle, delimiter=_DELIMITED_SUFFIXES[suffix]))
    elif suffix in _EXCEL_SUFFIXES:
        workbook = load_workbook(filename=file_path, read_only=True)
        try:
            table = TabularData.from_rows(_excel_rows(workbook.active))
        finally:
            workbook.close()
    else:
        raise UnsupportedFileTypeError(f"Unsupported input format '{file_path.suffix}'. Use CSV, TSV or Excel")

    LOGGER.debug("Read %s rows with %s headers from %s", len(table.rows), len(table.headers), file_path)
    return table


def _excel_rows(sheet) -> Iterable[List[Any]]:
    """Yield sheet rows padded to the header width; filled cells beyond it are kept."""

    rows = sheet.iter_rows(values_only=True)
    try:
        header = _trim_trailing_empty(next(rows))
    except StopIteration:
        return
    width = len(header)
    yield header
    for row in rows:
        cells = _trim_trailing_empty(row)
        if len(cells) < width:
            cells.extend([None] * (width - len(cells)))
        yield cells


def _trim_trailing_empty(row: Sequence[Any]) -> List[Any]:
    cells = list(row)
    while cells and (cells[-1] is None or cells[-1] == ""):
        cells.pop()
    return cells


# --- Export ---

def leads_to_dataframe(leads: Iterable[LeadRecord]) -> pd.DataFrame:
    """Convert lead records into a :class:`pandas.DataFrame` with external column names."""

    return pd.DataFrame([lead.to_dict() for lead in leads])


def jobs_to_dataframe(jobs: Iterable[ImportJob]) -> pd.DataFrame:
    records = []
    for job in jobs:
        row = job.to_dict()
        row["errors"] = "; ".join(row["errors"])
        records.append(row)
    return pd.DataFrame(records)


def export_leads(
    path: PathLike,
    leads: Iterable[LeadRecord],
    *,
    sheet_name: str = "Leads",
    exporter_kwargs: Optional[MutableMapping[str, object]] = None,
) -> Path:
    """Write lead records to a CSV, TSV or Excel file."""

    output_path = Path(path)
    _write_dataframe(leads_to_dataframe(leads), output_path, sheet_name=sheet_name, exporter_kwargs=exporter_kwargs)
    return output_path


def export_jobs(
    path: PathLike,
    jobs: Sequence[ImportJob],
    *,
    sheet_name: str = "Jobs",
    exporter_kwargs: Optional[MutableMapping[str, object]] = None,
) -> Path:
    """Write import job summaries to a CSV, TSV or Excel file."""

    output_path = Path(path)
    _write_dataframe(jobs_to_dataframe(jobs), output_path, sheet_name=sheet_name, exporter_kwargs=exporter_kwargs)
    return output_path


def _write_dataframe(
    dataframe: pd.DataFrame,
    path: Path,
    *,
    sheet_name: str,
    exporter_kwargs: Optional[MutableMapping[str, object]],
) -> None:
    exporter_kwargs = dict(exporter_kwargs or {})
    suffix = path.suffix.lower()
    path.parent.mkdir(parents=True, exist_ok=True)

    if suffix in _DELIMITED_SUFFIXES:
        exporter_kwargs.setdefault("sep", _DELIMITED_SUFFIXES[suffix])
        dataframe.to_csv(path, index=False, **exporter_kwargs)
        return

    if suffix in _EXCEL_SUFFIXES:
        engine = exporter_kwargs.pop("engine", None) or "openpyxl"
        dataframe.to_excel(path, index=False, sheet_name=sheet_name, engine=engine, **exporter_kwargs)
        return

    raise UnsupportedFileTypeError(f"Unsupported export file extension: {suffix}")


__all__ = [
    "TabularData",
    "UnsupportedFileTypeError",
    "export_jobs",
    "export_leads",
    "jobs_to_dataframe",
    "leads_to_dataframe",
    "read_table",
]
