"""Command line interface for detecting field mappings and running import jobs."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .collaborators import EchoEnricher, RuleBasedValidator
from .config import ConfigurationError, detector_settings, import_settings, load_configuration
from .detector import FieldMappingDetector
from .factory import build_enricher, build_validator
from .io import export_jobs, export_leads, read_table
from .jobs import ImportJobFailedError, IngestionSurface, run_import
from .models import CanonicalField, FieldMapping


def build_parser(prog: Optional[str] = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Map lead spreadsheet columns to canonical fields and import them",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO, WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    detect = subparsers.add_parser("detect", help="Show the detected field mapping for a spreadsheet")
    detect.add_argument("input", help="Path to the input spreadsheet (CSV, TSV or XLSX)")
    detect.add_argument("--config", help="Optional configuration file (YAML or JSON) with detector thresholds")
    detect.add_argument("--json", action="store_true", help="Print the mapping as JSON")

    run = subparsers.add_parser("import", help="Run an import job and export the resulting leads")
    run.add_argument("input", help="Path to the input spreadsheet (CSV, TSV or XLSX)")
    run.add_argument("output", help="Path where the lead records should be written")
    run.add_argument("--config", help="Path to the configuration file (YAML or JSON)")
    run.add_argument("--source-name", help="Provenance recorded on each lead (defaults to the input file name)")
    run.add_argument(
        "--map",
        action="append",
        default=[],
        metavar="HEADER=FIELD",
        help="Override the detected field for a header; may be repeated",
    )
    run.add_argument(
        "--enrich",
        action="store_true",
        help="Enrich valid leads with the local echo enricher when no enricher is configured",
    )
    run.add_argument("--jobs-output", help="Optional path for a job summary (CSV or XLSX)")
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def apply_overrides(mapping: FieldMapping, overrides: List[str]) -> FieldMapping:
    for override in overrides:
        header, separator, target = override.rpartition("=")
        if not separator or not header:
            raise ValueError(f"Mapping override '{override}' must look like HEADER=FIELD")
        mapping = mapping.with_override(header, CanonicalField.parse(target))
    return mapping


def _format_mapping(mapping: FieldMapping) -> str:
    lines = []
    width = max((len(header) for header in mapping.mapping), default=0)
    for header, canonical in mapping.mapping.items():
        confidence = mapping.header_confidence.get(header, 0.0)
        lines.append(f"{header.ljust(width)}  ->  {canonical.value:<12} {confidence:.2f}")
    lines.append(f"overall confidence: {mapping.overall_confidence:.2f}")
    lines.append("suggestions: " + ", ".join(canonical.value for canonical in mapping.suggestions))
    return "\n".join(lines)


def _run_detect(args: argparse.Namespace) -> int:
    config: Dict[str, Any] = load_configuration(args.config) if args.config else {}
    table = read_table(args.input)
    mapping = FieldMappingDetector(detector_settings(config)).detect(table.headers)
    if args.json:
        print(json.dumps(mapping.to_dict(), indent=2))
    else:
        print(_format_mapping(mapping))
    return 0


def _run_import(args: argparse.Namespace) -> int:
    config: Dict[str, Any] = load_configuration(args.config) if args.config else {}
    validator = build_validator(config) or RuleBasedValidator()
    enricher = build_enricher(config)
    if enricher is None and args.enrich:
        enricher = EchoEnricher()

    table = read_table(args.input)
    mapping = FieldMappingDetector(detector_settings(config)).detect(table.headers)
    mapping = apply_overrides(mapping, args.map)
    logging.info("Field mapping confidence %.2f for %s headers", mapping.overall_confidence, len(table.headers))

    surface = IngestionSurface(name="cli")
    try:
        controller = run_import(
            table.headers,
            table.rows,
            source_name=args.source_name or Path(args.input).name,
            validator=validator,
            enricher=enricher,
            mapping=mapping,
            surface=surface,
            settings=import_settings(config),
        )
    except ImportJobFailedError as exc:
        logging.error("Import failed: %s", exc)
        if args.jobs_output and exc.job is not None:
            export_jobs(args.jobs_output, [exc.job])
        return 1

    job = controller.snapshot()
    export_leads(args.output, controller.job_leads())
    if args.jobs_output:
        export_jobs(args.jobs_output, [job])

    logging.info(
        "Processed %s of %s records: %s valid, %s invalid, %s enriched",
        job.processed_records,
        job.total_records,
        job.valid_records,
        job.invalid_records,
        job.enriched_records,
    )
    for error in job.errors:
        logging.warning("%s", error)
    logging.info("Lead records written to %s", Path(args.output).resolve())
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    try:
        if args.command == "detect":
            return _run_detect(args)
        return _run_import(args)
    except (ConfigurationError, ValueError, KeyError) as exc:
        logging.error("%s", exc)
        return 2


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
