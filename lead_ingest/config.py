"""Configuration helpers for the detector, import jobs, and collaborators."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional

import yaml

from .detector import DEFAULT_ACCEPT_THRESHOLD, DEFAULT_SUGGEST_THRESHOLD, DetectorSettings
from .jobs import ImportSettings

LOGGER = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Raised when configuration files are missing or malformed."""


_SUPPORTED_EXTENSIONS = {".json", ".yaml", ".yml"}
_COLLABORATOR_SECTIONS = {"validators", "enrichers"}


def load_configuration(path: str | Path) -> Dict[str, Any]:
    """Load configuration data from a JSON or YAML file."""

    file_path = Path(path)
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file '{file_path}' was not found")

    if file_path.suffix.lower() not in _SUPPORTED_EXTENSIONS:
        raise ConfigurationError(
            f"Unsupported configuration format '{file_path.suffix}'. Supported extensions: {sorted(_SUPPORTED_EXTENSIONS)}"
        )

    text = file_path.read_text(encoding="utf-8")
    try:
        if file_path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Configuration file '{file_path}' could not be parsed: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file '{file_path}' must contain a mapping at the top level")
    return data


def detector_settings(config: Optional[Mapping[str, Any]]) -> DetectorSettings:
    section = _section(config, "detector")
    try:
        accept = float(section.get("accept_threshold", DEFAULT_ACCEPT_THRESHOLD))
        suggest = float(section.get("suggest_threshold", DEFAULT_SUGGEST_THRESHOLD))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Detector thresholds must be numbers: {exc}") from exc
    for label, value in (("accept_threshold", accept), ("suggest_threshold", suggest)):
        if not 0.0 <= value <= 1.0:
            raise ConfigurationError(f"Detector {label} must be between 0 and 1, got {value}")
    return DetectorSettings(accept_threshold=accept, suggest_threshold=suggest)


def import_settings(config: Optional[Mapping[str, Any]]) -> ImportSettings:
    section = _section(config, "import")
    defaults = ImportSettings()
    batch_size = int(section.get("batch_size", defaults.batch_size) or defaults.batch_size)
    if batch_size < 1:
        raise ConfigurationError(f"Import batch_size must be positive, got {batch_size}")
    max_workers = section.get("max_workers", defaults.max_workers)
    return ImportSettings(
        batch_size=batch_size,
        concurrent=bool(section.get("concurrent", defaults.concurrent)),
        max_workers=int(max_workers) if max_workers else None,
    )


def iter_enabled_collaborator_configs(config: Mapping[str, Any], section: str) -> Iterable[Dict[str, Any]]:
    if section not in _COLLABORATOR_SECTIONS:
        raise ConfigurationError(f"Unknown collaborator section '{section}'")
    for entry in config.get(section, None) or []:
        if entry.get("enabled", True):
            yield entry
        else:
            LOGGER.debug("Skipping disabled collaborator %s", entry.get("name"))


def _section(config: Optional[Mapping[str, Any]], name: str) -> Mapping[str, Any]:
    section = (config or {}).get(name) or {}
    if not isinstance(section, Mapping):
        raise ConfigurationError(f"Configuration section '{name}' must be a mapping")
    return section


__all__ = [
    "ConfigurationError",
    "detector_settings",
    "import_settings",
    "iter_enabled_collaborator_configs",
    "load_configuration",
]
