"""Automatic detection of which canonical field each column header holds."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .catalog import FALLBACK_FIELD, iter_patterns
from .models import CanonicalField, FieldMapping
from .similarity import similarity

LOGGER = logging.getLogger(__name__)

DEFAULT_ACCEPT_THRESHOLD = 0.5
DEFAULT_SUGGEST_THRESHOLD = 0.3

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]")


def normalize_header(header: str) -> str:
    """Lower-case ``header`` and replace anything outside ``[a-z0-9]`` with ``_``."""

    return _NON_ALPHANUMERIC.sub("_", header.lower())


@dataclass(frozen=True)
class DetectorSettings:
    """Score thresholds used when accepting and suggesting fields."""

    accept_threshold: float = DEFAULT_ACCEPT_THRESHOLD
    suggest_threshold: float = DEFAULT_SUGGEST_THRESHOLD


class FieldMappingDetector:
    """Scores headers against the alias catalog and picks a mapping."""

    def __init__(self, settings: Optional[DetectorSettings] = None) -> None:
        self._settings = settings or DetectorSettings()

    @property
    def settings(self) -> DetectorSettings:
        return self._settings

    def detect(self, headers: Iterable[str]) -> FieldMapping:
        mapping: Dict[str, CanonicalField] = {}
        header_confidence: Dict[str, float] = {}
        suggestions: List[CanonicalField] = []
        total_confidence = 0.0
        matched = 0

        for header in headers:
            normalized = normalize_header(header)
            best_field: Optional[CanonicalField] = None
            best_confidence = 0.0

            for canonical, alias in iter_patterns():
                score = similarity(normalized, alias)
                if score > best_confidence:
                    best_confidence = score
                    best_field = canonical
                if score > self._settings.suggest_threshold and canonical not in suggestions:
                    suggestions.append(canonical)

            header_confidence[header] = best_confidence
            if best_field is not None and best_confidence > self._settings.accept_threshold:
                mapping[header] = best_field
                total_confidence += best_confidence
                matched += 1
                LOGGER.debug("Header %r mapped to %s (%.2f)", header, best_field.value, best_confidence)
            else:
                mapping[header] = FALLBACK_FIELD
                if FALLBACK_FIELD not in suggestions:
                    suggestions.append(FALLBACK_FIELD)
                LOGGER.debug("Header %r fell back to %s (best %.2f)", header, FALLBACK_FIELD.value, best_confidence)

        overall = total_confidence / matched if matched else 0.0
        return FieldMapping(
            mapping=mapping,
            header_confidence=header_confidence,
            overall_confidence=overall,
            suggestions=tuple(suggestions),
        )


def detect_field_mapping(headers: Iterable[str], settings: Optional[DetectorSettings] = None) -> FieldMapping:
    """Detect a mapping for ``headers`` using the default (or supplied) thresholds."""

    return FieldMappingDetector(settings).detect(headers)


__all__ = [
    "DEFAULT_ACCEPT_THRESHOLD",
    "DEFAULT_SUGGEST_THRESHOLD",
    "DetectorSettings",
    "FieldMappingDetector",
    "detect_field_mapping",
    "normalize_header",
]
