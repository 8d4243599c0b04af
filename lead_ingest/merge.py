"""Utility helpers for folding collaborator results back into the lead working set."""
from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, MutableMapping, Union

from .models import EnrichmentResult, LeadRecord, LeadStatus, ValidationOutcome, lead_attribute

LOGGER = logging.getLogger(__name__)

MergeableResult = Union[EnrichmentResult, ValidationOutcome]

_PROTECTED_KEYS = {"id", "createdAt", "created_at"}
_METADATA_PREFIX = "metadata."


def _overlay_for(result: MergeableResult) -> Mapping[str, Any]:
    if isinstance(result, EnrichmentResult):
        return result.enriched
    return result.updates


def _coerce(attribute: str, value: Any) -> Any:
    if attribute == "status":
        return value if isinstance(value, LeadStatus) else LeadStatus(str(value))
    if attribute == "qualification_score":
        return float(value)
    return value


def merge_result(lead: LeadRecord, result: MergeableResult) -> LeadRecord:
    """Apply the sparse overlay carried by ``result`` to ``lead`` in place.

    Values that cannot be coerced to the field type (an unknown ``status``,
    a non-numeric ``qualificationScore``) are kept in ``metadata`` instead.
    """

    for key, value in _overlay_for(result).items():
        if value is None or key in _PROTECTED_KEYS:
            continue
        if key.startswith(_METADATA_PREFIX):
            lead.metadata[key[len(_METADATA_PREFIX):]] = value
            continue
        attribute = lead_attribute(key)
        if attribute is None:
            lead.metadata[key] = value
            continue
        try:
            coerced = _coerce(attribute, value)
        except (TypeError, ValueError):
            LOGGER.warning("Keeping unusable value %r for %s of lead %s in metadata", value, key, lead.id)
            lead.metadata[key] = value
            continue
        setattr(lead, attribute, coerced)
    return lead


def merge_results(
    leads: MutableMapping[str, LeadRecord], results: Iterable[MergeableResult]
) -> MutableMapping[str, LeadRecord]:
    """Merge validation or enrichment results into ``leads`` keyed by lead id.

    Results for ids that are not in ``leads`` are skipped; the lead may have
    been removed by another actor.
    """

    for result in results:
        if result is None:
            continue
        lead = leads.get(result.lead_id)
        if lead is None:
            LOGGER.debug("Skipping result for unknown lead %s", result.lead_id)
            continue
        merge_result(lead, result)
    return leads


__all__ = ["MergeableResult", "merge_result", "merge_results"]
