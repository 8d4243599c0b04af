"""Tests for the alias catalog and header field detection."""

import pytest

from lead_ingest.catalog import CANONICAL_FIELDS, FALLBACK_FIELD, FIELD_PATTERNS, aliases_for, iter_patterns
from lead_ingest.detector import DetectorSettings, FieldMappingDetector, detect_field_mapping, normalize_header
from lead_ingest.models import CanonicalField


def test_normalize_header_replaces_non_alphanumerics() -> None:
    assert normalize_header("Full Name") == "full_name"
    assert normalize_header("E-Mail") == "e_mail"
    assert normalize_header("Phone #1") == "phone__1"
    assert normalize_header("!!!") == "___"


def test_catalog_order_is_fixed() -> None:
    fields = [canonical for canonical, _ in FIELD_PATTERNS]
    assert fields[0] is CanonicalField.NAME
    assert fields[-1] is CanonicalField.TIMELINE
    assert CANONICAL_FIELDS[-1] is FALLBACK_FIELD
    assert next(iter_patterns()) == (CanonicalField.NAME, "name")
    assert FALLBACK_FIELD not in fields


def test_catalog_aliases_are_normalized_and_unique() -> None:
    for canonical, aliases in FIELD_PATTERNS:
        assert len(aliases) == len(set(aliases)), canonical
        for alias in aliases:
            assert alias == normalize_header(alias)
    assert "e_mail" in aliases_for(CanonicalField.EMAIL)


def test_detects_common_headers_and_falls_back_to_notes() -> None:
    headers = ["Full Name", "E-Mail", "Cellphone", "Random123"]

    result = detect_field_mapping(headers)

    assert result.mapping == {
        "Full Name": CanonicalField.NAME,
        "E-Mail": CanonicalField.EMAIL,
        "Cellphone": CanonicalField.PHONE,
        "Random123": CanonicalField.NOTES,
    }
    for header in headers[:3]:
        assert result.header_confidence[header] > 0.5
    assert result.header_confidence["Random123"] <= 0.5
    assert result.overall_confidence == pytest.approx(1.0)
    assert CanonicalField.NOTES in result.suggestions
    assert CanonicalField.NAME in result.suggestions


def test_every_header_gets_exactly_one_entry() -> None:
    headers = ["Company Name", "Job Title", "LinkedIn URL", "", "!!!"]

    result = detect_field_mapping(headers)

    assert set(result.mapping) == set(headers)
    assert result.mapping["Company Name"] is CanonicalField.COMPANY
    assert result.mapping["Job Title"] is CanonicalField.JOB_TITLE
    assert result.mapping["LinkedIn URL"] is CanonicalField.LINKEDIN
    assert result.mapping[""] is CanonicalField.NOTES
    assert result.mapping["!!!"] is CanonicalField.NOTES


def test_overall_confidence_averages_matched_headers_only() -> None:
    result = detect_field_mapping(["Email", "Phne", "xxxx"])

    assert result.mapping["Phne"] is CanonicalField.PHONE
    assert result.header_confidence["Phne"] == pytest.approx(0.8)
    assert result.overall_confidence == pytest.approx(0.9)


def test_unmatched_headers_yield_zero_confidence() -> None:
    result = detect_field_mapping(["xxxx", "qqqq"])

    assert set(result.mapping.values()) == {CanonicalField.NOTES}
    assert result.overall_confidence == 0
    assert result.suggestions == (CanonicalField.NOTES,)


def test_empty_header_list_gives_degenerate_mapping() -> None:
    result = detect_field_mapping([])

    assert result.mapping == {}
    assert result.overall_confidence == 0
    assert result.suggestions == ()


def test_duplicate_headers_collapse_into_one_entry() -> None:
    result = detect_field_mapping(["Email", "Email"])

    assert result.mapping == {"Email": CanonicalField.EMAIL}
    assert result.overall_confidence == pytest.approx(1.0)


def test_thresholds_are_configurable() -> None:
    detector = FieldMappingDetector(DetectorSettings(accept_threshold=0.85))

    result = detector.detect(["Email", "Phne"])

    assert result.mapping["Phne"] is CanonicalField.NOTES
    assert result.overall_confidence == pytest.approx(1.0)


def test_default_thresholds_are_preserved() -> None:
    settings = FieldMappingDetector().settings
    assert settings.accept_threshold == 0.5
    assert settings.suggest_threshold == 0.3


def test_with_override_pins_header() -> None:
    result = detect_field_mapping(["Full Name", "Random123"])

    overridden = result.with_override("Random123", "budget")

    assert overridden.mapping["Random123"] is CanonicalField.BUDGET
    assert overridden.header_confidence["Random123"] == 1.0
    assert CanonicalField.BUDGET in overridden.suggestions
    assert result.mapping["Random123"] is CanonicalField.NOTES
    with pytest.raises(KeyError):
        result.with_override("Missing", CanonicalField.NAME)


def test_to_dict_uses_external_names() -> None:
    payload = detect_field_mapping(["Job Title"]).to_dict()

    assert payload["mapping"] == {"Job Title": "jobTitle"}
    assert set(payload) == {"mapping", "perHeaderConfidence", "overallConfidence", "suggestions"}
