"""Tests for the normalised edit-distance score."""

import pytest

from lead_ingest.similarity import edit_distance, similarity


@pytest.mark.parametrize("value", ["", "a", "email", "Full Name", "e_mail_address"])
def test_identical_strings_score_one(value: str) -> None:
    assert similarity(value, value) == 1.0


@pytest.mark.parametrize(
    ("first", "second"),
    [("phone", "phne"), ("email", "e_mail"), ("company", "org"), ("", "linkedin"), ("abc", "xyz")],
)
def test_similarity_is_symmetric(first: str, second: str) -> None:
    assert similarity(first, second) == similarity(second, first)


def test_empty_string_edge_cases() -> None:
    assert similarity("", "") == 1.0
    assert similarity("", "x") == 0.0


def test_similarity_scales_distance_by_longer_length() -> None:
    assert edit_distance("phone", "phne") == 1
    assert similarity("phone", "phne") == pytest.approx(0.8)
    assert similarity("kitten", "sitting") == pytest.approx(4 / 7)


def test_similarity_stays_in_unit_interval() -> None:
    score = similarity("abc", "xyzxyzxyz")
    assert 0.0 <= score <= 1.0
    assert score == 0.0
