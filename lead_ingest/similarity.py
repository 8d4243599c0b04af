"""Normalised edit-distance similarity between header strings."""
from __future__ import annotations

from rapidfuzz.distance import Levenshtein


def edit_distance(first: str, second: str) -> int:
    """Classic Levenshtein distance with unit insert, delete and substitute costs."""

    return Levenshtein.distance(first, second)


def similarity(first: str, second: str) -> float:
    """Return a score in ``[0, 1]`` where ``1.0`` means identical strings.

    The distance is scaled by the length of the longer string, so two empty
    strings are considered identical.
    """

    if len(first) >= len(second):
        longer, shorter = first, second
    else:
        longer, shorter = second, first

    if not longer:
        return 1.0
    distance = edit_distance(longer, shorter)
    return (len(longer) - distance) / len(longer)


__all__ = ["edit_distance", "similarity"]
