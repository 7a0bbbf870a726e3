"""Multiset overlap scoring between fingerprints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .fingerprint import collapse_colors

if TYPE_CHECKING:
    from collections.abc import Hashable, Mapping

    from .fingerprint import Fingerprint


@dataclass(frozen=True, slots=True)
class SimilarityScore:
    score: float
    matched_qty: int
    total_qty: int


ZERO_SCORE = SimilarityScore(score=0.0, matched_qty=0, total_qty=0)


def _overlap[K: Hashable](a: Mapping[K, int], b: Mapping[K, int]) -> SimilarityScore:
    matched = sum(min(a.get(key, 0), b.get(key, 0)) for key in a.keys() | b.keys())
    total = max(sum(a.values()), sum(b.values()))
    if total == 0:
        return ZERO_SCORE
    return SimilarityScore(score=matched / total, matched_qty=matched, total_qty=total)


def compare(a: Fingerprint, b: Fingerprint) -> SimilarityScore:
    """Score two fingerprints by shared quantity over the larger total.

    The result is symmetric in its arguments and ``1.0`` for identical non-empty
    fingerprints.
    """

    return _overlap(a, b)


def compare_parts_only(a: Fingerprint, b: Fingerprint) -> SimilarityScore:
    """Same as :func:`compare` with colors ignored."""

    return _overlap(collapse_colors(a), collapse_colors(b))
