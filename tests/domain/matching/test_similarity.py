from __future__ import annotations

import pytest

from brickbridge.domain.matching import build_fingerprint, compare, compare_parts_only
from brickbridge.domain.matching.similarity import ZERO_SCORE
from tests.helpers.catalog import line


def test_identical_fingerprints_score_one() -> None:
    fingerprint = build_fingerprint([line("3626", 1, 1), line("973", 2, 1)])

    result = compare(fingerprint, fingerprint)

    assert result.score == 1.0
    assert result.matched_qty == 2
    assert result.total_qty == 2


def test_score_uses_the_larger_total() -> None:
    a = build_fingerprint([line("3626", 1, 2)])
    b = build_fingerprint([line("3626", 1, 1), line("973", 1, 1)])

    result = compare(a, b)

    assert result.matched_qty == 1
    assert result.total_qty == 2
    assert result.score == pytest.approx(0.5)


def test_compare_is_symmetric() -> None:
    a = build_fingerprint([line("3626", 1, 1), line("973", 2, 3), line("970c00", 2, 1)])
    b = build_fingerprint([line("3626", 1, 2), line("973", 2, 1)])

    assert compare(a, b) == compare(b, a)


def test_empty_fingerprints_score_zero() -> None:
    empty = build_fingerprint([])

    assert compare(empty, empty) == ZERO_SCORE
    assert compare(empty, build_fingerprint([line("3626")])).score == 0.0


def test_parts_only_ignores_color_differences() -> None:
    a = build_fingerprint([line("3626", 1, 1), line("973", 1, 1)])
    b = build_fingerprint([line("3626", 2, 1), line("973", 3, 1)])

    assert compare(a, b).score == 0.0
    assert compare_parts_only(a, b).score == 1.0
