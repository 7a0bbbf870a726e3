from __future__ import annotations

import pytest

from brickbridge.domain.matching import (
    CooccurrenceIndex,
    FingerprintMatcher,
    MatchState,
    build_fingerprint,
    gather_candidates,
)
from brickbridge.domain.model import MatchMethod
from tests.helpers.catalog import fixed_clock, line, mapping, membership

HEAD = line("3626", 11)
TORSO = line("973", 12)
LEGS = line("970c00", 12)


def _matcher() -> FingerprintMatcher:
    return FingerprintMatcher(clock=fixed_clock)


def test_best_scoring_candidate_wins() -> None:
    index = CooccurrenceIndex([membership("A-1", ["fig-001"], ["sw0001", "sw0002"])])
    primary = {"fig-001": build_fingerprint([HEAD, TORSO, LEGS])}
    secondary = {
        "sw0001": build_fingerprint([HEAD, line("973", 99), LEGS]),
        "sw0002": build_fingerprint([HEAD, TORSO, LEGS]),
    }

    result = _matcher().match(
        index, MatchState(), primary_fingerprints=primary, secondary_fingerprints=secondary
    )

    assert [(r.primary_id, r.secondary_id) for r in result.records] == [("fig-001", "sw0002")]
    assert result.records[0].method is MatchMethod.EXACT
    assert result.records[0].confidence == pytest.approx(0.95)


def test_overlap_and_fuzzy_tiers() -> None:
    index = CooccurrenceIndex(
        [
            membership("A-1", ["fig-001"], ["sw0001"]),
            membership("B-1", ["fig-002"], ["sw0002"]),
        ]
    )
    ten_parts = [line(f"p{n}", 1) for n in range(10)]
    four_parts = [line(f"q{n}", 1) for n in range(4)]
    primary = {
        "fig-001": build_fingerprint(ten_parts),
        "fig-002": build_fingerprint(four_parts),
    }
    secondary = {
        "sw0001": build_fingerprint([*ten_parts[:9], line("other", 1)]),
        "sw0002": build_fingerprint([*four_parts[:3], line("q3", 2)]),
    }

    result = _matcher().match(
        index, MatchState(), primary_fingerprints=primary, secondary_fingerprints=secondary
    )

    by_primary = {record.primary_id: record for record in result.records}
    assert by_primary["fig-001"].secondary_id == "sw0001"
    assert by_primary["fig-001"].method is MatchMethod.OVERLAP
    assert by_primary["fig-001"].confidence == pytest.approx(0.875)
    assert by_primary["fig-002"].secondary_id == "sw0002"
    assert by_primary["fig-002"].method is MatchMethod.FUZZY
    assert by_primary["fig-002"].confidence == pytest.approx(0.725)


def test_matched_candidate_leaves_the_pool() -> None:
    index = CooccurrenceIndex([membership("A-1", ["fig-001", "fig-002"], ["sw0001", "sw0002"])])
    fingerprint = build_fingerprint([HEAD, TORSO, LEGS])
    primary = {"fig-001": fingerprint, "fig-002": fingerprint}
    secondary = {
        "sw0001": fingerprint,
        "sw0002": build_fingerprint([line("x", 1), line("y", 1)]),
    }

    result = _matcher().match(
        index, MatchState(), primary_fingerprints=primary, secondary_fingerprints=secondary
    )

    assert [(r.primary_id, r.secondary_id) for r in result.records] == [("fig-001", "sw0001")]
    assert result.unmatched == ["fig-002"]


def test_ties_keep_the_first_candidate_in_id_order() -> None:
    index = CooccurrenceIndex([membership("A-1", ["fig-001"], ["sw0002", "sw0001"])])
    fingerprint = build_fingerprint([HEAD, TORSO])

    result = _matcher().match(
        index,
        MatchState(),
        primary_fingerprints={"fig-001": fingerprint},
        secondary_fingerprints={"sw0001": fingerprint, "sw0002": fingerprint},
    )

    assert result.records[0].secondary_id == "sw0001"


def test_empty_primary_fingerprints_are_skipped() -> None:
    index = CooccurrenceIndex([membership("A-1", ["fig-001", "fig-002"], ["sw0001", "sw0002"])])

    result = _matcher().match(
        index,
        MatchState(),
        primary_fingerprints={"fig-002": build_fingerprint([])},
        secondary_fingerprints={"sw0001": build_fingerprint([HEAD])},
    )

    assert result.records == []
    assert result.skipped_empty == ["fig-001", "fig-002"]


def test_variant_container_falls_back_to_base_release() -> None:
    index = CooccurrenceIndex(
        [
            membership("7140-2", ["fig-001"], []),
            membership("7140-1", [], ["sw0001"]),
        ]
    )
    state = MatchState()

    assert gather_candidates("fig-001", index, state) == ["sw0001"]

    fingerprint = build_fingerprint([HEAD, TORSO, LEGS])
    result = _matcher().match(
        index,
        state,
        primary_fingerprints={"fig-001": fingerprint},
        secondary_fingerprints={"sw0001": fingerprint},
    )

    assert [(r.primary_id, r.secondary_id) for r in result.records] == [("fig-001", "sw0001")]


def test_already_matched_ids_are_not_candidates() -> None:
    index = CooccurrenceIndex([membership("A-1", ["fig-001", "fig-002"], ["sw0001"])])
    state = MatchState.from_records([mapping("fig-001", "sw0001")])

    assert gather_candidates("fig-002", index, state) == []

    result = _matcher().match(
        index,
        state,
        primary_fingerprints={"fig-002": build_fingerprint([HEAD])},
        secondary_fingerprints={"sw0001": build_fingerprint([HEAD])},
    )

    assert result.records == []
    assert result.unmatched == ["fig-002"]
