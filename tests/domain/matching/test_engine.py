from __future__ import annotations

import pytest

from brickbridge.config.matching import MatchingConfig
from brickbridge.domain.errors import MappingConflictError
from brickbridge.domain.matching import MatchingSettings, run_matching_pass
from brickbridge.domain.model import Catalog, MappingRecord, MatchMethod
from tests.helpers.catalog import (
    FakeCatalog,
    FakeMappingRepository,
    fixed_clock,
    line,
    mapping,
    membership,
)


class _ConcurrentlyWrittenMappings(FakeMappingRepository):
    def add(self, record: MappingRecord) -> None:
        raise MappingConflictError(f"{record.primary_id} was stored by another pass")


def _catalog(mappings: FakeMappingRepository | None = None) -> FakeCatalog:
    catalog = FakeCatalog(mappings=mappings or FakeMappingRepository())
    catalog.containers.memberships = [
        membership("6000-1", ["fig-001"], ["sw0001"]),
        membership("6001-1", ["fig-002", "fig-003"], ["sw0002", "sw0003"]),
    ]
    catalog.xrefs.parts = {"3626": "3626b"}
    catalog.xrefs.colors = {1: 11, 2: 12, 3: 13}
    catalog.compositions.put(
        Catalog.PRIMARY, "fig-002", [line("3626", 1), line("973", 2), line("970c00", 2)]
    )
    catalog.compositions.put(
        Catalog.PRIMARY, "fig-003", [line("3626", 1), line("973", 3), line("970c00", 3)]
    )
    catalog.compositions.put(
        Catalog.SECONDARY, "sw0002", [line("3626b", 11), line("973", 12), line("970c22", 12)]
    )
    catalog.compositions.put(
        Catalog.SECONDARY, "sw0003", [line("3626b", 11), line("973", 13), line("970c05", 13)]
    )
    return catalog


def test_pass_runs_both_tiers_and_persists_mappings() -> None:
    catalog = _catalog()

    report = run_matching_pass(
        unit_of_work_factory=catalog.unit_of_work,
        settings=MatchingConfig().settings(),
        clock=fixed_clock,
    )

    assert report.tier_one == 1
    assert report.tier_two == 2
    assert report.by_method[MatchMethod.EXACT] == 2
    assert report.unmatched == 0
    assert {key: r.secondary_id for key, r in catalog.mappings.records.items()} == {
        "fig-001": "sw0001",
        "fig-002": "sw0002",
        "fig-003": "sw0003",
    }
    assert catalog.uow.commits == 2


def test_without_family_rules_leg_variants_do_not_match() -> None:
    catalog = _catalog()

    report = run_matching_pass(
        unit_of_work_factory=catalog.unit_of_work,
        settings=MatchingSettings(),
        clock=fixed_clock,
    )

    assert report.tier_one == 1
    assert report.tier_two == 0
    assert report.unmatched == 2


def test_second_pass_finds_nothing_new() -> None:
    catalog = _catalog()
    settings = MatchingConfig().settings()
    run_matching_pass(unit_of_work_factory=catalog.unit_of_work, settings=settings)

    report = run_matching_pass(unit_of_work_factory=catalog.unit_of_work, settings=settings)

    assert report.records == []
    assert len(catalog.mappings.records) == 3


def test_existing_mappings_are_respected() -> None:
    catalog = _catalog()
    catalog.mappings.add(mapping("fig-002", "sw0002", method=MatchMethod.OVERLAP, confidence=0.9))

    report = run_matching_pass(
        unit_of_work_factory=catalog.unit_of_work,
        settings=MatchingConfig().settings(),
        clock=fixed_clock,
    )

    assert {(r.primary_id, r.secondary_id) for r in report.records} == {
        ("fig-001", "sw0001"),
        ("fig-003", "sw0003"),
    }
    assert report.by_method[MatchMethod.ELIMINATION] == 2
    assert catalog.mappings.records["fig-002"].method is MatchMethod.OVERLAP


def test_colors_without_cross_reference_are_dropped_from_fingerprints() -> None:
    catalog = _catalog()
    catalog.xrefs.colors = {1: 11}

    report = run_matching_pass(
        unit_of_work_factory=catalog.unit_of_work,
        settings=MatchingConfig().settings(),
        clock=fixed_clock,
    )

    assert report.tier_two == 0
    assert report.unmatched == 2


def test_conflicting_store_rolls_back() -> None:
    catalog = _catalog(mappings=_ConcurrentlyWrittenMappings())

    with pytest.raises(MappingConflictError):
        run_matching_pass(unit_of_work_factory=catalog.unit_of_work, clock=fixed_clock)

    assert catalog.uow.rollbacks == 1
    assert catalog.uow.commits == 0
