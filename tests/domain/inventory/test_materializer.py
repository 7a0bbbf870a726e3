from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from brickbridge.common.cache import BoundedTTLCache
from brickbridge.domain.identity import ResolutionContext
from brickbridge.domain.inventory import InventoryMaterializer
from brickbridge.domain.model import (
    CompositionLine,
    ContainerInventory,
    InventorySource,
    MinifigReference,
    RowType,
)
from tests.helpers.catalog import FakeCompositionFetcher, container, line, mapping

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from brickbridge.domain.outcomes import InventoryResult

FIG_KEY = "secondary:fig:sw0001"
HEAD_KEY = "secondary:part:3626b:11"
TORSO_KEY = "secondary:part:973:11"


def _context() -> ResolutionContext:
    return ResolutionContext.build(
        part_xref={"3626": "3626b", "973": "973", "3001": "3001"},
        color_xref={1: 11, 4: 5},
        mappings={"fig-001": mapping("fig-001", "sw0001")},
    )


def _materialize(
    inventory: ContainerInventory,
    *,
    local: Mapping[str, Sequence[CompositionLine]] | None = None,
    materializer: InventoryMaterializer | None = None,
    context: ResolutionContext | None = None,
) -> InventoryResult:
    return asyncio.run(
        (materializer or InventoryMaterializer()).materialize(
            inventory,
            context or _context(),
            local_compositions=local or {},
            source=InventorySource.LOCAL,
        )
    )


def test_direct_parts_only_have_no_minifig_meta() -> None:
    result = _materialize(
        container("6000-1", parts=[line("3001", 4, 2), line("3001", 4, 3), line("3002", 4, 1)])
    )

    assert [row.canonical_key for row in result.rows] == [
        "secondary:part:3001:5",
        "primary:part:3002:4",
    ]
    assert result.rows[0].quantity_required == 5
    assert result.minifig_meta is None
    assert result.source is InventorySource.LOCAL


def test_local_composition_explodes_into_subparts() -> None:
    result = _materialize(
        container("6000-1", minifigs={"fig-001": 2}),
        local={"fig-001": [line("3626", 1, 1), line("973", 1, 1)]},
    )

    parent = result.row(FIG_KEY)
    head = result.row(HEAD_KEY)
    assert parent is not None
    assert head is not None
    assert parent.row_type is RowType.MINIFIG_PARENT
    assert parent.quantity_required == 2
    assert {(c.child_key, c.quantity) for c in parent.component_relations} == {
        (HEAD_KEY, 1),
        (TORSO_KEY, 1),
    }
    assert head.row_type is RowType.MINIFIG_SUBPART
    assert head.quantity_required == 2
    assert [(p.parent_key, p.quantity) for p in head.parent_relations] == [(FIG_KEY, 1)]
    assert result.report.succeeded == 1
    assert result.minifig_meta is not None
    assert result.minifig_meta.total_minifigs == 2
    assert not result.minifig_meta.self_heal_triggered


def test_every_canonical_key_appears_once() -> None:
    result = _materialize(
        container("6000-1", parts=[line("3626", 1, 3)], minifigs={"fig-001": 2, "fig-002": 1}),
        local={
            "fig-001": [line("3626", 1, 1), line("973", 1, 1)],
            "fig-002": [line("3626", 1, 2)],
        },
    )

    keys = [row.canonical_key for row in result.rows]
    assert len(keys) == len(set(keys))
    head = result.row(HEAD_KEY)
    assert head is not None
    assert head.row_type is RowType.CATALOG_PART
    assert head.quantity_required == 3 + 1 * 2 + 2 * 1
    assert {(p.parent_key, p.quantity) for p in head.parent_relations} == {
        (FIG_KEY, 1),
        ("primary:fig:fig-002", 2),
    }


def test_duplicate_parent_rows_are_summed_once() -> None:
    inventory = ContainerInventory(
        container_id="6000-1",
        minifigs=(
            MinifigReference(primary_id="fig-001", quantity=1),
            MinifigReference(primary_id="fig-001", quantity=2),
        ),
    )

    result = _materialize(inventory, local={"fig-001": [line("3626", 1, 1)]})

    head = result.row(HEAD_KEY)
    parent = result.row(FIG_KEY)
    assert parent is not None
    assert head is not None
    assert parent.quantity_required == 3
    assert head.quantity_required == 3
    assert len(head.parent_relations) == 1


def test_repeated_subpart_lines_are_merged_per_parent() -> None:
    result = _materialize(
        container("6000-1", minifigs={"fig-001": 2}),
        local={"fig-001": [line("3626", 1, 1), line("3626", 1, 1)]},
    )

    head = result.row(HEAD_KEY)
    assert head is not None
    assert head.quantity_required == 4
    assert [(p.parent_key, p.quantity) for p in head.parent_relations] == [(FIG_KEY, 2)]


def test_missing_composition_is_self_healed_and_cached() -> None:
    fetcher = FakeCompositionFetcher({"sw0001": [line("3626b", 11, 1), line("970c00", 86, 1)]})
    cache: BoundedTTLCache[str, tuple[CompositionLine, ...]] = BoundedTTLCache()
    materializer = InventoryMaterializer(self_heal=fetcher, composition_cache=cache)
    inventory = container("6000-1", minifigs={"fig-001": 1})

    first = _materialize(inventory, materializer=materializer)
    second = _materialize(inventory, materializer=materializer)

    assert fetcher.calls == ["sw0001"]
    assert cache.get("sw0001") is not None
    legs = first.row("secondary:part:970c00:86")
    assert legs is not None
    assert legs.row_type is RowType.MINIFIG_SUBPART
    assert first.minifig_meta is not None
    assert first.minifig_meta.self_heal_attempted == 1
    assert first.minifig_meta.self_heal_succeeded == 1
    assert second.minifig_meta is not None
    assert not second.minifig_meta.self_heal_triggered
    assert [row.canonical_key for row in first.rows] == [row.canonical_key for row in second.rows]


def test_failed_self_heal_degrades_only_that_parent() -> None:
    context = ResolutionContext.build(
        color_xref={1: 11},
        mappings={
            "fig-001": mapping("fig-001", "sw0001"),
            "fig-002": mapping("fig-002", "sw0002"),
            "fig-003": mapping("fig-003", "sw0003"),
        },
    )
    fetcher = FakeCompositionFetcher(
        {
            "sw0002": [line("3626b", 11, 1), line("973", 11, 1)],
            "sw0003": [line("3626b", 11, 2)],
        },
        failures=["sw0001"],
    )

    result = _materialize(
        container("6000-1", minifigs={"fig-001": 1, "fig-002": 2, "fig-003": 1}),
        materializer=InventoryMaterializer(self_heal=fetcher),
        context=context,
    )

    failed = result.row(FIG_KEY)
    assert failed is not None
    assert failed.component_relations == ()
    head = result.row(HEAD_KEY)
    torso = result.row(TORSO_KEY)
    assert head is not None
    assert torso is not None
    assert head.quantity_required == 1 * 2 + 2 * 1
    assert {(p.parent_key, p.quantity) for p in head.parent_relations} == {
        ("secondary:fig:sw0002", 1),
        ("secondary:fig:sw0003", 2),
    }
    assert torso.quantity_required == 2
    assert [(p.parent_key, p.quantity) for p in torso.parent_relations] == [
        ("secondary:fig:sw0002", 1)
    ]
    assert result.report.degraded == 1
    assert result.report.succeeded == 2
    assert result.minifig_meta is not None
    assert result.minifig_meta.self_heal_attempted == 3
    assert result.minifig_meta.self_heal_failed == 1
    assert result.minifig_meta.missing_compositions == (FIG_KEY,)


def test_invalid_secondary_id_degrades_only_that_parent() -> None:
    context = ResolutionContext.build(
        color_xref={1: 11},
        mappings={
            "fig-001": mapping("fig-001", " "),
            "fig-002": mapping("fig-002", "sw0002"),
            "fig-003": mapping("fig-003", "sw0003"),
        },
    )
    fetcher = FakeCompositionFetcher(
        {"sw0002": [line("3626b", 11, 1)], "sw0003": [line("973", 11, 1)]}
    )

    result = _materialize(
        container("6000-1", minifigs={"fig-001": 1, "fig-002": 1, "fig-003": 1}),
        materializer=InventoryMaterializer(self_heal=fetcher),
        context=context,
    )

    assert result.row(HEAD_KEY) is not None
    assert result.row(TORSO_KEY) is not None
    broken = result.row("secondary:fig: ")
    assert broken is not None
    assert broken.component_relations == ()
    assert result.report.degraded == 1
    assert result.report.succeeded == 2
    assert any("invalid secondary id" in warning for warning in result.report.warnings)
    assert result.minifig_meta is not None
    assert result.minifig_meta.self_heal_failed == 1
    assert result.minifig_meta.self_heal_succeeded == 2


def test_materialization_is_idempotent() -> None:
    inventory = container(
        "6000-1", parts=[line("3626", 1, 3), line("3001", 4, 2)], minifigs={"fig-001": 2}
    )
    local = {"fig-001": [line("3626", 1, 1), line("973", 1, 1)]}

    first = _materialize(inventory, local=local)
    second = _materialize(inventory, local=local)

    assert set(first.rows) == set(second.rows)
    assert first.rows == second.rows
    assert first.minifig_meta == second.minifig_meta

def test_slow_self_heal_times_out() -> None:
    fetcher = FakeCompositionFetcher({"sw0001": [line("3626b", 11, 1)]}, delays={"sw0001": 1.0})

    result = _materialize(
        container("6000-1", minifigs={"fig-001": 1}),
        materializer=InventoryMaterializer(self_heal=fetcher, timeout_seconds=0.05),
    )

    assert result.report.degraded == 1
    assert any("exceeded" in warning for warning in result.report.warnings)
    assert result.minifig_meta is not None
    assert result.minifig_meta.self_heal_failed == 1


def test_unmapped_parent_without_composition_is_degraded_without_fetching() -> None:
    fetcher = FakeCompositionFetcher()

    result = _materialize(
        container("6000-1", minifigs={"fig-404": 1}),
        materializer=InventoryMaterializer(self_heal=fetcher),
    )

    assert fetcher.calls == []
    assert result.row("primary:fig:fig-404") is not None
    assert result.report.degraded == 1
    assert result.minifig_meta is not None
    assert result.minifig_meta.self_heal_attempted == 0
    assert result.minifig_meta.missing_compositions == ("primary:fig:fig-404",)


def test_empty_self_heal_response_is_degraded() -> None:
    fetcher = FakeCompositionFetcher({"sw0001": []})

    result = _materialize(
        container("6000-1", minifigs={"fig-001": 1}),
        materializer=InventoryMaterializer(self_heal=fetcher),
    )

    assert result.report.degraded == 1
    assert result.minifig_meta is not None
    assert result.minifig_meta.self_heal_failed == 1


def test_name_conflicts_are_reported() -> None:
    result = _materialize(
        container("6000-1", parts=[line("3626", 1, 1, "Minifig Head")], minifigs={"fig-001": 1}),
        local={"fig-001": [line("3626", 1, 1, "Head Plain")]},
    )

    head = result.row(HEAD_KEY)
    assert head is not None
    assert head.name == "Head Plain"
    assert any("DataIntegrityWarning" in warning for warning in result.report.warnings)


def test_invalid_part_ids_are_skipped() -> None:
    result = _materialize(container("6000-1", parts=[line("", 4, 1), line("3001", 4, 1)]))

    assert [row.canonical_key for row in result.rows] == ["secondary:part:3001:5"]
    assert result.report.failed == 1
