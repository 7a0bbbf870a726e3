"""Ports for reading catalog data and persisting mappings."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable

    from brickbridge.domain.model import (
        Catalog,
        CompositionLine,
        ContainerInventory,
        ContainerMembership,
        MappingRecord,
    )


@runtime_checkable
class ContainerRepository(Protocol):
    """Container rows and the minifigure co-occurrence data derived from them."""

    def get_inventory(self, container_id: str) -> ContainerInventory | None: ...

    def list_memberships(self) -> list[ContainerMembership]: ...


@runtime_checkable
class CompositionRepository(Protocol):
    """Pre-materialized minifigure compositions, keyed by the figure's own catalog id."""

    def get_compositions(
        self, catalog: Catalog, entity_ids: Iterable[str]
    ) -> dict[str, list[CompositionLine]]: ...


@runtime_checkable
class CrossReferenceRepository(Protocol):
    """Primary to secondary translation tables for parts and colors."""

    def get_part_xrefs(self, part_ids: Iterable[str]) -> dict[str, str]: ...

    def get_color_xrefs(self, color_ids: Iterable[int]) -> dict[int, int]: ...


@runtime_checkable
class MappingRepository(Protocol):
    """Append-only store of cross-catalog minifigure mappings."""

    def add(self, record: MappingRecord) -> None: ...

    def list_all(self) -> list[MappingRecord]: ...

    def get_by_primary_ids(self, primary_ids: Iterable[str]) -> dict[str, MappingRecord]: ...
