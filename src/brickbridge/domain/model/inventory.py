"""Materialized inventory rows and identities."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from .catalog import Catalog


class RowType(StrEnum):
    CATALOG_PART = "catalog_part"
    MINIFIG_PARENT = "minifig_parent"
    MINIFIG_SUBPART = "minifig_subpart"


class InventorySource(StrEnum):
    LOCAL = "local"
    LIVE = "live"


@dataclass(frozen=True, slots=True)
class PartIdentity:
    """Resolved cross-catalog identity of a part+color pair or a minifigure."""

    canonical_key: str
    row_type: RowType
    catalog: Catalog
    primary_id: str | None = None
    primary_color_id: int | None = None
    secondary_id: str | None = None
    secondary_color_id: int | None = None

    def as_subpart(self) -> PartIdentity:
        if self.row_type is not RowType.CATALOG_PART:
            return self
        return PartIdentity(
            canonical_key=self.canonical_key,
            row_type=RowType.MINIFIG_SUBPART,
            catalog=self.catalog,
            primary_id=self.primary_id,
            primary_color_id=self.primary_color_id,
            secondary_id=self.secondary_id,
            secondary_color_id=self.secondary_color_id,
        )


@dataclass(frozen=True, slots=True)
class ParentRelation:
    parent_key: str
    quantity: int


@dataclass(frozen=True, slots=True)
class ComponentRelation:
    child_key: str
    quantity: int


@dataclass(frozen=True, slots=True)
class InventoryRow:
    identity: PartIdentity
    quantity_required: int
    name: str | None = None
    parent_relations: tuple[ParentRelation, ...] = ()
    component_relations: tuple[ComponentRelation, ...] = ()

    @property
    def canonical_key(self) -> str:
        return self.identity.canonical_key

    @property
    def row_type(self) -> RowType:
        return self.identity.row_type


@dataclass(frozen=True, slots=True)
class MinifigMeta:
    total_minifigs: int
    self_heal_attempted: int = 0
    self_heal_succeeded: int = 0
    self_heal_failed: int = 0
    missing_compositions: tuple[str, ...] = field(default_factory=tuple)

    @property
    def self_heal_triggered(self) -> bool:
        return self.self_heal_attempted > 0
