"""Domain value types for catalog matching and inventory rows."""

from __future__ import annotations

from .catalog import (
    Catalog,
    CatalogEntity,
    CompositionLine,
    ContainerInventory,
    ContainerMembership,
    MappingRecord,
    MatchMethod,
    MinifigReference,
    variant_fallback,
)
from .inventory import (
    ComponentRelation,
    InventoryRow,
    InventorySource,
    MinifigMeta,
    ParentRelation,
    PartIdentity,
    RowType,
)

__all__ = [
    "Catalog",
    "CatalogEntity",
    "ComponentRelation",
    "CompositionLine",
    "ContainerInventory",
    "ContainerMembership",
    "InventoryRow",
    "InventorySource",
    "MappingRecord",
    "MatchMethod",
    "MinifigMeta",
    "MinifigReference",
    "ParentRelation",
    "PartIdentity",
    "RowType",
    "variant_fallback",
]
