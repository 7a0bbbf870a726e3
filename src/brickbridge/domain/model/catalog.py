"""Catalog-level value types: entities, compositions, memberships and mappings."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime


class Catalog(StrEnum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


class MatchMethod(StrEnum):
    ELIMINATION = "elimination"
    EXACT = "exact"
    OVERLAP = "overlap"
    FUZZY = "fuzzy"


@dataclass(frozen=True, slots=True)
class CatalogEntity:
    """A minifigure or part identifier inside one catalog namespace."""

    entity_id: str
    catalog: Catalog


@dataclass(frozen=True, slots=True)
class CompositionLine:
    """One ``(part, color, quantity)`` entry of an exploded composition."""

    part_id: str
    color_id: int
    quantity: int
    name: str | None = field(default=None, compare=False)


@dataclass(frozen=True, slots=True)
class MinifigReference:
    """A minifigure contained ``quantity`` times in a container (primary ids)."""

    primary_id: str
    quantity: int
    name: str | None = field(default=None, compare=False)


@dataclass(frozen=True, slots=True)
class ContainerInventory:
    """Raw rows of a container: direct parts plus minifigure parents."""

    container_id: str
    parts: tuple[CompositionLine, ...] = ()
    minifigs: tuple[MinifigReference, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.parts and not self.minifigs


@dataclass(frozen=True, slots=True)
class ContainerMembership:
    """Minifigures known to be in one container, per catalog."""

    container_id: str
    primary: frozenset[str] = frozenset()
    secondary: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class MappingRecord:
    primary_id: str
    secondary_id: str
    confidence: float
    method: MatchMethod
    matched_at: datetime

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")


_VARIANT_RE = re.compile(r"^(?P<base>.+)-(?P<variant>\d+)$")


def variant_fallback(container_id: str) -> str | None:
    """Return the ``base-1`` sibling for a numbered reissue ``base-N`` with ``N > 1``."""

    match = _VARIANT_RE.match(container_id)
    if match is None:
        return None
    if int(match["variant"]) <= 1:
        return None
    return f"{match['base']}-1"
