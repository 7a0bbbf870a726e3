"""Explicit per-entity result values and their batch aggregation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .errors import BrickBridgeError
    from .model import CompositionLine, InventoryRow, InventorySource, MinifigMeta

log = getLogger(__name__)


class CompositionSource(StrEnum):
    LOCAL = "local"
    CACHE = "cache"
    SELF_HEAL = "self_heal"


@dataclass(frozen=True, slots=True)
class ResolvedComposition:
    """Composition found for a minifigure parent.

    ``lines`` are in the primary namespace for local data and in the secondary
    namespace for cached or self-healed data.
    """

    primary_id: str
    lines: tuple[CompositionLine, ...]
    source: CompositionSource


@dataclass(frozen=True, slots=True)
class DegradedComposition:
    """Minifigure parent whose composition could not be obtained."""

    primary_id: str
    reason: str
    error: BrickBridgeError | None = None
    attempted_fetch: bool = False


type CompositionOutcome = ResolvedComposition | DegradedComposition


@dataclass(slots=True)
class BatchReport:
    """Counts of succeeded, degraded and failed entities plus recorded warnings."""

    succeeded: int = 0
    degraded: int = 0
    failed: int = 0
    warnings: list[str] = field(default_factory=list)

    def record(self, outcome: CompositionOutcome) -> None:
        match outcome:
            case ResolvedComposition():
                self.succeeded += 1
            case DegradedComposition(primary_id=primary_id, reason=reason):
                self.degraded += 1
                self.warn(f"{primary_id}: {reason}")

    def record_failure(self, item: str, error: Exception) -> None:
        self.failed += 1
        self.warn(f"{item}: {error}")

    def warn(self, message: str) -> None:
        log.warning(message)
        self.warnings.append(message)


@dataclass(frozen=True, slots=True)
class InventoryResult:
    container_id: str
    rows: tuple[InventoryRow, ...]
    source: InventorySource
    report: BatchReport
    minifig_meta: MinifigMeta | None = None

    def row(self, canonical_key: str) -> InventoryRow | None:
        for row in self.rows:
            if row.canonical_key == canonical_key:
                return row
        return None
