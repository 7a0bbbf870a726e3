"""Tier 1: match minifigures by exclusive containment.

When a container has exactly one unmatched minifigure in each catalog, those
two must be the same figure. Linking them can shrink other containers down to
one-versus-one, so every container is re-scanned until a full pass yields
nothing new.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from brickbridge.domain.model import MappingRecord, MatchMethod

if TYPE_CHECKING:
    from collections.abc import Callable

    from .index import CooccurrenceIndex
    from .state import MatchState

log = getLogger(__name__)

ELIMINATION_CONFIDENCE = 1.0


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class EliminationResult:
    records: list[MappingRecord] = field(default_factory=list)
    passes: int = 0


def match_by_elimination(
    index: CooccurrenceIndex,
    state: MatchState,
    *,
    clock: Callable[[], datetime] = _utcnow,
) -> EliminationResult:
    """Run elimination to a fixpoint, updating ``state`` as links are found."""

    result = EliminationResult()
    changed = True
    while changed:
        changed = False
        result.passes += 1
        for membership in index:
            unmatched_primary = state.unmatched_primary(membership.primary)
            unmatched_secondary = state.unmatched_secondary(membership.secondary)
            if len(unmatched_primary) != 1 or len(unmatched_secondary) != 1:
                continue
            record = MappingRecord(
                primary_id=unmatched_primary[0],
                secondary_id=unmatched_secondary[0],
                confidence=ELIMINATION_CONFIDENCE,
                method=MatchMethod.ELIMINATION,
                matched_at=clock(),
            )
            state.record(record)
            result.records.append(record)
            changed = True
            log.debug(
                "Elimination in %s: %s -> %s (pass %d)",
                membership.container_id,
                record.primary_id,
                record.secondary_id,
                result.passes,
            )

    log.info(
        "Elimination converged after %d pass(es) with %d new mapping(s)",
        result.passes,
        len(result.records),
    )
    return result
