"""Exclusion state shared by the elimination and fingerprint tiers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from brickbridge.domain.errors import MappingConflictError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from brickbridge.domain.model import MappingRecord


@dataclass(slots=True)
class MatchState:
    """Primary and secondary ids already linked by a mapping.

    Ids only ever enter the state; a linked id never returns to a candidate pool.
    """

    matched_primary: set[str] = field(default_factory=set)
    matched_secondary: set[str] = field(default_factory=set)

    @classmethod
    def from_records(cls, records: Iterable[MappingRecord]) -> MatchState:
        state = cls()
        for record in records:
            state.record(record)
        return state

    def unmatched_primary(self, ids: Iterable[str]) -> list[str]:
        return sorted(set(ids) - self.matched_primary)

    def unmatched_secondary(self, ids: Iterable[str]) -> list[str]:
        return sorted(set(ids) - self.matched_secondary)

    def record(self, record: MappingRecord) -> None:
        if record.primary_id in self.matched_primary:
            raise MappingConflictError(f"Primary id {record.primary_id} is already mapped")
        if record.secondary_id in self.matched_secondary:
            raise MappingConflictError(f"Secondary id {record.secondary_id} is already mapped")
        self.matched_primary.add(record.primary_id)
        self.matched_secondary.add(record.secondary_id)
