"""Batch matching pass linking primary minifigures to secondary ones.

The pass is sequential: elimination runs to a fixpoint first, its mappings
are committed, then fingerprint matching works through what is left. It must
not run concurrently with another pass.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import UTC, datetime
from itertools import chain
from logging import getLogger
from typing import TYPE_CHECKING

from brickbridge.domain.identity import CrossReferenceLoader, translate_line
from brickbridge.domain.model import Catalog, MatchMethod

from .elimination import match_by_elimination
from .fingerprint import IDENTITY_NORMALIZER, PartNormalizer, build_fingerprint
from .fingerprint_match import FingerprintMatcher
from .index import CooccurrenceIndex
from .policy import MatchThresholds
from .state import MatchState

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from brickbridge.domain.identity import ResolutionContext
    from brickbridge.domain.model import CompositionLine, MappingRecord
    from brickbridge.domain.ports.unit_of_work import CatalogRepositories, CatalogUnitOfWork

    from .fingerprint import Fingerprint

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class MatchingReport:
    records: list[MappingRecord] = field(default_factory=list)
    elimination_passes: int = 0
    unmatched: int = 0
    skipped_empty: int = 0
    skipped_invalid: int = 0

    @property
    def by_method(self) -> Counter[MatchMethod]:
        return Counter(record.method for record in self.records)

    @property
    def tier_one(self) -> int:
        return self.by_method[MatchMethod.ELIMINATION]

    @property
    def tier_two(self) -> int:
        return len(self.records) - self.tier_one


@dataclass(frozen=True, slots=True)
class MatchingSettings:
    thresholds: MatchThresholds = field(default_factory=MatchThresholds)
    normalizer: PartNormalizer = IDENTITY_NORMALIZER
    assume_same_part_id: bool = True


def translated_fingerprint(
    lines: Iterable[CompositionLine],
    context: ResolutionContext,
    *,
    normalizer: PartNormalizer,
    assume_same_part_id: bool = True,
) -> Fingerprint:
    """Fingerprint of a primary composition expressed in secondary ids.

    Lines whose color has no cross-reference are dropped.
    """

    translated = (
        translate_line(line, context, assume_same_part_id=assume_same_part_id) for line in lines
    )
    return build_fingerprint(
        (line for line in translated if line is not None), normalizer=normalizer
    )


def run_matching_pass(
    *,
    unit_of_work_factory: Callable[[], CatalogUnitOfWork],
    settings: MatchingSettings | None = None,
    clock: Callable[[], datetime] = _utcnow,
) -> MatchingReport:
    settings = settings or MatchingSettings()
    report = MatchingReport()

    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        index = CooccurrenceIndex(repositories.containers.list_memberships())
        report.skipped_invalid = index.skipped_invalid
        state = MatchState.from_records(repositories.mappings.list_all())
        log.info(
            "Matching pass over %d container(s); %d mapping(s) already known",
            len(index),
            len(state.matched_primary),
        )

        elimination = match_by_elimination(index, state, clock=clock)
        _persist(repositories, elimination.records)
        uow.commit()
        report.records.extend(elimination.records)
        report.elimination_passes = elimination.passes

        primary_fingerprints, secondary_fingerprints = _load_fingerprints(
            repositories, index, state, settings
        )
        matcher = FingerprintMatcher(thresholds=settings.thresholds, clock=clock)
        fingerprint_result = matcher.match(
            index,
            state,
            primary_fingerprints=primary_fingerprints,
            secondary_fingerprints=secondary_fingerprints,
        )
        _persist(repositories, fingerprint_result.records)
        uow.commit()
        report.records.extend(fingerprint_result.records)
        report.unmatched = len(fingerprint_result.unmatched)
        report.skipped_empty = len(fingerprint_result.skipped_empty)

    by_method = report.by_method
    log.info(
        "Matching pass finished: elimination=%d, exact=%d, overlap=%d, fuzzy=%d, "
        "unmatched=%d, skipped_empty=%d, skipped_invalid=%d",
        by_method[MatchMethod.ELIMINATION],
        by_method[MatchMethod.EXACT],
        by_method[MatchMethod.OVERLAP],
        by_method[MatchMethod.FUZZY],
        report.unmatched,
        report.skipped_empty,
        report.skipped_invalid,
    )
    return report


def _persist(repositories: CatalogRepositories, records: Iterable[MappingRecord]) -> None:
    for record in records:
        repositories.mappings.add(record)


def _load_fingerprints(
    repositories: CatalogRepositories,
    index: CooccurrenceIndex,
    state: MatchState,
    settings: MatchingSettings,
) -> tuple[Mapping[str, Fingerprint], Mapping[str, Fingerprint]]:
    primary_ids = state.unmatched_primary(index.primary_ids())
    secondary_ids = state.unmatched_secondary(index.secondary_ids())
    if not primary_ids or not secondary_ids:
        return {}, {}

    primary = repositories.compositions.get_compositions(Catalog.PRIMARY, primary_ids)
    secondary = repositories.compositions.get_compositions(Catalog.SECONDARY, secondary_ids)
    context = CrossReferenceLoader(repositories.xrefs).build_context(
        chain.from_iterable(primary.values())
    )

    primary_fingerprints = {
        primary_id: translated_fingerprint(
            lines,
            context,
            normalizer=settings.normalizer,
            assume_same_part_id=settings.assume_same_part_id,
        )
        for primary_id, lines in primary.items()
    }
    secondary_fingerprints = {
        secondary_id: build_fingerprint(lines, normalizer=settings.normalizer)
        for secondary_id, lines in secondary.items()
    }
    return primary_fingerprints, secondary_fingerprints
