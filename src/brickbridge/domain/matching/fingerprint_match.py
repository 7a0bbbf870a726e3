"""Tier 2: match remaining minifigures by composition similarity."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from brickbridge.domain.model import MappingRecord, MatchMethod, variant_fallback

from .policy import MatchThresholds, classify_match
from .similarity import ZERO_SCORE, SimilarityScore, compare, compare_parts_only

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from .fingerprint import Fingerprint
    from .index import CooccurrenceIndex
    from .state import MatchState

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class CandidateScore:
    secondary_id: str
    similarity: SimilarityScore


@dataclass(slots=True)
class FingerprintMatchResult:
    records: list[MappingRecord] = field(default_factory=list)
    skipped_empty: list[str] = field(default_factory=list)
    unmatched: list[str] = field(default_factory=list)

    def count(self, method: MatchMethod) -> int:
        return sum(1 for record in self.records if record.method is method)


def gather_candidates(primary_id: str, index: CooccurrenceIndex, state: MatchState) -> list[str]:
    """Unmatched secondary figures sharing a container (or its base variant) with ``primary_id``."""

    candidates: set[str] = set()
    for container_id in index.containers_of(primary_id):
        for sibling_id in (container_id, variant_fallback(container_id)):
            if sibling_id is None:
                continue
            membership = index.get(sibling_id)
            if membership is not None:
                candidates |= membership.secondary
    return state.unmatched_secondary(candidates)


def best_candidate(
    fingerprint: Fingerprint,
    candidates: Iterable[str],
    secondary_fingerprints: Mapping[str, Fingerprint],
) -> CandidateScore | None:
    best: CandidateScore | None = None
    for secondary_id in candidates:
        other = secondary_fingerprints.get(secondary_id)
        if not other:
            continue
        similarity = compare(fingerprint, other)
        log.debug("Candidate %s scored %.3f", secondary_id, similarity.score)
        if best is None or similarity.score > best.similarity.score:
            best = CandidateScore(secondary_id=secondary_id, similarity=similarity)
    return best


class FingerprintMatcher:
    def __init__(
        self,
        *,
        thresholds: MatchThresholds | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.thresholds = thresholds or MatchThresholds()
        self._clock = clock

    def match(
        self,
        index: CooccurrenceIndex,
        state: MatchState,
        *,
        primary_fingerprints: Mapping[str, Fingerprint],
        secondary_fingerprints: Mapping[str, Fingerprint],
    ) -> FingerprintMatchResult:
        """Link still-unmatched primary figures to their best scoring candidate.

        Primary fingerprints must already be translated into the secondary
        namespace. Matched candidates leave the pool immediately, so earlier
        entities (in sorted id order) take precedence.
        """

        result = FingerprintMatchResult()
        for primary_id in state.unmatched_primary(index.primary_ids()):
            fingerprint = primary_fingerprints.get(primary_id)
            if not fingerprint:
                result.skipped_empty.append(primary_id)
                continue

            candidates = gather_candidates(primary_id, index, state)
            best = best_candidate(fingerprint, candidates, secondary_fingerprints)
            if best is None:
                result.unmatched.append(primary_id)
                continue

            parts_only = ZERO_SCORE
            if best.similarity.score < self.thresholds.overlap:
                parts_only = compare_parts_only(
                    fingerprint, secondary_fingerprints[best.secondary_id]
                )
            decision = classify_match(best.similarity.score, parts_only.score, self.thresholds)
            if decision is None:
                log.debug(
                    "No qualifying match for %s (best %s at %.3f)",
                    primary_id,
                    best.secondary_id,
                    best.similarity.score,
                )
                result.unmatched.append(primary_id)
                continue

            record = MappingRecord(
                primary_id=primary_id,
                secondary_id=best.secondary_id,
                confidence=decision.confidence,
                method=decision.method,
                matched_at=self._clock(),
            )
            state.record(record)
            result.records.append(record)
            log.debug(
                "Fingerprint match %s -> %s (%s, score=%.3f, confidence=%.3f)",
                primary_id,
                best.secondary_id,
                decision.method,
                best.similarity.score,
                decision.confidence,
            )

        log.info(
            "Fingerprint matching: matched=%d, unmatched=%d, skipped_empty=%d",
            len(result.records),
            len(result.unmatched),
            len(result.skipped_empty),
        )
        return result
