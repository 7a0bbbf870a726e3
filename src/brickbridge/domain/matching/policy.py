"""Confidence tiers for fingerprint similarity scores."""

from __future__ import annotations

from dataclasses import dataclass

from brickbridge.domain.model import MatchMethod


@dataclass(frozen=True, slots=True)
class MatchThresholds:
    """Score cut-offs and slopes mapping a similarity score to a confidence.

    The defaults were tuned by hand against real catalogs and are expected to
    need re-tuning as coverage grows.
    """

    exact: float = 0.95
    exact_confidence: float = 0.95
    overlap: float = 0.8
    overlap_slope: float = 0.75
    fuzzy: float = 0.7
    fuzzy_slope: float = 0.5
    parts_only: float = 0.75

    def __post_init__(self) -> None:
        if not 0.0 <= self.fuzzy <= self.overlap <= self.exact <= 1.0:
            raise ValueError(
                "thresholds must satisfy 0 <= fuzzy <= overlap <= exact <= 1, got "
                f"fuzzy={self.fuzzy}, overlap={self.overlap}, exact={self.exact}"
            )


@dataclass(frozen=True, slots=True)
class MatchDecision:
    confidence: float
    method: MatchMethod


def classify_match(
    score: float,
    parts_only_score: float,
    thresholds: MatchThresholds | None = None,
) -> MatchDecision | None:
    """Return the confidence tier for ``score`` or ``None`` when it does not qualify.

    ``parts_only_score`` is only consulted inside the fuzzy band.
    """

    t = thresholds or MatchThresholds()
    if score >= t.exact:
        return MatchDecision(confidence=t.exact_confidence, method=MatchMethod.EXACT)
    if score >= t.overlap:
        confidence = t.overlap + (score - t.overlap) * t.overlap_slope
        return MatchDecision(confidence=confidence, method=MatchMethod.OVERLAP)
    if score >= t.fuzzy and parts_only_score >= t.parts_only:
        confidence = t.fuzzy + (score - t.fuzzy) * t.fuzzy_slope
        return MatchDecision(confidence=confidence, method=MatchMethod.FUZZY)
    return None
