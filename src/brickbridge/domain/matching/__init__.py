"""Two-tier cross-catalog minifigure matching."""

from __future__ import annotations

from .elimination import EliminationResult, match_by_elimination
from .engine import MatchingReport, MatchingSettings, run_matching_pass, translated_fingerprint
from .fingerprint import (
    EMPTY_FINGERPRINT,
    Fingerprint,
    PartFamilyRule,
    PartNormalizer,
    build_fingerprint,
)
from .fingerprint_match import FingerprintMatcher, FingerprintMatchResult, gather_candidates
from .index import CooccurrenceIndex
from .policy import MatchDecision, MatchThresholds, classify_match
from .similarity import SimilarityScore, compare, compare_parts_only
from .state import MatchState

__all__ = [
    "EMPTY_FINGERPRINT",
    "CooccurrenceIndex",
    "EliminationResult",
    "Fingerprint",
    "FingerprintMatchResult",
    "FingerprintMatcher",
    "MatchDecision",
    "MatchState",
    "MatchThresholds",
    "MatchingReport",
    "MatchingSettings",
    "PartFamilyRule",
    "PartNormalizer",
    "SimilarityScore",
    "build_fingerprint",
    "classify_match",
    "compare",
    "compare_parts_only",
    "gather_candidates",
    "match_by_elimination",
    "run_matching_pass",
    "translated_fingerprint",
]
