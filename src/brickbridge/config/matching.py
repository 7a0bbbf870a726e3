"""Matching thresholds and part family rules."""

from __future__ import annotations

from dataclasses import dataclass, field

from brickbridge.domain.matching import (
    MatchingSettings,
    MatchThresholds,
    PartFamilyRule,
    PartNormalizer,
)

from .env import optional_float_env

# Leg assemblies: the secondary catalog numbers every print run separately.
DEFAULT_SECONDARY_FAMILY_RULES: tuple[PartFamilyRule, ...] = (
    PartFamilyRule.from_regex(r"970cm.*", "970cm00"),
    PartFamilyRule.from_regex(r"970c\d+", "970c00"),
)


@dataclass(frozen=True, slots=True)
class MatchingConfig:
    thresholds: MatchThresholds = field(default_factory=MatchThresholds)
    family_rules: tuple[PartFamilyRule, ...] = DEFAULT_SECONDARY_FAMILY_RULES
    assume_same_part_id: bool = True

    def settings(self) -> MatchingSettings:
        return MatchingSettings(
            thresholds=self.thresholds,
            normalizer=PartNormalizer(self.family_rules),
            assume_same_part_id=self.assume_same_part_id,
        )


def get_matching_config() -> MatchingConfig:
    """Load thresholds, letting ``BRICKBRIDGE_MATCH_*`` variables override defaults."""

    defaults = MatchThresholds()
    thresholds = MatchThresholds(
        exact=optional_float_env("BRICKBRIDGE_MATCH_EXACT", defaults.exact),
        exact_confidence=optional_float_env(
            "BRICKBRIDGE_MATCH_EXACT_CONFIDENCE", defaults.exact_confidence
        ),
        overlap=optional_float_env("BRICKBRIDGE_MATCH_OVERLAP", defaults.overlap),
        overlap_slope=optional_float_env("BRICKBRIDGE_MATCH_OVERLAP_SLOPE", defaults.overlap_slope),
        fuzzy=optional_float_env("BRICKBRIDGE_MATCH_FUZZY", defaults.fuzzy),
        fuzzy_slope=optional_float_env("BRICKBRIDGE_MATCH_FUZZY_SLOPE", defaults.fuzzy_slope),
        parts_only=optional_float_env("BRICKBRIDGE_MATCH_PARTS_ONLY", defaults.parts_only),
    )
    return MatchingConfig(thresholds=thresholds)
