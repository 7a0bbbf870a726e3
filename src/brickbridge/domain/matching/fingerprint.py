"""Fingerprints: normalized part+color multisets describing a composition."""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from brickbridge.domain.model import CompositionLine

type PartKey = tuple[str, int]
type Fingerprint = Mapping[PartKey, int]

EMPTY_FINGERPRINT: Fingerprint = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class PartFamilyRule:
    """Collapse every part id matching ``pattern`` onto ``canonical_id``.

    Families cover cosmetic numbering variants of one physical component, such
    as leg assemblies re-numbered per printing batch.
    """

    pattern: re.Pattern[str]
    canonical_id: str

    @classmethod
    def from_regex(cls, regex: str, canonical_id: str) -> PartFamilyRule:
        return cls(pattern=re.compile(regex), canonical_id=canonical_id)

    def apply(self, part_id: str) -> str | None:
        if self.pattern.fullmatch(part_id):
            return self.canonical_id
        return None


class PartNormalizer:
    """Applies family rules in order; the first matching rule wins."""

    def __init__(self, rules: Sequence[PartFamilyRule] = ()) -> None:
        self._rules = tuple(rules)

    @property
    def rules(self) -> tuple[PartFamilyRule, ...]:
        return self._rules

    def __call__(self, part_id: str) -> str:
        for rule in self._rules:
            canonical = rule.apply(part_id)
            if canonical is not None:
                return canonical
        return part_id


IDENTITY_NORMALIZER = PartNormalizer()


def build_fingerprint(
    lines: Iterable[CompositionLine],
    *,
    normalizer: PartNormalizer = IDENTITY_NORMALIZER,
) -> Fingerprint:
    totals: Counter[PartKey] = Counter()
    for line in lines:
        if line.quantity <= 0:
            continue
        totals[(normalizer(line.part_id), line.color_id)] += line.quantity
    if not totals:
        return EMPTY_FINGERPRINT
    return MappingProxyType(dict(totals))


def collapse_colors(fingerprint: Fingerprint) -> Mapping[str, int]:
    """Sum quantities per part id, ignoring color."""

    totals: Counter[str] = Counter()
    for (part_id, _color_id), quantity in fingerprint.items():
        totals[part_id] += quantity
    return totals
