"""Explode minifigure parents into parts and merge them with a container's own parts.

Every canonical key appears exactly once in the result. A subpart shared by two
minifigures, or by a minifigure and the container itself, is one row whose
quantity is the sum over all sources and whose parent relations list each
minifigure once.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from brickbridge.domain.errors import (
    BrickBridgeError,
    DataIntegrityWarning,
    FetchTimeoutError,
    InvalidIdentifierError,
)
from brickbridge.domain.identity import IdentityResolver
from brickbridge.domain.model import (
    Catalog,
    ComponentRelation,
    InventoryRow,
    InventorySource,
    MinifigMeta,
    ParentRelation,
    PartIdentity,
)
from brickbridge.domain.outcomes import (
    BatchReport,
    CompositionOutcome,
    CompositionSource,
    DegradedComposition,
    InventoryResult,
    ResolvedComposition,
)

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from brickbridge.common.cache import CacheService
    from brickbridge.domain.identity import ResolutionContext
    from brickbridge.domain.model import CompositionLine, ContainerInventory
    from brickbridge.domain.ports.fetching import CompositionFetcher

log = getLogger(__name__)

DEFAULT_SELF_HEAL_TIMEOUT_SECONDS = 8.0

type CompositionCache = CacheService[str, tuple[CompositionLine, ...]]


@dataclass(slots=True)
class _RowDraft:
    identity: PartIdentity
    name: str | None = None
    quantity: int = 0
    parents: dict[str, int] = field(default_factory=dict)
    components: dict[str, int] = field(default_factory=dict)

    def freeze(self) -> InventoryRow:
        return InventoryRow(
            identity=self.identity,
            quantity_required=self.quantity,
            name=self.name,
            parent_relations=tuple(
                ParentRelation(parent_key=key, quantity=qty) for key, qty in self.parents.items()
            ),
            component_relations=tuple(
                ComponentRelation(child_key=key, quantity=qty)
                for key, qty in self.components.items()
            ),
        )


class _RowSet:
    """Insertion-ordered rows keyed by canonical key."""

    def __init__(self, report: BatchReport) -> None:
        self._drafts: dict[str, _RowDraft] = {}
        self._report = report

    def upsert(self, identity: PartIdentity, name: str | None) -> _RowDraft:
        draft = self._drafts.get(identity.canonical_key)
        if draft is None:
            draft = _RowDraft(identity=identity, name=name)
            self._drafts[identity.canonical_key] = draft
            return draft
        if name is not None and draft.name is not None and name != draft.name:
            self._report.warn(
                f"{DataIntegrityWarning.__name__}: name for {identity.canonical_key} "
                f"changed from {draft.name!r} to {name!r}"
            )
        if name is not None:
            draft.name = name
        return draft

    def freeze(self) -> tuple[InventoryRow, ...]:
        return tuple(draft.freeze() for draft in self._drafts.values())


@dataclass(frozen=True, slots=True)
class _Parent:
    primary_id: str
    identity: PartIdentity
    count: int


class InventoryMaterializer:
    def __init__(
        self,
        *,
        self_heal: CompositionFetcher | None = None,
        composition_cache: CompositionCache | None = None,
        timeout_seconds: float = DEFAULT_SELF_HEAL_TIMEOUT_SECONDS,
    ) -> None:
        self._self_heal = self_heal
        self._cache = composition_cache
        self._timeout = timeout_seconds

    async def materialize(
        self,
        inventory: ContainerInventory,
        context: ResolutionContext,
        *,
        local_compositions: Mapping[str, Sequence[CompositionLine]],
        source: InventorySource = InventorySource.LOCAL,
    ) -> InventoryResult:
        """Build the merged row set for one container.

        ``local_compositions`` holds pre-materialized subparts keyed by primary
        minifigure id. Parents missing there are fetched from the secondary
        catalog concurrently; a failed or timed out fetch leaves that parent
        with no component rows and is recorded in the report.
        """

        report = BatchReport()
        resolver = IdentityResolver(context)
        rows = _RowSet(report)

        for line in inventory.parts:
            try:
                identity = resolver.resolve_part(line)
            except InvalidIdentifierError as exc:
                report.record_failure(f"part in {inventory.container_id}", exc)
                continue
            rows.upsert(identity, line.name).quantity += line.quantity

        parents = self._collect_parents(inventory, resolver, rows, report)
        outcomes = await self._compositions(parents, context, local_compositions)

        for parent in parents:
            outcome = outcomes[parent.primary_id]
            report.record(outcome)
            if isinstance(outcome, ResolvedComposition):
                self._merge_subparts(parent, outcome, resolver, rows, report)

        return InventoryResult(
            container_id=inventory.container_id,
            rows=rows.freeze(),
            source=source,
            report=report,
            minifig_meta=self._minifig_meta(parents, outcomes),
        )

    def _collect_parents(
        self,
        inventory: ContainerInventory,
        resolver: IdentityResolver,
        rows: _RowSet,
        report: BatchReport,
    ) -> list[_Parent]:
        counts: Counter[str] = Counter()
        names: dict[str, str | None] = {}
        for ref in inventory.minifigs:
            counts[ref.primary_id] += ref.quantity
            names[ref.primary_id] = ref.name or names.get(ref.primary_id)

        parents: list[_Parent] = []
        for primary_id, count in counts.items():
            try:
                identity = resolver.resolve_minifig(primary_id)
            except InvalidIdentifierError as exc:
                report.record_failure(f"minifig in {inventory.container_id}", exc)
                continue
            rows.upsert(identity, names[primary_id]).quantity += count
            parents.append(_Parent(primary_id=primary_id, identity=identity, count=count))
        return parents

    async def _compositions(
        self,
        parents: Sequence[_Parent],
        context: ResolutionContext,
        local: Mapping[str, Sequence[CompositionLine]],
    ) -> dict[str, CompositionOutcome]:
        outcomes: dict[str, CompositionOutcome] = {}
        pending: list[tuple[str, str]] = []
        for parent in parents:
            lines = local.get(parent.primary_id)
            if lines:
                outcomes[parent.primary_id] = ResolvedComposition(
                    primary_id=parent.primary_id,
                    lines=tuple(lines),
                    source=CompositionSource.LOCAL,
                )
                continue
            record = context.mappings.get(parent.primary_id)
            if record is None:
                outcomes[parent.primary_id] = DegradedComposition(
                    primary_id=parent.primary_id,
                    reason="no stored composition and no secondary mapping",
                )
                continue
            cached = self._cache.get(record.secondary_id) if self._cache is not None else None
            if cached is not None:
                outcomes[parent.primary_id] = ResolvedComposition(
                    primary_id=parent.primary_id,
                    lines=cached,
                    source=CompositionSource.CACHE,
                )
                continue
            if self._self_heal is None:
                outcomes[parent.primary_id] = DegradedComposition(
                    primary_id=parent.primary_id,
                    reason="no stored composition and self-heal is disabled",
                )
                continue
            pending.append((parent.primary_id, record.secondary_id))

        if pending and self._self_heal is not None:
            log.info("Self-healing %d minifig composition(s)", len(pending))
            fetcher = self._self_heal
            results = await asyncio.gather(
                *(self._fetch(fetcher, secondary_id) for _, secondary_id in pending),
                return_exceptions=True,
            )
            for (primary_id, secondary_id), result in zip(pending, results, strict=True):
                outcomes[primary_id] = self._settle(primary_id, secondary_id, result)
        return outcomes

    async def _fetch(
        self, fetcher: CompositionFetcher, secondary_id: str
    ) -> tuple[CompositionLine, ...]:
        try:
            async with asyncio.timeout(self._timeout):
                lines = await fetcher.fetch_entity_composition(secondary_id)
        except TimeoutError as exc:
            raise FetchTimeoutError(
                f"Composition fetch for {secondary_id} exceeded {self._timeout:.1f}s"
            ) from exc
        return tuple(lines)

    def _settle(
        self,
        primary_id: str,
        secondary_id: str,
        result: tuple[CompositionLine, ...] | BaseException,
    ) -> CompositionOutcome:
        if isinstance(result, InvalidIdentifierError):
            return DegradedComposition(
                primary_id=primary_id,
                reason=f"self-heal skipped invalid secondary id {secondary_id!r}: {result}",
                error=result,
                attempted_fetch=True,
            )
        if isinstance(result, BrickBridgeError):
            return DegradedComposition(
                primary_id=primary_id,
                reason=f"self-heal failed: {result}",
                error=result,
                attempted_fetch=True,
            )
        if isinstance(result, BaseException):
            raise result
        if not result:
            return DegradedComposition(
                primary_id=primary_id,
                reason=f"secondary catalog returned no parts for {secondary_id}",
                attempted_fetch=True,
            )
        if self._cache is not None:
            self._cache.set(secondary_id, result)
        return ResolvedComposition(
            primary_id=primary_id,
            lines=result,
            source=CompositionSource.SELF_HEAL,
        )

    def _merge_subparts(
        self,
        parent: _Parent,
        composition: ResolvedComposition,
        resolver: IdentityResolver,
        rows: _RowSet,
        report: BatchReport,
    ) -> None:
        catalog = (
            Catalog.PRIMARY if composition.source is CompositionSource.LOCAL else Catalog.SECONDARY
        )
        per_instance: dict[str, int] = {}
        identities: dict[str, tuple[PartIdentity, str | None]] = {}
        for line in composition.lines:
            try:
                identity = resolver.resolve_part(line, catalog=catalog).as_subpart()
            except BrickBridgeError as exc:
                report.warn(f"Skipping subpart of {parent.identity.canonical_key}: {exc}")
                continue
            key = identity.canonical_key
            per_instance[key] = per_instance.get(key, 0) + line.quantity
            identities[key] = (identity, line.name)

        parent_key = parent.identity.canonical_key
        parent_draft = rows.upsert(parent.identity, None)
        for child_key, quantity in per_instance.items():
            identity, name = identities[child_key]
            draft = rows.upsert(identity, name)
            if parent_key in draft.parents:
                continue
            draft.quantity += quantity * parent.count
            draft.parents[parent_key] = quantity
            parent_draft.components[child_key] = quantity

    @staticmethod
    def _minifig_meta(
        parents: Sequence[_Parent],
        outcomes: Mapping[str, CompositionOutcome],
    ) -> MinifigMeta | None:
        if not parents:
            return None
        attempted = succeeded = failed = 0
        missing: list[str] = []
        for parent in parents:
            outcome = outcomes[parent.primary_id]
            match outcome:
                case ResolvedComposition(source=CompositionSource.SELF_HEAL):
                    attempted += 1
                    succeeded += 1
                case DegradedComposition(attempted_fetch=True):
                    attempted += 1
                    failed += 1
                    missing.append(parent.identity.canonical_key)
                case DegradedComposition():
                    missing.append(parent.identity.canonical_key)
                case _:
                    pass
        return MinifigMeta(
            total_minifigs=sum(parent.count for parent in parents),
            self_heal_attempted=attempted,
            self_heal_succeeded=succeeded,
            self_heal_failed=failed,
            missing_compositions=tuple(missing),
        )
