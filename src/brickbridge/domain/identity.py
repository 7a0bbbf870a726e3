"""Canonical cross-catalog keys for parts and minifigures.

Keys are namespace-qualified so that a primary id can never collide with an
unrelated secondary id that happens to share its spelling::

    secondary:part:<part_id>:<color_id>
    primary:part:<part_id>:<color_id>
    secondary:fig:<minifig_id>
    primary:fig:<minifig_id>
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from brickbridge.domain.errors import InvalidIdentifierError, require_identifier
from brickbridge.domain.model import (
    Catalog,
    CatalogEntity,
    CompositionLine,
    PartIdentity,
    RowType,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from brickbridge.common.cache import CacheService
    from brickbridge.domain.model import MappingRecord
    from brickbridge.domain.ports.persistence import CrossReferenceRepository

PART_KIND: Final[str] = "part"
FIG_KIND: Final[str] = "fig"

_EMPTY: Mapping[str, str] = MappingProxyType({})


def part_key(catalog: Catalog, part_id: str, color_id: int) -> str:
    return f"{catalog}:{PART_KIND}:{part_id}:{color_id}"


def minifig_key(catalog: Catalog, minifig_id: str) -> str:
    return f"{catalog}:{FIG_KIND}:{minifig_id}"


@dataclass(frozen=True, slots=True)
class ParsedKey:
    catalog: Catalog
    kind: str
    entity_id: str
    color_id: int | None = None

    @property
    def entity(self) -> CatalogEntity:
        return CatalogEntity(entity_id=self.entity_id, catalog=self.catalog)


def parse_canonical_key(key: str) -> ParsedKey:
    parts = key.split(":")
    try:
        catalog = Catalog(parts[0])
    except ValueError as exc:
        raise InvalidIdentifierError(f"Unknown catalog in key {key!r}") from exc
    if len(parts) == 3 and parts[1] == FIG_KIND:
        return ParsedKey(catalog=catalog, kind=FIG_KIND, entity_id=parts[2])
    if len(parts) == 4 and parts[1] == PART_KIND:
        try:
            color_id = int(parts[3])
        except ValueError as exc:
            raise InvalidIdentifierError(f"Invalid color in key {key!r}") from exc
        return ParsedKey(catalog=catalog, kind=PART_KIND, entity_id=parts[2], color_id=color_id)
    raise InvalidIdentifierError(f"Malformed canonical key {key!r}")


@dataclass(frozen=True, slots=True)
class ResolutionContext:
    """Read-only lookup tables for one materialization call or matching pass."""

    part_xref: Mapping[str, str] = field(default_factory=lambda: _EMPTY)
    color_xref: Mapping[int, int] = field(default_factory=lambda: MappingProxyType({}))
    mappings: Mapping[str, MappingRecord] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def build(
        cls,
        *,
        part_xref: Mapping[str, str] | None = None,
        color_xref: Mapping[int, int] | None = None,
        mappings: Mapping[str, MappingRecord] | None = None,
    ) -> ResolutionContext:
        return cls(
            part_xref=MappingProxyType(dict(part_xref or {})),
            color_xref=MappingProxyType(dict(color_xref or {})),
            mappings=MappingProxyType(dict(mappings or {})),
        )


def translate_line(
    line: CompositionLine,
    context: ResolutionContext,
    *,
    assume_same_part_id: bool = False,
) -> CompositionLine | None:
    """Translate a primary composition line into the secondary namespace.

    Returns ``None`` when the color (or, unless ``assume_same_part_id``, the
    part) has no cross-reference.
    """

    color_id = context.color_xref.get(line.color_id)
    if color_id is None:
        return None
    part_id = context.part_xref.get(line.part_id)
    if part_id is None:
        if not assume_same_part_id:
            return None
        part_id = line.part_id
    return CompositionLine(
        part_id=part_id, color_id=color_id, quantity=line.quantity, name=line.name
    )


class IdentityResolver:
    def __init__(self, context: ResolutionContext) -> None:
        self.context = context

    def resolve_part(
        self, line: CompositionLine, *, catalog: Catalog = Catalog.PRIMARY
    ) -> PartIdentity:
        """Canonical identity for a part+color line.

        Secondary ids win whenever both part and color translate; otherwise the
        primary ids are kept.
        """

        part_id = require_identifier(line.part_id, kind="part")
        if catalog is Catalog.SECONDARY:
            return PartIdentity(
                canonical_key=part_key(Catalog.SECONDARY, part_id, line.color_id),
                row_type=RowType.CATALOG_PART,
                catalog=Catalog.SECONDARY,
                secondary_id=part_id,
                secondary_color_id=line.color_id,
            )

        translated = translate_line(line, self.context)
        if translated is None:
            return PartIdentity(
                canonical_key=part_key(Catalog.PRIMARY, part_id, line.color_id),
                row_type=RowType.CATALOG_PART,
                catalog=Catalog.PRIMARY,
                primary_id=part_id,
                primary_color_id=line.color_id,
            )
        return PartIdentity(
            canonical_key=part_key(Catalog.SECONDARY, translated.part_id, translated.color_id),
            row_type=RowType.CATALOG_PART,
            catalog=Catalog.SECONDARY,
            primary_id=part_id,
            primary_color_id=line.color_id,
            secondary_id=translated.part_id,
            secondary_color_id=translated.color_id,
        )

    def resolve_minifig(self, primary_id: str) -> PartIdentity:
        """Canonical identity for a minifigure parent, falling back to its primary id."""

        primary_id = require_identifier(primary_id, kind="minifig")
        record = self.context.mappings.get(primary_id)
        if record is None:
            return PartIdentity(
                canonical_key=minifig_key(Catalog.PRIMARY, primary_id),
                row_type=RowType.MINIFIG_PARENT,
                catalog=Catalog.PRIMARY,
                primary_id=primary_id,
            )
        return PartIdentity(
            canonical_key=minifig_key(Catalog.SECONDARY, record.secondary_id),
            row_type=RowType.MINIFIG_PARENT,
            catalog=Catalog.SECONDARY,
            primary_id=primary_id,
            secondary_id=record.secondary_id,
        )


class CrossReferenceLoader:
    """Read-through loader for part and color cross-references.

    Negative lookups are cached as well, so a part with no secondary id is not
    queried again until its cache entry expires.
    """

    def __init__(
        self,
        xrefs: CrossReferenceRepository,
        *,
        part_cache: CacheService[str, str | None] | None = None,
        color_cache: CacheService[int, int | None] | None = None,
    ) -> None:
        self._xrefs = xrefs
        self._part_cache = part_cache
        self._color_cache = color_cache

    def load_parts(self, part_ids: Iterable[str]) -> dict[str, str]:
        wanted = {part_id for part_id in part_ids if part_id}
        return self._load(wanted, self._part_cache, self._xrefs.get_part_xrefs)

    def load_colors(self, color_ids: Iterable[int]) -> dict[int, int]:
        return self._load(set(color_ids), self._color_cache, self._xrefs.get_color_xrefs)

    @staticmethod
    def _load[K, V](
        wanted: set[K],
        cache: CacheService[K, V | None] | None,
        fetch: Callable[[Iterable[K]], dict[K, V]],
    ) -> dict[K, V]:
        found: dict[K, V] = {}
        missing: set[K] = set()
        for key in wanted:
            if cache is not None and cache.has(key):
                value = cache.get(key)
                if value is not None:
                    found[key] = value
            else:
                missing.add(key)
        if missing:
            fetched = fetch(list(missing))
            found.update(fetched)
            if cache is not None:
                for key in missing:
                    cache.set(key, fetched.get(key))
        return found

    def build_context(
        self,
        lines: Iterable[CompositionLine],
        *,
        mappings: Mapping[str, MappingRecord] | None = None,
    ) -> ResolutionContext:
        materialized = list(lines)
        return ResolutionContext.build(
            part_xref=self.load_parts(line.part_id for line in materialized),
            color_xref=self.load_colors(line.color_id for line in materialized),
            mappings=mappings,
        )
