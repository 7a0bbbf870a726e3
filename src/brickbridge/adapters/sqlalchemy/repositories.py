"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from collections import defaultdict
from itertools import batched
from typing import TYPE_CHECKING

from sqlalchemy import func, insert, select

from brickbridge.adapters.sqlalchemy.mappings import (
    color_xref_table,
    container_minifig_table,
    container_part_table,
    minifig_mapping_table,
    minifig_part_table,
    part_xref_table,
)
from brickbridge.domain.errors import MappingConflictError
from brickbridge.domain.model import (
    Catalog,
    CompositionLine,
    ContainerInventory,
    ContainerMembership,
    MappingRecord,
    MatchMethod,
    MinifigReference,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.engine import Row
    from sqlalchemy.orm import Session

# Stays well below SQLite's bound parameter limit.
LOOKUP_CHUNK_SIZE = 200


class SqlAlchemyContainerRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_inventory(self, container_id: str) -> ContainerInventory | None:
        part_rows = self.session.execute(
            select(container_part_table)
            .where(container_part_table.c.container_id == container_id)
            .order_by(container_part_table.c.part_id, container_part_table.c.color_id)
        ).all()
        minifig_rows = self.session.execute(
            select(container_minifig_table)
            .where(container_minifig_table.c.container_id == container_id)
            .where(container_minifig_table.c.catalog == Catalog.PRIMARY)
            .order_by(container_minifig_table.c.minifig_id)
        ).all()
        if not part_rows and not minifig_rows:
            return None
        return ContainerInventory(
            container_id=container_id,
            parts=tuple(
                CompositionLine(
                    part_id=row.part_id,
                    color_id=row.color_id,
                    quantity=row.quantity,
                    name=row.name,
                )
                for row in part_rows
            ),
            minifigs=tuple(
                MinifigReference(primary_id=row.minifig_id, quantity=row.quantity, name=row.name)
                for row in minifig_rows
            ),
        )

    def list_memberships(self) -> list[ContainerMembership]:
        primary: defaultdict[str, set[str]] = defaultdict(set)
        secondary: defaultdict[str, set[str]] = defaultdict(set)
        rows = self.session.execute(
            select(
                container_minifig_table.c.container_id,
                container_minifig_table.c.catalog,
                container_minifig_table.c.minifig_id,
            )
        )
        for container_id, catalog, minifig_id in rows:
            target = primary if catalog == Catalog.PRIMARY else secondary
            target[container_id].add(minifig_id)
        return [
            ContainerMembership(
                container_id=container_id,
                primary=frozenset(primary.get(container_id, ())),
                secondary=frozenset(secondary.get(container_id, ())),
            )
            for container_id in sorted(primary.keys() | secondary.keys())
        ]

    def add_part(self, container_id: str, line: CompositionLine) -> None:
        self.session.execute(
            insert(container_part_table).values(
                container_id=container_id,
                part_id=line.part_id,
                color_id=line.color_id,
                quantity=line.quantity,
                name=line.name,
            )
        )

    def add_minifig(
        self,
        container_id: str,
        catalog: Catalog,
        minifig_id: str,
        *,
        quantity: int = 1,
        name: str | None = None,
    ) -> None:
        self.session.execute(
            insert(container_minifig_table).values(
                container_id=container_id,
                catalog=catalog,
                minifig_id=minifig_id,
                quantity=quantity,
                name=name,
            )
        )


class SqlAlchemyCompositionRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_compositions(
        self, catalog: Catalog, entity_ids: Iterable[str]
    ) -> dict[str, list[CompositionLine]]:
        compositions: dict[str, list[CompositionLine]] = {}
        for chunk in batched(sorted(set(entity_ids)), LOOKUP_CHUNK_SIZE):
            stmt = (
                select(minifig_part_table)
                .where(minifig_part_table.c.catalog == catalog)
                .where(minifig_part_table.c.minifig_id.in_(chunk))
                .order_by(
                    minifig_part_table.c.minifig_id,
                    minifig_part_table.c.part_id,
                    minifig_part_table.c.color_id,
                )
            )
            for row in self.session.execute(stmt):
                compositions.setdefault(row.minifig_id, []).append(_line_from_row(row))
        return compositions

    def add_composition(
        self, catalog: Catalog, entity_id: str, lines: Iterable[CompositionLine]
    ) -> None:
        values = [
            {
                "catalog": catalog,
                "minifig_id": entity_id,
                "part_id": line.part_id,
                "color_id": line.color_id,
                "quantity": line.quantity,
                "name": line.name,
            }
            for line in lines
        ]
        if values:
            self.session.execute(insert(minifig_part_table), values)


class SqlAlchemyCrossReferenceRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_part_xrefs(self, part_ids: Iterable[str]) -> dict[str, str]:
        found: dict[str, str] = {}
        for chunk in batched(sorted(set(part_ids)), LOOKUP_CHUNK_SIZE):
            stmt = select(
                part_xref_table.c.primary_part_id, part_xref_table.c.secondary_part_id
            ).where(part_xref_table.c.primary_part_id.in_(chunk))
            found.update({primary: secondary for primary, secondary in self.session.execute(stmt)})
        return found

    def get_color_xrefs(self, color_ids: Iterable[int]) -> dict[int, int]:
        found: dict[int, int] = {}
        for chunk in batched(sorted(set(color_ids)), LOOKUP_CHUNK_SIZE):
            stmt = select(
                color_xref_table.c.primary_color_id, color_xref_table.c.secondary_color_id
            ).where(color_xref_table.c.primary_color_id.in_(chunk))
            found.update({primary: secondary for primary, secondary in self.session.execute(stmt)})
        return found

    def add_part_xref(self, primary_part_id: str, secondary_part_id: str) -> None:
        self.session.execute(
            insert(part_xref_table).values(
                primary_part_id=primary_part_id, secondary_part_id=secondary_part_id
            )
        )

    def add_color_xref(self, primary_color_id: int, secondary_color_id: int) -> None:
        self.session.execute(
            insert(color_xref_table).values(
                primary_color_id=primary_color_id, secondary_color_id=secondary_color_id
            )
        )


class SqlAlchemyMappingRepository:
    """Append-only mapping store; existing mappings are never updated."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, record: MappingRecord) -> None:
        conflicts = self.session.execute(
            select(func.count())
            .select_from(minifig_mapping_table)
            .where(
                (minifig_mapping_table.c.primary_id == record.primary_id)
                | (minifig_mapping_table.c.secondary_id == record.secondary_id)
            )
        ).scalar_one()
        if conflicts:
            raise MappingConflictError(
                f"Mapping {record.primary_id} -> {record.secondary_id} conflicts with a stored one"
            )
        self.session.execute(
            insert(minifig_mapping_table).values(
                primary_id=record.primary_id,
                secondary_id=record.secondary_id,
                confidence=record.confidence,
                method=record.method,
                matched_at=record.matched_at,
            )
        )

    def list_all(self) -> list[MappingRecord]:
        stmt = select(minifig_mapping_table).order_by(minifig_mapping_table.c.primary_id)
        return [_record_from_row(row) for row in self.session.execute(stmt)]

    def get_by_primary_ids(self, primary_ids: Iterable[str]) -> dict[str, MappingRecord]:
        found: dict[str, MappingRecord] = {}
        for chunk in batched(sorted(set(primary_ids)), LOOKUP_CHUNK_SIZE):
            stmt = select(minifig_mapping_table).where(
                minifig_mapping_table.c.primary_id.in_(chunk)
            )
            for row in self.session.execute(stmt):
                record = _record_from_row(row)
                found[record.primary_id] = record
        return found


def _line_from_row(row: Row[tuple[object, ...]]) -> CompositionLine:
    mapping = row._mapping  # noqa: SLF001
    return CompositionLine(
        part_id=str(mapping["part_id"]),
        color_id=int(mapping["color_id"]),  # pyright: ignore[reportArgumentType]
        quantity=int(mapping["quantity"]),  # pyright: ignore[reportArgumentType]
        name=mapping["name"],  # pyright: ignore[reportArgumentType]
    )


def _record_from_row(row: Row[tuple[object, ...]]) -> MappingRecord:
    mapping = row._mapping  # noqa: SLF001
    return MappingRecord(
        primary_id=str(mapping["primary_id"]),
        secondary_id=str(mapping["secondary_id"]),
        confidence=float(mapping["confidence"]),  # pyright: ignore[reportArgumentType]
        method=MatchMethod(mapping["method"]),
        matched_at=mapping["matched_at"],  # pyright: ignore[reportArgumentType]
    )
