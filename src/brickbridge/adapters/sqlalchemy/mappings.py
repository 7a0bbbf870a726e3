"""SQLAlchemy Core tables for catalog rows, cross-references and mappings."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Dialect,
    Enum,
    Float,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    orm,
)

from brickbridge.domain.model import Catalog, MatchMethod


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

CatalogColumnType = Enum(
    Catalog, native_enum=False, values_callable=lambda e: [m.value for m in e]
)
MatchMethodColumnType = Enum(
    MatchMethod, native_enum=False, values_callable=lambda e: [m.value for m in e]
)

# Container rows --------------------------------------------------------------

container_part_table = Table(
    "container_part",
    mapper_registry.metadata,
    Column("container_id", String, primary_key=True),
    Column("part_id", String, primary_key=True),
    Column("color_id", Integer, primary_key=True),
    Column("quantity", Integer, nullable=False),
    Column("name", String, nullable=True),
    CheckConstraint("quantity > 0", name="quantity_positive"),
)

container_minifig_table = Table(
    "container_minifig",
    mapper_registry.metadata,
    Column("container_id", String, primary_key=True),
    Column("catalog", CatalogColumnType, primary_key=True),
    Column("minifig_id", String, primary_key=True),
    Column("quantity", Integer, nullable=False, default=1),
    Column("name", String, nullable=True),
    Index("ix_container_minifig_minifig", "catalog", "minifig_id"),
)

# Pre-materialized compositions -----------------------------------------------

minifig_part_table = Table(
    "minifig_part",
    mapper_registry.metadata,
    Column("catalog", CatalogColumnType, primary_key=True),
    Column("minifig_id", String, primary_key=True),
    Column("part_id", String, primary_key=True),
    Column("color_id", Integer, primary_key=True),
    Column("quantity", Integer, nullable=False),
    Column("name", String, nullable=True),
)

# Cross-references ------------------------------------------------------------

part_xref_table = Table(
    "part_xref",
    mapper_registry.metadata,
    Column("primary_part_id", String, primary_key=True),
    Column("secondary_part_id", String, nullable=False),
)

color_xref_table = Table(
    "color_xref",
    mapper_registry.metadata,
    Column("primary_color_id", Integer, primary_key=True),
    Column("secondary_color_id", Integer, nullable=False),
)

# Mappings --------------------------------------------------------------------

minifig_mapping_table = Table(
    "minifig_mapping",
    mapper_registry.metadata,
    Column("primary_id", String, primary_key=True),
    Column("secondary_id", String, nullable=False),
    Column("confidence", Float, nullable=False),
    Column("method", MatchMethodColumnType, nullable=False),
    Column("matched_at", UTCDateTime(), nullable=False),
    UniqueConstraint("secondary_id"),
)
