"""Initial catalog schema.

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from brickbridge.adapters.sqlalchemy.mappings import UTCDateTime

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

_CATALOG = sa.Enum("primary", "secondary", name="catalog", native_enum=False)
_METHOD = sa.Enum(
    "elimination", "exact", "overlap", "fuzzy", name="matchmethod", native_enum=False
)


def upgrade() -> None:
    op.create_table(
        "container_part",
        sa.Column("container_id", sa.String(), nullable=False),
        sa.Column("part_id", sa.String(), nullable=False),
        sa.Column("color_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.CheckConstraint("quantity > 0", name="ck_container_part_quantity_positive"),
        sa.PrimaryKeyConstraint("container_id", "part_id", "color_id", name="pk_container_part"),
    )
    op.create_table(
        "container_minifig",
        sa.Column("container_id", sa.String(), nullable=False),
        sa.Column("catalog", _CATALOG, nullable=False),
        sa.Column("minifig_id", sa.String(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint(
            "container_id", "catalog", "minifig_id", name="pk_container_minifig"
        ),
    )
    op.create_index(
        "ix_container_minifig_minifig", "container_minifig", ["catalog", "minifig_id"]
    )
    op.create_table(
        "minifig_part",
        sa.Column("catalog", _CATALOG, nullable=False),
        sa.Column("minifig_id", sa.String(), nullable=False),
        sa.Column("part_id", sa.String(), nullable=False),
        sa.Column("color_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint(
            "catalog", "minifig_id", "part_id", "color_id", name="pk_minifig_part"
        ),
    )
    op.create_table(
        "part_xref",
        sa.Column("primary_part_id", sa.String(), nullable=False),
        sa.Column("secondary_part_id", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("primary_part_id", name="pk_part_xref"),
    )
    op.create_table(
        "color_xref",
        sa.Column("primary_color_id", sa.Integer(), nullable=False),
        sa.Column("secondary_color_id", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("primary_color_id", name="pk_color_xref"),
    )
    op.create_table(
        "minifig_mapping",
        sa.Column("primary_id", sa.String(), nullable=False),
        sa.Column("secondary_id", sa.String(), nullable=False),
        sa.Column("confidence", sa.Float(), nullable=False),
        sa.Column("method", _METHOD, nullable=False),
        sa.Column("matched_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("primary_id", name="pk_minifig_mapping"),
        sa.UniqueConstraint("secondary_id", name="uq_minifig_mapping_secondary_id"),
    )


def downgrade() -> None:
    op.drop_table("minifig_mapping")
    op.drop_table("color_xref")
    op.drop_table("part_xref")
    op.drop_table("minifig_part")
    op.drop_index("ix_container_minifig_minifig", table_name="container_minifig")
    op.drop_table("container_minifig")
    op.drop_table("container_part")
