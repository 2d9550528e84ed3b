"""VTN schema: programs, events, reports, vens, resources, ven_programs.

Revision ID: 001_vtn_schema
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_vtn_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _entity_columns(name_column: str, name_nullable: bool) -> list[sa.Column]:
    return [
        sa.Column("id", sa.String(128), primary_key=True),
        sa.Column("created_date_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("modification_date_time", sa.DateTime(timezone=True), nullable=False),
        # unique indexes admit any number of NULLs
        sa.Column(name_column, sa.String(128), nullable=name_nullable, unique=True),
    ]


def upgrade() -> None:
    op.create_table(
        "programs",
        *_entity_columns("program_name", name_nullable=False),
        sa.Column("business_id", sa.String(128), nullable=True, index=True),
        sa.Column("document", sa.JSON, nullable=False),
    )
    op.create_table(
        "vens",
        *_entity_columns("ven_name", name_nullable=False),
        sa.Column("document", sa.JSON, nullable=False),
    )
    op.create_table(
        "events",
        *_entity_columns("event_name", name_nullable=True),
        sa.Column(
            "program_id", sa.String(128), sa.ForeignKey("programs.id"),
            nullable=False, index=True,
        ),
        sa.Column("document", sa.JSON, nullable=False),
    )
    op.create_table(
        "reports",
        *_entity_columns("report_name", name_nullable=True),
        sa.Column(
            "program_id", sa.String(128), sa.ForeignKey("programs.id"),
            nullable=False, index=True,
        ),
        sa.Column(
            "event_id", sa.String(128), sa.ForeignKey("events.id"),
            nullable=False, index=True,
        ),
        sa.Column("client_name", sa.String(128), nullable=False),
        sa.Column("document", sa.JSON, nullable=False),
    )
    op.create_table(
        "resources",
        *_entity_columns("resource_name", name_nullable=False),
        sa.Column(
            "ven_id", sa.String(128), sa.ForeignKey("vens.id"),
            nullable=False, index=True,
        ),
        sa.Column("document", sa.JSON, nullable=False),
    )
    op.create_table(
        "ven_programs",
        sa.Column(
            "program_id", sa.String(128),
            sa.ForeignKey("programs.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column(
            "ven_id", sa.String(128),
            sa.ForeignKey("vens.id", ondelete="CASCADE"), primary_key=True,
            index=True,
        ),
    )


def downgrade() -> None:
    for table in ("ven_programs", "resources", "reports", "events", "vens", "programs"):
        op.drop_table(table)
