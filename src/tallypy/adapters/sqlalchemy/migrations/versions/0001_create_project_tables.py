"""Create project and project_file tables.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from tallypy.adapters.sqlalchemy.mappings import BudgetBreakdownType, TextListType, UTCDateTime

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _amount(name: str) -> sa.Column[object]:
    return sa.Column(name, sa.Numeric(14, 2), nullable=True)


def upgrade() -> None:
    op.create_table(
        "project",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("project_name", sa.String(), nullable=False),
        sa.Column("organization", sa.String(), nullable=True),
        sa.Column("fiscal_year", sa.Integer(), nullable=True),
        _amount("budget_requested"),
        _amount("budget_approved"),
        _amount("budget_average"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("responsible_person", sa.String(), nullable=True),
        sa.Column("advisor", sa.String(), nullable=True),
        sa.Column("activity_type", sa.String(), nullable=True),
        sa.Column("rationale", sa.Text(), nullable=True),
        sa.Column("objectives", TextListType(), nullable=True),
        sa.Column("targets", sa.Text(), nullable=True),
        sa.Column("sdg_goals", TextListType(), nullable=True),
        sa.Column("budget_breakdown", BudgetBreakdownType(), nullable=True),
        sa.Column("is_published", sa.Boolean(), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("updated_at", UTCDateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_project"),
    )
    op.create_table(
        "project_file",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("file_name", sa.String(), nullable=False),
        sa.Column("file_url", sa.String(), nullable=False),
        sa.Column("file_type", sa.String(), nullable=True),
        sa.Column("category", sa.String(), nullable=True),
        sa.Column("uploaded_at", UTCDateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["project_id"],
            ["project.id"],
            name="fk_project_file_project_id_project",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_project_file"),
    )
    op.create_index("ix_project_file_project_id", "project_file", ["project_id"])


def downgrade() -> None:
    op.drop_index("ix_project_file_project_id", table_name="project_file")
    op.drop_table("project_file")
    op.drop_table("project")
