"""Create sla_policies, specializations and provider_specializations.

Revision ID: 20251020_0001_counsel_core
Revises:
Create Date: 2025-10-20
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20251020_0001_counsel_core"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Create the SLA policy and specialization tables with their indexes."""
    op.create_table(
        "sla_policies",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("request_type", sa.String(length=32), nullable=False),
        sa.Column("priority", sa.String(length=16), nullable=True),
        sa.Column("response_minutes", sa.Integer(), nullable=False),
        sa.Column("resolution_minutes", sa.Integer(), nullable=False),
        sa.Column("escalation_minutes", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_sla_policies"),
        sa.UniqueConstraint("name", name="uq_sla_policies_name"),
    )
    op.create_index(
        "ix_sla_policies_type_priority", "sla_policies", ["request_type", "priority"]
    )

    op.create_table(
        "specializations",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("name_ar", sa.String(length=200), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("description_ar", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_specializations"),
        sa.UniqueConstraint("name", name="uq_specializations_name"),
    )
    op.create_index("ix_specializations_category", "specializations", ["category"])

    op.create_table(
        "provider_specializations",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("provider_id", sa.String(length=36), nullable=False),
        sa.Column("specialization_id", sa.String(length=36), nullable=False),
        sa.Column("experience_years", sa.Integer(), nullable=True),
        sa.Column("is_certified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("certifications", sa.JSON(), nullable=False),
        sa.Column("case_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("success_rate", sa.Numeric(5, 2), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_provider_specializations"),
        sa.ForeignKeyConstraint(
            ["specialization_id"],
            ["specializations.id"],
            name="fk_provider_specializations_specialization_id_specializations",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint(
            "provider_id",
            "specialization_id",
            name="uq_provider_specializations_provider_id",
        ),
    )
    op.create_index(
        "ix_provider_specializations_provider_id",
        "provider_specializations",
        ["provider_id"],
    )
    op.create_index(
        "ix_provider_specializations_specialization_id",
        "provider_specializations",
        ["specialization_id"],
    )


def downgrade() -> None:
    """Drop the tables in reverse dependency order."""
    op.drop_index("ix_provider_specializations_specialization_id", "provider_specializations")
    op.drop_index("ix_provider_specializations_provider_id", "provider_specializations")
    op.drop_table("provider_specializations")
    op.drop_index("ix_specializations_category", "specializations")
    op.drop_table("specializations")
    op.drop_index("ix_sla_policies_type_priority", "sla_policies")
    op.drop_table("sla_policies")
