"""init operations schema

Revision ID: 20240110_000001
Revises:
Create Date: 2024-01-10 12:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

from familybudget.domain.enums import Actor, Category

revision = "20240110_000001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    family_members = op.create_table(
        "family_members",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("fam_member", sa.String(length=32), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("fam_member"),
    )
    category = op.create_table(
        "category",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("cat_name", sa.String(length=32), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("cat_name"),
    )
    op.create_table(
        "operations",
        sa.Column("id", sa.BigInteger().with_variant(sa.Integer(), "sqlite"), autoincrement=True, nullable=False),
        sa.Column("amount", sa.BigInteger(), nullable=False),
        sa.Column("actor_id", sa.Integer(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=16), nullable=False),
        sa.Column("operation_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column("description", sa.Text(), nullable=True),
        sa.CheckConstraint("type IN ('debit', 'credit')", name="ck_operations_type"),
        sa.ForeignKeyConstraint(["actor_id"], ["family_members.id"]),
        sa.ForeignKeyConstraint(["category_id"], ["category.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_operations_operation_at", "operations", ["operation_at"], unique=False)

    op.bulk_insert(family_members, [{"fam_member": a.value} for a in Actor])
    op.bulk_insert(category, [{"cat_name": c.value} for c in Category])


def downgrade() -> None:
    op.drop_index("idx_operations_operation_at", table_name="operations")
    op.drop_table("operations")
    op.drop_table("category")
    op.drop_table("family_members")
