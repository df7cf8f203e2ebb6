from __future__ import annotations

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    func,
)

metadata = MetaData()

family_members = Table(
    "family_members",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("fam_member", String(32), nullable=False, unique=True),
)

category = Table(
    "category",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("cat_name", String(32), nullable=False, unique=True),
)

operations = Table(
    "operations",
    metadata,
    Column("id", BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True),
    Column("amount", BigInteger, nullable=False),
    Column("actor_id", Integer, ForeignKey("family_members.id"), nullable=False),
    Column("category_id", Integer, ForeignKey("category.id"), nullable=False),
    Column("type", String(16), nullable=False),
    Column("operation_at", DateTime(timezone=True), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("description", Text),
    CheckConstraint("type IN ('debit', 'credit')", name="ck_operations_type"),
)

Index("idx_operations_operation_at", operations.c.operation_at)
