"""
Module: adoption_kernel.db.base
Responsibility: Declarative base classes for all SQLAlchemy ORM models.  Provides
    the integer primary key convention, type annotation map for consistent column
    types, and the TrackedBase mixin for audit timestamps.
Architecture position: Kernel > DB.  This is the lowest-level import target
    within the kernel.  ALL model files import from here.  This module MUST NOT
    import from models/, stores/, services/, selectors/, or outer layers.

Invariants enforced:
    - Integer identity: every model inherits an auto-incrementing positive
      integer primary key that is never reassigned.
    - Decimal precision: Python Decimal maps to Numeric(10, 2) (fees).
    - Audit timestamps: TrackedBase provides created_at and updated_at.
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar

from sqlalchemy import BigInteger, DateTime, Integer, Numeric, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# BIGINT on PostgreSQL, plain INTEGER on SQLite so the column aliases ROWID
# and autoincrements.
IdType = BigInteger().with_variant(Integer(), "sqlite")


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Contract:
        Every ORM model in the system inherits from Base (or TrackedBase).

    Guarantees:
        - id is a database-generated positive integer.
        - datetime maps to DateTime(timezone=True).
        - Decimal maps to Numeric(10, 2).
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(10, 2),
        datetime: DateTime(timezone=True),
        int: IdType,
    }

    id: Mapped[int] = mapped_column(
        IdType,
        primary_key=True,
        autoincrement=True,
    )


class TrackedBase(Base):
    """
    Abstract base with audit timestamps.

    Guarantees:
        - created_at is set to server NOW() on INSERT and never changes.
        - updated_at is set to server NOW() on INSERT and auto-updates on
          every ORM UPDATE and every store mutation.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
