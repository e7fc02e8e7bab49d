"""
Module: resale_kernel.db.base
Responsibility: Declarative base for the store's ORM models: the column
    type conventions, the UUID primary key and the row timestamps.
Architecture position: Kernel > DB.  Lowest import target inside the
    kernel; MUST NOT import from models/, selectors/, domain/ or outer
    layers.

Invariants enforced:
    - Primary keys are UUIDs kept as 36-character strings, so the same
      schema works on SQLite and PostgreSQL.  For purchase, shipment and
      sale rows the key is the engine's ``record_id``; the display key is
      an ordinary, non-unique column.
    - ``Decimal`` annotations map to Numeric(38, 9).  Amounts are never
      stored as float.
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID, uuid4

from sqlalchemy import BigInteger, DateTime, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """UUID in Python, String(36) in the database."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else UUID(value)


class Base(DeclarativeBase):
    """Declarative base carrying the annotation -> column type map."""

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(38, 9),
        datetime: DateTime(timezone=True),
        UUID: UUIDString(),
        int: BigInteger,
    }


class TrackedBase(Base):
    """
    Abstract base for every table.

    Guarantees:
        - ``id`` defaults to uuid4 when the caller supplies none.
        - ``created_at`` is set by the database on INSERT.
        - ``updated_at`` is refreshed on every UPDATE.
    """

    __abstract__ = True

    id: Mapped[UUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)

    created_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
