from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, MetaData, func
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column


# Standardized naming convention for alembic-friendly constraints/indexes.
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class Base(DeclarativeBase):
    """Declarative base class with metadata naming conventions."""
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class IntPkMixin:
    """Mixin that provides an autoincrement integer primary key."""
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)


class TimestampMixin:
    """Mixin that provides created_at and updated_at timestamp columns."""
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )


class OrgChainMixin:
    """
    Mixin that places a record inside the organization hierarchy.

    Records created by a Learning Center carry the full LC -> MF -> HQ chain so
    that MF and HQ users can filter on their own id without joins.
    """

    @declared_attr
    def hq_id(cls) -> Mapped[Optional[int]]:
        return mapped_column(ForeignKey("hqs.id", ondelete="SET NULL"), nullable=True, index=True)

    @declared_attr
    def mf_id(cls) -> Mapped[Optional[int]]:
        return mapped_column(
            ForeignKey("master_franchisees.id", ondelete="SET NULL"), nullable=True, index=True
        )

    @declared_attr
    def lc_id(cls) -> Mapped[Optional[int]]:
        return mapped_column(
            ForeignKey("learning_centers.id", ondelete="SET NULL"), nullable=True, index=True
        )
