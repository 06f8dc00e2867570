from __future__ import annotations

from typing import List, Optional

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from franchise_api.db.base import Base, IntPkMixin, TimestampMixin
from franchise_api.db.models.enums import AccountStatus


class OrgContactMixin:
    """Columns shared by every organization account."""
    name: Mapped[str] = mapped_column(Text, nullable=False)
    code: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    email: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    city: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    state: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    country: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    postal_code: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=AccountStatus.ACTIVE.value, server_default="ACTIVE"
    )


class HQ(IntPkMixin, OrgContactMixin, TimestampMixin, Base):
    """Headquarters: root of the franchise network."""
    __tablename__ = "hqs"

    master_franchisees: Mapped[List["MasterFranchisee"]] = relationship(
        "MasterFranchisee", back_populates="hq", lazy="raise"
    )


class MasterFranchisee(IntPkMixin, OrgContactMixin, TimestampMixin, Base):
    """Master Franchisee operating a region under an HQ."""
    __tablename__ = "master_franchisees"

    hq_id: Mapped[int] = mapped_column(
        ForeignKey("hqs.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    hq: Mapped[HQ] = relationship("HQ", back_populates="master_franchisees", lazy="selectin")


class LearningCenter(IntPkMixin, OrgContactMixin, TimestampMixin, Base):
    """Learning Center run under a Master Franchisee."""
    __tablename__ = "learning_centers"

    mf_id: Mapped[int] = mapped_column(
        ForeignKey("master_franchisees.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    mf: Mapped[MasterFranchisee] = relationship("MasterFranchisee", lazy="selectin")


class TeacherTrainer(IntPkMixin, OrgContactMixin, TimestampMixin, Base):
    """Teacher Trainer organization reporting directly to an HQ."""
    __tablename__ = "teacher_trainers"

    hq_id: Mapped[int] = mapped_column(
        ForeignKey("hqs.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    hq: Mapped[HQ] = relationship("HQ", lazy="selectin")
