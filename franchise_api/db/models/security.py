from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from franchise_api.db.base import Base, IntPkMixin, TimestampMixin
from franchise_api.db.models.enums import AccountStatus
from franchise_api.db.models.organization import (
    HQ,
    LearningCenter,
    MasterFranchisee,
    TeacherTrainer,
)


class User(IntPkMixin, TimestampMixin, Base):
    """Application user attached to one organization account."""
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    hashed_password: Mapped[str] = mapped_column(Text, nullable=False)
    first_name: Mapped[str] = mapped_column(Text, nullable=False)
    last_name: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=AccountStatus.ACTIVE.value, server_default="ACTIVE"
    )
    email_verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    hq_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("hqs.id", ondelete="SET NULL"), nullable=True, index=True
    )
    mf_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("master_franchisees.id", ondelete="SET NULL"), nullable=True, index=True
    )
    lc_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("learning_centers.id", ondelete="SET NULL"), nullable=True, index=True
    )
    tt_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("teacher_trainers.id", ondelete="SET NULL"), nullable=True, index=True
    )

    hq: Mapped[Optional[HQ]] = relationship("HQ", lazy="selectin")
    mf: Mapped[Optional[MasterFranchisee]] = relationship("MasterFranchisee", lazy="selectin")
    lc: Mapped[Optional[LearningCenter]] = relationship("LearningCenter", lazy="selectin")
    tt: Mapped[Optional[TeacherTrainer]] = relationship("TeacherTrainer", lazy="selectin")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
