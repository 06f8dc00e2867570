from __future__ import annotations

from datetime import date
from typing import Optional

from sqlalchemy import JSON, Boolean, Date, ForeignKey, Integer, Numeric, String, Text, true
from sqlalchemy.orm import Mapped, mapped_column, relationship

from franchise_api.db.base import Base, IntPkMixin, TimestampMixin
from franchise_api.db.models.organization import TeacherTrainer


class TrainingType(IntPkMixin, TimestampMixin, Base):
    """Kind of teacher training HQ offers, e.g. onboarding or curriculum updates."""
    __tablename__ = "training_types"

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)  # hours
    category: Mapped[str] = mapped_column(Text, nullable=False, default="General", server_default="General")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())
    prerequisites: Mapped[list] = mapped_column(JSON, nullable=False, default=list)


class Training(IntPkMixin, TimestampMixin, Base):
    """A scheduled training session run by a Teacher Trainer account."""
    __tablename__ = "trainings"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    training_type_id: Mapped[int] = mapped_column(
        ForeignKey("training_types.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    tt_id: Mapped[int] = mapped_column(
        ForeignKey("teacher_trainers.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    hq_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("hqs.id", ondelete="SET NULL"), nullable=True, index=True
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    max_participants: Mapped[int] = mapped_column(Integer, nullable=False)
    current_participants: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    location: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())
    cost: Mapped[float] = mapped_column(Numeric(12, 2), nullable=False, default=0, server_default="0")
    requirements: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    materials: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    training_type: Mapped[TrainingType] = relationship(TrainingType, lazy="selectin")
    tt: Mapped[TeacherTrainer] = relationship(TeacherTrainer, lazy="selectin")
