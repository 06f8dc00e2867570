from __future__ import annotations

from datetime import date
from typing import Optional

from sqlalchemy import JSON, Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from franchise_api.db.base import Base, IntPkMixin, OrgChainMixin, TimestampMixin
from franchise_api.db.models.catalog import Program, SubProgram
from franchise_api.db.models.enums import LearningGroupStatus
from franchise_api.db.models.organization import LearningCenter
from franchise_api.db.models.people import Teacher


class LearningGroup(IntPkMixin, OrgChainMixin, TimestampMixin, Base):
    """A scheduled class at a Learning Center: program, teacher, weekly slots and roster."""
    __tablename__ = "learning_groups"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=LearningGroupStatus.ACTIVE.value, server_default="ACTIVE"
    )
    max_students: Mapped[int] = mapped_column(Integer, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    location: Mapped[str] = mapped_column(Text, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # [{"day_of_week": 0-6, "start_time": "HH:MM", "end_time": "HH:MM", "room": str?}]
    schedule: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    pricing_snapshot: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    # Student ids on the roster
    students: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    program_id: Mapped[int] = mapped_column(
        ForeignKey("programs.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    sub_program_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("sub_programs.id", ondelete="RESTRICT"), nullable=True, index=True
    )
    teacher_id: Mapped[int] = mapped_column(
        ForeignKey("teachers.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    program: Mapped[Program] = relationship(Program, lazy="selectin")
    sub_program: Mapped[Optional[SubProgram]] = relationship(SubProgram, lazy="selectin")
    teacher: Mapped[Teacher] = relationship(Teacher, lazy="selectin")
    lc: Mapped[Optional[LearningCenter]] = relationship("LearningCenter", lazy="selectin")

    @property
    def current_students(self) -> int:
        return len(self.students or [])
