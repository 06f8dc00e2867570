from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy import JSON, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from franchise_api.db.base import Base, IntPkMixin, OrgChainMixin, TimestampMixin
from franchise_api.db.models.enums import StudentStatus, TeacherStatus
from franchise_api.db.models.organization import HQ, LearningCenter, MasterFranchisee


class AddressMixin:
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    city: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    state: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    country: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    postal_code: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class Student(IntPkMixin, OrgChainMixin, AddressMixin, TimestampMixin, Base):
    """Student enrolled at a Learning Center."""
    __tablename__ = "students"

    first_name: Mapped[str] = mapped_column(Text, nullable=False)
    last_name: Mapped[str] = mapped_column(Text, nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    gender: Mapped[str] = mapped_column(String(16), nullable=False)
    enrollment_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=StudentStatus.ACTIVE.value, server_default="ACTIVE"
    )
    parent_first_name: Mapped[str] = mapped_column(Text, nullable=False)
    parent_last_name: Mapped[str] = mapped_column(Text, nullable=False)
    parent_phone: Mapped[str] = mapped_column(Text, nullable=False)
    parent_email: Mapped[str] = mapped_column(Text, nullable=False)
    emergency_contact_email: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    emergency_contact_phone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    avatar: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    lc: Mapped[Optional[LearningCenter]] = relationship("LearningCenter", lazy="selectin")
    mf: Mapped[Optional[MasterFranchisee]] = relationship("MasterFranchisee", lazy="selectin")
    hq: Mapped[Optional[HQ]] = relationship("HQ", lazy="selectin")


class Teacher(IntPkMixin, OrgChainMixin, AddressMixin, TimestampMixin, Base):
    """
    Teacher employed by a Learning Center.

    New teachers start in PROCESS; the MF uploads a contract and HQ approves it,
    which moves the teacher to ACTIVE.
    """
    __tablename__ = "teachers"

    first_name: Mapped[str] = mapped_column(Text, nullable=False)
    last_name: Mapped[str] = mapped_column(Text, nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    gender: Mapped[str] = mapped_column(String(16), nullable=False)
    title: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    phone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    experience: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=TeacherStatus.PROCESS.value, server_default="PROCESS"
    )
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    avatar: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    availability: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    education: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    trainings: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    specialization: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    qualifications: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    contract_file: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    contract_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    contract_uploaded_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    contract_uploaded_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    lc: Mapped[Optional[LearningCenter]] = relationship("LearningCenter", lazy="selectin")
    mf: Mapped[Optional[MasterFranchisee]] = relationship("MasterFranchisee", lazy="selectin")
    hq: Mapped[Optional[HQ]] = relationship("HQ", lazy="selectin")
