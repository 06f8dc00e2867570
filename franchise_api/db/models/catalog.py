from __future__ import annotations

from typing import List, Optional

from sqlalchemy import JSON, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from franchise_api.db.base import Base, IntPkMixin, TimestampMixin
from franchise_api.db.models.enums import CatalogStatus, Visibility


class ProgramMfShare(Base):
    """Allow-list entry: a SHARED program is visible to this Master Franchisee."""
    __tablename__ = "program_mf_shares"

    program_id: Mapped[int] = mapped_column(
        ForeignKey("programs.id", ondelete="CASCADE"), primary_key=True
    )
    mf_id: Mapped[int] = mapped_column(
        ForeignKey("master_franchisees.id", ondelete="CASCADE"), primary_key=True
    )


class SubProgramMfShare(Base):
    """Allow-list entry: a SHARED subprogram is visible to this Master Franchisee."""
    __tablename__ = "subprogram_mf_shares"

    sub_program_id: Mapped[int] = mapped_column(
        ForeignKey("sub_programs.id", ondelete="CASCADE"), primary_key=True
    )
    mf_id: Mapped[int] = mapped_column(
        ForeignKey("master_franchisees.id", ondelete="CASCADE"), primary_key=True
    )


class SubProgramLcShare(Base):
    """Allow-list entry: a SHARED subprogram is visible to this Learning Center."""
    __tablename__ = "subprogram_lc_shares"

    sub_program_id: Mapped[int] = mapped_column(
        ForeignKey("sub_programs.id", ondelete="CASCADE"), primary_key=True
    )
    lc_id: Mapped[int] = mapped_column(
        ForeignKey("learning_centers.id", ondelete="CASCADE"), primary_key=True
    )


class Program(IntPkMixin, TimestampMixin, Base):
    """Top-level course offering published by HQ."""
    __tablename__ = "programs"

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=CatalogStatus.DRAFT.value, server_default="DRAFT"
    )
    category: Mapped[str] = mapped_column(
        Text, nullable=False, default="General", server_default="General"
    )
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[float] = mapped_column(Numeric(12, 2), nullable=False, default=0, server_default="0")
    max_students: Mapped[int] = mapped_column(Integer, nullable=False)
    current_students: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    requirements: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    learning_objectives: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    hours: Mapped[int] = mapped_column(Integer, nullable=False)
    lesson_length: Mapped[int] = mapped_column(Integer, nullable=False)
    kind: Mapped[str] = mapped_column(String(32), nullable=False)
    visibility: Mapped[str] = mapped_column(
        String(16), nullable=False, default=Visibility.PRIVATE.value, server_default="PRIVATE"
    )
    created_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    mf_shares: Mapped[List[ProgramMfShare]] = relationship(
        ProgramMfShare, cascade="all, delete-orphan", lazy="selectin"
    )
    sub_programs: Mapped[List["SubProgram"]] = relationship(
        "SubProgram", back_populates="program", lazy="selectin", order_by="SubProgram.order"
    )

    @property
    def shared_with_mfs(self) -> List[int]:
        return sorted(s.mf_id for s in self.mf_shares)

    def set_shared_with_mfs(self, mf_ids: List[int]) -> None:
        self.mf_shares = _merge_shares(self.mf_shares, "mf_id", mf_ids, ProgramMfShare)


def _merge_shares(current: list, key: str, wanted_ids: List[int], factory) -> list:
    """Keep surviving rows and append new ones so unchanged ids are never re-inserted."""
    wanted = set(wanted_ids)
    kept = [s for s in current if getattr(s, key) in wanted]
    existing = {getattr(s, key) for s in kept}
    return kept + [factory(**{key: i}) for i in sorted(wanted - existing)]


class SubProgram(IntPkMixin, TimestampMixin, Base):
    """Priced variant of a program that learning groups enroll into."""
    __tablename__ = "sub_programs"
    __table_args__ = (
        UniqueConstraint("program_id", "name", name="uq_sub_programs_program_id_name"),
    )

    program_id: Mapped[int] = mapped_column(
        ForeignKey("programs.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=CatalogStatus.DRAFT.value, server_default="DRAFT"
    )
    order: Mapped[int] = mapped_column("sort_order", Integer, nullable=False, default=1, server_default="1")
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[float] = mapped_column(Numeric(12, 2), nullable=False, default=0, server_default="0")
    prerequisites: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    learning_objectives: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    pricing_model: Mapped[str] = mapped_column(String(32), nullable=False)
    course_price: Mapped[float] = mapped_column(Numeric(12, 2), nullable=False)
    number_of_payments: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    gap: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    price_per_month: Mapped[Optional[float]] = mapped_column(Numeric(12, 2), nullable=True)
    price_per_session: Mapped[Optional[float]] = mapped_column(Numeric(12, 2), nullable=True)
    visibility: Mapped[str] = mapped_column(
        String(16), nullable=False, default=Visibility.PRIVATE.value, server_default="PRIVATE"
    )
    created_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    owner_mf_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("master_franchisees.id", ondelete="SET NULL"), nullable=True, index=True
    )

    program: Mapped[Program] = relationship(Program, back_populates="sub_programs", lazy="selectin")
    mf_shares: Mapped[List[SubProgramMfShare]] = relationship(
        SubProgramMfShare, cascade="all, delete-orphan", lazy="selectin"
    )
    lc_shares: Mapped[List[SubProgramLcShare]] = relationship(
        SubProgramLcShare, cascade="all, delete-orphan", lazy="selectin"
    )

    @property
    def shared_with_mfs(self) -> List[int]:
        return sorted(s.mf_id for s in self.mf_shares)

    @property
    def shared_with_lcs(self) -> List[int]:
        return sorted(s.lc_id for s in self.lc_shares)

    def set_shared_with_mfs(self, mf_ids: List[int]) -> None:
        self.mf_shares = _merge_shares(self.mf_shares, "mf_id", mf_ids, SubProgramMfShare)

    def set_shared_with_lcs(self, lc_ids: List[int]) -> None:
        self.lc_shares = _merge_shares(self.lc_shares, "lc_id", lc_ids, SubProgramLcShare)
