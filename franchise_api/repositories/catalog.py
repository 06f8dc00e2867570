from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from sqlalchemy import ColumnElement, func, or_, select

from franchise_api.db.models import LearningGroup, Program, SubProgram
from .base import BaseRepository, apply_sort

PROGRAM_SORT_FIELDS = ("created_at", "updated_at", "name", "status", "kind", "price")
SUBPROGRAM_SORT_FIELDS = ("created_at", "updated_at", "name", "status", "order", "course_price")


class ProgramRepository(BaseRepository):
    """Repository for programs and their MF allow-lists."""

    async def get_program(self, program_id: int) -> Optional[Program]:
        return await self.scalar_one_or_none(select(Program).where(Program.id == program_id))

    async def name_taken(self, name: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(Program.id).where(func.lower(Program.name) == name.lower())
        if exclude_id is not None:
            stmt = stmt.where(Program.id != exclude_id)
        return (await self.scalar_one_or_none(stmt)) is not None

    async def list_programs(
        self,
        *,
        visible: Optional[ColumnElement[bool]],
        search: Optional[str],
        status: Optional[str],
        category: Optional[str],
        kind: Optional[str],
        sort_by: Optional[str],
        sort_order: str,
        page: int,
        limit: int,
    ) -> Tuple[List[Program], int]:
        stmt = select(Program)
        # visibility and search are ANDed so a search never widens what a caller can see
        if visible is not None:
            stmt = stmt.where(visible)
        if search:
            like = f"%{search}%"
            stmt = stmt.where(
                or_(Program.name.ilike(like), Program.description.ilike(like), Program.category.ilike(like))
            )
        if status:
            stmt = stmt.where(Program.status == status)
        if category:
            stmt = stmt.where(Program.category == category)
        if kind:
            stmt = stmt.where(Program.kind == kind)
        stmt = apply_sort(stmt, Program, sort_by, sort_order, PROGRAM_SORT_FIELDS)
        return await self.paginate(stmt, page=page, limit=limit)

    async def subprogram_counts(self, program_ids: List[int]) -> Dict[int, int]:
        if not program_ids:
            return {}
        stmt = (
            select(SubProgram.program_id, func.count())
            .where(SubProgram.program_id.in_(program_ids))
            .group_by(SubProgram.program_id)
        )
        res = await self.execute(stmt)
        return {k: int(v) for k, v in res.all()}

    async def used_by_learning_groups(self, program_id: int) -> bool:
        stmt = select(LearningGroup.id).where(LearningGroup.program_id == program_id).limit(1)
        return (await self.scalar_one_or_none(stmt)) is not None


class SubProgramRepository(BaseRepository):
    """Repository for subprograms and their MF/LC allow-lists."""

    async def get_subprogram(self, sub_program_id: int) -> Optional[SubProgram]:
        return await self.scalar_one_or_none(select(SubProgram).where(SubProgram.id == sub_program_id))

    async def name_taken(self, program_id: int, name: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(SubProgram.id).where(
            SubProgram.program_id == program_id, func.lower(SubProgram.name) == name.lower()
        )
        if exclude_id is not None:
            stmt = stmt.where(SubProgram.id != exclude_id)
        return (await self.scalar_one_or_none(stmt)) is not None

    async def list_subprograms(
        self,
        *,
        visible: Optional[ColumnElement[bool]],
        search: Optional[str],
        status: Optional[str],
        program_id: Optional[int],
        pricing_model: Optional[str],
        sort_by: Optional[str],
        sort_order: str,
        page: int,
        limit: int,
    ) -> Tuple[List[SubProgram], int]:
        stmt = select(SubProgram)
        if visible is not None:
            stmt = stmt.where(visible)
        if search:
            like = f"%{search}%"
            stmt = stmt.where(or_(SubProgram.name.ilike(like), SubProgram.description.ilike(like)))
        if status:
            stmt = stmt.where(SubProgram.status == status)
        if program_id is not None:
            stmt = stmt.where(SubProgram.program_id == program_id)
        if pricing_model:
            stmt = stmt.where(SubProgram.pricing_model == pricing_model)
        stmt = apply_sort(stmt, SubProgram, sort_by, sort_order, SUBPROGRAM_SORT_FIELDS)
        return await self.paginate(stmt, page=page, limit=limit)

    async def list_for_program(
        self, program_id: int, visible: Optional[ColumnElement[bool]]
    ) -> List[SubProgram]:
        stmt = select(SubProgram).where(SubProgram.program_id == program_id)
        if visible is not None:
            stmt = stmt.where(visible)
        res = await self.scalars(stmt.order_by(SubProgram.order.asc(), SubProgram.id.asc()))
        return list(res)

    async def used_by_learning_groups(self, sub_program_id: int) -> bool:
        stmt = select(LearningGroup.id).where(LearningGroup.sub_program_id == sub_program_id).limit(1)
        return (await self.scalar_one_or_none(stmt)) is not None
