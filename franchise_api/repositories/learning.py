from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import ColumnElement, or_, select

from franchise_api.db.models import LearningGroup
from .base import BaseRepository, apply_sort

LEARNING_GROUP_SORT_FIELDS = ("created_at", "updated_at", "name", "start_date", "end_date", "status")


class LearningGroupRepository(BaseRepository):
    """Repository for learning groups."""

    async def get_group(self, group_id: int) -> Optional[LearningGroup]:
        return await self.scalar_one_or_none(select(LearningGroup).where(LearningGroup.id == group_id))

    async def list_groups(
        self,
        *,
        scope: Optional[ColumnElement[bool]],
        status: Optional[str],
        program_id: Optional[int],
        teacher_id: Optional[int],
        search: Optional[str],
        sort_by: Optional[str],
        sort_order: str,
        page: int,
        limit: int,
    ) -> Tuple[List[LearningGroup], int]:
        stmt = select(LearningGroup)
        if scope is not None:
            stmt = stmt.where(scope)
        if status:
            stmt = stmt.where(LearningGroup.status == status)
        if program_id is not None:
            stmt = stmt.where(LearningGroup.program_id == program_id)
        if teacher_id is not None:
            stmt = stmt.where(LearningGroup.teacher_id == teacher_id)
        if search:
            like = f"%{search}%"
            stmt = stmt.where(
                or_(
                    LearningGroup.name.ilike(like),
                    LearningGroup.description.ilike(like),
                    LearningGroup.location.ilike(like),
                )
            )
        stmt = apply_sort(stmt, LearningGroup, sort_by, sort_order, LEARNING_GROUP_SORT_FIELDS)
        return await self.paginate(stmt, page=page, limit=limit)

    async def running_between(
        self, scope: Optional[ColumnElement[bool]], start: date, end: date, statuses: Iterable[str]
    ) -> List[LearningGroup]:
        """Groups in ``statuses`` whose date range overlaps ``start``..``end`` (inclusive)."""
        stmt = select(LearningGroup).where(
            LearningGroup.start_date <= end,
            LearningGroup.end_date >= start,
            LearningGroup.status.in_(list(statuses)),
        )
        if scope is not None:
            stmt = stmt.where(scope)
        res = await self.scalars(stmt.order_by(LearningGroup.lc_id.asc(), LearningGroup.id.asc()))
        return list(res)
