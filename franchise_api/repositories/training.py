from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import ColumnElement, func, or_, select

from franchise_api.db.models import Training, TrainingType
from .base import BaseRepository


class TrainingTypeRepository(BaseRepository):
    """Repository for training types."""

    async def get_type(self, type_id: int) -> Optional[TrainingType]:
        return await self.scalar_one_or_none(select(TrainingType).where(TrainingType.id == type_id))

    async def name_taken(self, name: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(TrainingType.id).where(func.lower(TrainingType.name) == name.lower())
        if exclude_id is not None:
            stmt = stmt.where(TrainingType.id != exclude_id)
        return (await self.scalar_one_or_none(stmt)) is not None

    async def list_types(
        self, *, search: Optional[str], is_active: Optional[bool], page: int, limit: int
    ) -> Tuple[List[TrainingType], int]:
        stmt = select(TrainingType)
        if search:
            like = f"%{search}%"
            stmt = stmt.where(or_(TrainingType.name.ilike(like), TrainingType.category.ilike(like)))
        if is_active is not None:
            stmt = stmt.where(TrainingType.is_active == is_active)
        stmt = stmt.order_by(TrainingType.name.asc(), TrainingType.id.asc())
        return await self.paginate(stmt, page=page, limit=limit)


class TrainingRepository(BaseRepository):
    """Repository for trainings."""

    async def get_training(self, training_id: int) -> Optional[Training]:
        return await self.scalar_one_or_none(select(Training).where(Training.id == training_id))

    async def type_in_use(self, type_id: int) -> bool:
        stmt = select(Training.id).where(Training.training_type_id == type_id).limit(1)
        return (await self.scalar_one_or_none(stmt)) is not None

    async def list_trainings(
        self,
        *,
        scope: Optional[ColumnElement[bool]],
        search: Optional[str],
        type_id: Optional[int],
        tt_id: Optional[int],
        is_active: Optional[bool],
        page: int,
        limit: int,
    ) -> Tuple[List[Training], int]:
        stmt = select(Training)
        if scope is not None:
            stmt = stmt.where(scope)
        if search:
            like = f"%{search}%"
            stmt = stmt.where(or_(Training.name.ilike(like), Training.location.ilike(like)))
        if type_id is not None:
            stmt = stmt.where(Training.training_type_id == type_id)
        if tt_id is not None:
            stmt = stmt.where(Training.tt_id == tt_id)
        if is_active is not None:
            stmt = stmt.where(Training.is_active == is_active)
        stmt = stmt.order_by(Training.start_date.desc(), Training.id.desc())
        return await self.paginate(stmt, page=page, limit=limit)
