from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select

from franchise_api.db.models import HQ, LearningCenter, MasterFranchisee, TeacherTrainer, User
from .base import BaseRepository


class OrganizationRepository(BaseRepository):
    """Repository for HQ, Master Franchisee, Learning Center and Teacher Trainer accounts."""

    async def get_hq(self, hq_id: int) -> Optional[HQ]:
        return await self.scalar_one_or_none(select(HQ).where(HQ.id == hq_id))

    async def get_mf(self, mf_id: int) -> Optional[MasterFranchisee]:
        return await self.scalar_one_or_none(select(MasterFranchisee).where(MasterFranchisee.id == mf_id))

    async def get_lc(self, lc_id: int) -> Optional[LearningCenter]:
        return await self.scalar_one_or_none(select(LearningCenter).where(LearningCenter.id == lc_id))

    async def get_tt(self, tt_id: int) -> Optional[TeacherTrainer]:
        return await self.scalar_one_or_none(select(TeacherTrainer).where(TeacherTrainer.id == tt_id))

    async def code_taken(self, model, code: str) -> bool:
        stmt = select(model.id).where(model.code == code)
        return (await self.scalar_one_or_none(stmt)) is not None

    async def existing_mf_ids(self, mf_ids: List[int]) -> set[int]:
        if not mf_ids:
            return set()
        res = await self.scalars(select(MasterFranchisee.id).where(MasterFranchisee.id.in_(mf_ids)))
        return set(res)

    async def existing_lc_ids(self, lc_ids: List[int]) -> set[int]:
        if not lc_ids:
            return set()
        res = await self.scalars(select(LearningCenter.id).where(LearningCenter.id.in_(lc_ids)))
        return set(res)

    async def lc_ids_for_mf(self, mf_id: int) -> set[int]:
        res = await self.scalars(select(LearningCenter.id).where(LearningCenter.mf_id == mf_id))
        return set(res)

    async def list_hqs(self, *, hq_id: Optional[int] = None) -> List[HQ]:
        stmt = select(HQ)
        if hq_id is not None:
            stmt = stmt.where(HQ.id == hq_id)
        res = await self.scalars(stmt.order_by(HQ.created_at.desc(), HQ.id.desc()))
        return list(res)

    async def list_mfs(self, *, hq_id: Optional[int] = None, mf_id: Optional[int] = None) -> List[MasterFranchisee]:
        stmt = select(MasterFranchisee)
        if hq_id is not None:
            stmt = stmt.where(MasterFranchisee.hq_id == hq_id)
        if mf_id is not None:
            stmt = stmt.where(MasterFranchisee.id == mf_id)
        res = await self.scalars(stmt.order_by(MasterFranchisee.created_at.desc(), MasterFranchisee.id.desc()))
        return list(res)

    async def list_lcs(
        self,
        *,
        mf_id: Optional[int],
        lc_id: Optional[int],
        search: Optional[str],
        page: int,
        limit: int,
    ) -> Tuple[List[LearningCenter], int]:
        stmt = select(LearningCenter)
        if mf_id is not None:
            stmt = stmt.where(LearningCenter.mf_id == mf_id)
        if lc_id is not None:
            stmt = stmt.where(LearningCenter.id == lc_id)
        if search:
            prefix = f"{search}%"
            stmt = stmt.where(
                or_(
                    LearningCenter.name.ilike(prefix),
                    LearningCenter.address.ilike(prefix),
                    LearningCenter.city.ilike(prefix),
                    LearningCenter.state.ilike(prefix),
                )
            )
        stmt = stmt.order_by(LearningCenter.name.asc(), LearningCenter.id.asc())
        return await self.paginate(stmt, page=page, limit=limit)

    async def lcs_under(self, mf_id: Optional[int] = None) -> List[LearningCenter]:
        """Every Learning Center, or those of one MF, grouped by MF."""
        stmt = select(LearningCenter)
        if mf_id is not None:
            stmt = stmt.where(LearningCenter.mf_id == mf_id)
        stmt = stmt.order_by(LearningCenter.mf_id.asc(), LearningCenter.name.asc(), LearningCenter.id.asc())
        res = await self.scalars(stmt)
        return list(res)

    async def list_tts(self, *, tt_id: Optional[int] = None) -> List[TeacherTrainer]:
        stmt = select(TeacherTrainer)
        if tt_id is not None:
            stmt = stmt.where(TeacherTrainer.id == tt_id)
        res = await self.scalars(stmt.order_by(TeacherTrainer.created_at.desc(), TeacherTrainer.id.desc()))
        return list(res)

    async def _count_by(self, column, ids: List[int]) -> Dict[int, int]:
        if not ids:
            return {}
        stmt = select(column, func.count()).where(column.in_(ids)).group_by(column)
        res = await self.execute(stmt)
        return {k: int(v) for k, v in res.all()}

    async def user_counts(self, column_name: str, ids: List[int]) -> Dict[int, int]:
        """Users per organization id, keyed by the User foreign key column name."""
        return await self._count_by(getattr(User, column_name), ids)

    async def mf_counts_by_hq(self, ids: List[int]) -> Dict[int, int]:
        return await self._count_by(MasterFranchisee.hq_id, ids)

    async def tt_counts_by_hq(self, ids: List[int]) -> Dict[int, int]:
        return await self._count_by(TeacherTrainer.hq_id, ids)

    async def lc_counts_by_mf(self, ids: List[int]) -> Dict[int, int]:
        return await self._count_by(LearningCenter.mf_id, ids)
