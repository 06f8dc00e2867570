from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import ColumnElement, func, or_, select

from franchise_api.db.models import User
from .base import BaseRepository


class UserRepository(BaseRepository):
    """Repository for application users."""

    async def get_user_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(func.lower(User.email) == email.lower())
        return await self.scalar_one_or_none(stmt)

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        stmt = select(User).where(User.id == user_id)
        return await self.scalar_one_or_none(stmt)

    async def list_users(
        self,
        *,
        scope: Optional[ColumnElement[bool]],
        role: Optional[str],
        status: Optional[str],
        search: Optional[str],
        page: int,
        limit: int,
    ) -> Tuple[List[User], int]:
        stmt = select(User)
        if scope is not None:
            stmt = stmt.where(scope)
        if role:
            stmt = stmt.where(User.role == role)
        if status:
            stmt = stmt.where(User.status == status)
        if search:
            like = f"%{search}%"
            stmt = stmt.where(
                or_(User.email.ilike(like), User.first_name.ilike(like), User.last_name.ilike(like))
            )
        stmt = stmt.order_by(User.created_at.desc(), User.id.desc())
        return await self.paginate(stmt, page=page, limit=limit)

    async def create_user(self, user: User) -> User:
        await self.add(user)
        await self.commit()
        return await self.refetch(User, user.id)
