from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import ColumnElement, false
from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.errors import BadRequestError, NotFoundError, PermissionDeniedError
from franchise_api.core.rbac import Principal, Role, Tier, has_permission
from franchise_api.db.models import User
from franchise_api.repositories.security import UserRepository
from franchise_api.schemas.auth import UserRead, UserUpdate
from franchise_api.schemas.common import Page
from franchise_api.services.base import BaseService

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
def user_scope_clause(principal: Principal) -> Optional[ColumnElement[bool]]:
    """Users an administrator may manage: HQ all, otherwise members of their own organization."""
    tier = principal.tier
    if tier == Tier.HQ:
        return None
    if tier == Tier.MF and principal.mf_id is not None:
        return User.mf_id == principal.mf_id
    if tier == Tier.LC and principal.lc_id is not None:
        return User.lc_id == principal.lc_id
    if tier == Tier.TT and principal.tt_id is not None:
        return User.tt_id == principal.tt_id
    return false()


def user_in_scope(principal: Principal, user: User) -> bool:
    tier = principal.tier
    if tier == Tier.HQ:
        return True
    if tier == Tier.MF:
        return principal.mf_id is not None and user.mf_id == principal.mf_id
    if tier == Tier.LC:
        return principal.lc_id is not None and user.lc_id == principal.lc_id
    return principal.tt_id is not None and user.tt_id == principal.tt_id


class UserService(BaseService):
    """User administration within the principal's organization scope."""

    def __init__(self, session: AsyncSession, principal: Principal) -> None:
        super().__init__(session, principal)
        self.users = UserRepository(session)

    # PUBLIC_INTERFACE
    async def list_users(
        self,
        *,
        role: Optional[Role],
        status: Optional[str],
        search: Optional[str],
        page: int,
        limit: int,
    ) -> Page[UserRead]:
        users, total = await self.users.list_users(
            scope=user_scope_clause(self.principal),
            role=role.value if role else None,
            status=status,
            search=search,
            page=page,
            limit=limit,
        )
        items = [UserRead.model_validate(u) for u in users]
        return Page[UserRead].build(items, page=page, limit=limit, total=total)

    async def _get_in_scope(self, user_id: int) -> User:
        user = await self.users.get_user_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        if not user_in_scope(self.principal, user):
            raise PermissionDeniedError("Access denied")
        return user

    # PUBLIC_INTERFACE
    async def get_user(self, user_id: int) -> UserRead:
        return UserRead.model_validate(await self._get_in_scope(user_id))

    # PUBLIC_INTERFACE
    async def update_user(self, user_id: int, payload: UserUpdate) -> UserRead:
        """
        Update profile fields, role or status.

        A new role must stay in the user's tier and rank no higher than the caller's.
        Callers cannot change their own role or status.
        """
        user = await self._get_in_scope(user_id)
        data = payload.model_dump(exclude_unset=True)

        if ("role" in data or "status" in data) and user.id == self.principal.user_id:
            raise BadRequestError("Cannot change your own role or status")
        if not has_permission(self.principal.role, Role(user.role)):
            raise PermissionDeniedError("Cannot modify a user with a higher role")

        new_role = data.pop("role", None)
        if new_role is not None:
            new_role = Role(new_role)
            if new_role.tier != Role(user.role).tier:
                raise BadRequestError("Role must stay within the user's organization tier")
            if not has_permission(self.principal.role, new_role):
                raise PermissionDeniedError("Cannot assign a role above your own")
            user.role = new_role.value

        for field, value in data.items():
            if field == "status" and value is not None:
                value = value.value if hasattr(value, "value") else value
            setattr(user, field, value)

        await self.users.commit()
        logger.info("Updated user %s", user.id)
        return UserRead.model_validate(await self.users.refetch(User, user.id))
