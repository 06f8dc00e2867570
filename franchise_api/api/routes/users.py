from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.deps import PageParams, page_params, require_admin
from franchise_api.core.rbac import Principal, Role
from franchise_api.db.models.enums import AccountStatus
from franchise_api.db.session import get_async_session
from franchise_api.schemas.auth import UserRead, UserUpdate
from franchise_api.schemas.common import Page
from franchise_api.services.users import UserService

router = APIRouter(prefix="/users", tags=["Users"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=Page[UserRead],
    summary="List users",
    description="List users of the accounts the administrator can reach (HQ: all; otherwise own organization).",
)
async def list_users(
    role: Optional[Role] = Query(None, description="Filter by role"),
    status: Optional[AccountStatus] = Query(None, description="Filter by status"),
    search: Optional[str] = Query(None, description="Match email, first or last name"),
    paging: PageParams = Depends(page_params),
    principal: Principal = Depends(require_admin),
    session: AsyncSession = Depends(get_async_session),
) -> Page[UserRead]:
    return await UserService(session, principal).list_users(
        role=role,
        status=status.value if status else None,
        search=search,
        page=paging.page,
        limit=paging.limit,
    )


# PUBLIC_INTERFACE
@router.get("/{user_id}", response_model=UserRead, summary="Get user")
async def get_user(
    user_id: int,
    principal: Principal = Depends(require_admin),
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    return await UserService(session, principal).get_user(user_id)


# PUBLIC_INTERFACE
@router.patch(
    "/{user_id}",
    response_model=UserRead,
    summary="Update user",
    description="Update name, phone, status or role. Roles stay within the user's tier and the caller's rank.",
)
async def update_user(
    user_id: int,
    payload: UserUpdate,
    principal: Principal = Depends(require_admin),
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    return await UserService(session, principal).update_user(user_id, payload)
