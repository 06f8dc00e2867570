from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.deps import PageParams, get_current_principal, page_params, require_tiers
from franchise_api.core.rbac import Principal, Tier
from franchise_api.db.session import get_async_session
from franchise_api.schemas.accounts import AccountUpdate, LCCreate, LCRead
from franchise_api.schemas.common import Page
from franchise_api.services.accounts import AccountService

router = APIRouter(prefix="/learning-centers", tags=["Learning Centers"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=Page[LCRead],
    summary="List Learning Centers",
    description=(
        "HQ sees all (optionally one MF's), an MF its own LCs, an LC itself and a TT nothing. "
        "Search matches the start of name, address, city or state."
    ),
)
async def list_learning_centers(
    mf_id: Optional[int] = Query(None, description="Filter by Master Franchisee (HQ users only)"),
    search: Optional[str] = Query(None, description="Prefix search"),
    paging: PageParams = Depends(page_params),
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_async_session),
) -> Page[LCRead]:
    return await AccountService(session, principal).list_lcs(
        mf_id=mf_id, search=search, page=paging.page, limit=paging.limit
    )


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=LCRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Learning Center",
    description="HQ may create under any active MF; an MF only under itself.",
)
async def create_learning_center(
    payload: LCCreate,
    principal: Principal = Depends(require_tiers(Tier.HQ, Tier.MF)),
    session: AsyncSession = Depends(get_async_session),
) -> LCRead:
    return await AccountService(session, principal).create_lc(payload)


# PUBLIC_INTERFACE
@router.patch("/{lc_id}", response_model=LCRead, summary="Update Learning Center")
async def update_learning_center(
    lc_id: int,
    payload: AccountUpdate,
    principal: Principal = Depends(require_tiers(Tier.HQ, Tier.MF)),
    session: AsyncSession = Depends(get_async_session),
) -> LCRead:
    return await AccountService(session, principal).update_lc(lc_id, payload)
