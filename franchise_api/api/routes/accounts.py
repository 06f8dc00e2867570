from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.deps import require_tiers
from franchise_api.core.rbac import Principal, Tier
from franchise_api.db.session import get_async_session
from franchise_api.schemas.accounts import AccountCreate, AccountUpdate, HQRead, MFCreate, MFRead, TTCreate, TTRead
from franchise_api.services.accounts import AccountService

router = APIRouter(prefix="/accounts", tags=["Accounts"])


# PUBLIC_INTERFACE
@router.get(
    "/hq",
    response_model=List[HQRead],
    summary="List HQ accounts",
    description="HQ accounts with user, Master Franchisee and Teacher Trainer counts.",
)
async def list_hqs(
    principal: Principal = Depends(require_tiers(Tier.HQ)),
    session: AsyncSession = Depends(get_async_session),
) -> List[HQRead]:
    return await AccountService(session, principal).list_hqs()


# PUBLIC_INTERFACE
@router.post("/hq", response_model=HQRead, status_code=status.HTTP_201_CREATED, summary="Create HQ account")
async def create_hq(
    payload: AccountCreate,
    principal: Principal = Depends(require_tiers(Tier.HQ)),
    session: AsyncSession = Depends(get_async_session),
) -> HQRead:
    return await AccountService(session, principal).create_hq(payload)


# PUBLIC_INTERFACE
@router.get(
    "/mf",
    response_model=List[MFRead],
    summary="List Master Franchisee accounts",
    description="HQ sees every MF (optionally one HQ's); an MF sees only its own account.",
)
async def list_mfs(
    hq_id: Optional[int] = Query(None, description="Filter by HQ (HQ users only)"),
    principal: Principal = Depends(require_tiers(Tier.HQ, Tier.MF)),
    session: AsyncSession = Depends(get_async_session),
) -> List[MFRead]:
    return await AccountService(session, principal).list_mfs(hq_id=hq_id)


# PUBLIC_INTERFACE
@router.post(
    "/mf",
    response_model=MFRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Master Franchisee account",
)
async def create_mf(
    payload: MFCreate,
    principal: Principal = Depends(require_tiers(Tier.HQ, Tier.MF)),
    session: AsyncSession = Depends(get_async_session),
) -> MFRead:
    return await AccountService(session, principal).create_mf(payload)


# PUBLIC_INTERFACE
@router.patch("/mf/{mf_id}", response_model=MFRead, summary="Update Master Franchisee account")
async def update_mf(
    mf_id: int,
    payload: AccountUpdate,
    principal: Principal = Depends(require_tiers(Tier.HQ)),
    session: AsyncSession = Depends(get_async_session),
) -> MFRead:
    return await AccountService(session, principal).update_mf(mf_id, payload)


# PUBLIC_INTERFACE
@router.get(
    "/tt",
    response_model=List[TTRead],
    summary="List Teacher Trainer accounts",
    description="HQ sees every Teacher Trainer account; a TT user sees its own.",
)
async def list_tts(
    principal: Principal = Depends(require_tiers(Tier.HQ, Tier.TT)),
    session: AsyncSession = Depends(get_async_session),
) -> List[TTRead]:
    return await AccountService(session, principal).list_tts()


# PUBLIC_INTERFACE
@router.post(
    "/tt",
    response_model=TTRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Teacher Trainer account",
)
async def create_tt(
    payload: TTCreate,
    principal: Principal = Depends(require_tiers(Tier.HQ, Tier.TT)),
    session: AsyncSession = Depends(get_async_session),
) -> TTRead:
    return await AccountService(session, principal).create_tt(payload)
