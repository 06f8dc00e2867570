from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.deps import PageParams, page_params, require_tiers
from franchise_api.core.rbac import Principal, Tier
from franchise_api.db.session import get_async_session
from franchise_api.schemas.commerce import StockAdjustmentResult
from franchise_api.schemas.common import MessageResponse, Page, upper_or_none
from franchise_api.schemas.learning import LearningGroupRead, LearningGroupWrite, ProductAssignment
from franchise_api.services.learning import LearningGroupService

router = APIRouter(prefix="/learning-groups", tags=["Learning Groups"])

org_member = require_tiers(Tier.HQ, Tier.MF, Tier.LC)


# PUBLIC_INTERFACE
@router.get("", response_model=Page[LearningGroupRead], summary="List learning groups")
async def list_learning_groups(
    status_filter: Optional[str] = Query(None, alias="status"),
    program_id: Optional[int] = Query(None),
    teacher_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None, description="Match name, description or location"),
    lc_id: Optional[int] = Query(None),
    mf_id: Optional[int] = Query(None),
    sort_by: Optional[str] = Query(None, description="created_at | updated_at | name | start_date | end_date | status"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    paging: PageParams = Depends(page_params),
    principal: Principal = Depends(org_member),
    session: AsyncSession = Depends(get_async_session),
) -> Page[LearningGroupRead]:
    return await LearningGroupService(session, principal).list_groups(
        status=upper_or_none(status_filter),
        program_id=program_id,
        teacher_id=teacher_id,
        search=search,
        lc_id=lc_id,
        mf_id=mf_id,
        sort_by=sort_by,
        sort_order=sort_order,
        page=paging.page,
        limit=paging.limit,
    )


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=LearningGroupRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create learning group",
    description=(
        "LC users only. The program (and subprogram) must be ACTIVE and visible to the LC, "
        "the teacher ACTIVE at the same LC, and the roster made of the LC's students."
    ),
)
async def create_learning_group(
    payload: LearningGroupWrite,
    principal: Principal = Depends(org_member),
    session: AsyncSession = Depends(get_async_session),
) -> LearningGroupRead:
    return await LearningGroupService(session, principal).create_group(payload)


# PUBLIC_INTERFACE
@router.get("/{group_id}", response_model=LearningGroupRead, summary="Get learning group")
async def get_learning_group(
    group_id: int,
    principal: Principal = Depends(org_member),
    session: AsyncSession = Depends(get_async_session),
) -> LearningGroupRead:
    return await LearningGroupService(session, principal).get_group(group_id)


# PUBLIC_INTERFACE
@router.put("/{group_id}", response_model=LearningGroupRead, summary="Update learning group")
async def update_learning_group(
    group_id: int,
    payload: LearningGroupWrite,
    principal: Principal = Depends(org_member),
    session: AsyncSession = Depends(get_async_session),
) -> LearningGroupRead:
    return await LearningGroupService(session, principal).update_group(group_id, payload)


# PUBLIC_INTERFACE
@router.delete("/{group_id}", response_model=MessageResponse, summary="Delete learning group")
async def delete_learning_group(
    group_id: int,
    principal: Principal = Depends(org_member),
    session: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    await LearningGroupService(session, principal).delete_group(group_id)
    return MessageResponse(message="Learning group deleted successfully")


# PUBLIC_INTERFACE
@router.post(
    "/{group_id}/assign-product",
    response_model=StockAdjustmentResult,
    summary="Assign product to student",
    description="Give a product to a student on the group's roster; the quantity is taken out of stock.",
)
async def assign_product(
    group_id: int,
    payload: ProductAssignment,
    principal: Principal = Depends(org_member),
    session: AsyncSession = Depends(get_async_session),
) -> StockAdjustmentResult:
    return await LearningGroupService(session, principal).assign_product(group_id, payload)
