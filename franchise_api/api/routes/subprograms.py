from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.deps import PageParams, get_current_principal, page_params
from franchise_api.core.rbac import Principal
from franchise_api.db.session import get_async_session
from franchise_api.schemas.catalog import SubProgramCreate, SubProgramRead, SubProgramUpdate
from franchise_api.schemas.common import MessageResponse, Page, upper_or_none
from franchise_api.services.catalog import SubProgramService

router = APIRouter(prefix="/subprograms", tags=["SubPrograms"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=Page[SubProgramRead],
    summary="List subprograms",
    description="Subprograms visible to the caller; a subprogram is only visible when its program is.",
)
async def list_subprograms(
    search: Optional[str] = Query(None, description="Match name or description"),
    status_filter: Optional[str] = Query(None, alias="status"),
    program_id: Optional[int] = Query(None),
    pricing_model: Optional[str] = Query(None, description="e.g. PER_MONTH"),
    sort_by: Optional[str] = Query(None, description="created_at | updated_at | name | status | order | course_price"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    paging: PageParams = Depends(page_params),
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_async_session),
) -> Page[SubProgramRead]:
    return await SubProgramService(session, principal).list_subprograms(
        search=search,
        status=upper_or_none(status_filter),
        program_id=program_id,
        pricing_model=upper_or_none(pricing_model),
        sort_by=sort_by,
        sort_order=sort_order,
        page=paging.page,
        limit=paging.limit,
    )


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=SubProgramRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create subprogram",
    description="HQ, or an MF building on a program shared with it. An MF may share only with itself and its LCs.",
)
async def create_subprogram(
    payload: SubProgramCreate,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_async_session),
) -> SubProgramRead:
    return await SubProgramService(session, principal).create_subprogram(payload)


# PUBLIC_INTERFACE
@router.get("/{sub_program_id}", response_model=SubProgramRead, summary="Get subprogram")
async def get_subprogram(
    sub_program_id: int,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_async_session),
) -> SubProgramRead:
    return await SubProgramService(session, principal).get_subprogram(sub_program_id)


# PUBLIC_INTERFACE
@router.patch(
    "/{sub_program_id}",
    response_model=SubProgramRead,
    summary="Update subprogram",
    description="HQ, or the Master Franchisee that created the subprogram.",
)
async def update_subprogram(
    sub_program_id: int,
    payload: SubProgramUpdate,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_async_session),
) -> SubProgramRead:
    return await SubProgramService(session, principal).update_subprogram(sub_program_id, payload)


# PUBLIC_INTERFACE
@router.delete("/{sub_program_id}", response_model=MessageResponse, summary="Delete subprogram")
async def delete_subprogram(
    sub_program_id: int,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    await SubProgramService(session, principal).delete_subprogram(sub_program_id)
    return MessageResponse(message="Subprogram deleted successfully")
