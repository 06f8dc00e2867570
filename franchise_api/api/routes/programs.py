from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.deps import PageParams, get_current_principal, page_params
from franchise_api.core.rbac import Principal
from franchise_api.db.session import get_async_session
from franchise_api.schemas.catalog import ProgramCreate, ProgramDetail, ProgramRead, ProgramUpdate
from franchise_api.schemas.common import MessageResponse, Page, upper_or_none
from franchise_api.services.catalog import ProgramService

router = APIRouter(prefix="/programs", tags=["Programs"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=Page[ProgramRead],
    summary="List programs",
    description=(
        "Programs visible to the caller: HQ sees all, MF/LC see PUBLIC programs and SHARED "
        "programs whose allow-list holds their MF, TT sees PUBLIC programs only."
    ),
)
async def list_programs(
    search: Optional[str] = Query(None, description="Match name, description or category"),
    status_filter: Optional[str] = Query(None, alias="status", description="ACTIVE | INACTIVE | DRAFT"),
    category: Optional[str] = Query(None),
    kind: Optional[str] = Query(None, description="Program kind, e.g. ACADEMIC"),
    sort_by: Optional[str] = Query(None, description="created_at | updated_at | name | status | kind | price"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    paging: PageParams = Depends(page_params),
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_async_session),
) -> Page[ProgramRead]:
    return await ProgramService(session, principal).list_programs(
        search=search,
        status=upper_or_none(status_filter),
        category=category,
        kind=upper_or_none(kind),
        sort_by=sort_by,
        sort_order=sort_order,
        page=paging.page,
        limit=paging.limit,
    )


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=ProgramDetail,
    status_code=status.HTTP_201_CREATED,
    summary="Create program",
    description="HQ only. New programs default to DRAFT and PRIVATE.",
)
async def create_program(
    payload: ProgramCreate,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_async_session),
) -> ProgramDetail:
    return await ProgramService(session, principal).create_program(payload)


# PUBLIC_INTERFACE
@router.get(
    "/{program_id}",
    response_model=ProgramDetail,
    summary="Get program",
    description="Program detail with the subprograms visible to the caller, ordered by position.",
)
async def get_program(
    program_id: int,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_async_session),
) -> ProgramDetail:
    return await ProgramService(session, principal).get_program(program_id)


# PUBLIC_INTERFACE
@router.patch("/{program_id}", response_model=ProgramDetail, summary="Update program")
async def update_program(
    program_id: int,
    payload: ProgramUpdate,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_async_session),
) -> ProgramDetail:
    return await ProgramService(session, principal).update_program(program_id, payload)


# PUBLIC_INTERFACE
@router.delete(
    "/{program_id}",
    response_model=MessageResponse,
    summary="Delete program",
    description="HQ only. Programs that still have subprograms cannot be deleted.",
)
async def delete_program(
    program_id: int,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    await ProgramService(session, principal).delete_program(program_id)
    return MessageResponse(message="Program deleted successfully")
