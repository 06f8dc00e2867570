from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.deps import PageParams, page_params, require_tiers
from franchise_api.core.rbac import Principal, Tier
from franchise_api.db.session import get_async_session
from franchise_api.schemas.common import MessageResponse, Page, upper_or_none
from franchise_api.schemas.people import StudentRead, StudentWrite
from franchise_api.services.people import StudentService

router = APIRouter(prefix="/students", tags=["Students"])

org_member = require_tiers(Tier.HQ, Tier.MF, Tier.LC)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=Page[StudentRead],
    summary="List students",
    description=(
        "Students in the caller's scope: HQ all, MF those of its LCs, LC its own. "
        "lc_id/mf_id narrow the list but never widen it."
    ),
)
async def list_students(
    status_filter: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = Query(None, description="Match student or parent names, or parent email"),
    lc_id: Optional[int] = Query(None),
    mf_id: Optional[int] = Query(None),
    sort_by: Optional[str] = Query(None, description="created_at | updated_at | first_name | last_name | enrollment_date | status"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    paging: PageParams = Depends(page_params),
    principal: Principal = Depends(org_member),
    session: AsyncSession = Depends(get_async_session),
) -> Page[StudentRead]:
    return await StudentService(session, principal).list_students(
        status=upper_or_none(status_filter),
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
    response_model=StudentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create student",
    description="LC users only. The organization chain comes from the caller's Learning Center.",
)
async def create_student(
    payload: StudentWrite,
    principal: Principal = Depends(org_member),
    session: AsyncSession = Depends(get_async_session),
) -> StudentRead:
    return await StudentService(session, principal).create_student(payload)


# PUBLIC_INTERFACE
@router.get("/{student_id}", response_model=StudentRead, summary="Get student")
async def get_student(
    student_id: int,
    principal: Principal = Depends(org_member),
    session: AsyncSession = Depends(get_async_session),
) -> StudentRead:
    return await StudentService(session, principal).get_student(student_id)


# PUBLIC_INTERFACE
@router.put("/{student_id}", response_model=StudentRead, summary="Update student")
async def update_student(
    student_id: int,
    payload: StudentWrite,
    principal: Principal = Depends(org_member),
    session: AsyncSession = Depends(get_async_session),
) -> StudentRead:
    return await StudentService(session, principal).update_student(student_id, payload)


# PUBLIC_INTERFACE
@router.delete("/{student_id}", response_model=MessageResponse, summary="Delete student")
async def delete_student(
    student_id: int,
    principal: Principal = Depends(org_member),
    session: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    await StudentService(session, principal).delete_student(student_id)
    return MessageResponse(message="Student deleted successfully")
