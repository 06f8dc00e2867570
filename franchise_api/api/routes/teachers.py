from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.deps import PageParams, page_params, require_tiers
from franchise_api.core.rbac import Principal, Tier
from franchise_api.db.session import get_async_session
from franchise_api.schemas.common import MessageResponse, Page, upper_or_none
from franchise_api.schemas.people import TeacherContract, TeacherRead, TeacherWrite
from franchise_api.services.people import TeacherService

router = APIRouter(prefix="/teachers", tags=["Teachers"])

org_member = require_tiers(Tier.HQ, Tier.MF, Tier.LC)


# PUBLIC_INTERFACE
@router.get("", response_model=Page[TeacherRead], summary="List teachers")
async def list_teachers(
    status_filter: Optional[str] = Query(None, alias="status", description="PROCESS | ACTIVE | INACTIVE"),
    search: Optional[str] = Query(None, description="Match first name, last name or email"),
    lc_id: Optional[int] = Query(None),
    mf_id: Optional[int] = Query(None),
    sort_by: Optional[str] = Query(None),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    paging: PageParams = Depends(page_params),
    principal: Principal = Depends(org_member),
    session: AsyncSession = Depends(get_async_session),
) -> Page[TeacherRead]:
    return await TeacherService(session, principal).list_teachers(
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
    response_model=TeacherRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create teacher",
    description="LC users only. New teachers start in PROCESS until HQ approves them.",
)
async def create_teacher(
    payload: TeacherWrite,
    principal: Principal = Depends(org_member),
    session: AsyncSession = Depends(get_async_session),
) -> TeacherRead:
    return await TeacherService(session, principal).create_teacher(payload)


# PUBLIC_INTERFACE
@router.get("/{teacher_id}", response_model=TeacherRead, summary="Get teacher")
async def get_teacher(
    teacher_id: int,
    principal: Principal = Depends(org_member),
    session: AsyncSession = Depends(get_async_session),
) -> TeacherRead:
    return await TeacherService(session, principal).get_teacher(teacher_id)


# PUBLIC_INTERFACE
@router.put("/{teacher_id}", response_model=TeacherRead, summary="Update teacher")
async def update_teacher(
    teacher_id: int,
    payload: TeacherWrite,
    principal: Principal = Depends(org_member),
    session: AsyncSession = Depends(get_async_session),
) -> TeacherRead:
    return await TeacherService(session, principal).update_teacher(teacher_id, payload)


# PUBLIC_INTERFACE
@router.delete("/{teacher_id}", response_model=MessageResponse, summary="Delete teacher")
async def delete_teacher(
    teacher_id: int,
    principal: Principal = Depends(org_member),
    session: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    await TeacherService(session, principal).delete_teacher(teacher_id)
    return MessageResponse(message="Teacher deleted successfully")


# PUBLIC_INTERFACE
@router.put(
    "/{teacher_id}/contract",
    response_model=TeacherRead,
    summary="Upload teacher contract",
    description="The teacher's Master Franchisee attaches the signed contract while the teacher is in PROCESS.",
)
async def upload_contract(
    teacher_id: int,
    payload: TeacherContract,
    principal: Principal = Depends(org_member),
    session: AsyncSession = Depends(get_async_session),
) -> TeacherRead:
    return await TeacherService(session, principal).upload_contract(teacher_id, payload)


# PUBLIC_INTERFACE
@router.put(
    "/{teacher_id}/approve",
    response_model=TeacherRead,
    summary="Approve teacher",
    description="HQ approval moves a contracted teacher from PROCESS to ACTIVE.",
)
async def approve_teacher(
    teacher_id: int,
    principal: Principal = Depends(org_member),
    session: AsyncSession = Depends(get_async_session),
) -> TeacherRead:
    return await TeacherService(session, principal).approve_teacher(teacher_id)
