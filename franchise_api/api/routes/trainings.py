from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.deps import PageParams, page_params, require_tiers
from franchise_api.core.rbac import Principal, Tier
from franchise_api.db.session import get_async_session
from franchise_api.schemas.common import MessageResponse, Page
from franchise_api.schemas.training import (
    TrainingCreate,
    TrainingRead,
    TrainingTypeCreate,
    TrainingTypeRead,
    TrainingTypeUpdate,
    TrainingUpdate,
)
from franchise_api.services.training import TrainingService

router = APIRouter(tags=["Trainings"])

any_tier = require_tiers(Tier.HQ, Tier.MF, Tier.LC, Tier.TT)
training_managers = require_tiers(Tier.HQ, Tier.TT)


# PUBLIC_INTERFACE
@router.get(
    "/training-types",
    response_model=Page[TrainingTypeRead],
    summary="List training types",
)
async def list_training_types(
    search: Optional[str] = Query(None, description="Match name or category"),
    is_active: Optional[bool] = Query(None),
    paging: PageParams = Depends(page_params),
    principal: Principal = Depends(any_tier),
    session: AsyncSession = Depends(get_async_session),
) -> Page[TrainingTypeRead]:
    return await TrainingService(session, principal).list_types(
        search=search, is_active=is_active, page=paging.page, limit=paging.limit
    )


# PUBLIC_INTERFACE
@router.get("/training-types/{type_id}", response_model=TrainingTypeRead, summary="Get training type")
async def get_training_type(
    type_id: int,
    principal: Principal = Depends(any_tier),
    session: AsyncSession = Depends(get_async_session),
) -> TrainingTypeRead:
    return await TrainingService(session, principal).get_type(type_id)


# PUBLIC_INTERFACE
@router.post(
    "/training-types",
    response_model=TrainingTypeRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create training type",
    description="HQ only. Names are unique regardless of case.",
)
async def create_training_type(
    payload: TrainingTypeCreate,
    principal: Principal = Depends(require_tiers(Tier.HQ)),
    session: AsyncSession = Depends(get_async_session),
) -> TrainingTypeRead:
    return await TrainingService(session, principal).create_type(payload)


# PUBLIC_INTERFACE
@router.patch("/training-types/{type_id}", response_model=TrainingTypeRead, summary="Update training type")
async def update_training_type(
    type_id: int,
    payload: TrainingTypeUpdate,
    principal: Principal = Depends(require_tiers(Tier.HQ)),
    session: AsyncSession = Depends(get_async_session),
) -> TrainingTypeRead:
    return await TrainingService(session, principal).update_type(type_id, payload)


# PUBLIC_INTERFACE
@router.delete(
    "/training-types/{type_id}",
    response_model=MessageResponse,
    summary="Delete training type",
    description="HQ only. Fails with 409 while trainings still use the type.",
)
async def delete_training_type(
    type_id: int,
    principal: Principal = Depends(require_tiers(Tier.HQ)),
    session: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    await TrainingService(session, principal).delete_type(type_id)
    return MessageResponse(message="Training type deleted successfully")


# PUBLIC_INTERFACE
@router.get(
    "/trainings",
    response_model=Page[TrainingRead],
    summary="List trainings",
    description="HQ sees all trainings, TT users their own account's, MF and LC users active ones.",
)
async def list_trainings(
    search: Optional[str] = Query(None, description="Match name or location"),
    type_id: Optional[int] = Query(None, description="Filter by training type"),
    tt_id: Optional[int] = Query(None, description="Filter by Teacher Trainer account"),
    is_active: Optional[bool] = Query(None),
    paging: PageParams = Depends(page_params),
    principal: Principal = Depends(any_tier),
    session: AsyncSession = Depends(get_async_session),
) -> Page[TrainingRead]:
    return await TrainingService(session, principal).list_trainings(
        search=search,
        type_id=type_id,
        tt_id=tt_id,
        is_active=is_active,
        page=paging.page,
        limit=paging.limit,
    )


# PUBLIC_INTERFACE
@router.get("/trainings/{training_id}", response_model=TrainingRead, summary="Get training")
async def get_training(
    training_id: int,
    principal: Principal = Depends(any_tier),
    session: AsyncSession = Depends(get_async_session),
) -> TrainingRead:
    return await TrainingService(session, principal).get_training(training_id)


# PUBLIC_INTERFACE
@router.post(
    "/trainings",
    response_model=TrainingRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create training",
    description="TT users create trainings for their own account; HQ must pass tt_id.",
)
async def create_training(
    payload: TrainingCreate,
    principal: Principal = Depends(training_managers),
    session: AsyncSession = Depends(get_async_session),
) -> TrainingRead:
    return await TrainingService(session, principal).create_training(payload)


# PUBLIC_INTERFACE
@router.patch("/trainings/{training_id}", response_model=TrainingRead, summary="Update training")
async def update_training(
    training_id: int,
    payload: TrainingUpdate,
    principal: Principal = Depends(training_managers),
    session: AsyncSession = Depends(get_async_session),
) -> TrainingRead:
    return await TrainingService(session, principal).update_training(training_id, payload)


# PUBLIC_INTERFACE
@router.delete("/trainings/{training_id}", response_model=MessageResponse, summary="Delete training")
async def delete_training(
    training_id: int,
    principal: Principal = Depends(training_managers),
    session: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    await TrainingService(session, principal).delete_training(training_id)
    return MessageResponse(message="Training deleted successfully")
