from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.deps import PageParams, page_params, require_tiers
from franchise_api.core.rbac import Principal, Tier
from franchise_api.db.session import get_async_session
from franchise_api.schemas.commerce import OrderCreate, OrderRead, OrderStatusChange
from franchise_api.schemas.common import Page, upper_or_none
from franchise_api.services.orders import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])

org_member = require_tiers(Tier.HQ, Tier.MF, Tier.LC)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=OrderRead,
    status_code=status.HTTP_201_CREATED,
    summary="Place order",
    description="LC and MF users order products from HQ. Prices are taken from the catalog at order time.",
)
async def create_order(
    payload: OrderCreate,
    principal: Principal = Depends(require_tiers(Tier.MF, Tier.LC)),
    session: AsyncSession = Depends(get_async_session),
) -> OrderRead:
    return await OrderService(session, principal).create_order(payload)


# PUBLIC_INTERFACE
@router.get("", response_model=Page[OrderRead], summary="List orders")
async def list_orders(
    status_filter: Optional[str] = Query(None, alias="status"),
    lc_id: Optional[int] = Query(None),
    mf_id: Optional[int] = Query(None),
    paging: PageParams = Depends(page_params),
    principal: Principal = Depends(org_member),
    session: AsyncSession = Depends(get_async_session),
) -> Page[OrderRead]:
    return await OrderService(session, principal).list_orders(
        status=upper_or_none(status_filter),
        lc_id=lc_id,
        mf_id=mf_id,
        page=paging.page,
        limit=paging.limit,
    )


# PUBLIC_INTERFACE
@router.get("/{order_id}", response_model=OrderRead, summary="Get order")
async def get_order(
    order_id: int,
    principal: Principal = Depends(org_member),
    session: AsyncSession = Depends(get_async_session),
) -> OrderRead:
    return await OrderService(session, principal).get_order(order_id)


# PUBLIC_INTERFACE
@router.post(
    "/{order_id}/status",
    response_model=OrderRead,
    summary="Change order status",
    description=(
        "PENDING -> PROCESSING (HQ or the order's MF), PROCESSING -> SHIPPED (HQ, takes stock), "
        "SHIPPED -> DELIVERED (HQ or the ordering organization). Orders can be cancelled before shipping."
    ),
)
async def change_order_status(
    order_id: int,
    payload: OrderStatusChange,
    principal: Principal = Depends(org_member),
    session: AsyncSession = Depends(get_async_session),
) -> OrderRead:
    return await OrderService(session, principal).change_status(order_id, payload)
