from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.deps import PageParams, page_params, require_tiers
from franchise_api.core.rbac import Principal, Tier
from franchise_api.db.session import get_async_session
from franchise_api.schemas.commerce import ProductCreate, ProductRead, ProductUpdate, ReceiveStock
from franchise_api.schemas.common import Page
from franchise_api.services.inventory import InventoryService

router = APIRouter(prefix="/products", tags=["Products"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=Page[ProductRead],
    summary="List products",
    description="Browse the product catalog with its current stock status.",
)
async def list_products(
    search: Optional[str] = Query(None, description="Match name, SKU or description"),
    category: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    paging: PageParams = Depends(page_params),
    principal: Principal = Depends(require_tiers(Tier.HQ, Tier.MF, Tier.LC)),
    session: AsyncSession = Depends(get_async_session),
) -> Page[ProductRead]:
    return await InventoryService(session, principal).list_products(
        search=search, category=category, is_active=is_active, page=paging.page, limit=paging.limit
    )


# PUBLIC_INTERFACE
@router.get("/{product_id}", response_model=ProductRead, summary="Get product")
async def get_product(
    product_id: int,
    principal: Principal = Depends(require_tiers(Tier.HQ, Tier.MF, Tier.LC)),
    session: AsyncSession = Depends(get_async_session),
) -> ProductRead:
    return await InventoryService(session, principal).get_product(product_id)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create product",
    description="HQ only. Opening stock is recorded as a stock receipt.",
)
async def create_product(
    payload: ProductCreate,
    principal: Principal = Depends(require_tiers(Tier.HQ)),
    session: AsyncSession = Depends(get_async_session),
) -> ProductRead:
    return await InventoryService(session, principal).create_product(payload)


# PUBLIC_INTERFACE
@router.patch("/{product_id}", response_model=ProductRead, summary="Update product")
async def update_product(
    product_id: int,
    payload: ProductUpdate,
    principal: Principal = Depends(require_tiers(Tier.HQ)),
    session: AsyncSession = Depends(get_async_session),
) -> ProductRead:
    return await InventoryService(session, principal).update_product(product_id, payload)


# PUBLIC_INTERFACE
@router.post(
    "/{product_id}/receive-stock",
    response_model=ProductRead,
    summary="Receive stock",
    description="Add delivered units to a product's stock.",
)
async def receive_stock(
    product_id: int,
    payload: ReceiveStock,
    principal: Principal = Depends(require_tiers(Tier.HQ)),
    session: AsyncSession = Depends(get_async_session),
) -> ProductRead:
    return await InventoryService(session, principal).receive_stock(product_id, payload)
