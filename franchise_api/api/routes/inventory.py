from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.deps import PageParams, page_params, require_tiers
from franchise_api.core.rbac import Principal, Tier
from franchise_api.db.session import get_async_session
from franchise_api.schemas.commerce import (
    InventorySummary,
    InventoryTransactionRead,
    StockAdjustmentResult,
    StockReductionRequest,
    StockValidationResult,
)
from franchise_api.schemas.common import Page
from franchise_api.services.inventory import InventoryService

router = APIRouter(prefix="/inventory", tags=["Inventory"])

hq_only = require_tiers(Tier.HQ)


# PUBLIC_INTERFACE
@router.get(
    "/summary",
    response_model=InventorySummary,
    summary="Inventory summary",
    description="Stock counts by status, total stock value and the low/out-of-stock products.",
)
async def inventory_summary(
    principal: Principal = Depends(hq_only),
    session: AsyncSession = Depends(get_async_session),
) -> InventorySummary:
    return await InventoryService(session, principal).summary()


# PUBLIC_INTERFACE
@router.get("/transactions", response_model=Page[InventoryTransactionRead], summary="List inventory transactions")
async def list_transactions(
    product_id: Optional[int] = Query(None),
    reason: Optional[str] = Query(
        None, description="stock_receipt | student_assignment | order_fulfillment | manual_adjustment"
    ),
    paging: PageParams = Depends(page_params),
    principal: Principal = Depends(hq_only),
    session: AsyncSession = Depends(get_async_session),
) -> Page[InventoryTransactionRead]:
    return await InventoryService(session, principal).list_transactions(
        product_id=product_id,
        reason=reason.strip().lower() if reason else None,
        page=paging.page,
        limit=paging.limit,
    )


# PUBLIC_INTERFACE
@router.post(
    "/validate",
    response_model=StockValidationResult,
    summary="Validate stock reductions",
    description="Dry run: report errors and low-stock warnings for a batch without changing stock.",
)
async def validate_reductions(
    payload: StockReductionRequest,
    principal: Principal = Depends(hq_only),
    session: AsyncSession = Depends(get_async_session),
) -> StockValidationResult:
    return await InventoryService(session, principal).validate(payload)


# PUBLIC_INTERFACE
@router.post(
    "/adjustments",
    response_model=StockAdjustmentResult,
    summary="Apply stock adjustments",
    description="Apply a batch of manual reductions. Nothing is applied if any item fails validation (409).",
)
async def apply_adjustments(
    payload: StockReductionRequest,
    principal: Principal = Depends(hq_only),
    session: AsyncSession = Depends(get_async_session),
) -> StockAdjustmentResult:
    return await InventoryService(session, principal).apply_adjustments(payload)
