"""
Product catalog, stock levels and inventory movements.

Stock only changes through this module: receipts add stock, while student
assignments, order fulfillment and manual adjustments remove it. Every change
writes an InventoryTransaction. Reductions are validated as a batch first and
applied all-or-nothing.
"""
from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.errors import ConflictError, NotFoundError, PermissionDeniedError
from franchise_api.core.rbac import Principal, Tier
from franchise_api.db.models import InventoryTransaction, Product
from franchise_api.db.models.enums import StockDirection, StockReason, StockStatus
from franchise_api.repositories.commerce import InventoryTransactionRepository, ProductRepository
from franchise_api.schemas.commerce import (
    InventorySummary,
    InventoryTransactionRead,
    ProductCreate,
    ProductRead,
    ProductStockRef,
    ProductUpdate,
    ReceiveStock,
    StockAdjustmentResult,
    StockReductionRequest,
    StockStatusRead,
    StockValidationResult,
)
from franchise_api.schemas.common import Page
from franchise_api.services.base import BaseService

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
def stock_status(quantity: int, min_stock_level: int) -> StockStatusRead:
    """Classify a stock level: empty is OUT_OF_STOCK, at or under the minimum is LOW_STOCK."""
    if quantity <= 0:
        return StockStatusRead(
            status=StockStatus.OUT_OF_STOCK, message="Out of Stock", quantity=quantity, min_stock_level=min_stock_level
        )
    if quantity <= min_stock_level:
        return StockStatusRead(
            status=StockStatus.LOW_STOCK,
            message=f"Low Stock ({quantity} remaining)",
            quantity=quantity,
            min_stock_level=min_stock_level,
        )
    return StockStatusRead(
        status=StockStatus.IN_STOCK,
        message=f"In Stock ({quantity} available)",
        quantity=quantity,
        min_stock_level=min_stock_level,
    )


def _totals(items: Iterable[Tuple[int, int]]) -> "OrderedDict[int, int]":
    totals: "OrderedDict[int, int]" = OrderedDict()
    for product_id, quantity in items:
        totals[product_id] = totals.get(product_id, 0) + quantity
    return totals


# PUBLIC_INTERFACE
def validate_reductions(
    products: Mapping[int, Any], items: Iterable[Tuple[int, int]]
) -> StockValidationResult:
    """
    Check a batch of (product_id, quantity) reductions against current stock.

    Quantities for the same product are summed first. Missing products and
    insufficient stock are errors. Ending at or below the minimum level is a warning.
    """
    totals = _totals(items)
    errors: List[str] = []
    warnings: List[str] = []

    missing = [str(pid) for pid in totals if pid not in products]
    if missing:
        errors.append(f"Products not found: {', '.join(missing)}")

    for product_id, required in totals.items():
        product = products.get(product_id)
        if product is None:
            continue
        available = int(product.stock_quantity)
        if available < required:
            errors.append(
                f"Insufficient stock for {product.name}. Required: {required}, Available: {available}"
            )
        elif available - required <= int(product.min_stock_level):
            warnings.append(f"{product.name} will be at or below minimum stock level after this operation")

    return StockValidationResult(valid=not errors, errors=errors, warnings=warnings)


# PUBLIC_INTERFACE
def product_read(product: Product) -> ProductRead:
    return ProductRead.model_validate(product).model_copy(
        update={"stock_status": stock_status(product.stock_quantity, product.min_stock_level)}
    )


class InventoryService(BaseService):
    """Products and stock. HQ manages the catalog and stock; MF and LC can browse products."""

    def __init__(self, session: AsyncSession, principal: Optional[Principal] = None) -> None:
        super().__init__(session, principal)
        self.products = ProductRepository(session)
        self.transactions = InventoryTransactionRepository(session)

    def _require_hq(self) -> None:
        if self.principal is None or self.principal.tier != Tier.HQ:
            raise PermissionDeniedError("Only HQ users can manage inventory")

    async def _get(self, product_id: int) -> Product:
        product = await self.products.get_product(product_id)
        if product is None:
            raise NotFoundError("Product not found")
        return product

    # PUBLIC_INTERFACE
    async def list_products(
        self,
        *,
        search: Optional[str],
        category: Optional[str],
        is_active: Optional[bool],
        page: int,
        limit: int,
    ) -> Page[ProductRead]:
        products, total = await self.products.list_products(
            search=search, category=category, is_active=is_active, page=page, limit=limit
        )
        return Page[ProductRead].build([product_read(p) for p in products], page=page, limit=limit, total=total)

    # PUBLIC_INTERFACE
    async def get_product(self, product_id: int) -> ProductRead:
        return product_read(await self._get(product_id))

    # PUBLIC_INTERFACE
    async def create_product(self, payload: ProductCreate) -> ProductRead:
        self._require_hq()
        if await self.products.sku_taken(payload.sku):
            raise ConflictError("Product with this SKU already exists")
        product = Product(**payload.model_dump())
        await self.products.add(product)
        await self.products.flush()
        if product.stock_quantity > 0:
            await self.transactions.add(
                InventoryTransaction(
                    product_id=product.id,
                    direction=StockDirection.IN.value,
                    quantity=product.stock_quantity,
                    reason=StockReason.STOCK_RECEIPT.value,
                    notes="Opening stock",
                    created_by=self.principal.user_id,
                )
            )
        await self.products.commit()
        logger.info("Created product %s (%s)", product.id, product.sku)
        return product_read(await self.products.refetch(Product, product.id))

    # PUBLIC_INTERFACE
    async def update_product(self, product_id: int, payload: ProductUpdate) -> ProductRead:
        self._require_hq()
        product = await self._get(product_id)
        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(product, field, value)
        await self.products.commit()
        logger.info("Updated product %s", product.id)
        return product_read(await self.products.refetch(Product, product.id))

    # PUBLIC_INTERFACE
    async def receive_stock(self, product_id: int, payload: ReceiveStock) -> ProductRead:
        self._require_hq()
        product = await self._get(product_id)
        product.stock_quantity = product.stock_quantity + payload.quantity
        await self.transactions.add(
            InventoryTransaction(
                product_id=product.id,
                direction=StockDirection.IN.value,
                quantity=payload.quantity,
                reason=StockReason.STOCK_RECEIPT.value,
                reference_id=payload.reference_id,
                notes=payload.notes,
                created_by=self.principal.user_id,
            )
        )
        await self.products.commit()
        logger.info("Received %s units of product %s", payload.quantity, product.id)
        return product_read(await self.products.refetch(Product, product.id))

    # PUBLIC_INTERFACE
    async def summary(self) -> InventorySummary:
        self._require_hq()
        products = await self.products.all_products()
        low: List[Product] = []
        out: List[Product] = []
        in_stock = 0
        for p in products:
            status = stock_status(p.stock_quantity, p.min_stock_level).status
            if status == StockStatus.OUT_OF_STOCK:
                out.append(p)
            elif status == StockStatus.LOW_STOCK:
                low.append(p)
            else:
                in_stock += 1
        return InventorySummary(
            total_products=len(products),
            total_units=sum(max(p.stock_quantity, 0) for p in products),
            in_stock=in_stock,
            low_stock=len(low),
            out_of_stock=len(out),
            total_value=round(sum(p.stock_quantity * float(p.cost) for p in products), 2),
            low_stock_products=[ProductStockRef.model_validate(p) for p in low],
            out_of_stock_products=[ProductStockRef.model_validate(p) for p in out],
        )

    # PUBLIC_INTERFACE
    async def list_transactions(
        self, *, product_id: Optional[int], reason: Optional[str], page: int, limit: int
    ) -> Page[InventoryTransactionRead]:
        self._require_hq()
        rows, total = await self.transactions.list_transactions(
            product_id=product_id, reason=reason, page=page, limit=limit
        )
        items = [InventoryTransactionRead.model_validate(t) for t in rows]
        return Page[InventoryTransactionRead].build(items, page=page, limit=limit, total=total)

    # PUBLIC_INTERFACE
    async def validate(self, payload: StockReductionRequest) -> StockValidationResult:
        self._require_hq()
        items = [(i.product_id, i.quantity) for i in payload.items]
        products = await self.products.get_many(sorted({pid for pid, _ in items}))
        return validate_reductions(products, items)

    # PUBLIC_INTERFACE
    async def apply_adjustments(self, payload: StockReductionRequest) -> StockAdjustmentResult:
        """Apply a manual reduction batch, or nothing at all when any item fails validation."""
        self._require_hq()
        items = [(i.product_id, i.quantity) for i in payload.items]
        products, result = await self.reduce_stock(
            items,
            reason=StockReason.MANUAL_ADJUSTMENT,
            reference_id=payload.reference_id,
            notes=payload.notes,
        )
        await self.products.commit()
        refreshed = [await self.products.refetch(Product, p.id) for p in products]
        return StockAdjustmentResult(applied=[product_read(p) for p in refreshed], warnings=result.warnings)

    async def reduce_stock(
        self,
        items: List[Tuple[int, int]],
        *,
        reason: StockReason,
        reference_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Tuple[List[Product], StockValidationResult]:
        """
        Validate and apply reductions in the current transaction without committing.

        Raises ConflictError (with the validation errors as details) when any
        reduction cannot be satisfied; the transaction is rolled back in that case.
        Each decrement is re-checked against the stored quantity when it is written.
        """
        totals = _totals(items)
        products: Dict[int, Product] = await self.products.get_many(list(totals))
        result = validate_reductions(products, items)
        if not result.valid:
            raise ConflictError("Insufficient stock", details={"errors": result.errors})

        created_by = self.principal.user_id if self.principal else None
        changed: List[Product] = []
        for product_id, quantity in totals.items():
            product = products[product_id]
            if not await self.products.take_stock(product_id, quantity):
                await self.session.rollback()
                raise ConflictError(
                    "Insufficient stock",
                    details={"errors": [f"Insufficient stock for {product.name}. Required: {quantity}"]},
                )
            await self.transactions.add(
                InventoryTransaction(
                    product_id=product_id,
                    direction=StockDirection.OUT.value,
                    quantity=quantity,
                    reason=reason.value,
                    reference_id=reference_id,
                    notes=notes,
                    created_by=created_by,
                )
            )
            changed.append(product)
        for product in changed:
            await self.session.refresh(product, attribute_names=["stock_quantity"])
        for warning in result.warnings:
            logger.warning(warning)
        logger.info("Reduced stock for %d product(s) (%s)", len(changed), reason.value)
        return changed, result
