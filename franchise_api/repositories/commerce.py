from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from sqlalchemy import ColumnElement, func, or_, select, update

from franchise_api.db.models import InventoryTransaction, Order, Product
from .base import BaseRepository


class ProductRepository(BaseRepository):
    """Repository for products."""

    async def get_product(self, product_id: int) -> Optional[Product]:
        return await self.scalar_one_or_none(select(Product).where(Product.id == product_id))

    async def sku_taken(self, sku: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(Product.id).where(func.upper(Product.sku) == sku.upper())
        if exclude_id is not None:
            stmt = stmt.where(Product.id != exclude_id)
        return (await self.scalar_one_or_none(stmt)) is not None

    async def get_many(self, product_ids: List[int]) -> Dict[int, Product]:
        if not product_ids:
            return {}
        res = await self.scalars(select(Product).where(Product.id.in_(product_ids)))
        return {p.id: p for p in res}

    async def take_stock(self, product_id: int, quantity: int) -> bool:
        """Decrement stock in one conditional UPDATE; False when less than ``quantity`` is left."""
        stmt = (
            update(Product)
            .where(Product.id == product_id, Product.stock_quantity >= quantity)
            .values(stock_quantity=Product.stock_quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def list_products(
        self,
        *,
        search: Optional[str],
        category: Optional[str],
        is_active: Optional[bool],
        page: int,
        limit: int,
    ) -> Tuple[List[Product], int]:
        stmt = select(Product)
        if search:
            like = f"%{search}%"
            stmt = stmt.where(or_(Product.name.ilike(like), Product.sku.ilike(like)))
        if category:
            stmt = stmt.where(Product.category == category)
        if is_active is not None:
            stmt = stmt.where(Product.is_active == is_active)
        stmt = stmt.order_by(Product.name.asc(), Product.id.asc())
        return await self.paginate(stmt, page=page, limit=limit)

    async def all_products(self) -> List[Product]:
        res = await self.scalars(select(Product).order_by(Product.name.asc(), Product.id.asc()))
        return list(res)


class InventoryTransactionRepository(BaseRepository):
    """Repository for inventory transactions."""

    async def list_transactions(
        self, *, product_id: Optional[int], reason: Optional[str], page: int, limit: int
    ) -> Tuple[List[InventoryTransaction], int]:
        stmt = select(InventoryTransaction)
        if product_id is not None:
            stmt = stmt.where(InventoryTransaction.product_id == product_id)
        if reason:
            stmt = stmt.where(InventoryTransaction.reason == reason)
        stmt = stmt.order_by(InventoryTransaction.created_at.desc(), InventoryTransaction.id.desc())
        return await self.paginate(stmt, page=page, limit=limit)


class OrderRepository(BaseRepository):
    """Repository for orders and order lines."""

    async def get_order(self, order_id: int) -> Optional[Order]:
        return await self.scalar_one_or_none(select(Order).where(Order.id == order_id))

    async def list_orders(
        self,
        *,
        scope: Optional[ColumnElement[bool]],
        status: Optional[str],
        page: int,
        limit: int,
    ) -> Tuple[List[Order], int]:
        stmt = select(Order)
        if scope is not None:
            stmt = stmt.where(scope)
        if status:
            stmt = stmt.where(Order.status == status)
        stmt = stmt.order_by(Order.created_at.desc(), Order.id.desc())
        return await self.paginate(stmt, page=page, limit=limit)

    async def last_number_for_year(self, year: int) -> Optional[str]:
        prefix = f"ORD-{year}-"
        stmt = (
            select(Order.order_number)
            .where(Order.order_number.like(f"{prefix}%"))
            .order_by(func.length(Order.order_number).desc(), Order.order_number.desc())
            .limit(1)
        )
        return await self.scalar_one_or_none(stmt)
