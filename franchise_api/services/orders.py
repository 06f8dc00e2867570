from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, FrozenSet, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.errors import BadRequestError, NotFoundError, PermissionDeniedError
from franchise_api.core.rbac import Principal, Tier
from franchise_api.core.settings import get_app_settings
from franchise_api.db.models import Order, OrderLine
from franchise_api.db.models.enums import AccountStatus, OrderStatus, StockReason
from franchise_api.repositories.commerce import OrderRepository, ProductRepository
from franchise_api.repositories.organization import OrganizationRepository
from franchise_api.schemas.commerce import OrderCreate, OrderRead, OrderStatusChange
from franchise_api.schemas.common import Page
from franchise_api.services.base import BaseService
from franchise_api.services.inventory import InventoryService
from franchise_api.services.scoping import active_lc_chain, ensure_in_scope, org_scope_clause

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")

# Who may move an order between two statuses:
#   "hq"     HQ users
#   "mf"     the Master Franchisee the order belongs to
#   "placer" the organization that placed it (its LC, or the MF for MF orders)
#   "lc"     the Learning Center that placed it
TRANSITIONS: Dict[Tuple[OrderStatus, OrderStatus], FrozenSet[str]] = {
    (OrderStatus.PENDING, OrderStatus.PROCESSING): frozenset({"hq", "mf"}),
    (OrderStatus.PROCESSING, OrderStatus.SHIPPED): frozenset({"hq"}),
    (OrderStatus.SHIPPED, OrderStatus.DELIVERED): frozenset({"hq", "placer"}),
    (OrderStatus.PENDING, OrderStatus.CANCELLED): frozenset({"hq", "mf", "lc"}),
    (OrderStatus.PROCESSING, OrderStatus.CANCELLED): frozenset({"hq", "mf", "lc"}),
}


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)


# PUBLIC_INTERFACE
def next_order_number(year: int, last_number: Optional[str]) -> str:
    """Return ``ORD-<year>-<seq>`` following ``last_number`` (the highest number issued that year)."""
    seq = 0
    if last_number:
        try:
            seq = int(last_number.rsplit("-", 1)[-1])
        except ValueError:
            seq = 0
    return f"ORD-{year}-{seq + 1:05d}"


# PUBLIC_INTERFACE
def order_roles(principal: Principal, order: Order) -> FrozenSet[str]:
    """The transition roles the principal holds on ``order`` (see TRANSITIONS)."""
    roles = set()
    if principal.tier == Tier.HQ:
        roles.add("hq")
    if principal.tier == Tier.MF and principal.mf_id is not None and principal.mf_id == order.mf_id:
        roles.add("mf")
        if order.lc_id is None:
            roles.add("placer")
    if principal.tier == Tier.LC and principal.lc_id is not None and principal.lc_id == order.lc_id:
        roles.update({"lc", "placer"})
    return frozenset(roles)


class OrderService(BaseService):
    """Product orders placed by Learning Centers and Master Franchisees, fulfilled by HQ."""

    def __init__(self, session: AsyncSession, principal: Principal) -> None:
        super().__init__(session, principal)
        self.orders = OrderRepository(session)
        self.products = ProductRepository(session)
        self.orgs = OrganizationRepository(session)

    async def _get(self, order_id: int) -> Order:
        order = await self.orders.get_order(order_id)
        if order is None:
            raise NotFoundError("Order not found")
        return order

    async def _placing_chain(self) -> dict:
        if self.principal.tier == Tier.LC:
            return await active_lc_chain(self.session, self.principal)
        if self.principal.tier == Tier.MF:
            if self.principal.mf_id is None:
                raise BadRequestError("MF user missing organizational information")
            mf = await self.orgs.get_mf(self.principal.mf_id)
            if mf is None or mf.status != AccountStatus.ACTIVE.value:
                raise BadRequestError("Invalid or inactive Master Franchisee")
            return {"lc_id": None, "mf_id": mf.id, "hq_id": mf.hq_id}
        raise PermissionDeniedError("Only LC and MF users can place orders")

    # PUBLIC_INTERFACE
    async def list_orders(
        self,
        *,
        status: Optional[str],
        lc_id: Optional[int],
        mf_id: Optional[int],
        page: int,
        limit: int,
    ) -> Page[OrderRead]:
        scope = await org_scope_clause(self.session, self.principal, Order, lc_id=lc_id, mf_id=mf_id)
        orders, total = await self.orders.list_orders(scope=scope, status=status, page=page, limit=limit)
        items = [OrderRead.model_validate(o) for o in orders]
        return Page[OrderRead].build(items, page=page, limit=limit, total=total)

    # PUBLIC_INTERFACE
    async def get_order(self, order_id: int) -> OrderRead:
        order = await self._get(order_id)
        ensure_in_scope(self.principal, order)
        return OrderRead.model_validate(order)

    # PUBLIC_INTERFACE
    async def create_order(self, payload: OrderCreate) -> OrderRead:
        """
        Place an order. Unit prices are copied from the products at order time;
        tax is the subtotal times ORDER_TAX_RATE.
        """
        chain = await self._placing_chain()
        product_ids = sorted({line.product_id for line in payload.lines})
        products = await self.products.get_many(product_ids)
        unavailable = [pid for pid in product_ids if pid not in products or not products[pid].is_active]
        if unavailable:
            raise BadRequestError("Invalid or inactive products", details={"product_ids": unavailable})

        lines = []
        subtotal = Decimal("0")
        for line in payload.lines:
            unit_price = _money(products[line.product_id].price)
            total_price = _money(unit_price * line.quantity)
            subtotal += total_price
            lines.append(
                OrderLine(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_price=unit_price,
                    total_price=total_price,
                )
            )
        tax = _money(subtotal * Decimal(str(get_app_settings().ORDER_TAX_RATE)))

        year = datetime.now(timezone.utc).year
        order = Order(
            order_number=next_order_number(year, await self.orders.last_number_for_year(year)),
            status=OrderStatus.PENDING.value,
            subtotal=_money(subtotal),
            tax=tax,
            total=_money(subtotal + tax),
            notes=payload.notes,
            placed_by=self.principal.user_id,
            lines=lines,
            **chain,
        )
        await self.orders.add(order)
        await self.orders.commit()
        logger.info("Order %s placed (%d lines, total %s)", order.order_number, len(lines), order.total)
        return OrderRead.model_validate(await self.orders.refetch(Order, order.id))

    # PUBLIC_INTERFACE
    async def change_status(self, order_id: int, payload: OrderStatusChange) -> OrderRead:
        """
        Move an order along PENDING -> PROCESSING -> SHIPPED -> DELIVERED, or cancel it
        before it ships. Shipping takes the ordered quantities out of stock.
        """
        order = await self._get(order_id)
        ensure_in_scope(self.principal, order)
        current = OrderStatus(order.status)
        target = payload.status

        allowed = TRANSITIONS.get((current, target))
        if allowed is None:
            raise BadRequestError(f"Cannot change order status from {current.value} to {target.value}")
        if not allowed & order_roles(self.principal, order):
            raise PermissionDeniedError("Not allowed to change this order's status")

        if target == OrderStatus.SHIPPED:
            inventory = InventoryService(self.session, self.principal)
            await inventory.reduce_stock(
                [(line.product_id, line.quantity) for line in order.lines],
                reason=StockReason.ORDER_FULFILLMENT,
                reference_id=order.order_number,
                notes=f"Order fulfillment: {order.order_number}",
            )

        order.status = target.value
        if payload.notes:
            order.notes = f"{order.notes}\n{payload.notes}" if order.notes else payload.notes
        await self.orders.commit()
        logger.info("Order %s: %s -> %s", order.order_number, current.value, target.value)
        return OrderRead.model_validate(await self.orders.refetch(Order, order.id))
