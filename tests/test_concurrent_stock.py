import asyncio

import pytest
from sqlalchemy import func, select

from franchise_api.core.errors import ConflictError
from franchise_api.db.models import InventoryTransaction, Product
from franchise_api.db.models.enums import StockReason
from franchise_api.services.inventory import InventoryService


async def _product(maker, stock):
    async with maker() as session:
        product = Product(sku="KIT-RACE", name="Race Kit", price=10, cost=5, stock_quantity=stock, min_stock_level=0)
        session.add(product)
        await session.commit()
        return product.id


async def _stock_and_movements(maker, product_id):
    async with maker() as session:
        stock = await session.scalar(select(Product.stock_quantity).where(Product.id == product_id))
        moves = await session.scalar(
            select(func.count()).select_from(InventoryTransaction).where(InventoryTransaction.product_id == product_id)
        )
        return stock, moves


def test_interleaved_reductions_both_apply(seeded_app, session_maker):
    async def scenario():
        pid = await _product(session_maker, 10)
        async with session_maker() as first, session_maker() as second:
            a, b = InventoryService(first), InventoryService(second)
            # both requests read stock 10 before either writes
            await a.products.get_many([pid])
            await b.products.get_many([pid])

            changed, _ = await a.reduce_stock([(pid, 3)], reason=StockReason.MANUAL_ADJUSTMENT)
            await first.commit()
            assert changed[0].stock_quantity == 7

            changed, _ = await b.reduce_stock([(pid, 4)], reason=StockReason.MANUAL_ADJUSTMENT)
            await second.commit()
            assert changed[0].stock_quantity == 3
        return await _stock_and_movements(session_maker, pid)

    assert asyncio.run(scenario()) == (3, 2)


def test_reduction_rejected_when_stock_ran_out_meanwhile(seeded_app, session_maker):
    async def scenario():
        pid = await _product(session_maker, 10)
        async with session_maker() as first, session_maker() as second:
            a, b = InventoryService(first), InventoryService(second)
            await a.products.get_many([pid])
            await b.products.get_many([pid])

            await a.reduce_stock([(pid, 8)], reason=StockReason.ORDER_FULFILLMENT)
            await first.commit()

            with pytest.raises(ConflictError):
                await b.reduce_stock([(pid, 4)], reason=StockReason.ORDER_FULFILLMENT)
        return await _stock_and_movements(session_maker, pid)

    assert asyncio.run(scenario()) == (2, 1)
