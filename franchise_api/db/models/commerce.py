from __future__ import annotations

from typing import List, Optional

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String, Text, true
from sqlalchemy.orm import Mapped, mapped_column, relationship

from franchise_api.db.base import Base, IntPkMixin, OrgChainMixin, TimestampMixin
from franchise_api.db.models.enums import OrderStatus
from franchise_api.db.models.organization import LearningCenter, MasterFranchisee


class Product(IntPkMixin, TimestampMixin, Base):
    """Stocked item (kits, books, merchandise) that HQ supplies to the network."""
    __tablename__ = "products"

    sku: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[float] = mapped_column(Numeric(12, 2), nullable=False, default=0, server_default="0")
    cost: Mapped[float] = mapped_column(Numeric(12, 2), nullable=False, default=0, server_default="0")
    stock_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    min_stock_level: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    supplier: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())


class InventoryTransaction(IntPkMixin, TimestampMixin, Base):
    """Stock movement for a product with a reason code."""
    __tablename__ = "inventory_transactions"

    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    direction: Mapped[str] = mapped_column(String(8), nullable=False)  # IN/OUT
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(String(32), nullable=False)
    reference_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # e.g., order number
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    product: Mapped[Product] = relationship(Product, lazy="selectin")


class Order(IntPkMixin, OrgChainMixin, TimestampMixin, Base):
    """Purchase of products by an LC or MF, fulfilled from HQ stock."""
    __tablename__ = "orders"

    order_number: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=OrderStatus.PENDING.value, server_default="PENDING"
    )
    subtotal: Mapped[float] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    tax: Mapped[float] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    total: Mapped[float] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    placed_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    lines: Mapped[List["OrderLine"]] = relationship(
        "OrderLine", cascade="all, delete-orphan", lazy="selectin", order_by="OrderLine.id"
    )
    lc: Mapped[Optional[LearningCenter]] = relationship("LearningCenter", lazy="selectin")
    mf: Mapped[Optional[MasterFranchisee]] = relationship("MasterFranchisee", lazy="selectin")


class OrderLine(IntPkMixin, Base):
    """Single product line with the unit price captured at order time."""
    __tablename__ = "order_lines"

    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[float] = mapped_column(Numeric(12, 2), nullable=False)
    total_price: Mapped[float] = mapped_column(Numeric(12, 2), nullable=False)

    product: Mapped[Product] = relationship(Product, lazy="selectin")
