from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from franchise_api.db.models.enums import OrderStatus, StockDirection, StockReason, StockStatus
from franchise_api.schemas.common import OrgRef, reject_null, upper_or_none


class ProductCreate(BaseModel):
    sku: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    price: float = Field(0, ge=0)
    cost: float = Field(0, ge=0)
    stock_quantity: int = Field(0, ge=0)
    min_stock_level: int = Field(0, ge=0)
    supplier: Optional[str] = None
    is_active: bool = True

    @field_validator("sku", mode="before")
    @classmethod
    def _upper_sku(cls, v):
        return upper_or_none(v)


class ProductUpdate(BaseModel):
    """Partial product update; stock changes go through receive-stock and adjustments."""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    cost: Optional[float] = Field(None, ge=0)
    min_stock_level: Optional[int] = Field(None, ge=0)
    supplier: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("name", "price", "cost", "min_stock_level", "is_active")
    @classmethod
    def _not_null(cls, v):
        return reject_null(v)


class StockStatusRead(BaseModel):
    """Computed stock level classification."""
    status: StockStatus
    message: str
    quantity: int
    min_stock_level: int


class ProductRead(BaseModel):
    id: int
    sku: str
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    price: float
    cost: float
    stock_quantity: int
    min_stock_level: int
    supplier: Optional[str] = None
    is_active: bool
    stock_status: Optional[StockStatusRead] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ReceiveStock(BaseModel):
    quantity: int = Field(..., gt=0)
    reference_id: Optional[str] = Field(None, description="Supplier invoice or delivery note")
    notes: Optional[str] = None


class StockReduction(BaseModel):
    product_id: int
    quantity: int = Field(..., gt=0)


class StockReductionRequest(BaseModel):
    """Batch of reductions validated and applied all-or-nothing."""
    items: List[StockReduction] = Field(..., min_length=1)
    reference_id: Optional[str] = None
    notes: Optional[str] = None


class StockValidationResult(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class StockAdjustmentResult(BaseModel):
    applied: List[ProductRead] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class InventoryTransactionRead(BaseModel):
    id: int
    product_id: int
    direction: StockDirection
    quantity: int
    reason: StockReason
    reference_id: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ProductStockRef(BaseModel):
    id: int
    sku: str
    name: str
    stock_quantity: int
    min_stock_level: int

    class Config:
        from_attributes = True


class InventorySummary(BaseModel):
    total_products: int
    total_units: int
    in_stock: int
    low_stock: int
    out_of_stock: int
    total_value: float = Field(..., description="Sum of stock_quantity x cost")
    low_stock_products: List[ProductStockRef] = Field(default_factory=list)
    out_of_stock_products: List[ProductStockRef] = Field(default_factory=list)


class OrderLineCreate(BaseModel):
    product_id: int
    quantity: int = Field(..., gt=0)


class OrderCreate(BaseModel):
    lines: List[OrderLineCreate] = Field(..., min_length=1)
    notes: Optional[str] = None


class OrderLineRead(BaseModel):
    id: int
    product_id: int
    quantity: int
    unit_price: float
    total_price: float
    product: Optional[ProductStockRef] = None

    class Config:
        from_attributes = True


class OrderRead(BaseModel):
    id: int
    order_number: str
    status: OrderStatus
    subtotal: float
    tax: float
    total: float
    notes: Optional[str] = None
    placed_by: Optional[int] = None
    hq_id: Optional[int] = None
    mf_id: Optional[int] = None
    lc_id: Optional[int] = None
    lc: Optional[OrgRef] = None
    mf: Optional[OrgRef] = None
    lines: List[OrderLineRead] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class OrderStatusChange(BaseModel):
    status: OrderStatus
    notes: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def _upper(cls, v):
        return upper_or_none(v)
