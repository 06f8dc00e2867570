from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


def upper_or_none(v: Any) -> Any:
    """Normalize enum-like string input to upper case; other values pass through."""
    if isinstance(v, str):
        return v.strip().upper()
    return v


# PUBLIC_INTERFACE
def reject_null(v: Any) -> Any:
    """For PATCH fields that may be omitted but not cleared."""
    if v is None:
        raise ValueError("may be omitted but not set to null")
    return v


class Timestamps(BaseModel):
    """Common created/updated timestamp fields."""
    created_at: datetime = Field(..., description="Creation timestamp (UTC)")
    updated_at: datetime = Field(..., description="Last update timestamp (UTC)")


class OrgRef(BaseModel):
    """Compact reference to an organization account."""
    id: int = Field(..., description="Account ID")
    name: str = Field(..., description="Account name")
    code: str = Field(..., description="Account code")

    class Config:
        from_attributes = True


# PUBLIC_INTERFACE
class Page(BaseModel, Generic[T]):
    """One page of results plus the paging metadata clients need to navigate."""
    items: List[T] = Field(default_factory=list, description="Records on this page")
    page: int = Field(..., ge=1, description="1-based page number")
    limit: int = Field(..., ge=1, description="Page size")
    total: int = Field(..., ge=0, description="Total matching records")
    total_pages: int = Field(..., ge=0, description="Number of pages")
    has_next: bool = Field(..., description="True when a later page exists")
    has_prev: bool = Field(..., description="True when an earlier page exists")

    @classmethod
    def build(cls, items: List[Any], *, page: int, limit: int, total: int) -> "Page[T]":
        total_pages = math.ceil(total / limit) if limit else 0
        return cls(
            items=items,
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


class MessageResponse(BaseModel):
    """Standard message response."""
    message: str = Field(..., description="Human readable message")
    details: Optional[dict] = Field(default=None, description="Optional extra data")


class ErrorInfo(BaseModel):
    """Structured error description."""
    type: str = Field(..., description="Machine-readable error type code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Any] = Field(default=None, description="Optional error details (e.g., validation issues)")


# PUBLIC_INTERFACE
class ErrorResponse(BaseModel):
    """Standardized API error envelope returned by exception handlers."""
    status: int = Field(..., description="HTTP status code")
    error: ErrorInfo = Field(..., description="Error details")
    correlation_id: Optional[str] = Field(default=None, description="Request correlation ID")
    principal: Optional[str] = Field(default=None, description="Authenticated caller as ROLE:user_id (if known)")
    path: Optional[str] = Field(default=None, description="Request path")
    method: Optional[str] = Field(default=None, description="HTTP method")
    timestamp: datetime = Field(..., description="Error timestamp (UTC)")
