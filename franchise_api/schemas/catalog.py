from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from franchise_api.db.models.enums import CatalogStatus, PricingModel, ProgramKind, Visibility
from franchise_api.schemas.common import upper_or_none


class ProgramCreate(BaseModel):
    """Create a program (HQ only)."""
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    duration: int = Field(..., gt=0, description="Duration in weeks")
    max_students: int = Field(..., gt=0)
    hours: int = Field(..., gt=0, description="Total teaching hours")
    lesson_length: int = Field(..., gt=0, description="Lesson length in minutes")
    kind: ProgramKind = Field(...)
    status: CatalogStatus = Field(CatalogStatus.DRAFT)
    visibility: Visibility = Field(Visibility.PRIVATE)
    category: str = Field("General")
    price: float = Field(0, ge=0)
    requirements: List[str] = Field(default_factory=list)
    learning_objectives: List[str] = Field(default_factory=list)
    shared_with_mfs: List[int] = Field(
        default_factory=list, description="MF ids a SHARED program is visible to"
    )

    @field_validator("kind", "status", "visibility", mode="before")
    @classmethod
    def _upper(cls, v):
        return upper_or_none(v)


class ProgramUpdate(BaseModel):
    """Partial program update (HQ only)."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    duration: Optional[int] = Field(None, gt=0)
    max_students: Optional[int] = Field(None, gt=0)
    hours: Optional[int] = Field(None, gt=0)
    lesson_length: Optional[int] = Field(None, gt=0)
    kind: Optional[ProgramKind] = None
    status: Optional[CatalogStatus] = None
    visibility: Optional[Visibility] = None
    category: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    requirements: Optional[List[str]] = None
    learning_objectives: Optional[List[str]] = None
    shared_with_mfs: Optional[List[int]] = None

    @field_validator("kind", "status", "visibility", mode="before")
    @classmethod
    def _upper(cls, v):
        return upper_or_none(v)


class SubProgramCreate(BaseModel):
    """Create a subprogram (HQ or MF)."""
    program_id: int = Field(...)
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    duration: int = Field(..., gt=0)
    pricing_model: PricingModel = Field(...)
    course_price: float = Field(..., ge=0)
    status: CatalogStatus = Field(CatalogStatus.DRAFT)
    visibility: Visibility = Field(Visibility.PRIVATE)
    order: int = Field(1, ge=1)
    price: float = Field(0, ge=0)
    prerequisites: List[str] = Field(default_factory=list)
    learning_objectives: List[str] = Field(default_factory=list)
    number_of_payments: Optional[int] = Field(None, gt=0)
    gap: Optional[int] = Field(None, ge=0, description="Days between installments")
    price_per_month: Optional[float] = Field(None, ge=0)
    price_per_session: Optional[float] = Field(None, ge=0)
    shared_with_mfs: List[int] = Field(default_factory=list)
    shared_with_lcs: List[int] = Field(default_factory=list)

    @field_validator("pricing_model", "status", "visibility", mode="before")
    @classmethod
    def _upper(cls, v):
        return upper_or_none(v)


class SubProgramUpdate(BaseModel):
    """Partial subprogram update."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    duration: Optional[int] = Field(None, gt=0)
    pricing_model: Optional[PricingModel] = None
    course_price: Optional[float] = Field(None, ge=0)
    status: Optional[CatalogStatus] = None
    visibility: Optional[Visibility] = None
    order: Optional[int] = Field(None, ge=1)
    price: Optional[float] = Field(None, ge=0)
    prerequisites: Optional[List[str]] = None
    learning_objectives: Optional[List[str]] = None
    number_of_payments: Optional[int] = Field(None, gt=0)
    gap: Optional[int] = Field(None, ge=0)
    price_per_month: Optional[float] = Field(None, ge=0)
    price_per_session: Optional[float] = Field(None, ge=0)
    shared_with_mfs: Optional[List[int]] = None
    shared_with_lcs: Optional[List[int]] = None

    @field_validator("pricing_model", "status", "visibility", mode="before")
    @classmethod
    def _upper(cls, v):
        return upper_or_none(v)


class SubProgramRead(BaseModel):
    """Subprogram read model."""
    id: int
    program_id: int
    name: str
    description: str
    status: CatalogStatus
    order: int
    duration: int
    price: float
    prerequisites: List[str] = Field(default_factory=list)
    learning_objectives: List[str] = Field(default_factory=list)
    pricing_model: PricingModel
    course_price: float
    number_of_payments: Optional[int] = None
    gap: Optional[int] = None
    price_per_month: Optional[float] = None
    price_per_session: Optional[float] = None
    visibility: Visibility
    shared_with_mfs: List[int] = Field(default_factory=list)
    shared_with_lcs: List[int] = Field(default_factory=list)
    created_by: Optional[int] = None
    owner_mf_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProgramRead(BaseModel):
    """Program read model for lists."""
    id: int
    name: str
    description: str
    status: CatalogStatus
    category: str
    duration: int
    price: float
    max_students: int
    current_students: int
    requirements: List[str] = Field(default_factory=list)
    learning_objectives: List[str] = Field(default_factory=list)
    hours: int
    lesson_length: int
    kind: ProgramKind
    visibility: Visibility
    shared_with_mfs: List[int] = Field(default_factory=list)
    created_by: Optional[int] = None
    sub_program_count: int = Field(0, description="Subprograms under this program")
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProgramDetail(ProgramRead):
    """Program with the subprograms visible to the caller."""
    sub_programs: List[SubProgramRead] = Field(default_factory=list)
