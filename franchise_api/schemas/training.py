from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from franchise_api.schemas.common import OrgRef, reject_null
from franchise_api.schemas.learning import CatalogRef


class TrainingTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    duration: int = Field(..., gt=0, description="Length in hours")
    category: str = Field("General", min_length=1)
    is_active: bool = True
    prerequisites: List[str] = Field(default_factory=list)


class TrainingTypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    duration: Optional[int] = Field(None, gt=0)
    category: Optional[str] = Field(None, min_length=1)
    is_active: Optional[bool] = None
    prerequisites: Optional[List[str]] = None

    @field_validator("name", "description", "duration", "category", "is_active", "prerequisites")
    @classmethod
    def _not_null(cls, v):
        return reject_null(v)


class TrainingTypeRead(BaseModel):
    id: int
    name: str
    description: str
    duration: int
    category: str
    is_active: bool
    prerequisites: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TrainingCreate(BaseModel):
    """New training. Teacher Trainers always create for their own account; HQ names the account."""
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    training_type_id: int
    tt_id: Optional[int] = Field(None, description="Teacher Trainer account; required for HQ callers")
    start_date: date
    end_date: date
    max_participants: int = Field(..., gt=0)
    current_participants: int = Field(0, ge=0)
    location: str = Field(..., min_length=1)
    is_active: bool = True
    cost: float = Field(0, ge=0)
    requirements: List[str] = Field(default_factory=list)
    materials: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _consistent(self) -> "TrainingCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if self.current_participants > self.max_participants:
            raise ValueError("current_participants cannot exceed max_participants")
        return self


class TrainingUpdate(BaseModel):
    """Partial update; the running Teacher Trainer account cannot be changed."""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    training_type_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    max_participants: Optional[int] = Field(None, gt=0)
    current_participants: Optional[int] = Field(None, ge=0)
    location: Optional[str] = Field(None, min_length=1)
    is_active: Optional[bool] = None
    cost: Optional[float] = Field(None, ge=0)
    requirements: Optional[List[str]] = None
    materials: Optional[List[str]] = None

    @field_validator(
        "name",
        "description",
        "training_type_id",
        "start_date",
        "end_date",
        "max_participants",
        "current_participants",
        "location",
        "is_active",
        "cost",
        "requirements",
        "materials",
    )
    @classmethod
    def _not_null(cls, v):
        return reject_null(v)


class TrainingRead(BaseModel):
    id: int
    name: str
    description: str
    training_type_id: int
    training_type: Optional[CatalogRef] = None
    tt_id: int
    tt: Optional[OrgRef] = None
    hq_id: Optional[int] = None
    start_date: date
    end_date: date
    max_participants: int
    current_participants: int
    location: str
    is_active: bool
    cost: float
    requirements: List[str] = Field(default_factory=list)
    materials: List[str] = Field(default_factory=list)
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
