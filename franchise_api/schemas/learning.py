from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from franchise_api.db.models.enums import LearningGroupStatus
from franchise_api.schemas.common import OrgRef, upper_or_none

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class ScheduleSlot(BaseModel):
    """Weekly time slot; day_of_week 0 is Sunday."""
    day_of_week: int = Field(..., ge=0, le=6)
    start_time: str = Field(..., description="HH:MM (24h)")
    end_time: str = Field(..., description="HH:MM (24h)")
    room: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def _hhmm(cls, v: str) -> str:
        if not _HHMM.match(v):
            raise ValueError("time must be HH:MM")
        return v

    @model_validator(mode="after")
    def _ordered(self) -> "ScheduleSlot":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class LearningGroupWrite(BaseModel):
    """Create or fully replace a learning group (LC only)."""
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    max_students: int = Field(..., gt=0)
    start_date: date = Field(...)
    end_date: date = Field(...)
    location: str = Field(..., min_length=1)
    program_id: int = Field(...)
    teacher_id: int = Field(...)
    sub_program_id: Optional[int] = None
    status: LearningGroupStatus = Field(LearningGroupStatus.ACTIVE)
    notes: Optional[str] = None
    schedule: List[ScheduleSlot] = Field(default_factory=list)
    pricing_snapshot: Optional[Dict[str, Any]] = Field(
        None, description="Price terms frozen at enrollment; defaults to the subprogram pricing"
    )
    students: List[int] = Field(default_factory=list, description="Student ids on the roster")

    @field_validator("status", mode="before")
    @classmethod
    def _upper(cls, v):
        return upper_or_none(v)

    @model_validator(mode="after")
    def _dates(self) -> "LearningGroupWrite":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class TeacherRef(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str

    class Config:
        from_attributes = True


class CatalogRef(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class LearningGroupRead(BaseModel):
    id: int
    name: str
    description: str
    status: LearningGroupStatus
    max_students: int
    current_students: int
    start_date: date
    end_date: date
    location: str
    notes: Optional[str] = None
    schedule: List[Dict[str, Any]] = Field(default_factory=list)
    pricing_snapshot: Optional[Dict[str, Any]] = None
    students: List[int] = Field(default_factory=list)
    program_id: int
    sub_program_id: Optional[int] = None
    teacher_id: int
    program: Optional[CatalogRef] = None
    sub_program: Optional[CatalogRef] = None
    teacher: Optional[TeacherRef] = None
    hq_id: Optional[int] = None
    mf_id: Optional[int] = None
    lc_id: Optional[int] = None
    lc: Optional[OrgRef] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProductAssignment(BaseModel):
    """Hand a product to a student of the group, reducing stock."""
    student_id: int = Field(...)
    product_id: int = Field(...)
    quantity: int = Field(1, gt=0)
    notes: Optional[str] = None
