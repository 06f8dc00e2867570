from __future__ import annotations

from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from franchise_api.db.models.enums import Gender, StudentStatus, TeacherStatus
from franchise_api.schemas.common import OrgRef, upper_or_none


class AddressFields(BaseModel):
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None


class StudentWrite(AddressFields):
    """
    Create or fully replace a student.

    The organization chain is taken from the calling LC user, never from the body.
    """
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    date_of_birth: date = Field(...)
    gender: Gender = Field(...)
    enrollment_date: Optional[date] = None
    status: StudentStatus = Field(StudentStatus.ACTIVE)
    parent_first_name: str = Field(..., min_length=1)
    parent_last_name: str = Field(..., min_length=1)
    parent_phone: str = Field(..., min_length=1)
    parent_email: EmailStr = Field(...)
    emergency_contact_email: Optional[EmailStr] = None
    emergency_contact_phone: Optional[str] = None
    notes: Optional[str] = None
    avatar: Optional[str] = None

    @field_validator("gender", "status", mode="before")
    @classmethod
    def _upper(cls, v):
        return upper_or_none(v)


class StudentRead(AddressFields):
    id: int
    first_name: str
    last_name: str
    date_of_birth: date
    gender: Gender
    enrollment_date: Optional[date] = None
    status: StudentStatus
    parent_first_name: str
    parent_last_name: str
    parent_phone: str
    parent_email: str
    emergency_contact_email: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    notes: Optional[str] = None
    avatar: Optional[str] = None
    hq_id: Optional[int] = None
    mf_id: Optional[int] = None
    lc_id: Optional[int] = None
    lc: Optional[OrgRef] = None
    mf: Optional[OrgRef] = None
    hq: Optional[OrgRef] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TeacherWrite(AddressFields):
    """Create or fully replace a teacher. New teachers start in PROCESS."""
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    date_of_birth: date = Field(...)
    gender: Gender = Field(...)
    email: EmailStr = Field(...)
    title: Optional[str] = None
    phone: Optional[str] = None
    experience: int = Field(0, ge=0, description="Years of experience")
    status: Optional[TeacherStatus] = Field(
        None, description="Ignored on create; ACTIVE requires HQ approval"
    )
    bio: Optional[str] = None
    avatar: Optional[str] = None
    availability: Optional[List[Any]] = None
    education: Optional[List[Any]] = None
    trainings: Optional[List[Any]] = None
    specialization: Optional[List[Any]] = None
    qualifications: Optional[List[Any]] = None

    @field_validator("gender", "status", mode="before")
    @classmethod
    def _upper(cls, v):
        return upper_or_none(v)


class TeacherContract(BaseModel):
    """Contract upload by the Master Franchisee."""
    contract_file: str = Field(..., min_length=1, description="Stored file reference or URL")
    contract_date: date = Field(...)


class TeacherRead(AddressFields):
    id: int
    first_name: str
    last_name: str
    date_of_birth: date
    gender: Gender
    title: Optional[str] = None
    email: str
    phone: Optional[str] = None
    experience: int
    status: TeacherStatus
    bio: Optional[str] = None
    avatar: Optional[str] = None
    availability: Optional[List[Any]] = None
    education: Optional[List[Any]] = None
    trainings: Optional[List[Any]] = None
    specialization: Optional[List[Any]] = None
    qualifications: Optional[List[Any]] = None
    contract_file: Optional[str] = None
    contract_date: Optional[date] = None
    contract_uploaded_by: Optional[int] = None
    contract_uploaded_at: Optional[datetime] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    hq_id: Optional[int] = None
    mf_id: Optional[int] = None
    lc_id: Optional[int] = None
    lc: Optional[OrgRef] = None
    mf: Optional[OrgRef] = None
    hq: Optional[OrgRef] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
