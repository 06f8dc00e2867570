from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from franchise_api.db.models.enums import AccountStatus
from franchise_api.schemas.common import OrgRef, reject_null, upper_or_none


class AccountBase(BaseModel):
    """Contact and address fields shared by every account type."""
    email: Optional[EmailStr] = Field(None)
    phone: Optional[str] = Field(None)
    address: Optional[str] = Field(None)
    city: Optional[str] = Field(None)
    state: Optional[str] = Field(None)
    country: Optional[str] = Field(None)
    postal_code: Optional[str] = Field(None)


class AccountCreate(AccountBase):
    """Create payload; code is upper-cased and must be unique per account type."""
    name: str = Field(..., min_length=1, description="Account name")
    code: str = Field(..., min_length=1, max_length=32, description="Unique account code")

    @field_validator("code", mode="before")
    @classmethod
    def _upper_code(cls, v):
        return upper_or_none(v)


class AccountUpdate(AccountBase):
    """Partial update payload."""
    name: Optional[str] = Field(None, min_length=1)
    status: Optional[AccountStatus] = Field(None)

    @field_validator("status", mode="before")
    @classmethod
    def _upper_status(cls, v):
        return upper_or_none(v)

    @field_validator("name", "status")
    @classmethod
    def _not_null(cls, v):
        return reject_null(v)


class AccountRead(AccountBase):
    """Common read fields."""
    id: int
    name: str
    code: str
    email: Optional[str] = None
    status: AccountStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class HQRead(AccountRead):
    """HQ with user, MF and TT counts."""
    user_count: int = Field(0)
    mf_count: int = Field(0)
    tt_count: int = Field(0)


class MFCreate(AccountCreate):
    """Master Franchisee create payload; hq_id defaults to the caller's HQ."""
    hq_id: Optional[int] = Field(None, description="Parent HQ id")


class MFRead(AccountRead):
    """Master Franchisee with HQ summary and user/LC counts."""
    hq_id: int
    hq: Optional[OrgRef] = None
    user_count: int = Field(0)
    lc_count: int = Field(0)


class LCCreate(AccountCreate):
    """Learning Center create payload; MF users may omit mf_id."""
    mf_id: Optional[int] = Field(None, description="Parent Master Franchisee id")


class LCRead(AccountRead):
    """Learning Center with parent MF summary and user count."""
    mf_id: int
    mf: Optional[OrgRef] = None
    user_count: int = Field(0)


class TTCreate(AccountCreate):
    """Teacher Trainer create payload; hq_id defaults to the caller's HQ."""
    hq_id: Optional[int] = Field(None, description="Parent HQ id")


class TTRead(AccountRead):
    """Teacher Trainer with HQ summary and user count."""
    hq_id: int
    hq: Optional[OrgRef] = None
    user_count: int = Field(0)
