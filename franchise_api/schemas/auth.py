from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from franchise_api.core.rbac import Role, Tier
from franchise_api.db.models.enums import AccountStatus
from franchise_api.schemas.common import OrgRef, reject_null, upper_or_none


class TokenPair(BaseModel):
    """Access and refresh tokens."""
    token_type: str = Field("bearer", description="Token type, typically 'bearer'")
    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    expires_in: int = Field(..., description="Access token lifetime in seconds")


class RefreshRequest(BaseModel):
    """Request to refresh an access token."""
    refresh_token: str = Field(..., description="Refresh token")


class RegisterRequest(BaseModel):
    """Create a user attached to an organization account."""
    email: EmailStr = Field(..., description="User email (stored lower-cased)")
    password: str = Field(..., min_length=1, description="Password; minimum length is PASSWORD_MIN_LENGTH")
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    phone: Optional[str] = Field(None)
    role: Role = Field(..., description="Role; its tier must match account_type")
    account_type: Tier = Field(..., description="HQ | MF | LC | TT")
    account_id: int = Field(..., description="ID of the HQ/MF/LC/TT account")

    @field_validator("role", "account_type", mode="before")
    @classmethod
    def _upper(cls, v):
        return upper_or_none(v)


class Message(BaseModel):
    """Simple message response."""
    message: str = Field(...)


class UserRead(BaseModel):
    """User read model including organization references."""
    id: int = Field(..., description="User ID")
    email: str = Field(..., description="User email")
    first_name: str = Field(...)
    last_name: str = Field(...)
    phone: Optional[str] = Field(None)
    role: Role = Field(..., description="User role")
    status: AccountStatus = Field(..., description="Account status")
    email_verified: bool = Field(False)
    last_login_at: Optional[datetime] = Field(None)
    hq_id: Optional[int] = Field(None)
    mf_id: Optional[int] = Field(None)
    lc_id: Optional[int] = Field(None)
    tt_id: Optional[int] = Field(None)
    hq: Optional[OrgRef] = Field(None)
    mf: Optional[OrgRef] = Field(None)
    lc: Optional[OrgRef] = Field(None)
    tt: Optional[OrgRef] = Field(None)
    created_at: datetime = Field(..., description="Created timestamp")
    updated_at: datetime = Field(..., description="Updated timestamp")

    class Config:
        from_attributes = True


class LoginResponse(TokenPair):
    """Tokens plus the authenticated user's profile."""
    user: UserRead = Field(..., description="Authenticated user")


class UserUpdate(BaseModel):
    """Admin update user payload."""
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = Field(None)
    role: Optional[Role] = Field(None, description="New role; must stay within the user's tier")
    status: Optional[AccountStatus] = Field(None)

    @field_validator("role", "status", mode="before")
    @classmethod
    def _upper(cls, v):
        return upper_or_none(v)

    @field_validator("first_name", "last_name", "role", "status")
    @classmethod
    def _not_null(cls, v):
        return reject_null(v)


class NavigationEntry(BaseModel):
    """One menu entry the client may render for the current user."""
    label: str
    href: str
    icon: str
    scope: Optional[str] = Field(None, description="Scope note for scoped routes")


class NavigationResponse(BaseModel):
    """Navigation allowed for the current user's tier."""
    role: Role
    tier: Tier
    items: List[NavigationEntry] = Field(default_factory=list)
