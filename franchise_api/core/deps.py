"""
FastAPI dependencies: the current user, tier guards and paging parameters.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.logging import bind_principal
from franchise_api.core.rbac import Principal, Role, Tier
from franchise_api.core.security import ACCESS_TOKEN, InvalidTokenError, token_user_id
from franchise_api.core.settings import get_app_settings
from franchise_api.db.models.enums import AccountStatus
from franchise_api.db.session import get_async_session
from franchise_api.repositories.security import UserRepository

logger = logging.getLogger(__name__)

# OAuth2 bearer (used by docs); login endpoint path referenced here
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


def principal_from_user(user) -> Principal:
    """Build a Principal from a User row."""
    return Principal(
        user_id=user.id,
        email=user.email,
        role=Role(user.role),
        hq_id=user.hq_id,
        mf_id=user.mf_id,
        lc_id=user.lc_id,
        tt_id=user.tt_id,
    )


# PUBLIC_INTERFACE
async def get_current_user(
    request: Request,
    token: str = Depends(oauth2_scheme),
    session: AsyncSession = Depends(get_async_session),
):
    """
    Resolve the current user from the Authorization bearer token.

    The token only identifies the user; role and organization ids are read from
    the database so that role changes and suspensions take effect immediately.
    """
    credentials_error = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid token",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        uid = token_user_id(token, ACCESS_TOKEN)
    except InvalidTokenError:
        raise credentials_error

    repo = UserRepository(session)
    user = await repo.get_user_by_id(uid)
    if not user or user.status != AccountStatus.ACTIVE.value:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or inactive user",
            headers={"WWW-Authenticate": "Bearer"},
        )

    principal = principal_from_user(user)
    bind_principal(principal.label())
    request.state.principal = principal.label()
    return user


# PUBLIC_INTERFACE
async def get_current_principal(user=Depends(get_current_user)) -> Principal:
    """Return the authenticated caller as a Principal."""
    return principal_from_user(user)


# PUBLIC_INTERFACE
def require_tiers(*tiers: Tier):
    """
    Create a dependency that requires the current user to belong to one of the
    given organization tiers. Returns the Principal.
    """
    allowed = set(tiers)

    async def _dep(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.tier not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return principal

    return _dep


# PUBLIC_INTERFACE
async def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    """Require an *_ADMIN role."""
    if not principal.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
    return principal


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int


# PUBLIC_INTERFACE
def page_params(
    page: int = Query(1, ge=1, description="1-based page number"),
    limit: Optional[int] = Query(None, ge=1, description="Page size (default DEFAULT_PAGE_SIZE, max MAX_PAGE_SIZE)"),
) -> PageParams:
    """Paging query parameters with the configured default and cap applied."""
    settings = get_app_settings()
    size = limit or settings.DEFAULT_PAGE_SIZE
    return PageParams(page=page, limit=min(size, settings.MAX_PAGE_SIZE))
