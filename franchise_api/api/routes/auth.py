from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.deps import get_current_principal, get_current_user
from franchise_api.core.rbac import Principal, navigation_for
from franchise_api.core.security import REFRESH_TOKEN, InvalidTokenError, token_user_id
from franchise_api.db.session import get_async_session
from franchise_api.schemas.auth import (
    LoginResponse,
    Message,
    NavigationResponse,
    RefreshRequest,
    RegisterRequest,
    TokenPair,
    UserRead,
)
from franchise_api.services.auth import AuthenticationError, AuthService, issue_tokens

router = APIRouter(prefix="/auth", tags=["Auth"])


# PUBLIC_INTERFACE
@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Login",
    description="Authenticate using the OAuth2 password form (username = email) and receive access/refresh tokens.",
)
async def login_for_tokens(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: AsyncSession = Depends(get_async_session),
) -> LoginResponse:
    """Authenticate user and issue tokens together with the user's profile."""
    try:
        user = await AuthService(session).authenticate(form_data.username, form_data.password)
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        )
    return LoginResponse(**issue_tokens(user), user=UserRead.model_validate(user))


# PUBLIC_INTERFACE
@router.post(
    "/register",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register user",
    description=(
        "Create a user attached to an HQ/MF/LC/TT account. The caller must be able to reach "
        "the account and hold a role ranked at least as high as the one granted."
    ),
)
async def register_user(
    payload: RegisterRequest,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    """Register a new user under an organization account."""
    user = await AuthService(session, principal).register(payload)
    return UserRead.model_validate(user)


# PUBLIC_INTERFACE
@router.post(
    "/refresh",
    response_model=TokenPair,
    summary="Refresh access token",
    description="Issue a new token pair from a valid refresh token.",
)
async def refresh_token(
    payload: RefreshRequest,
    session: AsyncSession = Depends(get_async_session),
) -> TokenPair:
    """Validate refresh token and issue a new access token pair."""
    try:
        user_id = token_user_id(payload.refresh_token, REFRESH_TOKEN)
    except InvalidTokenError as exc:
        raise HTTPException(status_code=401, detail=str(exc))

    try:
        user = await AuthService(session).user_for_refresh(user_id)
    except AuthenticationError as exc:
        raise HTTPException(status_code=401, detail=str(exc))
    return TokenPair(**issue_tokens(user))


# PUBLIC_INTERFACE
@router.post(
    "/logout",
    response_model=Message,
    summary="Logout",
    description="Stateless logout. Clients should discard tokens. No server state maintained.",
)
async def logout() -> Message:
    """Acknowledge logout in stateless JWT systems."""
    return Message(message="Logged out")


# PUBLIC_INTERFACE
@router.get(
    "/me",
    response_model=UserRead,
    summary="Read current user",
    description="Return the current authenticated user with account summaries.",
)
async def read_current_user(user=Depends(get_current_user)) -> UserRead:
    """Return current user profile."""
    return UserRead.model_validate(user)


# PUBLIC_INTERFACE
@router.get(
    "/navigation",
    response_model=NavigationResponse,
    summary="Navigation for current user",
    description="Menu entries the client may render for the caller's tier, with scope notes for scoped pages.",
)
async def read_navigation(principal: Principal = Depends(get_current_principal)) -> NavigationResponse:
    """Return the role-gated navigation for the caller."""
    return NavigationResponse(role=principal.role, tier=principal.tier, items=navigation_for(principal.tier))
