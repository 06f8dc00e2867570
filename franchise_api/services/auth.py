from __future__ import annotations

import logging
from typing import Any, Dict, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.errors import BadRequestError, ConflictError, PermissionDeniedError
from franchise_api.core.rbac import Principal, Role, Tier, can_access_account, has_permission
from franchise_api.core.security import (
    create_access_token,
    create_refresh_token,
    get_password_hash,
    verify_password,
)
from franchise_api.core.settings import get_app_settings
from franchise_api.db.base import utcnow
from franchise_api.db.models import User
from franchise_api.db.models.enums import AccountStatus
from franchise_api.repositories.organization import OrganizationRepository
from franchise_api.repositories.security import UserRepository
from franchise_api.schemas.auth import RegisterRequest
from franchise_api.services.base import BaseService

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Raised for login failures; routes turn it into 401."""


# PUBLIC_INTERFACE
def issue_tokens(user: User) -> Dict[str, Any]:
    """Create the access/refresh pair for a user."""
    settings = get_app_settings()
    claims = {
        "email": user.email,
        "role": user.role,
        "hq_id": user.hq_id,
        "mf_id": user.mf_id,
        "lc_id": user.lc_id,
        "tt_id": user.tt_id,
    }
    return {
        "token_type": "bearer",
        "access_token": create_access_token(subject=str(user.id), claims=claims),
        "refresh_token": create_refresh_token(subject=str(user.id)),
        "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    }


class AuthService(BaseService):
    """Login, registration and organization-chain resolution for users."""

    def __init__(self, session: AsyncSession, principal: Principal | None = None) -> None:
        super().__init__(session, principal)
        self.users = UserRepository(session)
        self.orgs = OrganizationRepository(session)

    # PUBLIC_INTERFACE
    async def authenticate(self, email: str, password: str) -> User:
        """
        Verify credentials, fill in missing organization ids from the account
        chain and record the login time.

        Raises:
            AuthenticationError: unknown email, wrong password, or inactive account.
        """
        user = await self.users.get_user_by_email(email.strip().lower())
        if not user or not verify_password(password, user.hashed_password):
            raise AuthenticationError("Invalid email or password")
        if user.status != AccountStatus.ACTIVE.value:
            raise AuthenticationError("Account is inactive or suspended")

        await self._complete_org_chain(user)
        user.last_login_at = utcnow()
        await self.users.commit()
        logger.info("User %s logged in", user.id)
        return await self.users.refetch(User, user.id)

    async def _complete_org_chain(self, user: User) -> None:
        """LC users inherit mf/hq ids from their LC; MF and TT users inherit hq_id."""
        if user.lc_id is not None and (user.mf_id is None or user.hq_id is None):
            lc = await self.orgs.get_lc(user.lc_id)
            if lc is not None:
                user.mf_id = user.mf_id or lc.mf_id
                if user.hq_id is None and lc.mf is not None:
                    user.hq_id = lc.mf.hq_id
        if user.mf_id is not None and user.hq_id is None:
            mf = await self.orgs.get_mf(user.mf_id)
            if mf is not None:
                user.hq_id = mf.hq_id
        if user.tt_id is not None and user.hq_id is None:
            tt = await self.orgs.get_tt(user.tt_id)
            if tt is not None:
                user.hq_id = tt.hq_id

    async def _resolve_account(self, account_type: Tier, account_id: int) -> Tuple[Dict[str, Any], Any]:
        """Return the org-id chain for an active account and the parent MF id (for LCs)."""
        invalid = BadRequestError("Invalid or inactive account")
        if account_type == Tier.HQ:
            hq = await self.orgs.get_hq(account_id)
            if hq is None or hq.status != AccountStatus.ACTIVE.value:
                raise invalid
            return {"hq_id": hq.id}, None
        if account_type == Tier.MF:
            mf = await self.orgs.get_mf(account_id)
            if mf is None or mf.status != AccountStatus.ACTIVE.value:
                raise invalid
            return {"hq_id": mf.hq_id, "mf_id": mf.id}, None
        if account_type == Tier.LC:
            lc = await self.orgs.get_lc(account_id)
            if lc is None or lc.status != AccountStatus.ACTIVE.value:
                raise invalid
            return {"hq_id": lc.mf.hq_id if lc.mf else None, "mf_id": lc.mf_id, "lc_id": lc.id}, lc.mf_id
        tt = await self.orgs.get_tt(account_id)
        if tt is None or tt.status != AccountStatus.ACTIVE.value:
            raise invalid
        return {"hq_id": tt.hq_id, "tt_id": tt.id}, None

    # PUBLIC_INTERFACE
    async def register(self, payload: RegisterRequest) -> User:
        """
        Create a user attached to an account the caller administers.

        Raises:
            BadRequestError: weak password, role/account mismatch, or inactive account.
            PermissionDeniedError: caller cannot reach the account or grant the role.
            ConflictError: email already registered.
        """
        if self.principal is None:
            raise PermissionDeniedError("Authentication required to register users")
        settings = get_app_settings()
        if len(payload.password) < settings.PASSWORD_MIN_LENGTH:
            raise BadRequestError(
                f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters long"
            )
        if Role(payload.role).tier != payload.account_type:
            raise BadRequestError("Role does not match account type")
        if not has_permission(self.principal.role, payload.role):
            raise PermissionDeniedError("Cannot assign a role above your own")

        chain, parent_mf_id = await self._resolve_account(payload.account_type, payload.account_id)
        if not can_access_account(self.principal, payload.account_type, payload.account_id, parent_mf_id):
            raise PermissionDeniedError("Access denied to this account")

        email = payload.email.lower()
        if await self.users.get_user_by_email(email):
            raise ConflictError("Email already exists")

        user = User(
            email=email,
            hashed_password=get_password_hash(payload.password),
            first_name=payload.first_name,
            last_name=payload.last_name,
            phone=payload.phone,
            role=payload.role.value,
            status=AccountStatus.ACTIVE.value,
            **chain,
        )
        created = await self.users.create_user(user)
        logger.info("Registered user %s as %s on %s %s", created.id, created.role, payload.account_type.value, payload.account_id)
        return created

    # PUBLIC_INTERFACE
    async def user_for_refresh(self, user_id: int) -> User:
        """Load the active user behind a refresh token."""
        user = await self.users.get_user_by_id(user_id)
        if not user or user.status != AccountStatus.ACTIVE.value:
            raise AuthenticationError("User not found or inactive")
        return user
