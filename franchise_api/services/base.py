from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.rbac import Principal


class BaseService:
    """
    Base class for services. Holds a session for use across multiple repositories
    and the principal every business rule is evaluated for.

    Services keep business logic and authorization, delegating data access
    to repositories.
    """

    def __init__(self, session: AsyncSession, principal: Principal | None = None) -> None:
        self.session = session
        self.principal = principal
