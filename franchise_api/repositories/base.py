from __future__ import annotations

from typing import Any, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import Executable, Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession


class BaseRepository:
    """
    Base class for repositories providing common helpers.

    Note:
      Repositories never decide who may see a row. Callers pass the visibility
      or organization-scope clauses built in franchise_api.services.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def execute(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute a SQLAlchemy statement."""
        return await self.session.execute(statement, params or {})

    async def scalars(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute and return scalars."""
        result = await self.execute(statement, params)
        return result.scalars()

    async def scalar_one_or_none(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute and return a single scalar or None."""
        result = await self.execute(statement, params)
        return result.scalar_one_or_none()

    async def count(self, stmt: Select) -> int:
        """Count the rows a select would return, ignoring ordering and paging."""
        sub = stmt.order_by(None).limit(None).offset(None).subquery()
        result = await self.execute(select(func.count()).select_from(sub))
        return int(result.scalar_one())

    async def paginate(self, stmt: Select, *, page: int, limit: int) -> Tuple[List[Any], int]:
        """Return one page of ORM objects and the total row count."""
        total = await self.count(stmt)
        res = await self.scalars(stmt.offset((page - 1) * limit).limit(limit))
        return list(res.unique()), total

    async def refetch(self, model, entity_id: Any):
        """Reload an entity and its eager relationships after a write."""
        stmt = (
            select(model)
            .where(model.id == entity_id)
            .execution_options(populate_existing=True)
        )
        return await self.scalar_one_or_none(stmt)

    async def commit(self) -> None:
        """Commit current transaction."""
        await self.session.commit()

    async def flush(self) -> None:
        """Flush pending changes so generated ids are available."""
        await self.session.flush()

    async def delete(self, entity: Any) -> None:
        """Mark an entity for deletion."""
        await self.session.delete(entity)

    async def add_all(self, entities: Iterable[Any]) -> None:
        """Add multiple entities to session."""
        self.session.add_all(list(entities))

    async def add(self, entity: Any) -> None:
        """Add a single entity to session."""
        self.session.add(entity)


# PUBLIC_INTERFACE
def apply_sort(
    stmt: Select,
    model,
    sort_by: Optional[str],
    sort_order: str,
    allowed: Sequence[str],
    default: str = "created_at",
) -> Select:
    """
    Order a select by a whitelisted column, falling back to ``default``.

    The id is always used as a tiebreaker so paging stays stable.
    """
    column_name = sort_by if sort_by in allowed else default
    column = getattr(model, column_name)
    ordered = column.asc() if sort_order == "asc" else column.desc()
    return stmt.order_by(ordered, model.id.asc())
