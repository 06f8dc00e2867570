from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, List, Optional

import pandas as pd
from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.errors import PermissionDeniedError
from franchise_api.core.rbac import Principal, Tier
from franchise_api.core.settings import get_app_settings
from franchise_api.db.models import LearningGroup, Student
from franchise_api.db.models.enums import LearningGroupStatus
from franchise_api.repositories.commerce import ProductRepository
from franchise_api.repositories.learning import LearningGroupRepository
from franchise_api.repositories.organization import OrganizationRepository
from franchise_api.repositories.people import StudentRepository
from franchise_api.services.base import BaseService
from franchise_api.services.inventory import stock_status
from franchise_api.services.royalties import commission, fee_per_student, month_period
from franchise_api.services.scoping import org_scope_clause

logger = logging.getLogger(__name__)

STUDENT_COLUMNS = [
    "id",
    "first_name",
    "last_name",
    "date_of_birth",
    "gender",
    "status",
    "enrollment_date",
    "parent_name",
    "parent_phone",
    "parent_email",
    "learning_center",
    "master_franchisee",
]

INVENTORY_COLUMNS = [
    "sku",
    "name",
    "category",
    "stock_quantity",
    "min_stock_level",
    "stock_status",
    "unit_cost",
    "stock_value",
    "price",
    "is_active",
]

ROYALTY_COLUMNS = [
    "period",
    "mf_code",
    "master_franchisee",
    "lc_code",
    "learning_center",
    "student_count",
    "revenue",
    "first_tier_students",
    "first_tier_commission",
    "beyond_tier_students",
    "beyond_tier_commission",
    "lc_to_mf_commission",
    "mf_to_hq_commission",
]

# Groups that bill their rosters
ROYALTY_GROUP_STATUSES = (LearningGroupStatus.ACTIVE.value, LearningGroupStatus.COMPLETED.value)


class ReportService(BaseService):
    """Builds report DataFrames; rendering to CSV/XLSX/PDF happens in the reports router."""

    def __init__(self, session: AsyncSession, principal: Principal) -> None:
        super().__init__(session, principal)
        self.students = StudentRepository(session)
        self.products = ProductRepository(session)
        self.groups = LearningGroupRepository(session)
        self.orgs = OrganizationRepository(session)

    # PUBLIC_INTERFACE
    async def students_frame(self) -> pd.DataFrame:
        """Student roster within the caller's organization scope."""
        scope = await org_scope_clause(self.session, self.principal, Student)
        rows = []
        for s in await self.students.all_in_scope(scope):
            rows.append(
                {
                    "id": s.id,
                    "first_name": s.first_name,
                    "last_name": s.last_name,
                    "date_of_birth": s.date_of_birth,
                    "gender": s.gender,
                    "status": s.status,
                    "enrollment_date": s.enrollment_date,
                    "parent_name": f"{s.parent_first_name} {s.parent_last_name}",
                    "parent_phone": s.parent_phone,
                    "parent_email": s.parent_email,
                    "learning_center": s.lc.name if s.lc else None,
                    "master_franchisee": s.mf.name if s.mf else None,
                }
            )
        return pd.DataFrame(rows, columns=STUDENT_COLUMNS)

    # PUBLIC_INTERFACE
    async def inventory_frame(self) -> pd.DataFrame:
        """Stock levels and valuation (quantity x cost) per product. HQ only."""
        if self.principal.tier != Tier.HQ:
            raise PermissionDeniedError("Insufficient permissions")
        rows = []
        for p in await self.products.all_products():
            cost = float(p.cost or 0)
            rows.append(
                {
                    "sku": p.sku,
                    "name": p.name,
                    "category": p.category,
                    "stock_quantity": p.stock_quantity,
                    "min_stock_level": p.min_stock_level,
                    "stock_status": stock_status(p.stock_quantity, p.min_stock_level).status.value,
                    "unit_cost": cost,
                    "stock_value": round(p.stock_quantity * cost, 2),
                    "price": float(p.price or 0),
                    "is_active": p.is_active,
                }
            )
        return pd.DataFrame(rows, columns=INVENTORY_COLUMNS)

    # PUBLIC_INTERFACE
    async def royalties_frame(self, month: Optional[str] = None) -> pd.DataFrame:
        """
        One row per Learning Center in scope with its student count, tuition
        revenue and the LC -> MF -> HQ commissions for the month. HQ sees every
        LC, an MF only its own.
        """
        if self.principal.tier not in (Tier.HQ, Tier.MF):
            raise PermissionDeniedError("Insufficient permissions")
        start, end = month_period(month)
        settings = get_app_settings()

        scope = await org_scope_clause(self.session, self.principal, LearningGroup)
        groups_by_lc: Dict[int, List[LearningGroup]] = defaultdict(list)
        for group in await self.groups.running_between(scope, start, end, ROYALTY_GROUP_STATUSES):
            groups_by_lc[group.lc_id].append(group)

        mf_id = self.principal.mf_id if self.principal.tier == Tier.MF else None
        rows = []
        for lc in await self.orgs.lcs_under(mf_id):
            groups = groups_by_lc.get(lc.id, [])
            students = {sid for g in groups for sid in (g.students or [])}
            revenue = round(sum(len(g.students or []) * fee_per_student(g, start, end) for g in groups), 2)
            due = commission(len(students), revenue, settings)
            rows.append(
                {
                    "period": start.strftime("%Y-%m"),
                    "mf_code": lc.mf.code if lc.mf else None,
                    "master_franchisee": lc.mf.name if lc.mf else None,
                    "lc_code": lc.code,
                    "learning_center": lc.name,
                    "student_count": len(students),
                    "revenue": revenue,
                    "first_tier_students": due.first_tier_students,
                    "first_tier_commission": due.first_tier_commission,
                    "beyond_tier_students": due.beyond_tier_students,
                    "beyond_tier_commission": due.beyond_tier_commission,
                    "lc_to_mf_commission": due.lc_to_mf,
                    "mf_to_hq_commission": due.mf_to_hq,
                }
            )
        logger.info("Built royalties for %s: %d learning center(s)", start.strftime("%Y-%m"), len(rows))
        return pd.DataFrame(rows, columns=ROYALTY_COLUMNS)
