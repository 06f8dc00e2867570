from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.errors import BadRequestError, NotFoundError, PermissionDeniedError
from franchise_api.core.rbac import Principal, Tier
from franchise_api.db.models import LearningGroup, Product, SubProgram
from franchise_api.db.models.enums import CatalogStatus, StockReason, TeacherStatus
from franchise_api.repositories.catalog import ProgramRepository, SubProgramRepository
from franchise_api.repositories.learning import LearningGroupRepository
from franchise_api.repositories.people import StudentRepository, TeacherRepository
from franchise_api.schemas.commerce import StockAdjustmentResult
from franchise_api.schemas.common import Page
from franchise_api.schemas.learning import LearningGroupRead, LearningGroupWrite, ProductAssignment
from franchise_api.services.base import BaseService
from franchise_api.services.inventory import InventoryService, product_read
from franchise_api.services.scoping import active_lc_chain, ensure_in_scope, ensure_lc_owner, org_scope_clause
from franchise_api.services.visibility import program_visible, resolve_viewer, subprogram_visible

logger = logging.getLogger(__name__)


def _money(value) -> Optional[float]:
    return float(value) if value is not None else None


# PUBLIC_INTERFACE
def pricing_snapshot_for(sub_program: SubProgram) -> Dict[str, Any]:
    """Freeze a subprogram's price terms so later catalog edits do not reprice a running group."""
    return {
        "sub_program_id": sub_program.id,
        "pricing_model": sub_program.pricing_model,
        "course_price": _money(sub_program.course_price),
        "number_of_payments": sub_program.number_of_payments,
        "gap": sub_program.gap,
        "price_per_month": _money(sub_program.price_per_month),
        "price_per_session": _money(sub_program.price_per_session),
    }


class LearningGroupService(BaseService):
    """Learning groups belong to one LC and tie a visible program, an ACTIVE teacher and a roster together."""

    def __init__(self, session: AsyncSession, principal: Principal) -> None:
        super().__init__(session, principal)
        self.groups = LearningGroupRepository(session)
        self.programs = ProgramRepository(session)
        self.sub_programs = SubProgramRepository(session)
        self.teachers = TeacherRepository(session)
        self.students = StudentRepository(session)

    async def _get(self, group_id: int) -> LearningGroup:
        group = await self.groups.get_group(group_id)
        if group is None:
            raise NotFoundError("Learning group not found")
        return group

    # PUBLIC_INTERFACE
    async def list_groups(
        self,
        *,
        status: Optional[str],
        program_id: Optional[int],
        teacher_id: Optional[int],
        search: Optional[str],
        lc_id: Optional[int],
        mf_id: Optional[int],
        sort_by: Optional[str],
        sort_order: str,
        page: int,
        limit: int,
    ) -> Page[LearningGroupRead]:
        scope = await org_scope_clause(self.session, self.principal, LearningGroup, lc_id=lc_id, mf_id=mf_id)
        groups, total = await self.groups.list_groups(
            scope=scope,
            status=status,
            program_id=program_id,
            teacher_id=teacher_id,
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            limit=limit,
        )
        items = [LearningGroupRead.model_validate(g) for g in groups]
        return Page[LearningGroupRead].build(items, page=page, limit=limit, total=total)

    # PUBLIC_INTERFACE
    async def get_group(self, group_id: int) -> LearningGroupRead:
        group = await self._get(group_id)
        ensure_in_scope(self.principal, group)
        return LearningGroupRead.model_validate(group)

    async def _validated_fields(self, payload: LearningGroupWrite, lc_id: int) -> Dict[str, Any]:
        """Check catalog, teacher and roster references and return the column values to store."""
        viewer = await resolve_viewer(self.session, self.principal)

        program = await self.programs.get_program(payload.program_id)
        if (
            program is None
            or program.status != CatalogStatus.ACTIVE.value
            or not program_visible(viewer, program)
        ):
            raise BadRequestError("Invalid or inactive Program")

        sub_program = None
        if payload.sub_program_id is not None:
            sub_program = await self.sub_programs.get_subprogram(payload.sub_program_id)
            if (
                sub_program is None
                or sub_program.program_id != program.id
                or sub_program.status != CatalogStatus.ACTIVE.value
                or not subprogram_visible(viewer, sub_program, program)
            ):
                raise BadRequestError("Invalid or inactive SubProgram")

        teacher = await self.teachers.get_teacher(payload.teacher_id)
        if teacher is None or teacher.lc_id != lc_id or teacher.status != TeacherStatus.ACTIVE.value:
            raise BadRequestError("Invalid teacher or teacher does not belong to this Learning Center")

        roster: List[int] = list(dict.fromkeys(payload.students))
        if len(roster) > payload.max_students:
            raise BadRequestError(
                "Learning group is over capacity",
                details={"max_students": payload.max_students, "students": len(roster)},
            )
        known = await self.students.ids_in_lc(lc_id, roster)
        unknown = [sid for sid in roster if sid not in known]
        if unknown:
            raise BadRequestError(
                "Students must belong to this Learning Center", details={"student_ids": unknown}
            )

        data = payload.model_dump(exclude={"schedule", "students", "pricing_snapshot"})
        data["status"] = payload.status.value
        data["schedule"] = [slot.model_dump() for slot in payload.schedule]
        data["students"] = roster
        if payload.pricing_snapshot is not None:
            data["pricing_snapshot"] = payload.pricing_snapshot
        elif sub_program is not None:
            data["pricing_snapshot"] = pricing_snapshot_for(sub_program)
        else:
            data["pricing_snapshot"] = None
        return data

    # PUBLIC_INTERFACE
    async def create_group(self, payload: LearningGroupWrite) -> LearningGroupRead:
        if self.principal.tier != Tier.LC:
            raise PermissionDeniedError("Only LC users can create learning groups")
        chain = await active_lc_chain(self.session, self.principal)
        data = await self._validated_fields(payload, chain["lc_id"])

        group = LearningGroup(**data, **chain)
        await self.groups.add(group)
        await self.groups.commit()
        logger.info("Created learning group %s at LC %s", group.id, chain["lc_id"])
        return LearningGroupRead.model_validate(await self.groups.refetch(LearningGroup, group.id))

    # PUBLIC_INTERFACE
    async def update_group(self, group_id: int, payload: LearningGroupWrite) -> LearningGroupRead:
        group = await self._get(group_id)
        ensure_lc_owner(self.principal, group, "update learning groups")
        data = await self._validated_fields(payload, group.lc_id)
        # keep the enrolled price terms unless the caller sent new ones or switched subprogram
        if (
            payload.pricing_snapshot is None
            and payload.sub_program_id == group.sub_program_id
            and group.pricing_snapshot is not None
        ):
            data["pricing_snapshot"] = group.pricing_snapshot

        for field, value in data.items():
            setattr(group, field, value)
        await self.groups.commit()
        logger.info("Updated learning group %s", group.id)
        return LearningGroupRead.model_validate(await self.groups.refetch(LearningGroup, group.id))

    # PUBLIC_INTERFACE
    async def delete_group(self, group_id: int) -> None:
        group = await self._get(group_id)
        ensure_lc_owner(self.principal, group, "delete learning groups")
        await self.groups.delete(group)
        await self.groups.commit()
        logger.info("Deleted learning group %s", group_id)

    # PUBLIC_INTERFACE
    async def assign_product(self, group_id: int, payload: ProductAssignment) -> StockAdjustmentResult:
        """Hand a product to a student on the roster, taking it out of stock."""
        group = await self._get(group_id)
        ensure_lc_owner(self.principal, group, "assign products")
        if payload.student_id not in (group.students or []):
            raise BadRequestError("Student is not a member of this learning group")

        inventory = InventoryService(self.session, self.principal)
        product = await inventory.products.get_product(payload.product_id)
        if product is None or not product.is_active:
            raise BadRequestError("Invalid or inactive Product")

        changed, result = await inventory.reduce_stock(
            [(payload.product_id, payload.quantity)],
            reason=StockReason.STUDENT_ASSIGNMENT,
            reference_id=str(payload.student_id),
            notes=payload.notes or f"Product assigned to student in learning group: {group.name}",
        )
        await self.groups.commit()
        logger.info(
            "Assigned %s x product %s to student %s in group %s",
            payload.quantity,
            payload.product_id,
            payload.student_id,
            group.id,
        )
        applied = [product_read(await inventory.products.refetch(Product, p.id)) for p in changed]
        return StockAdjustmentResult(applied=applied, warnings=result.warnings)
