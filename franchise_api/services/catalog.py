from __future__ import annotations

import logging
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.errors import BadRequestError, ConflictError, NotFoundError, PermissionDeniedError
from franchise_api.core.rbac import Principal, Tier
from franchise_api.db.models import Program, SubProgram
from franchise_api.repositories.catalog import ProgramRepository, SubProgramRepository
from franchise_api.repositories.organization import OrganizationRepository
from franchise_api.schemas.catalog import (
    ProgramCreate,
    ProgramDetail,
    ProgramRead,
    ProgramUpdate,
    SubProgramCreate,
    SubProgramRead,
    SubProgramUpdate,
)
from franchise_api.schemas.common import Page
from franchise_api.services.base import BaseService
from franchise_api.services.visibility import (
    program_visibility_clause,
    program_visible,
    resolve_viewer,
    subprogram_visibility_clause,
    subprogram_visible,
)

logger = logging.getLogger(__name__)


def _enum_value(value):
    return value.value if hasattr(value, "value") else value


class ProgramService(BaseService):
    """Program catalog: HQ authors programs, everyone else sees what is shared with them."""

    def __init__(self, session: AsyncSession, principal: Principal) -> None:
        super().__init__(session, principal)
        self.programs = ProgramRepository(session)
        self.sub_programs = SubProgramRepository(session)
        self.orgs = OrganizationRepository(session)

    def _require_hq(self, action: str) -> None:
        if self.principal.tier != Tier.HQ:
            raise PermissionDeniedError(f"Access denied. Only HQ can {action} programs.")

    async def _validate_mf_ids(self, mf_ids: Iterable[int]) -> None:
        wanted = set(mf_ids)
        missing = wanted - await self.orgs.existing_mf_ids(sorted(wanted))
        if missing:
            raise BadRequestError("Unknown Master Franchisee ids", details={"mf_ids": sorted(missing)})

    async def _get(self, program_id: int) -> Program:
        program = await self.programs.get_program(program_id)
        if program is None:
            raise NotFoundError("Program not found")
        return program

    # PUBLIC_INTERFACE
    async def list_programs(
        self,
        *,
        search: Optional[str],
        status: Optional[str],
        category: Optional[str],
        kind: Optional[str],
        sort_by: Optional[str],
        sort_order: str,
        page: int,
        limit: int,
    ) -> Page[ProgramRead]:
        viewer = await resolve_viewer(self.session, self.principal)
        programs, total = await self.programs.list_programs(
            visible=program_visibility_clause(viewer),
            search=search,
            status=status,
            category=category,
            kind=kind,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            limit=limit,
        )
        counts = await self.programs.subprogram_counts([p.id for p in programs])
        items = [
            ProgramRead.model_validate(p).model_copy(update={"sub_program_count": counts.get(p.id, 0)})
            for p in programs
        ]
        return Page[ProgramRead].build(items, page=page, limit=limit, total=total)

    # PUBLIC_INTERFACE
    async def get_program(self, program_id: int) -> ProgramDetail:
        """Program detail with only the subprograms the caller may see."""
        program = await self._get(program_id)
        viewer = await resolve_viewer(self.session, self.principal)
        if not program_visible(viewer, program):
            raise PermissionDeniedError("Access denied")
        return await self._detail(program, viewer)

    async def _detail(self, program: Program, viewer) -> ProgramDetail:
        subs = await self.sub_programs.list_for_program(program.id, subprogram_visibility_clause(viewer))
        counts = await self.programs.subprogram_counts([program.id])
        read = ProgramRead.model_validate(program).model_copy(
            update={"sub_program_count": counts.get(program.id, 0)}
        )
        return ProgramDetail(
            **read.model_dump(),
            sub_programs=[SubProgramRead.model_validate(s) for s in subs],
        )

    # PUBLIC_INTERFACE
    async def create_program(self, payload: ProgramCreate) -> ProgramDetail:
        self._require_hq("create")
        if await self.programs.name_taken(payload.name):
            raise ConflictError("Program with this name already exists")
        await self._validate_mf_ids(payload.shared_with_mfs)

        data = payload.model_dump(exclude={"shared_with_mfs"})
        for key in ("kind", "status", "visibility"):
            data[key] = _enum_value(data[key])
        program = Program(**data, created_by=self.principal.user_id)
        program.set_shared_with_mfs(payload.shared_with_mfs)
        await self.programs.add(program)
        await self.programs.commit()
        logger.info("Created program %s (%s, %s)", program.id, program.name, program.visibility)
        return await self.get_program(program.id)

    # PUBLIC_INTERFACE
    async def update_program(self, program_id: int, payload: ProgramUpdate) -> ProgramDetail:
        self._require_hq("update")
        program = await self._get(program_id)
        data = payload.model_dump(exclude_unset=True)

        if data.get("name") and await self.programs.name_taken(data["name"], exclude_id=program.id):
            raise ConflictError("Program with this name already exists")
        shared = data.pop("shared_with_mfs", None)
        if shared is not None:
            await self._validate_mf_ids(shared)
            program.set_shared_with_mfs(shared)

        for field, value in data.items():
            if value is None:
                continue
            setattr(program, field, _enum_value(value))
        await self.programs.commit()
        logger.info("Updated program %s", program.id)
        return await self.get_program(program.id)

    # PUBLIC_INTERFACE
    async def delete_program(self, program_id: int) -> None:
        self._require_hq("delete")
        program = await self._get(program_id)
        counts = await self.programs.subprogram_counts([program.id])
        if counts.get(program.id, 0):
            raise ConflictError(
                "Cannot delete program with existing subprograms. Please delete subprograms first."
            )
        if await self.programs.used_by_learning_groups(program.id):
            raise ConflictError("Cannot delete program used by learning groups")
        await self.programs.delete(program)
        await self.programs.commit()
        logger.info("Deleted program %s", program_id)


class SubProgramService(BaseService):
    """
    Subprogram catalog. HQ and MF users author subprograms; an MF may only build
    on programs shared with it and only edit subprograms it created.
    """

    def __init__(self, session: AsyncSession, principal: Principal) -> None:
        super().__init__(session, principal)
        self.programs = ProgramRepository(session)
        self.sub_programs = SubProgramRepository(session)
        self.orgs = OrganizationRepository(session)

    async def _get(self, sub_program_id: int) -> SubProgram:
        sub = await self.sub_programs.get_subprogram(sub_program_id)
        if sub is None:
            raise NotFoundError("Subprogram not found")
        return sub

    async def _validate_shares(self, mf_ids: Iterable[int], lc_ids: Iterable[int]) -> None:
        """MF authors may share only with their own MF and its LCs; HQ ids must exist."""
        mf_set, lc_set = set(mf_ids), set(lc_ids)
        if self.principal.tier == Tier.MF:
            own_lcs = await self.orgs.lc_ids_for_mf(self.principal.mf_id)
            if not mf_set <= {self.principal.mf_id} or not lc_set <= own_lcs:
                raise BadRequestError(
                    "You can only share subprograms with your own Master Franchisee and its Learning Centers"
                )
            return
        missing_mf = mf_set - await self.orgs.existing_mf_ids(sorted(mf_set))
        missing_lc = lc_set - await self.orgs.existing_lc_ids(sorted(lc_set))
        if missing_mf or missing_lc:
            raise BadRequestError(
                "Unknown share targets",
                details={"mf_ids": sorted(missing_mf), "lc_ids": sorted(missing_lc)},
            )

    def _ensure_can_modify(self, sub: SubProgram) -> None:
        p = self.principal
        if p.tier == Tier.HQ:
            return
        if p.tier == Tier.MF and p.mf_id is not None and sub.owner_mf_id == p.mf_id:
            return
        raise PermissionDeniedError(
            "Access denied. You can only modify subprograms created by your account."
        )

    # PUBLIC_INTERFACE
    async def list_subprograms(
        self,
        *,
        search: Optional[str],
        status: Optional[str],
        program_id: Optional[int],
        pricing_model: Optional[str],
        sort_by: Optional[str],
        sort_order: str,
        page: int,
        limit: int,
    ) -> Page[SubProgramRead]:
        viewer = await resolve_viewer(self.session, self.principal)
        subs, total = await self.sub_programs.list_subprograms(
            visible=subprogram_visibility_clause(viewer),
            search=search,
            status=status,
            program_id=program_id,
            pricing_model=pricing_model,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            limit=limit,
        )
        items = [SubProgramRead.model_validate(s) for s in subs]
        return Page[SubProgramRead].build(items, page=page, limit=limit, total=total)

    # PUBLIC_INTERFACE
    async def get_subprogram(self, sub_program_id: int) -> SubProgramRead:
        sub = await self._get(sub_program_id)
        viewer = await resolve_viewer(self.session, self.principal)
        if not subprogram_visible(viewer, sub, sub.program):
            raise PermissionDeniedError("Access denied")
        return SubProgramRead.model_validate(sub)

    # PUBLIC_INTERFACE
    async def create_subprogram(self, payload: SubProgramCreate) -> SubProgramRead:
        p = self.principal
        if p.tier not in (Tier.HQ, Tier.MF):
            raise PermissionDeniedError("Access denied. Only MF and HQ can create subprograms.")
        if p.tier == Tier.MF and p.mf_id is None:
            raise BadRequestError("MF user missing organizational information")

        program = await self.programs.get_program(payload.program_id)
        if program is None:
            raise NotFoundError("Program not found")
        if p.tier == Tier.MF:
            viewer = await resolve_viewer(self.session, p)
            if not program_visible(viewer, program):
                raise PermissionDeniedError(
                    "Access denied. You can only create subprograms for programs shared with your account."
                )
        await self._validate_shares(payload.shared_with_mfs, payload.shared_with_lcs)
        if await self.sub_programs.name_taken(program.id, payload.name):
            raise ConflictError("Subprogram with this name already exists in this program")

        data = payload.model_dump(exclude={"shared_with_mfs", "shared_with_lcs"})
        for key in ("pricing_model", "status", "visibility"):
            data[key] = _enum_value(data[key])
        sub = SubProgram(
            **data,
            created_by=p.user_id,
            owner_mf_id=p.mf_id if p.tier == Tier.MF else None,
        )
        sub.set_shared_with_mfs(payload.shared_with_mfs)
        sub.set_shared_with_lcs(payload.shared_with_lcs)
        await self.sub_programs.add(sub)
        await self.sub_programs.commit()
        logger.info("Created subprogram %s under program %s", sub.id, program.id)
        return SubProgramRead.model_validate(await self.sub_programs.refetch(SubProgram, sub.id))

    # PUBLIC_INTERFACE
    async def update_subprogram(self, sub_program_id: int, payload: SubProgramUpdate) -> SubProgramRead:
        sub = await self._get(sub_program_id)
        self._ensure_can_modify(sub)
        data = payload.model_dump(exclude_unset=True)

        if data.get("name") and await self.sub_programs.name_taken(sub.program_id, data["name"], exclude_id=sub.id):
            raise ConflictError("Subprogram with this name already exists in this program")
        mf_ids = data.pop("shared_with_mfs", None)
        lc_ids = data.pop("shared_with_lcs", None)
        if mf_ids is not None or lc_ids is not None:
            await self._validate_shares(mf_ids or [], lc_ids or [])
            if mf_ids is not None:
                sub.set_shared_with_mfs(mf_ids)
            if lc_ids is not None:
                sub.set_shared_with_lcs(lc_ids)

        nullable = {"number_of_payments", "gap", "price_per_month", "price_per_session"}
        for field, value in data.items():
            if value is None and field not in nullable:
                continue
            setattr(sub, field, _enum_value(value))
        await self.sub_programs.commit()
        logger.info("Updated subprogram %s", sub.id)
        return SubProgramRead.model_validate(await self.sub_programs.refetch(SubProgram, sub.id))

    # PUBLIC_INTERFACE
    async def delete_subprogram(self, sub_program_id: int) -> None:
        sub = await self._get(sub_program_id)
        self._ensure_can_modify(sub)
        if await self.sub_programs.used_by_learning_groups(sub.id):
            raise ConflictError("Cannot delete subprogram used by learning groups")
        await self.sub_programs.delete(sub)
        await self.sub_programs.commit()
        logger.info("Deleted subprogram %s", sub_program_id)
