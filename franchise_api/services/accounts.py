from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.errors import BadRequestError, ConflictError, NotFoundError, PermissionDeniedError
from franchise_api.core.rbac import Principal, Tier, can_access_account
from franchise_api.db.models import HQ, LearningCenter, MasterFranchisee, TeacherTrainer
from franchise_api.db.models.enums import AccountStatus
from franchise_api.repositories.organization import OrganizationRepository
from franchise_api.schemas.accounts import (
    AccountCreate,
    AccountUpdate,
    HQRead,
    LCCreate,
    LCRead,
    MFCreate,
    MFRead,
    TTCreate,
    TTRead,
)
from franchise_api.schemas.common import Page
from franchise_api.services.base import BaseService

logger = logging.getLogger(__name__)

_ACCOUNT_FIELDS = ("name", "email", "phone", "address", "city", "state", "country", "postal_code")


def _account_kwargs(payload: AccountCreate) -> dict:
    data = {f: getattr(payload, f) for f in _ACCOUNT_FIELDS}
    data["code"] = payload.code
    return data


def _apply_update(entity, payload: AccountUpdate) -> None:
    for field, value in payload.model_dump(exclude_unset=True).items():
        if field == "status" and value is not None:
            value = AccountStatus(value).value
        setattr(entity, field, value)


class AccountService(BaseService):
    """
    Provisioning and listing of HQ, Master Franchisee, Learning Center and
    Teacher Trainer accounts, scoped to what the principal can reach.
    """

    def __init__(self, session: AsyncSession, principal: Principal) -> None:
        super().__init__(session, principal)
        self.orgs = OrganizationRepository(session)

    async def _ensure_code_free(self, model, code: str) -> None:
        if await self.orgs.code_taken(model, code):
            raise ConflictError(f"Account code '{code}' already exists")

    # HQ
    # PUBLIC_INTERFACE
    async def list_hqs(self) -> List[HQRead]:
        hqs = await self.orgs.list_hqs()
        ids = [h.id for h in hqs]
        users = await self.orgs.user_counts("hq_id", ids)
        mfs = await self.orgs.mf_counts_by_hq(ids)
        tts = await self.orgs.tt_counts_by_hq(ids)
        return [
            HQRead.model_validate(h).model_copy(
                update={"user_count": users.get(h.id, 0), "mf_count": mfs.get(h.id, 0), "tt_count": tts.get(h.id, 0)}
            )
            for h in hqs
        ]

    # PUBLIC_INTERFACE
    async def create_hq(self, payload: AccountCreate) -> HQRead:
        await self._ensure_code_free(HQ, payload.code)
        hq = HQ(**_account_kwargs(payload))
        await self.orgs.add(hq)
        await self.orgs.commit()
        logger.info("Created HQ %s (%s)", hq.id, hq.code)
        return HQRead.model_validate(await self.orgs.refetch(HQ, hq.id))

    # Master Franchisees
    # PUBLIC_INTERFACE
    async def list_mfs(self, *, hq_id: Optional[int] = None) -> List[MFRead]:
        """HQ users see every MF (optionally filtered by HQ); MF users see only their own."""
        p = self.principal
        if p.tier == Tier.MF:
            if p.mf_id is None:
                raise BadRequestError("MF user missing organizational information")
            mfs = await self.orgs.list_mfs(mf_id=p.mf_id)
        elif p.tier == Tier.HQ:
            mfs = await self.orgs.list_mfs(hq_id=hq_id)
        else:
            raise PermissionDeniedError("Insufficient permissions")
        ids = [m.id for m in mfs]
        users = await self.orgs.user_counts("mf_id", ids)
        lcs = await self.orgs.lc_counts_by_mf(ids)
        return [
            MFRead.model_validate(m).model_copy(
                update={"user_count": users.get(m.id, 0), "lc_count": lcs.get(m.id, 0)}
            )
            for m in mfs
        ]

    # PUBLIC_INTERFACE
    async def create_mf(self, payload: MFCreate) -> MFRead:
        if self.principal.tier != Tier.HQ:
            raise PermissionDeniedError("Only HQ users can create Master Franchisee accounts")
        hq_id = payload.hq_id or self.principal.hq_id
        hq = await self.orgs.get_hq(hq_id) if hq_id else None
        if hq is None or hq.status != AccountStatus.ACTIVE.value:
            raise BadRequestError("Invalid or inactive HQ")
        await self._ensure_code_free(MasterFranchisee, payload.code)
        mf = MasterFranchisee(hq_id=hq.id, **_account_kwargs(payload))
        await self.orgs.add(mf)
        await self.orgs.commit()
        logger.info("Created MF %s (%s) under HQ %s", mf.id, mf.code, hq.id)
        return MFRead.model_validate(await self.orgs.refetch(MasterFranchisee, mf.id))

    # PUBLIC_INTERFACE
    async def update_mf(self, mf_id: int, payload: AccountUpdate) -> MFRead:
        if self.principal.tier != Tier.HQ:
            raise PermissionDeniedError("Only HQ users can update Master Franchisee accounts")
        mf = await self.orgs.get_mf(mf_id)
        if mf is None:
            raise NotFoundError("Master Franchisee not found")
        _apply_update(mf, payload)
        await self.orgs.commit()
        logger.info("Updated MF %s", mf.id)
        return MFRead.model_validate(await self.orgs.refetch(MasterFranchisee, mf.id))

    # Learning Centers
    # PUBLIC_INTERFACE
    async def list_lcs(
        self, *, mf_id: Optional[int], search: Optional[str], page: int, limit: int
    ) -> Page[LCRead]:
        """
        HQ sees every LC (optionally one MF's), an MF sees its own LCs, an LC sees
        itself and a TT sees none.
        """
        p = self.principal
        lc_filter: Optional[int] = None
        if p.tier == Tier.TT:
            return Page[LCRead].build([], page=page, limit=limit, total=0)
        if p.tier == Tier.MF:
            if p.mf_id is None:
                raise BadRequestError("MF user missing organizational information")
            mf_id = p.mf_id
        elif p.tier == Tier.LC:
            if p.lc_id is None:
                raise BadRequestError("LC user missing organizational information")
            mf_id, lc_filter = None, p.lc_id
        lcs, total = await self.orgs.list_lcs(
            mf_id=mf_id, lc_id=lc_filter, search=search, page=page, limit=limit
        )
        users = await self.orgs.user_counts("lc_id", [lc.id for lc in lcs])
        items = [
            LCRead.model_validate(lc).model_copy(update={"user_count": users.get(lc.id, 0)})
            for lc in lcs
        ]
        return Page[LCRead].build(items, page=page, limit=limit, total=total)

    # PUBLIC_INTERFACE
    async def create_lc(self, payload: LCCreate) -> LCRead:
        p = self.principal
        if p.tier == Tier.HQ:
            if payload.mf_id is None:
                raise BadRequestError("mf_id is required")
            mf_id = payload.mf_id
        elif p.tier == Tier.MF:
            mf_id = payload.mf_id or p.mf_id
            if mf_id != p.mf_id:
                raise PermissionDeniedError("Access denied to requested MF")
        else:
            raise PermissionDeniedError("Only HQ and MF users can create Learning Centers")
        mf = await self.orgs.get_mf(mf_id) if mf_id else None
        if mf is None or mf.status != AccountStatus.ACTIVE.value:
            raise BadRequestError("Invalid or inactive Master Franchisee")
        await self._ensure_code_free(LearningCenter, payload.code)
        lc = LearningCenter(mf_id=mf.id, **_account_kwargs(payload))
        await self.orgs.add(lc)
        await self.orgs.commit()
        logger.info("Created LC %s (%s) under MF %s", lc.id, lc.code, mf.id)
        return LCRead.model_validate(await self.orgs.refetch(LearningCenter, lc.id))

    # PUBLIC_INTERFACE
    async def update_lc(self, lc_id: int, payload: AccountUpdate) -> LCRead:
        lc = await self.orgs.get_lc(lc_id)
        if lc is None:
            raise NotFoundError("Learning Center not found")
        if self.principal.tier not in (Tier.HQ, Tier.MF) or not can_access_account(
            self.principal, Tier.LC, lc.id, lc.mf_id
        ):
            raise PermissionDeniedError("Access denied")
        _apply_update(lc, payload)
        await self.orgs.commit()
        logger.info("Updated LC %s", lc.id)
        return LCRead.model_validate(await self.orgs.refetch(LearningCenter, lc.id))

    # Teacher Trainers
    # PUBLIC_INTERFACE
    async def list_tts(self) -> List[TTRead]:
        p = self.principal
        if p.tier == Tier.HQ:
            tts = await self.orgs.list_tts()
        elif p.tier == Tier.TT:
            tts = await self.orgs.list_tts(tt_id=p.tt_id) if p.tt_id else []
        else:
            raise PermissionDeniedError("Insufficient permissions")
        users = await self.orgs.user_counts("tt_id", [t.id for t in tts])
        return [
            TTRead.model_validate(t).model_copy(update={"user_count": users.get(t.id, 0)})
            for t in tts
        ]

    # PUBLIC_INTERFACE
    async def create_tt(self, payload: TTCreate) -> TTRead:
        if self.principal.tier != Tier.HQ:
            raise PermissionDeniedError("Only HQ users can create Teacher Trainer accounts")
        hq_id = payload.hq_id or self.principal.hq_id
        hq = await self.orgs.get_hq(hq_id) if hq_id else None
        if hq is None or hq.status != AccountStatus.ACTIVE.value:
            raise BadRequestError("Invalid or inactive HQ")
        await self._ensure_code_free(TeacherTrainer, payload.code)
        tt = TeacherTrainer(hq_id=hq.id, **_account_kwargs(payload))
        await self.orgs.add(tt)
        await self.orgs.commit()
        logger.info("Created TT %s (%s) under HQ %s", tt.id, tt.code, hq.id)
        return TTRead.model_validate(await self.orgs.refetch(TeacherTrainer, tt.id))
