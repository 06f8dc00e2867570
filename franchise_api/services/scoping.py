"""
Organization-scope filters for records that carry the HQ/MF/LC chain
(students, teachers, learning groups, orders).

HQ sees everything, an MF sees rows whose ``mf_id`` is its own (which includes
every LC under it), and an LC sees rows whose ``lc_id`` is its own.
"""
from __future__ import annotations

from typing import Any, List, Optional

from sqlalchemy import ColumnElement, and_
from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.errors import BadRequestError, PermissionDeniedError
from franchise_api.core.rbac import Principal, Tier
from franchise_api.db.models.enums import AccountStatus
from franchise_api.repositories.organization import OrganizationRepository


def _require_org_ids(principal: Principal) -> None:
    if principal.tier == Tier.MF and principal.mf_id is None:
        raise BadRequestError("MF user missing organizational information")
    if principal.tier == Tier.LC and principal.lc_id is None:
        raise BadRequestError("LC user missing organizational information")


# PUBLIC_INTERFACE
async def org_scope_clause(
    session: AsyncSession,
    principal: Principal,
    model,
    *,
    lc_id: Optional[int] = None,
    mf_id: Optional[int] = None,
) -> Optional[ColumnElement[bool]]:
    """
    Build the WHERE clause limiting ``model`` rows to the principal's scope.

    ``lc_id``/``mf_id`` are optional narrowing filters from the query string;
    they are honored only inside the principal's own scope.
    """
    _require_org_ids(principal)
    terms: List[ColumnElement[bool]] = []

    if principal.tier == Tier.HQ:
        pass
    elif principal.tier == Tier.MF:
        if mf_id is not None and mf_id != principal.mf_id:
            raise PermissionDeniedError("Access denied to requested MF")
        if lc_id is not None:
            lc = await OrganizationRepository(session).get_lc(lc_id)
            if lc is None or lc.mf_id != principal.mf_id:
                raise PermissionDeniedError("Access denied to requested LC")
        terms.append(model.mf_id == principal.mf_id)
    elif principal.tier == Tier.LC:
        if lc_id is not None and lc_id != principal.lc_id:
            raise PermissionDeniedError("Access denied to requested LC")
        if mf_id is not None and mf_id != principal.mf_id:
            raise PermissionDeniedError("Access denied to requested MF")
        terms.append(model.lc_id == principal.lc_id)
    else:
        raise PermissionDeniedError("Insufficient permissions")

    if lc_id is not None:
        terms.append(model.lc_id == lc_id)
    if mf_id is not None:
        terms.append(model.mf_id == mf_id)
    if not terms:
        return None
    return and_(*terms)


# PUBLIC_INTERFACE
def ensure_in_scope(principal: Principal, record: Any) -> None:
    """Raise PermissionDeniedError unless the record lies inside the principal's scope."""
    if principal.tier == Tier.HQ:
        return
    if principal.tier == Tier.MF and record.mf_id is not None and record.mf_id == principal.mf_id:
        return
    if principal.tier == Tier.LC and record.lc_id is not None and record.lc_id == principal.lc_id:
        return
    raise PermissionDeniedError("Access denied")


# PUBLIC_INTERFACE
def ensure_lc_owner(principal: Principal, record: Any, action: str) -> None:
    """Only users of the Learning Center that owns a record may change it."""
    if principal.tier != Tier.LC:
        raise PermissionDeniedError(f"Only LC users can {action}")
    _require_org_ids(principal)
    if record.lc_id != principal.lc_id:
        raise PermissionDeniedError("Access denied")


# PUBLIC_INTERFACE
async def active_lc_chain(session: AsyncSession, principal: Principal) -> dict:
    """
    Return ``{"lc_id", "mf_id", "hq_id"}`` for the calling LC user after checking
    that the LC, its MF and the HQ are all ACTIVE.
    """
    _require_org_ids(principal)
    orgs = OrganizationRepository(session)
    lc = await orgs.get_lc(principal.lc_id)
    if lc is None or lc.status != AccountStatus.ACTIVE.value:
        raise BadRequestError("Invalid or inactive Learning Center")
    mf = lc.mf
    if mf is None or mf.status != AccountStatus.ACTIVE.value:
        raise BadRequestError("Invalid or inactive Master Franchisee")
    hq = mf.hq
    if hq is None or hq.status != AccountStatus.ACTIVE.value:
        raise BadRequestError("Invalid or inactive HQ")
    return {"lc_id": lc.id, "mf_id": mf.id, "hq_id": hq.id}
