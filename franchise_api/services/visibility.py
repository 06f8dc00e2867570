"""
Program and subprogram visibility.

Each rule exists twice: as a Python predicate for detail checks on a loaded row,
and as a SQL clause for list queries. The two forms must agree.

Rules:
  Program
    - HQ sees every program.
    - MF and LC see PUBLIC programs and SHARED programs whose MF allow-list holds
      their MF (an LC uses its parent MF).
    - TT sees PUBLIC programs only.
  SubProgram
    - HQ sees every subprogram.
    - MF sees subprograms it created, plus those whose program is visible to it
      and which are PUBLIC or SHARED with its MF.
    - LC sees subprograms whose program is visible to it and which are PUBLIC or
      SHARED with its MF or with the LC itself.
    - TT sees PUBLIC subprograms of PUBLIC programs.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import ColumnElement, and_, false, or_
from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.rbac import Principal, Tier
from franchise_api.db.models import (
    Program,
    ProgramMfShare,
    SubProgram,
    SubProgramLcShare,
    SubProgramMfShare,
)
from franchise_api.db.models.enums import Visibility
from franchise_api.repositories.organization import OrganizationRepository


@dataclass(frozen=True)
class Viewer:
    """Tier plus the MF and LC ids that catalog visibility is decided on."""
    tier: Tier
    mf_id: Optional[int] = None
    lc_id: Optional[int] = None


# PUBLIC_INTERFACE
async def resolve_viewer(session: AsyncSession, principal: Principal) -> Viewer:
    """
    Build the Viewer for a principal. An LC user whose token lacks the parent MF
    id gets it looked up from the Learning Center.
    """
    mf_id = principal.mf_id
    if principal.tier == Tier.LC and mf_id is None and principal.lc_id is not None:
        lc = await OrganizationRepository(session).get_lc(principal.lc_id)
        mf_id = lc.mf_id if lc else None
    return Viewer(tier=principal.tier, mf_id=mf_id, lc_id=principal.lc_id)


# PUBLIC_INTERFACE
def program_visible(viewer: Viewer, program: Program) -> bool:
    """Return True when the viewer may see the program."""
    if viewer.tier == Tier.HQ:
        return True
    if program.visibility == Visibility.PUBLIC.value:
        return True
    if viewer.tier == Tier.TT:
        return False
    return (
        program.visibility == Visibility.SHARED.value
        and viewer.mf_id is not None
        and viewer.mf_id in program.shared_with_mfs
    )


# PUBLIC_INTERFACE
def subprogram_visible(viewer: Viewer, sub_program: SubProgram, program: Program) -> bool:
    """Return True when the viewer may see the subprogram (``program`` is its parent)."""
    if viewer.tier == Tier.HQ:
        return True
    if viewer.tier == Tier.MF and viewer.mf_id is not None and sub_program.owner_mf_id == viewer.mf_id:
        return True
    if not program_visible(viewer, program):
        return False
    if sub_program.visibility == Visibility.PUBLIC.value:
        return True
    if viewer.tier == Tier.TT or sub_program.visibility != Visibility.SHARED.value:
        return False
    if viewer.mf_id is not None and viewer.mf_id in sub_program.shared_with_mfs:
        return True
    return viewer.tier == Tier.LC and viewer.lc_id is not None and viewer.lc_id in sub_program.shared_with_lcs


# PUBLIC_INTERFACE
def program_visibility_clause(viewer: Viewer) -> Optional[ColumnElement[bool]]:
    """SQL form of program_visible; None means no restriction."""
    if viewer.tier == Tier.HQ:
        return None
    public = Program.visibility == Visibility.PUBLIC.value
    if viewer.tier == Tier.TT or viewer.mf_id is None:
        return public
    shared = and_(
        Program.visibility == Visibility.SHARED.value,
        Program.mf_shares.any(ProgramMfShare.mf_id == viewer.mf_id),
    )
    return or_(public, shared)


# PUBLIC_INTERFACE
def subprogram_visibility_clause(viewer: Viewer) -> Optional[ColumnElement[bool]]:
    """SQL form of subprogram_visible; None means no restriction."""
    if viewer.tier == Tier.HQ:
        return None

    program_clause = program_visibility_clause(viewer)
    parent_visible = SubProgram.program.has(program_clause)
    public = SubProgram.visibility == Visibility.PUBLIC.value

    if viewer.tier == Tier.TT:
        return and_(parent_visible, public)

    share_terms = []
    if viewer.mf_id is not None:
        share_terms.append(SubProgram.mf_shares.any(SubProgramMfShare.mf_id == viewer.mf_id))
    if viewer.tier == Tier.LC and viewer.lc_id is not None:
        share_terms.append(SubProgram.lc_shares.any(SubProgramLcShare.lc_id == viewer.lc_id))
    shared = (
        and_(SubProgram.visibility == Visibility.SHARED.value, or_(*share_terms))
        if share_terms
        else false()
    )
    visible = and_(parent_visible, or_(public, shared))

    if viewer.tier == Tier.MF and viewer.mf_id is not None:
        return or_(SubProgram.owner_mf_id == viewer.mf_id, visible)
    return visible
