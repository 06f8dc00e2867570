"""The SQL visibility clauses must select exactly the rows the predicates accept."""
import asyncio
import itertools

import pytest
from sqlalchemy import select

from franchise_api.core.rbac import Tier
from franchise_api.db.models import LearningCenter, MasterFranchisee, Program, SubProgram
from franchise_api.services.visibility import (
    Viewer,
    program_visibility_clause,
    program_visible,
    subprogram_visibility_clause,
    subprogram_visible,
)

VISIBILITIES = ("PRIVATE", "SHARED", "PUBLIC")

# viewer name -> how to build it from the organization ids
VIEWERS = {
    "hq": lambda o: Viewer(tier=Tier.HQ),
    "mf": lambda o: Viewer(tier=Tier.MF, mf_id=o["mf"]),
    "other_mf": lambda o: Viewer(tier=Tier.MF, mf_id=o["mf2"]),
    "lc": lambda o: Viewer(tier=Tier.LC, mf_id=o["mf"], lc_id=o["lc"]),
    "sibling_lc": lambda o: Viewer(tier=Tier.LC, mf_id=o["mf"], lc_id=o["lc3"]),
    "lc_of_other_mf": lambda o: Viewer(tier=Tier.LC, mf_id=o["mf2"], lc_id=o["lc2"]),
    "tt": lambda o: Viewer(tier=Tier.TT),
}


async def _build_catalog(maker, ids):
    """Every program visibility x allow-list, each with every subprogram visibility x share x owner."""
    async with maker() as session:
        mf2 = MasterFranchisee(name="MF West", code="MF002", hq_id=ids["hq"])
        session.add(mf2)
        await session.flush()
        lc2 = LearningCenter(name="LC West", code="LC002", mf_id=mf2.id)
        lc3 = LearningCenter(name="LC Uptown", code="LC003", mf_id=ids["mf"])
        session.add_all([lc2, lc3])
        await session.flush()
        orgs = {**ids, "mf2": mf2.id, "lc2": lc2.id, "lc3": lc3.id}

        program_lists = {"none": [], "mf": [orgs["mf"]], "other_mf": [orgs["mf2"]]}
        sub_shares = {
            "none": ([], []),
            "mf": ([orgs["mf"]], []),
            "other_mf": ([orgs["mf2"]], []),
            "lc": ([], [orgs["lc"]]),
            "lc_of_other_mf": ([], [orgs["lc2"]]),
        }
        owners = {"hq": None, "mf": orgs["mf"], "other_mf": orgs["mf2"]}

        for p_vis, p_list in itertools.product(VISIBILITIES, program_lists):
            program = Program(
                name=f"{p_vis}-{p_list}",
                description="matrix",
                duration=4,
                max_students=10,
                hours=8,
                lesson_length=60,
                kind="ACADEMIC",
                visibility=p_vis,
            )
            program.set_shared_with_mfs(program_lists[p_list])
            session.add(program)
            await session.flush()
            for s_vis, share, owner in itertools.product(VISIBILITIES, sub_shares, owners):
                sub = SubProgram(
                    program_id=program.id,
                    name=f"{s_vis}-{share}-{owner}",
                    description="matrix",
                    duration=4,
                    pricing_model="PER_COURSE",
                    course_price=100,
                    visibility=s_vis,
                    owner_mf_id=owners[owner],
                )
                mfs, lcs = sub_shares[share]
                sub.set_shared_with_mfs(mfs)
                sub.set_shared_with_lcs(lcs)
                session.add(sub)
        await session.commit()
        return orgs


async def _visible_ids(maker, viewer):
    async with maker() as session:
        programs = list(await session.scalars(select(Program)))
        subs = list(await session.scalars(select(SubProgram)))

        program_stmt = select(Program.id)
        clause = program_visibility_clause(viewer)
        if clause is not None:
            program_stmt = program_stmt.where(clause)
        sub_stmt = select(SubProgram.id)
        clause = subprogram_visibility_clause(viewer)
        if clause is not None:
            sub_stmt = sub_stmt.where(clause)

        return {
            "programs": (
                set(await session.scalars(program_stmt)),
                {p.id for p in programs if program_visible(viewer, p)},
            ),
            "subprograms": (
                set(await session.scalars(sub_stmt)),
                {s.id for s in subs if subprogram_visible(viewer, s, s.program)},
            ),
            "total": len(subs),
        }


@pytest.mark.parametrize("viewer_name", sorted(VIEWERS))
def test_list_clauses_match_predicates(viewer_name, ids, session_maker):
    async def scenario():
        orgs = await _build_catalog(session_maker, ids)
        return await _visible_ids(session_maker, VIEWERS[viewer_name](orgs))

    found = asyncio.run(scenario())
    assert found["total"] == 9 * 3 * 5 * 3

    queried, accepted = found["programs"]
    assert queried == accepted
    queried, accepted = found["subprograms"]
    assert queried == accepted

    if viewer_name == "hq":
        assert len(queried) == found["total"]
    else:
        assert 0 < len(queried) < found["total"]
