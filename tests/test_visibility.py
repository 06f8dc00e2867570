from types import SimpleNamespace

from franchise_api.core.rbac import Tier
from franchise_api.services.visibility import Viewer, program_visible, subprogram_visible


def _program(visibility, mfs=()):
    return SimpleNamespace(visibility=visibility, shared_with_mfs=list(mfs))


def _sub(visibility, mfs=(), lcs=(), owner=None):
    return SimpleNamespace(
        visibility=visibility, shared_with_mfs=list(mfs), shared_with_lcs=list(lcs), owner_mf_id=owner
    )


HQ = Viewer(tier=Tier.HQ)
MF1 = Viewer(tier=Tier.MF, mf_id=1)
MF2 = Viewer(tier=Tier.MF, mf_id=2)
LC10 = Viewer(tier=Tier.LC, mf_id=1, lc_id=10)
TT = Viewer(tier=Tier.TT)


def test_private_program_is_hq_only():
    program = _program("PRIVATE")
    assert program_visible(HQ, program)
    assert not any(program_visible(v, program) for v in (MF1, LC10, TT))


def test_shared_program_reaches_listed_mf_and_its_lcs():
    program = _program("SHARED", mfs=[1])
    assert program_visible(MF1, program)
    assert program_visible(LC10, program)
    assert not program_visible(MF2, program)
    assert not program_visible(TT, program)


def test_public_program_is_visible_to_everyone():
    program = _program("PUBLIC")
    assert all(program_visible(v, program) for v in (HQ, MF1, MF2, LC10, TT))


def test_subprogram_needs_visible_parent():
    hidden_parent = _program("PRIVATE")
    sub = _sub("PUBLIC")
    assert subprogram_visible(HQ, sub, hidden_parent)
    assert not subprogram_visible(MF1, sub, hidden_parent)
    assert not subprogram_visible(TT, sub, hidden_parent)


def test_subprogram_shared_with_lc_only():
    parent = _program("PUBLIC")
    sub = _sub("SHARED", lcs=[10])
    assert subprogram_visible(LC10, sub, parent)
    assert not subprogram_visible(Viewer(tier=Tier.LC, mf_id=2, lc_id=11), sub, parent)
    assert not subprogram_visible(MF2, sub, parent)
    assert not subprogram_visible(TT, sub, parent)


def test_subprogram_shared_with_mf_reaches_its_lcs():
    parent = _program("SHARED", mfs=[1])
    sub = _sub("SHARED", mfs=[1])
    assert subprogram_visible(MF1, sub, parent)
    assert subprogram_visible(LC10, sub, parent)


def test_mf_always_sees_its_own_subprograms():
    sub = _sub("PRIVATE", owner=2)
    assert subprogram_visible(MF2, sub, _program("PRIVATE"))
    assert not subprogram_visible(MF1, sub, _program("PUBLIC"))


def test_tt_sees_only_public_pairs():
    assert subprogram_visible(TT, _sub("PUBLIC"), _program("PUBLIC"))
    assert not subprogram_visible(TT, _sub("SHARED", mfs=[1]), _program("PUBLIC"))
