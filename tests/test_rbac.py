from franchise_api.core.rbac import Principal, Role, Tier, can_access_account, has_permission, navigation_for


def _p(role, **ids):
    return Principal(user_id=1, email="u@example.com", role=role, **ids)


def test_role_tier_and_admin_flag():
    assert Role.MF_STAFF.tier == Tier.MF
    assert Role.LC_ADMIN.is_admin
    assert not Role.TT_STAFF.is_admin


def test_has_permission_follows_rank():
    assert has_permission(Role.HQ_ADMIN, Role.LC_ADMIN)
    assert has_permission(Role.MF_STAFF, Role.MF_STAFF)
    assert not has_permission(Role.LC_ADMIN, Role.MF_STAFF)
    assert not has_permission(Role.TT_ADMIN, Role.LC_STAFF)


def test_hq_reaches_every_account():
    hq = _p(Role.HQ_STAFF, hq_id=1)
    for tier in Tier:
        assert can_access_account(hq, tier, 99)


def test_mf_reaches_itself_and_its_learning_centers():
    mf = _p(Role.MF_ADMIN, hq_id=1, mf_id=5)
    assert can_access_account(mf, Tier.MF, 5)
    assert not can_access_account(mf, Tier.MF, 6)
    assert can_access_account(mf, Tier.LC, 40, parent_mf_id=5)
    assert not can_access_account(mf, Tier.LC, 41, parent_mf_id=6)
    assert not can_access_account(mf, Tier.HQ, 1)


def test_lc_and_tt_reach_only_themselves():
    lc = _p(Role.LC_ADMIN, mf_id=5, lc_id=40)
    assert can_access_account(lc, Tier.LC, 40)
    assert not can_access_account(lc, Tier.LC, 41)
    assert not can_access_account(lc, Tier.MF, 5)

    tt = _p(Role.TT_STAFF, hq_id=1, tt_id=3)
    assert can_access_account(tt, Tier.TT, 3)
    assert not can_access_account(tt, Tier.TT, 4)


def test_navigation_is_gated_by_tier():
    hq_routes = [item["href"] for item in navigation_for(Tier.HQ)]
    assert "/accounts" in hq_routes and "/reports/royalties" in hq_routes

    tt_routes = [item["href"] for item in navigation_for(Tier.TT)]
    assert tt_routes == ["/dashboard", "/trainings"]

    lc_items = {item["href"]: item for item in navigation_for(Tier.LC)}
    assert "/accounts" not in lc_items
    assert lc_items["/programs"]["scope"] == "Programs visible based on parent MF sharing"
