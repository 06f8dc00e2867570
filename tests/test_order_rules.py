from types import SimpleNamespace

from franchise_api.core.rbac import Principal, Role
from franchise_api.db.models.enums import OrderStatus
from franchise_api.services.orders import TRANSITIONS, next_order_number, order_roles


def test_next_order_number():
    assert next_order_number(2026, None) == "ORD-2026-00001"
    assert next_order_number(2026, "ORD-2026-00041") == "ORD-2026-00042"
    assert next_order_number(2026, "garbage") == "ORD-2026-00001"


def test_order_roles():
    lc_order = SimpleNamespace(lc_id=10, mf_id=1)
    mf_order = SimpleNamespace(lc_id=None, mf_id=1)

    hq = Principal(user_id=1, email="a@x.io", role=Role.HQ_ADMIN, hq_id=1)
    mf = Principal(user_id=2, email="b@x.io", role=Role.MF_ADMIN, hq_id=1, mf_id=1)
    lc = Principal(user_id=3, email="c@x.io", role=Role.LC_STAFF, hq_id=1, mf_id=1, lc_id=10)
    other_lc = Principal(user_id=4, email="d@x.io", role=Role.LC_ADMIN, hq_id=1, mf_id=1, lc_id=11)

    assert order_roles(hq, lc_order) == {"hq"}
    assert order_roles(mf, lc_order) == {"mf"}
    assert order_roles(mf, mf_order) == {"mf", "placer"}
    assert order_roles(lc, lc_order) == {"lc", "placer"}
    assert order_roles(other_lc, lc_order) == frozenset()


def test_terminal_statuses_have_no_exits():
    for current, _ in TRANSITIONS:
        assert current not in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)
    assert (OrderStatus.SHIPPED, OrderStatus.CANCELLED) not in TRANSITIONS
