"""
Role-based access control primitives.

A user's role is one of ``{HQ,MF,LC,TT} x {ADMIN,STAFF}``. The role prefix is the
user's tier in the organization hierarchy (HQ -> MF -> LC, with TT hanging off HQ),
and each user carries the ids of the organizations it belongs to. Services receive
a ``Principal`` built from the authenticated user and decide visibility from it.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional


class Tier(str, Enum):
    """Organizational tier, ordered from the top of the hierarchy down."""
    HQ = "HQ"
    MF = "MF"
    LC = "LC"
    TT = "TT"


class Role(str, Enum):
    """User role; the prefix before the underscore is the tier."""
    HQ_ADMIN = "HQ_ADMIN"
    HQ_STAFF = "HQ_STAFF"
    MF_ADMIN = "MF_ADMIN"
    MF_STAFF = "MF_STAFF"
    LC_ADMIN = "LC_ADMIN"
    LC_STAFF = "LC_STAFF"
    TT_ADMIN = "TT_ADMIN"
    TT_STAFF = "TT_STAFF"

    @property
    def tier(self) -> Tier:
        return Tier(self.value.split("_", 1)[0])

    @property
    def is_admin(self) -> bool:
        return self.value.endswith("_ADMIN")


ROLE_RANK: Dict[Role, int] = {
    Role.HQ_ADMIN: 8,
    Role.HQ_STAFF: 7,
    Role.MF_ADMIN: 6,
    Role.MF_STAFF: 5,
    Role.LC_ADMIN: 4,
    Role.LC_STAFF: 3,
    Role.TT_ADMIN: 2,
    Role.TT_STAFF: 1,
}


@dataclass(frozen=True)
class Principal:
    """The authenticated caller: role plus the organization ids it belongs to."""
    user_id: int
    email: str
    role: Role
    hq_id: Optional[int] = None
    mf_id: Optional[int] = None
    lc_id: Optional[int] = None
    tt_id: Optional[int] = None

    @property
    def tier(self) -> Tier:
        return self.role.tier

    @property
    def is_admin(self) -> bool:
        return self.role.is_admin

    def label(self) -> str:
        """Short form used in log records."""
        return f"{self.role.value}:{self.user_id}"


# PUBLIC_INTERFACE
def has_permission(role: Role, required_role: Role) -> bool:
    """Return True when ``role`` ranks at or above ``required_role``."""
    return ROLE_RANK[role] >= ROLE_RANK[required_role]


# PUBLIC_INTERFACE
def can_access_account(
    principal: Principal,
    account_type: Tier,
    account_id: int,
    parent_mf_id: Optional[int] = None,
) -> bool:
    """
    Decide whether the principal may see or administer an organization.

    HQ users reach every account. MF users reach their own MF and any LC whose
    parent is their MF (``parent_mf_id``). LC and TT users reach only their own
    organization.
    """
    tier = principal.tier
    if tier == Tier.HQ:
        return True
    if tier == Tier.MF:
        if account_type == Tier.MF:
            return principal.mf_id == account_id
        if account_type == Tier.LC:
            return principal.mf_id is not None and principal.mf_id == parent_mf_id
        return False
    if tier == Tier.LC:
        return account_type == Tier.LC and principal.lc_id == account_id
    if tier == Tier.TT:
        return account_type == Tier.TT and principal.tt_id == account_id
    return False


@dataclass(frozen=True)
class NavigationItem:
    label: str
    href: str
    icon: str


NAVIGATION_ITEMS: List[NavigationItem] = [
    NavigationItem("Dashboard", "/dashboard", "LayoutDashboard"),
    NavigationItem("Programs", "/programs", "BookOpen"),
    NavigationItem("Subprograms", "/subprograms", "BookMarked"),
    NavigationItem("Students", "/contacts/students", "GraduationCap"),
    NavigationItem("Teachers", "/contacts/teachers", "Users"),
    NavigationItem("Learning Groups", "/learning-groups", "Users2"),
    NavigationItem("Orders", "/orders", "ShoppingCart"),
    NavigationItem("Products", "/orders/products", "Package"),
    NavigationItem("Trainings", "/trainings", "BookOpenCheck"),
    NavigationItem("Teacher Trainers", "/teacher-trainers", "UserCheck"),
    NavigationItem("Accounts", "/accounts", "Building2"),
    NavigationItem("Royalties Report", "/reports/royalties", "TrendingUp"),
    NavigationItem("Students Report", "/reports/students", "BarChart3"),
]

# Routes each tier may open, and the scope note shown next to scoped routes.
NAVIGATION_RULES: Dict[Tier, Dict[str, Optional[str]]] = {
    Tier.HQ: {
        "/dashboard": None,
        "/programs": None,
        "/subprograms": None,
        "/contacts/students": None,
        "/contacts/teachers": None,
        "/learning-groups": None,
        "/orders": None,
        "/orders/products": None,
        "/trainings": None,
        "/teacher-trainers": None,
        "/accounts": None,
        "/reports/royalties": None,
        "/reports/students": None,
    },
    Tier.MF: {
        "/dashboard": None,
        "/programs": "Scoped to MF regions",
        "/subprograms": "Scoped to MF regions",
        "/contacts/students": "Scoped to MF regions",
        "/contacts/teachers": "Scoped to MF regions",
        "/learning-groups": "Scoped to MF regions",
        "/orders": "Scoped to MF regions",
        "/trainings": "Scoped to MF regions",
        "/teacher-trainers": None,
        "/accounts": None,
        "/reports/royalties": "Scoped to MF regions",
        "/reports/students": "Scoped to MF regions",
    },
    Tier.LC: {
        "/dashboard": None,
        "/programs": "Programs visible based on parent MF sharing",
        "/contacts/students": None,
        "/contacts/teachers": None,
        "/learning-groups": None,
        "/orders": "Orders routed to MF for processing",
        "/reports/students": None,
        "/trainings": "View-only access to trainings",
    },
    Tier.TT: {
        "/dashboard": None,
        "/trainings": "Training management only",
    },
}


# PUBLIC_INTERFACE
def navigation_for(tier: Tier) -> List[dict]:
    """Return the navigation entries a tier may open, in menu order."""
    allowed = NAVIGATION_RULES.get(tier, {})
    return [
        {"label": item.label, "href": item.href, "icon": item.icon, "scope": allowed[item.href]}
        for item in NAVIGATION_ITEMS
        if item.href in allowed
    ]
