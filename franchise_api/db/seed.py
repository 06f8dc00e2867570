"""
Database seeding utilities for the reference organization tree.

Seeds:
- HQ001 (IQUP Headquarters)
- MF001 under HQ001, LC001 under MF001, TT001 under HQ001
- One admin user per tier (password ``admin123456``):
  admin@iqup.com, mf.admin@iqup.com, lc.admin@iqup.com, tt.admin@iqup.com

Seeding is idempotent: rows are looked up by code/email before insert.

Usage:
  python -m franchise_api.db.run_migrations upgrade head
  python -m franchise_api.db.seed
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from franchise_api.core.rbac import Role
from franchise_api.core.security import get_password_hash
from franchise_api.db.models import HQ, LearningCenter, MasterFranchisee, TeacherTrainer, User
from franchise_api.db.session import dispose_engine, session_scope

logger = logging.getLogger(__name__)

SEED_PASSWORD = "admin123456"


async def _get_or_create_account(session: AsyncSession, model, code: str, **fields):
    res = await session.execute(select(model).where(model.code == code))
    account = res.scalar_one_or_none()
    if account is None:
        account = model(code=code, **fields)
        session.add(account)
        await session.flush()
        logger.info("Seeded %s %s", model.__tablename__, code)
    return account


async def _get_or_create_user(session: AsyncSession, email: str, role: Role, **fields) -> User:
    res = await session.execute(select(User).where(User.email == email))
    user = res.scalar_one_or_none()
    if user is None:
        user = User(
            email=email,
            hashed_password=get_password_hash(SEED_PASSWORD),
            role=role.value,
            email_verified=True,
            **fields,
        )
        session.add(user)
        await session.flush()
        logger.info("Seeded user %s (%s)", email, role.value)
    return user


# PUBLIC_INTERFACE
async def seed_organizations(session: AsyncSession) -> Dict[str, object]:
    """
    Create the reference HQ/MF/LC/TT tree and one admin per tier within ``session``.

    Returns the seeded rows keyed by ``hq``, ``mf``, ``lc``, ``tt`` and
    ``hq_admin``, ``mf_admin``, ``lc_admin``, ``tt_admin``. The caller commits.
    """
    hq = await _get_or_create_account(
        session, HQ, "HQ001", name="IQUP Headquarters", email="hq@iqup.com", country="USA"
    )
    mf = await _get_or_create_account(
        session, MasterFranchisee, "MF001", name="IQUP Master Franchise East", email="mf@iqup.com", hq_id=hq.id
    )
    lc = await _get_or_create_account(
        session, LearningCenter, "LC001", name="IQUP Learning Center Downtown", email="lc@iqup.com", mf_id=mf.id
    )
    tt = await _get_or_create_account(
        session, TeacherTrainer, "TT001", name="IQUP Teacher Training", email="tt@iqup.com", hq_id=hq.id
    )

    users = {
        "hq_admin": await _get_or_create_user(
            session, "admin@iqup.com", Role.HQ_ADMIN, first_name="HQ", last_name="Admin", hq_id=hq.id
        ),
        "mf_admin": await _get_or_create_user(
            session,
            "mf.admin@iqup.com",
            Role.MF_ADMIN,
            first_name="MF",
            last_name="Admin",
            hq_id=hq.id,
            mf_id=mf.id,
        ),
        "lc_admin": await _get_or_create_user(
            session,
            "lc.admin@iqup.com",
            Role.LC_ADMIN,
            first_name="LC",
            last_name="Admin",
            hq_id=hq.id,
            mf_id=mf.id,
            lc_id=lc.id,
        ),
        "tt_admin": await _get_or_create_user(
            session,
            "tt.admin@iqup.com",
            Role.TT_ADMIN,
            first_name="TT",
            last_name="Admin",
            hq_id=hq.id,
            tt_id=tt.id,
        ),
    }
    return {"hq": hq, "mf": mf, "lc": lc, "tt": tt, **users}


# PUBLIC_INTERFACE
async def seed_all() -> None:
    """Seed the configured database with the reference organization tree."""
    async with session_scope() as session:
        seeded = await seed_organizations(session)
    logger.info(
        "Seed complete: %s",
        ", ".join(seeded[key].code for key in ("hq", "mf", "lc", "tt")),
    )


async def _main() -> None:
    try:
        await seed_all()
    finally:
        await dispose_engine()


if __name__ == "__main__":
    from franchise_api.core.logging import configure_logging

    configure_logging()
    asyncio.run(_main())
