# taskboard/crud/user_profile.py
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.models.auth_identity import AuthIdentity
from taskboard.models.task import Task
from taskboard.models.user_profile import UserProfile


async def get_profile_by_uid(db: AsyncSession, uid: str) -> Optional[UserProfile]:
    """
    Single indexed lookup on the globally-unique uid column; no per-tenant fan-out.
    """
    res = await db.execute(select(UserProfile).where(UserProfile.uid == uid))
    return res.scalar_one_or_none()


async def get_company_profile(db: AsyncSession, company_id: str, uid: str) -> Optional[UserProfile]:
    stmt = select(UserProfile).where(UserProfile.company_id == company_id, UserProfile.uid == uid)
    return (await db.execute(stmt)).scalar_one_or_none()


async def list_non_manager_profiles(db: AsyncSession, company_id: str) -> List[UserProfile]:
    """
    Everyone in the tenant except managers, in creation order.
    Roles in this project are stored as lowercase strings: "employee", "manager", "admin".
    """
    stmt = (
        select(UserProfile)
        .where(UserProfile.company_id == company_id)
        .where(UserProfile.role != "manager")
        .order_by(UserProfile.created_at.asc(), UserProfile.uid.asc())
    )
    res = await db.execute(stmt)
    return list(res.scalars().all())


async def count_tasks_in_status(db: AsyncSession, company_id: str, owner_uid: str, status: str) -> int:
    stmt = (
        select(func.count(Task.id))
        .where(Task.company_id == company_id)
        .where(Task.owner_uid == owner_uid)
        .where(Task.status == status)
    )
    res = await db.execute(stmt)
    return int(res.scalar() or 0)


async def get_identity_by_email(db: AsyncSession, email: str) -> Optional[AuthIdentity]:
    res = await db.execute(select(AuthIdentity).where(AuthIdentity.email == email.strip().lower()))
    return res.scalar_one_or_none()
