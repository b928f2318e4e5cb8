# tests/factories.py
from __future__ import annotations

from typing import Optional, Tuple

from taskboard.core.roles import default_account_state
from taskboard.core.security import create_access_token, get_password_hash
from taskboard.models.auth_identity import AuthIdentity
from taskboard.models.task import Task
from taskboard.models.tenant import Tenant
from taskboard.models.user_profile import UserProfile

PASSWORD = "secret-pass"


async def create_tenant(
    db,
    name: str = "Acme",
    manager_code: str = "MGR1",
    employee_code: str = "EMP1",
) -> Tenant:
    tenant = Tenant(
        id=name.strip().lower().replace(" ", "-"),
        name=name,
        manager_code=manager_code,
        employee_code=employee_code,
    )
    db.add(tenant)
    await db.flush()
    return tenant


async def create_identity(db, email: str, password: str = PASSWORD, name: Optional[str] = None) -> AuthIdentity:
    identity = AuthIdentity(
        email=email.lower().strip(),
        password_hash=get_password_hash(password),
        display_name=name,
        token_version=0,
    )
    db.add(identity)
    await db.flush()
    return identity


async def create_member(
    db,
    tenant: Tenant,
    email: str,
    role: str = "employee",
    *,
    name: Optional[str] = None,
    points: int = 0,
    presence: str = "idle",
    account_state: Optional[str] = None,
    is_super_admin: bool = False,
) -> Tuple[AuthIdentity, UserProfile]:
    identity = await create_identity(db, email, name=name)
    profile = UserProfile(
        uid=identity.uid,
        name=name or email.split("@")[0],
        email=identity.email,
        role=role,
        company_id=tenant.id,
        company_name=tenant.name,
        is_super_admin=is_super_admin,
        account_state=account_state or default_account_state(role),
        presence=presence,
        points_total_earned=points,
        points_current_balance=points,
        pending_task_count=0,
    )
    db.add(profile)
    await db.flush()
    return identity, profile


async def create_task(
    db,
    profile: UserProfile,
    *,
    title: str = "Stock the shelves",
    points: int = 10,
    status: str = "assigned",
    assigned_by: str = "manager-uid",
) -> Task:
    task = Task(
        company_id=profile.company_id,
        owner_uid=profile.uid,
        title=title,
        description="",
        points=points,
        status=status,
        assigned_by=assigned_by,
    )
    db.add(task)
    await db.flush()
    return task


def auth_headers(identity: AuthIdentity) -> dict:
    token = create_access_token(subject=identity.uid, version=identity.token_version or 0)
    return {"Authorization": f"Bearer {token}"}
