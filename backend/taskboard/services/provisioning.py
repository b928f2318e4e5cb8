from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.errors import ConflictError, NotFoundError, ValidationError
from taskboard.core.roles import AccountState, Role
from taskboard.core.tenant_codes import generate_code_pair, slugify_company
from taskboard.crud import tenant as tenant_crud
from taskboard.crud.user_profile import get_identity_by_email, get_profile_by_uid
from taskboard.db.session import commit_or_raise
from taskboard.models.tenant import Tenant
from taskboard.models.user_profile import UserProfile
from taskboard.services import identity as identity_service

log = structlog.get_logger(__name__)


@dataclass
class SuperAdminBootstrap:
    profile: UserProfile
    created_identity: bool
    created_profile: bool
    created_tenant: bool


def _resolve_codes(manager_code: Optional[str], employee_code: Optional[str]) -> tuple[str, str]:
    if manager_code is None and employee_code is None:
        return generate_code_pair()

    if not manager_code or not employee_code:
        raise ValidationError(
            "Provide both access codes, or neither to have them generated.",
            code="access_codes_incomplete",
        )
    if manager_code == employee_code:
        raise ValidationError("Manager and employee codes must differ.", code="access_codes_not_distinct")
    return manager_code, employee_code


async def _add_tenant(
    db: AsyncSession,
    *,
    name: str,
    manager_code: Optional[str] = None,
    employee_code: Optional[str] = None,
) -> Tenant:
    display = (name or "").strip()
    slug = slugify_company(display)
    if not slug:
        raise ValidationError("Company name is required", code="company_name_required")

    if await db.get(Tenant, slug) is not None:
        raise ConflictError(f"Company '{slug}' already exists.", code="tenant_exists")

    mgr, emp = _resolve_codes(manager_code, employee_code)
    tenant = Tenant(id=slug, name=display, manager_code=mgr, employee_code=emp)
    db.add(tenant)
    await db.flush()
    return tenant


async def create_tenant(
    db: AsyncSession,
    *,
    name: str,
    manager_code: Optional[str] = None,
    employee_code: Optional[str] = None,
) -> Tenant:
    tenant = await _add_tenant(db, name=name, manager_code=manager_code, employee_code=employee_code)
    await commit_or_raise(db, action="create company")
    log.info("tenant_created", company_id=tenant.id)
    return tenant


async def list_tenants(db: AsyncSession) -> List[Tenant]:
    return await tenant_crud.list_tenants(db)


async def delete_tenant(db: AsyncSession, tenant_id: str) -> None:
    """
    Removes the tenant record only. Profiles, tasks and messages that
    reference it stay behind and must be cleaned up separately.
    """
    tenant = await db.get(Tenant, tenant_id)
    if tenant is None:
        raise NotFoundError(f"Company '{tenant_id}' not found", code="company_not_found")
    await db.delete(tenant)
    await commit_or_raise(db, action="delete company")
    log.info("tenant_deleted", company_id=tenant_id)


async def bootstrap_super_admin(
    db: AsyncSession,
    *,
    email: str,
    password: str,
    name: str = "Super Admin",
    company_name: str = "Prime Commerce",
) -> SuperAdminBootstrap:
    """
    Idempotent: each missing piece (tenant, identity, profile) is created,
    anything already present is left as is. An existing profile is promoted
    to super-admin. Existing passwords are never overwritten.
    """
    slug = slugify_company(company_name)
    created_tenant = created_identity = created_profile = False

    tenant = await db.get(Tenant, slug) if slug else None
    if tenant is None:
        tenant = await _add_tenant(db, name=company_name)
        created_tenant = True

    identity = await get_identity_by_email(db, email)
    if identity is None:
        identity = await identity_service.create_identity(db, email=email, password=password, display_name=name)
        created_identity = True

    profile = await get_profile_by_uid(db, identity.uid)
    if profile is None:
        profile = await identity_service.create_profile(
            db,
            uid=identity.uid,
            name=name,
            email=identity.email,
            role=Role.ADMIN.value,
            company_id=tenant.id,
            company_name=tenant.name,
            is_super_admin=True,
        )
        created_profile = True
    elif not profile.is_super_admin:
        profile.is_super_admin = True
        profile.role = Role.ADMIN.value
        profile.account_state = AccountState.ADMIN.value

    await commit_or_raise(db, action="provision super admin")
    log.info(
        "super_admin_bootstrapped",
        uid=identity.uid,
        company_id=profile.company_id,
        created_identity=created_identity,
        created_profile=created_profile,
        created_tenant=created_tenant,
    )
    return SuperAdminBootstrap(
        profile=profile,
        created_identity=created_identity,
        created_profile=created_profile,
        created_tenant=created_tenant,
    )
