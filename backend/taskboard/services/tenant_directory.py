from __future__ import annotations

from dataclasses import dataclass

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.errors import InvalidAccessCodeError, NotFoundError, ValidationError
from taskboard.core.tenant_codes import match_access_code, slugify_company
from taskboard.crud.tenant import get_tenant
from taskboard.models.tenant import Tenant

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AccessGrant:
    role: str
    company_id: str
    company_name: str


async def require_tenant(db: AsyncSession, name_or_slug: str) -> Tenant:
    tenant = await get_tenant(db, name_or_slug)
    if tenant is None:
        raise NotFoundError(f"Company '{slugify_company(name_or_slug)}' not found", code="company_not_found")
    return tenant


async def resolve_access_code(db: AsyncSession, company_name_or_slug: str, code: str) -> AccessGrant:
    """
    Map (company, shared code) to the role it grants. Codes are opaque
    tokens: no trimming, no case folding.
    """
    if not code:
        raise ValidationError("Access Code is required", code="access_code_required")

    tenant = await require_tenant(db, company_name_or_slug)

    role = match_access_code(code, manager_code=tenant.manager_code, employee_code=tenant.employee_code)
    if role is None:
        log.info("access_code_rejected", company_id=tenant.id)
        raise InvalidAccessCodeError("Invalid Access Code. Please check with your administrator.")

    return AccessGrant(role=role, company_id=tenant.id, company_name=tenant.name)
