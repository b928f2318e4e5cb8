from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.tenant_codes import slugify_company
from taskboard.models.tenant import Tenant


async def get_tenant(db: AsyncSession, name_or_slug: str) -> Optional[Tenant]:
    slug = slugify_company(name_or_slug)
    if not slug:
        return None
    return await db.get(Tenant, slug)


async def list_tenants(db: AsyncSession) -> List[Tenant]:
    res = await db.execute(select(Tenant).order_by(Tenant.created_at.desc()))
    return list(res.scalars().all())
