from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.api.deps.auth import require_super_admin
from taskboard.db.session import get_db
from taskboard.models.user_profile import UserProfile
from taskboard.schemas.tenant import TenantCreate, TenantOut, TenantPublicOut
from taskboard.services import provisioning
from taskboard.services.tenant_directory import require_tenant

router = APIRouter(prefix="/tenants", tags=["tenants"])


# =========================================================
# SUPER-ADMIN PROVISIONING
# =========================================================
@router.post("", response_model=TenantOut, status_code=status.HTTP_201_CREATED)
async def create_tenant(
    payload: TenantCreate,
    db: AsyncSession = Depends(get_db),
    _admin: UserProfile = Depends(require_super_admin),
):
    """
    Creates a company. Access codes are generated when both are omitted.
    """
    return await provisioning.create_tenant(
        db,
        name=payload.name,
        manager_code=payload.manager_code,
        employee_code=payload.employee_code,
    )


@router.get("", response_model=List[TenantOut])
async def list_tenants(
    db: AsyncSession = Depends(get_db),
    _admin: UserProfile = Depends(require_super_admin),
):
    return await provisioning.list_tenants(db)


@router.delete("/{tenant_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tenant(
    tenant_id: str,
    db: AsyncSession = Depends(get_db),
    _admin: UserProfile = Depends(require_super_admin),
) -> None:
    await provisioning.delete_tenant(db, tenant_id)


# ---------------------------------------------------------
# Public lookup (company login pages)
# ---------------------------------------------------------
@router.get("/{slug}/public", response_model=TenantPublicOut)
async def get_public_tenant(slug: str, db: AsyncSession = Depends(get_db)):
    return await require_tenant(db, slug)
