from __future__ import annotations

from fastapi import Depends, Path

from taskboard.core.errors import PermissionDeniedError
from taskboard.core.roles import Role, normalize_role
from taskboard.api.deps.auth import get_current_profile
from taskboard.models.user_profile import UserProfile

ALLOWED_TENANT_ROLES = {r.value for r in Role}


async def get_company_profile(
    company_id: str = Path(..., description="Tenant slug"),
    profile: UserProfile = Depends(get_current_profile),
) -> UserProfile:
    """
    Caller's profile, checked against the tenant in the path.
    Super-admins pass for any tenant.
    """
    if profile.company_id != company_id and not profile.is_super_admin:
        raise PermissionDeniedError("You are not a member of this company", code="tenant_forbidden")
    return profile


def require_roles(*allowed_roles: str):
    """
    Enforce profile.role is in allowed_roles (employee/manager/admin)
    for the tenant in the path.
    """
    allowed = {normalize_role(r) for r in allowed_roles}
    unknown = allowed - ALLOWED_TENANT_ROLES
    if unknown:
        raise ValueError(
            f"Unknown tenant role(s): {sorted(unknown)}. Allowed: {sorted(ALLOWED_TENANT_ROLES)}"
        )

    async def _checker(profile: UserProfile = Depends(get_company_profile)) -> UserProfile:
        role = normalize_role(profile.role)
        if role not in allowed:
            raise PermissionDeniedError(
                "You do not have permission to perform this action.",
                code="rbac_forbidden",
                extra={"required": sorted(allowed), "role": role},
            )
        return profile

    return _checker
