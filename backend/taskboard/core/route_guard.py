from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from taskboard.core.roles import Role, normalize_role

LOGIN_PATH = "/login"
COMPLETE_PROFILE_PATH = "/complete-profile"
HOME_PATH = "/"
SUPER_ADMIN_DASHBOARD_PATH = "/superadmin/dashboard"

DECISION_PLACEHOLDER = "placeholder"
DECISION_REDIRECT = "redirect"
DECISION_RENDER = "render"


@dataclass(frozen=True)
class RouteDecision:
    action: str
    target: Optional[str] = None
    reason: Optional[str] = None

    @property
    def renders(self) -> bool:
        return self.action == DECISION_RENDER


def tenant_login_path(tenant_id: str | None) -> str:
    if tenant_id:
        return f"/{tenant_id}/login"
    return LOGIN_PATH


def dashboard_path_for(profile: Any) -> str:
    """
    Role-appropriate landing page for a profile, always built from the
    profile's own company, never from whatever route was attempted.
    """
    if getattr(profile, "is_super_admin", False):
        return SUPER_ADMIN_DASHBOARD_PATH

    company_id = getattr(profile, "company_id", None)
    role = normalize_role(getattr(profile, "role", None))
    if not company_id:
        return HOME_PATH
    if role == Role.ADMIN.value:
        return f"/{company_id}/admin/dashboard"
    if role == Role.MANAGER.value:
        return f"/{company_id}/manager/dashboard"
    return f"/{company_id}/dashboard"


def evaluate_route(
    *,
    identity: Any,
    profile: Any,
    loading: bool = False,
    required_roles: Optional[Iterable[str]] = None,
    require_super_admin: bool = False,
    route_tenant_id: Optional[str] = None,
) -> RouteDecision:
    """
    Decide whether a role-scoped view may render. First match wins:

      1. still resolving the session      -> placeholder
      2. no identity                      -> (tenant) login
      3. identity without a profile       -> profile completion
      4. super-admin required, not one    -> home
      5. role not allowed                 -> the profile's own dashboard
      6. otherwise                        -> render
    """
    if loading:
        return RouteDecision(DECISION_PLACEHOLDER, reason="loading")

    if identity is None:
        return RouteDecision(DECISION_REDIRECT, tenant_login_path(route_tenant_id), reason="unauthenticated")

    if profile is None:
        return RouteDecision(DECISION_REDIRECT, COMPLETE_PROFILE_PATH, reason="profile_incomplete")

    if require_super_admin and not getattr(profile, "is_super_admin", False):
        return RouteDecision(DECISION_REDIRECT, HOME_PATH, reason="super_admin_required")

    if required_roles is not None:
        allowed = {normalize_role(r) for r in required_roles}
        if normalize_role(getattr(profile, "role", None)) not in allowed:
            return RouteDecision(DECISION_REDIRECT, dashboard_path_for(profile), reason="role_mismatch")

    return RouteDecision(DECISION_RENDER)
