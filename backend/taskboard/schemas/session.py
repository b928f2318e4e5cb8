from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from taskboard.schemas.auth import IdentityOut
from taskboard.schemas.profile import ProfileOut


class SessionOut(BaseModel):
    identity: IdentityOut
    profile: Optional[ProfileOut] = None
    profile_complete: bool
    redirect_to: str


class RouteCheckRequest(BaseModel):
    required_roles: Optional[List[str]] = Field(default=None, description="Roles allowed on the route")
    require_super_admin: bool = False
    route_tenant_id: Optional[str] = None


class RouteDecisionOut(BaseModel):
    action: str
    target: Optional[str] = None
    reason: str
