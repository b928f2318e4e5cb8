from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.api.deps.auth import get_current_identity, get_optional_identity
from taskboard.core.route_guard import COMPLETE_PROFILE_PATH, dashboard_path_for, evaluate_route
from taskboard.crud.user_profile import get_profile_by_uid
from taskboard.db.session import get_db
from taskboard.models.auth_identity import AuthIdentity
from taskboard.schemas.auth import IdentityOut
from taskboard.schemas.profile import ProfileOut
from taskboard.schemas.session import RouteCheckRequest, RouteDecisionOut, SessionOut
from taskboard.services.identity import resolve_session

router = APIRouter(prefix="/session", tags=["session"])


@router.get("", response_model=SessionOut)
async def get_session(
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(get_current_identity),
) -> SessionOut:
    """
    Resolve the signed-in identity to its profile. profile_complete=False
    means the client should send the user to profile completion.
    """
    profile = await resolve_session(db, identity.uid)
    return SessionOut(
        identity=IdentityOut.model_validate(identity),
        profile=ProfileOut.from_profile(profile) if profile is not None else None,
        profile_complete=profile is not None,
        redirect_to=dashboard_path_for(profile) if profile is not None else COMPLETE_PROFILE_PATH,
    )


@router.post("/route-check", response_model=RouteDecisionOut)
async def route_check(
    payload: RouteCheckRequest,
    db: AsyncSession = Depends(get_db),
    identity: Optional[AuthIdentity] = Depends(get_optional_identity),
) -> RouteDecisionOut:
    profile = await get_profile_by_uid(db, identity.uid) if identity is not None else None
    decision = evaluate_route(
        identity=identity,
        profile=profile,
        required_roles=payload.required_roles,
        require_super_admin=payload.require_super_admin,
        route_tenant_id=payload.route_tenant_id,
    )
    return RouteDecisionOut(action=decision.action, target=decision.target, reason=decision.reason or "ok")
