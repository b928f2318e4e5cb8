from __future__ import annotations

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.errors import AuthError, PermissionDeniedError
from taskboard.core.security import bearer_scheme, decode_access_token, optional_bearer_scheme
from taskboard.crud.user_profile import get_profile_by_uid
from taskboard.db.session import get_db
from taskboard.models.auth_identity import AuthIdentity
from taskboard.models.user_profile import UserProfile


async def identity_from_token(db: AsyncSession, token: str) -> AuthIdentity:
    """
    Shared by HTTP dependencies and websocket handshakes.
    Tokens minted before the last logout carry a stale version and are refused.
    """
    claims = decode_access_token(token)
    identity = await db.get(AuthIdentity, claims.uid)
    if identity is None:
        raise AuthError("User not found", code="identity_not_found")
    if claims.version != (identity.token_version or 0):
        raise AuthError("Session has been signed out", code="token_revoked")
    return identity


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> AuthIdentity:
    """
    Dependency for protected endpoints.
    """
    return await identity_from_token(db, credentials.credentials)


async def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[AuthIdentity]:
    if credentials is None:
        return None
    return await identity_from_token(db, credentials.credentials)


async def get_current_profile(
    identity: AuthIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> UserProfile:
    profile = await get_profile_by_uid(db, identity.uid)
    if profile is None:
        raise PermissionDeniedError(
            "Complete your profile before continuing.",
            code="profile_incomplete",
            extra={"redirect_to": "/complete-profile"},
        )
    return profile


async def require_super_admin(profile: UserProfile = Depends(get_current_profile)) -> UserProfile:
    if not profile.is_super_admin:
        raise PermissionDeniedError("Super admin access required.", code="super_admin_required")
    return profile
