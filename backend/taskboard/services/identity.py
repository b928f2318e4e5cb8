from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.config import settings
from taskboard.core.errors import AuthError, CompanyMismatchError, ConflictError, ValidationError
from taskboard.core.roles import BLOCKED_ACCOUNT_STATES, default_account_state, normalize_role
from taskboard.core.route_guard import dashboard_path_for
from taskboard.core.security import (
    create_access_token,
    generate_reset_token,
    get_password_hash,
    verify_password,
)
from taskboard.crud.user_profile import get_identity_by_email, get_profile_by_uid
from taskboard.db.session import commit_or_raise
from taskboard.models.auth_identity import AuthIdentity
from taskboard.models.user_profile import UserProfile
from taskboard.services.leaderboard import leaderboard_cache
from taskboard.services.tenant_directory import AccessGrant, resolve_access_code

log = structlog.get_logger(__name__)

MIN_PASSWORD_LENGTH = 6


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_aware(dt: datetime) -> datetime:
    # sqlite hands back naive datetimes
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def normalize_email(email: str) -> str:
    return email.strip().lower()


@dataclass
class LoginResult:
    identity: AuthIdentity
    profile: Optional[UserProfile]
    access_token: str
    role_matches: bool = True

    @property
    def redirect_to(self) -> str:
        if self.profile is None:
            return "/complete-profile"
        return dashboard_path_for(self.profile)


def issue_token(identity: AuthIdentity) -> str:
    return create_access_token(subject=identity.uid, version=identity.token_version)


# ---------------------------------------------------------
# Identities (credentials only)
# ---------------------------------------------------------
async def create_identity(
    db: AsyncSession,
    *,
    email: str,
    password: str,
    display_name: Optional[str] = None,
) -> AuthIdentity:
    """Adds (flushes, does not commit) a new identity."""
    email = normalize_email(email)
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.", code="weak_password")

    if await get_identity_by_email(db, email) is not None:
        raise ConflictError("An account with this email already exists.", code="identity_exists")

    identity = AuthIdentity(
        email=email,
        password_hash=get_password_hash(password),
        display_name=display_name,
        token_version=0,
    )
    db.add(identity)
    await db.flush()
    return identity


async def authenticate(db: AsyncSession, email: str, password: str) -> AuthIdentity:
    identity = await get_identity_by_email(db, email)
    if identity is None or not verify_password(password, identity.password_hash):
        raise AuthError("Invalid email or password.", code="invalid_credentials")
    return identity


async def register(db: AsyncSession, *, email: str, password: str, name: Optional[str] = None) -> AuthIdentity:
    """Identity without tenant membership; the session resolves as incomplete."""
    identity = await create_identity(db, email=email, password=password, display_name=name)
    await commit_or_raise(db, action="create account")
    log.info("identity_registered", uid=identity.uid)
    return identity


# ---------------------------------------------------------
# Profiles
# ---------------------------------------------------------
async def create_profile(
    db: AsyncSession,
    *,
    uid: str,
    name: str,
    email: str,
    role: str,
    company_id: str,
    company_name: str,
    is_super_admin: bool = False,
) -> UserProfile:
    """Adds (flushes, does not commit) the tenant-scoped profile for uid."""
    if await get_profile_by_uid(db, uid) is not None:
        raise ConflictError("This account already belongs to a company.", code="profile_exists")

    role = normalize_role(role)
    profile = UserProfile(
        uid=uid,
        name=name,
        email=normalize_email(email),
        role=role,
        company_id=company_id,
        company_name=company_name,
        is_super_admin=is_super_admin,
        account_state=default_account_state(role),
        presence="idle",
        points_total_earned=0,
        points_current_balance=0,
        pending_task_count=0,
    )
    db.add(profile)
    await db.flush()
    leaderboard_cache.invalidate(company_id)
    return profile


async def stamp_last_login(db: AsyncSession, profile: UserProfile) -> UserProfile:
    """Best-effort: a failed stamp is logged and swallowed, never raised."""
    stamped_at = _utcnow()
    try:
        await db.execute(
            update(UserProfile)
            .where(UserProfile.id == profile.id)
            .values(last_login_at=stamped_at)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
    except SQLAlchemyError as e:
        # detach so the rollback does not expire what the request already loaded
        db.expunge_all()
        await db.rollback()
        log.warning("last_login_stamp_failed", uid=profile.uid, error=str(e))
        return profile
    profile.last_login_at = stamped_at
    return profile


async def resolve_session(db: AsyncSession, uid: str) -> Optional[UserProfile]:
    """
    Resolve an identity to its profile. None means "incomplete": the caller
    should route to profile completion.
    """
    profile = await get_profile_by_uid(db, uid)
    if profile is None:
        return None
    return await stamp_last_login(db, profile)


# ---------------------------------------------------------
# Flows
# ---------------------------------------------------------
async def login(
    db: AsyncSession,
    *,
    email: str,
    password: str,
    expected_company_id: Optional[str] = None,
    expected_role: Optional[str] = None,
) -> LoginResult:
    """
    Credential check + tenant check. No token is issued unless every check
    passes, so a failed tenant check leaves no signed-in state behind.
    A role mismatch is not fatal: the router redirects.
    """
    identity = await authenticate(db, email, password)
    profile = await get_profile_by_uid(db, identity.uid)

    if profile is None:
        if expected_company_id:
            raise AuthError(
                "No account found. Please wait for your join request to be approved.",
                code="profile_missing",
            )
    else:
        if expected_company_id and profile.company_id != expected_company_id:
            log.info("login_company_mismatch", uid=identity.uid, expected=expected_company_id)
            raise CompanyMismatchError("Invalid company credentials")

        if profile.account_state in BLOCKED_ACCOUNT_STATES:
            raise AuthError(
                "Your account is not active. Please contact your administrator.",
                code="account_inactive",
            )

        profile = await stamp_last_login(db, profile)

    role_matches = True
    if expected_role and profile is not None and normalize_role(expected_role) != profile.role:
        role_matches = False
        log.info("login_role_mismatch", uid=identity.uid, role=profile.role, expected=expected_role)

    return LoginResult(identity=identity, profile=profile, access_token=issue_token(identity), role_matches=role_matches)


async def signup(
    db: AsyncSession,
    *,
    email: str,
    password: str,
    name: str,
    company: str,
    access_code: str,
) -> LoginResult:
    # code first: an invalid code must not leave an orphaned identity
    grant = await resolve_access_code(db, company, access_code)

    identity = await create_identity(db, email=email, password=password, display_name=name)
    profile = await create_profile(
        db,
        uid=identity.uid,
        name=name,
        email=identity.email,
        role=grant.role,
        company_id=grant.company_id,
        company_name=grant.company_name,
    )
    await commit_or_raise(db, action="create account")
    log.info("signup_completed", uid=identity.uid, company_id=grant.company_id, role=grant.role)
    return LoginResult(identity=identity, profile=profile, access_token=issue_token(identity))


async def join_company(
    db: AsyncSession,
    *,
    email: str,
    password: str,
    company: str,
    access_code: str,
) -> LoginResult:
    """Links an existing identity to a tenant."""
    grant = await resolve_access_code(db, company, access_code)
    identity = await authenticate(db, email, password)
    return await _attach_profile(db, identity, grant)


async def complete_profile(
    db: AsyncSession,
    identity: AuthIdentity,
    *,
    company: str,
    access_code: str,
    name: Optional[str] = None,
) -> LoginResult:
    grant = await resolve_access_code(db, company, access_code)
    return await _attach_profile(db, identity, grant, name=name)


async def _attach_profile(
    db: AsyncSession,
    identity: AuthIdentity,
    grant: AccessGrant,
    *,
    name: Optional[str] = None,
) -> LoginResult:
    name = (name or identity.display_name or identity.email.split("@")[0]).strip()
    profile = await create_profile(
        db,
        uid=identity.uid,
        name=name,
        email=identity.email,
        role=grant.role,
        company_id=grant.company_id,
        company_name=grant.company_name,
    )
    await commit_or_raise(db, action="join company")
    log.info("company_joined", uid=identity.uid, company_id=grant.company_id, role=grant.role)
    return LoginResult(identity=identity, profile=profile, access_token=issue_token(identity))


async def logout(db: AsyncSession, identity: AuthIdentity) -> None:
    identity.token_version = (identity.token_version or 0) + 1
    await commit_or_raise(db, action="sign out")
    log.info("logged_out", uid=identity.uid)


# ---------------------------------------------------------
# Password reset
# ---------------------------------------------------------
def issue_password_reset(identity: AuthIdentity) -> str:
    """Sets (does not commit) a fresh reset token on the identity."""
    token = generate_reset_token()
    identity.password_reset_token = token
    identity.password_reset_expires_at = _utcnow() + timedelta(minutes=settings.PASSWORD_RESET_EXPIRY_MINUTES)
    return token


async def confirm_password_reset(db: AsyncSession, *, token: str, new_password: str) -> AuthIdentity:
    token = (token or "").strip()
    if not token:
        raise ValidationError("token is required", code="token_required")
    if len(new_password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.", code="weak_password")

    res = await db.execute(select(AuthIdentity).where(AuthIdentity.password_reset_token == token))
    identity = res.scalar_one_or_none()
    if identity is None or identity.password_reset_expires_at is None:
        raise AuthError("Invalid reset token", code="invalid_reset_token")
    if _as_aware(identity.password_reset_expires_at) < _utcnow():
        raise AuthError("Reset token expired", code="reset_token_expired")

    identity.password_hash = get_password_hash(new_password)
    identity.password_reset_token = None
    identity.password_reset_expires_at = None
    # existing sessions die with the old password
    identity.token_version = (identity.token_version or 0) + 1
    await commit_or_raise(db, action="reset password")
    log.info("password_reset_completed", uid=identity.uid)
    return identity
