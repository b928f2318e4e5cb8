from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from taskboard.core.roles import JoinRequestStatus, Role
from taskboard.core.security import generate_one_time_password
from taskboard.core.tenant_codes import slugify_company
from taskboard.crud.user_profile import get_identity_by_email, get_profile_by_uid
from taskboard.db.session import commit_or_raise
from taskboard.models.auth_identity import AuthIdentity
from taskboard.models.join_request import JoinRequest
from taskboard.models.user_profile import UserProfile
from taskboard.services.identity import create_identity, create_profile, issue_password_reset, normalize_email
from taskboard.services.mailer import send_password_reset_email
from taskboard.services.tenant_directory import require_tenant

log = structlog.get_logger(__name__)

PENDING = JoinRequestStatus.PENDING.value
APPROVED = JoinRequestStatus.APPROVED.value
REJECTED = JoinRequestStatus.REJECTED.value

REQUESTABLE_ROLES = {"EMPLOYEE", "MANAGER", "ADMIN"}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _normalize_role(role: str | None) -> str:
    return (role or "").strip().upper()


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    v = value.strip()
    return v or None


@dataclass
class ApprovalResult:
    request: JoinRequest
    profile: UserProfile
    created_identity: bool = False
    password_reset_sent: bool = False


def approver_email_for(
    role_requested: str,
    *,
    manager_email: Optional[str] = None,
    admin_email: Optional[str] = None,
    super_admin_email: Optional[str] = None,
) -> str:
    """
    Each requested role is approved one level up:
      EMPLOYEE -> manager, MANAGER -> admin, ADMIN -> super-admin
    """
    by_role = {
        "EMPLOYEE": (manager_email, "Manager email is required for employee requests"),
        "MANAGER": (admin_email, "Admin email is required for manager requests"),
        "ADMIN": (super_admin_email, "Super Admin email is required for admin requests"),
    }
    value, message = by_role[role_requested]
    value = _clean(value)
    if not value:
        raise ValidationError(message, code="approver_email_required")
    return normalize_email(value)


def can_decide(request: JoinRequest, approver: UserProfile) -> bool:
    if normalize_email(approver.email) != request.approver_email:
        return False

    role = _normalize_role(request.role_requested)
    if role == "ADMIN":
        return bool(approver.is_super_admin)
    if approver.is_super_admin:
        return True
    if approver.company_id != request.company_slug:
        return False
    if role == "MANAGER":
        return approver.role == Role.ADMIN.value
    # EMPLOYEE
    return approver.role in {Role.MANAGER.value, Role.ADMIN.value}


# =========================================================
# CREATE + LIST
# =========================================================
async def create_join_request(
    db: AsyncSession,
    *,
    name: str,
    email: str,
    role_requested: str,
    company_slug: str,
    uid: Optional[str] = None,
    manager_email: Optional[str] = None,
    admin_email: Optional[str] = None,
    super_admin_email: Optional[str] = None,
) -> JoinRequest:
    name = _clean(name)
    email = _clean(email)
    role = _normalize_role(role_requested)
    slug = slugify_company(company_slug)

    if not name or not email or not role or not slug:
        raise ValidationError(
            "Missing required fields: name, email, roleRequested, companySlug",
            code="missing_fields",
        )
    if role not in REQUESTABLE_ROLES:
        raise ValidationError(
            f"Invalid role. Allowed: {', '.join(sorted(REQUESTABLE_ROLES))}",
            code="invalid_role",
        )

    approver_email = approver_email_for(
        role,
        manager_email=manager_email,
        admin_email=admin_email,
        super_admin_email=super_admin_email,
    )
    email = normalize_email(email)

    await require_tenant(db, slug)

    if uid is not None and await get_profile_by_uid(db, uid) is not None:
        raise ConflictError("This account already belongs to a company.", code="profile_exists")

    # Block duplicate PENDING request for same company+email
    pending = (
        await db.execute(
            select(JoinRequest).where(
                JoinRequest.email == email,
                JoinRequest.company_slug == slug,
                JoinRequest.status == PENDING,
            )
        )
    ).scalars().first()
    if pending is not None:
        raise ConflictError("A pending join request already exists for this email", code="duplicate_request")

    req = JoinRequest(
        uid=uid,
        name=name,
        email=email,
        role_requested=role,
        company_slug=slug,
        approver_email=approver_email,
        status=PENDING,
    )
    db.add(req)
    await commit_or_raise(db, action="submit join request")
    await db.refresh(req)
    log.info("join_request_created", request_id=str(req.id), company_slug=slug, role=role, legacy=uid is None)
    return req


async def get_pending_requests_for_approver(db: AsyncSession, approver_email: str) -> List[JoinRequest]:
    stmt = (
        select(JoinRequest)
        .where(JoinRequest.approver_email == normalize_email(approver_email))
        .where(JoinRequest.status == PENDING)
        .order_by(JoinRequest.created_at.asc())
    )
    return list((await db.execute(stmt)).scalars().all())


# =========================================================
# DECIDE (designated approver only)
# =========================================================
async def _load_for_decision(db: AsyncSession, request_id: uuid.UUID, approver: UserProfile) -> JoinRequest:
    req = await db.get(JoinRequest, request_id)
    if req is None:
        raise NotFoundError("Join request not found", code="join_request_not_found")
    if not can_decide(req, approver):
        raise PermissionDeniedError("You are not the approver for this request.", code="not_approver")
    if req.status != PENDING:
        raise ConflictError(f"Join request already {req.status.lower()}", code="already_decided")
    return req


async def _close_request(db: AsyncSession, req: JoinRequest, status: str, decided_by: str) -> None:
    """
    PENDING -> terminal, conditional on the row still being PENDING so two
    approvers racing cannot both win.
    """
    res = await db.execute(
        update(JoinRequest)
        .where(JoinRequest.id == req.id, JoinRequest.status == PENDING)
        .values(status=status, decided_by=decided_by, updated_at=_utcnow())
        .execution_options(synchronize_session=False)
    )
    if res.rowcount != 1:
        await db.rollback()
        raise ConflictError("Join request was already decided", code="already_decided")


async def approve_join_request(db: AsyncSession, request_id: uuid.UUID, approver: UserProfile) -> ApprovalResult:
    req = await _load_for_decision(db, request_id, approver)
    tenant = await require_tenant(db, req.company_slug)

    created_identity = False
    reset_token: Optional[str] = None
    uid = req.uid

    try:
        if uid is None:
            # legacy request: no identity yet, mint one with a throwaway password
            if await get_identity_by_email(db, req.email) is not None:
                raise ConflictError(
                    "This user already exists but the request has no account attached. "
                    "Please reject this request and ask the user to sign up again.",
                    code="identity_exists_manual_resolution",
                )
            identity = await create_identity(
                db,
                email=req.email,
                password=generate_one_time_password(),
                display_name=req.name,
            )
            reset_token = issue_password_reset(identity)
            uid = identity.uid
            created_identity = True
        elif await db.get(AuthIdentity, uid) is None:
            raise NotFoundError("The account attached to this request no longer exists.", code="identity_not_found")

        profile = await create_profile(
            db,
            uid=uid,
            name=req.name,
            email=req.email,
            role=req.role_requested.lower(),
            company_id=tenant.id,
            company_name=tenant.name,
        )
    except (ConflictError, NotFoundError):
        await db.rollback()
        raise

    if created_identity:
        req.uid = uid
    await _close_request(db, req, APPROVED, approver.uid)
    await commit_or_raise(db, action="approve join request")
    await db.refresh(req)

    sent = False
    if reset_token is not None:
        sent = await send_password_reset_email(req.email, reset_token)

    log.info(
        "join_request_approved",
        request_id=str(req.id),
        uid=uid,
        company_id=tenant.id,
        role=profile.role,
        legacy=created_identity,
    )
    return ApprovalResult(request=req, profile=profile, created_identity=created_identity, password_reset_sent=sent)


async def reject_join_request(db: AsyncSession, request_id: uuid.UUID, approver: UserProfile) -> JoinRequest:
    req = await _load_for_decision(db, request_id, approver)
    await _close_request(db, req, REJECTED, approver.uid)
    await commit_or_raise(db, action="reject join request")
    await db.refresh(req)
    log.info("join_request_rejected", request_id=str(req.id), company_slug=req.company_slug)
    return req
