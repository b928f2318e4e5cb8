from __future__ import annotations

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.api.deps.auth import get_current_profile, get_optional_identity
from taskboard.db.session import get_db
from taskboard.models.auth_identity import AuthIdentity
from taskboard.models.user_profile import UserProfile
from taskboard.schemas.join_request import JoinRequestApproved, JoinRequestCreate, JoinRequestOut
from taskboard.schemas.profile import ProfileOut
from taskboard.services import join_requests as join_service

router = APIRouter(prefix="/join-requests", tags=["join-requests"])


# =========================================================
# CREATE (public; a bearer token attaches the caller's uid)
# =========================================================
@router.post("", response_model=JoinRequestOut, status_code=status.HTTP_201_CREATED)
async def create_join_request(
    payload: JoinRequestCreate,
    db: AsyncSession = Depends(get_db),
    identity: Optional[AuthIdentity] = Depends(get_optional_identity),
):
    return await join_service.create_join_request(
        db,
        name=payload.name,
        email=str(payload.email),
        role_requested=payload.role_requested,
        company_slug=payload.company_slug,
        uid=identity.uid if identity is not None else None,
        manager_email=str(payload.manager_email) if payload.manager_email else None,
        admin_email=str(payload.admin_email) if payload.admin_email else None,
        super_admin_email=str(payload.super_admin_email) if payload.super_admin_email else None,
    )


@router.get("/pending", response_model=List[JoinRequestOut])
async def list_pending_join_requests(
    db: AsyncSession = Depends(get_db),
    approver: UserProfile = Depends(get_current_profile),
):
    """
    Pending requests addressed to the caller's email.
    """
    return await join_service.get_pending_requests_for_approver(db, approver.email)


# =========================================================
# DECIDE (designated approver only)
# =========================================================
@router.post("/{request_id}/approve", response_model=JoinRequestApproved)
async def approve_join_request(
    request_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    approver: UserProfile = Depends(get_current_profile),
) -> JoinRequestApproved:
    result = await join_service.approve_join_request(db, request_id, approver)
    return JoinRequestApproved(
        request=JoinRequestOut.model_validate(result.request),
        profile=ProfileOut.from_profile(result.profile),
        created_identity=result.created_identity,
        password_reset_sent=result.password_reset_sent,
    )


@router.post("/{request_id}/reject", response_model=JoinRequestOut)
async def reject_join_request(
    request_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    approver: UserProfile = Depends(get_current_profile),
):
    return await join_service.reject_join_request(db, request_id, approver)
