# backend/taskboard/api/v1/auth.py
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.api.deps.auth import get_current_identity
from taskboard.db.session import get_db
from taskboard.models.auth_identity import AuthIdentity
from taskboard.schemas.auth import (
    AuthResponse,
    CompleteProfileRequest,
    IdentityOut,
    JoinCompanyRequest,
    LoginRequest,
    PasswordResetConfirm,
    RegisterRequest,
    SignupRequest,
)
from taskboard.schemas.profile import ProfileOut
from taskboard.services import identity as identity_service
from taskboard.services.identity import LoginResult

router = APIRouter(prefix="/auth", tags=["auth"])


def _to_auth_response(result: LoginResult) -> AuthResponse:
    return AuthResponse(
        access_token=result.access_token,
        identity=IdentityOut.model_validate(result.identity),
        profile=ProfileOut.from_profile(result.profile) if result.profile is not None else None,
        redirect_to=result.redirect_to,
        role_matches=result.role_matches,
    )


# =========================================================
# ACCOUNTS
# =========================================================
@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, db: AsyncSession = Depends(get_db)) -> AuthResponse:
    """
    Creates the sign-in identity only. The session resolves as incomplete
    until the user joins a company.
    """
    identity = await identity_service.register(
        db, email=str(payload.email), password=payload.password, name=payload.name
    )
    return _to_auth_response(
        LoginResult(identity=identity, profile=None, access_token=identity_service.issue_token(identity))
    )


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(payload: SignupRequest, db: AsyncSession = Depends(get_db)) -> AuthResponse:
    """
    Body: {"email", "password", "name", "company", "access_code"}
    The access code decides the role (manager or employee).
    """
    result = await identity_service.signup(
        db,
        email=str(payload.email),
        password=payload.password,
        name=payload.name,
        company=payload.company,
        access_code=payload.access_code,
    )
    return _to_auth_response(result)


@router.post("/login", response_model=AuthResponse)
async def login(payload: LoginRequest, db: AsyncSession = Depends(get_db)) -> AuthResponse:
    result = await identity_service.login(
        db,
        email=str(payload.email),
        password=payload.password,
        expected_company_id=payload.company_id,
        expected_role=payload.expected_role,
    )
    return _to_auth_response(result)


@router.post("/join-company", response_model=AuthResponse)
async def join_company(payload: JoinCompanyRequest, db: AsyncSession = Depends(get_db)) -> AuthResponse:
    result = await identity_service.join_company(
        db,
        email=str(payload.email),
        password=payload.password,
        company=payload.company,
        access_code=payload.access_code,
    )
    return _to_auth_response(result)


@router.post("/complete-profile", response_model=AuthResponse)
async def complete_profile(
    payload: CompleteProfileRequest,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(get_current_identity),
) -> AuthResponse:
    result = await identity_service.complete_profile(
        db,
        identity,
        company=payload.company,
        access_code=payload.access_code,
        name=payload.name,
    )
    return _to_auth_response(result)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(get_current_identity),
) -> None:
    await identity_service.logout(db, identity)


# =========================================================
# PASSWORD RESET
# =========================================================
@router.post("/password-reset/confirm")
async def confirm_password_reset(payload: PasswordResetConfirm, db: AsyncSession = Depends(get_db)):
    await identity_service.confirm_password_reset(db, token=payload.token, new_password=payload.new_password)
    return {"status": "ok"}
