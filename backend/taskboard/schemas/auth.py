# backend/taskboard/schemas/auth.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from taskboard.schemas.profile import ProfileOut


def _normalize_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    v = " ".join(value.strip().split())
    return v or None


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=256)
    name: Optional[str] = Field(default=None, max_length=200)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_name(v)


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=256)
    name: str = Field(min_length=1, max_length=200)
    company: str = Field(min_length=1, max_length=200)
    # opaque: not stripped, not case-folded
    access_code: str = Field(default="", max_length=64)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = _normalize_name(v)
        if not v:
            raise ValueError("Name is required")
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=256)
    company_id: Optional[str] = Field(default=None, description="Tenant the login page belongs to")
    expected_role: Optional[str] = Field(default=None, description="employee | manager | admin")


class JoinCompanyRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=256)
    company: str = Field(min_length=1, max_length=200)
    access_code: str = Field(default="", max_length=64)


class CompleteProfileRequest(BaseModel):
    company: str = Field(min_length=1, max_length=200)
    access_code: str = Field(default="", max_length=64)
    name: Optional[str] = Field(default=None, max_length=200)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_name(v)


class PasswordResetConfirm(BaseModel):
    token: str = Field(min_length=1)
    new_password: str = Field(min_length=1, max_length=256)


class IdentityOut(BaseModel):
    uid: str
    email: EmailStr
    display_name: Optional[str] = None

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class AuthResponse(TokenResponse):
    identity: IdentityOut
    profile: Optional[ProfileOut] = None
    redirect_to: str
    role_matches: bool = True
