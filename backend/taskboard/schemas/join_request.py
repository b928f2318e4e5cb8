from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from taskboard.schemas.profile import ProfileOut


class JoinRequestCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    role_requested: str = Field(description="EMPLOYEE, MANAGER or ADMIN")
    company_slug: str = Field(min_length=1, max_length=200)

    # only the one matching role_requested is used
    manager_email: Optional[EmailStr] = None
    admin_email: Optional[EmailStr] = None
    super_admin_email: Optional[EmailStr] = None


class JoinRequestOut(BaseModel):
    id: UUID
    uid: Optional[str] = None
    name: str
    email: EmailStr
    role_requested: str
    company_slug: str
    approver_email: EmailStr
    status: str
    decided_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class JoinRequestApproved(BaseModel):
    request: JoinRequestOut
    profile: ProfileOut
    created_identity: bool
    password_reset_sent: bool
