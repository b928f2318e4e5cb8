from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from taskboard.models.user_profile import UserProfile


class PointsStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_earned: int = Field(default=0, serialization_alias="totalEarned")
    current_balance: int = Field(default=0, serialization_alias="currentBalance")


class ProfileOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    uid: str
    name: str
    email: EmailStr
    role: str
    company_id: str
    company_name: str
    is_super_admin: bool = False

    account_state: str
    presence: str

    points_stats: PointsStats = Field(serialization_alias="pointsStats")
    pending_task_count: int = Field(default=0, serialization_alias="pendingTaskCount")

    created_at: datetime
    last_login_at: Optional[datetime] = None
    last_assigned_at: Optional[datetime] = None

    @classmethod
    def from_profile(cls, p: UserProfile) -> "ProfileOut":
        return cls(
            id=p.id,
            uid=p.uid,
            name=p.name,
            email=p.email,
            role=p.role,
            company_id=p.company_id,
            company_name=p.company_name,
            is_super_admin=bool(p.is_super_admin),
            account_state=p.account_state,
            presence=p.presence,
            points_stats=PointsStats(
                total_earned=p.points_total_earned or 0,
                current_balance=p.points_current_balance or 0,
            ),
            pending_task_count=p.pending_task_count or 0,
            created_at=p.created_at,
            last_login_at=p.last_login_at,
            last_assigned_at=p.last_assigned_at,
        )


class PresenceOut(BaseModel):
    uid: str
    presence: str
