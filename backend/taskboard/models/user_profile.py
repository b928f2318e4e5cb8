# taskboard/models/user_profile.py

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.db.base import Base


class UserProfile(Base):
    __tablename__ = "user_profiles"
    __table_args__ = (
        # roster / leaderboard scans are always tenant-scoped
        Index("ix_user_profiles_company_created_at", "company_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)

    # Unique across ALL tenants: this is the uid -> (company_id, id) index
    # used to resolve a session without scanning every tenant.
    uid: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)

    # No FK on purpose: deleting a tenant leaves its profiles in place.
    company_id: Mapped[str] = mapped_column(String(120), nullable=False)
    company_name: Mapped[str] = mapped_column(String(200), nullable=False)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)

    # employee | manager | admin
    role: Mapped[str] = mapped_column(String(30), nullable=False, default="employee")
    is_super_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # active | admin | inactive | banned
    account_state: Mapped[str] = mapped_column(String(30), nullable=False, default="active")
    # idle | available | busy | requesting_task
    presence: Mapped[str] = mapped_column(String(30), nullable=False, default="idle")

    points_total_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    points_current_balance: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pending_task_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    last_assigned_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
