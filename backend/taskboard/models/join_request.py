import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.db.base import Base


class JoinRequest(Base):
    __tablename__ = "join_requests"
    __table_args__ = (
        # Query acceleration for the exact lookups we do:
        Index("ix_join_requests_approver_status", "approver_email", "status"),
        Index("ix_join_requests_email_company_status", "email", "company_slug", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)

    # absent for legacy requests filed before the requester had an identity
    uid: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    # EMPLOYEE | MANAGER | ADMIN
    role_requested: Mapped[str] = mapped_column(String(30), nullable=False)
    company_slug: Mapped[str] = mapped_column(String(120), nullable=False)
    approver_email: Mapped[str] = mapped_column(String(320), nullable=False)

    # PENDING | APPROVED | REJECTED
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="PENDING")
    decided_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
