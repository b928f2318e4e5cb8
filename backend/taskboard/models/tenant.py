# taskboard/models/tenant.py

from datetime import datetime, timezone

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.db.base import Base


class Tenant(Base):
    __tablename__ = "tenants"

    # slug derived from the display name ("Prime Commerce" -> "prime-commerce")
    id: Mapped[str] = mapped_column(String(120), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    # shared secrets for self-service role assignment; opaque, case-sensitive
    manager_code: Mapped[str] = mapped_column(String(64), nullable=False)
    employee_code: Mapped[str] = mapped_column(String(64), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
