# taskboard/models/auth_identity.py

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from taskboard.db.base import Base


def _new_uid() -> str:
    return uuid.uuid4().hex


class AuthIdentity(Base):
    """Sign-in credentials. Knows nothing about tenants; see UserProfile."""

    __tablename__ = "auth_identities"

    uid: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_uid)

    email: Mapped[str] = mapped_column(String(320), unique=True, index=True, nullable=False)
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    display_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    # bumped on logout; tokens carrying an older version are rejected
    token_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    password_reset_token: Mapped[Optional[str]] = mapped_column(String(128), nullable=True, index=True)
    password_reset_expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
