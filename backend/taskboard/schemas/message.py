from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class MessageCreate(BaseModel):
    text: str = Field(max_length=4000)


class MessageOut(BaseModel):
    id: UUID
    company_id: str
    employee_uid: str
    sender_id: str
    text: str
    read: bool
    created_at: datetime

    model_config = {"from_attributes": True}
