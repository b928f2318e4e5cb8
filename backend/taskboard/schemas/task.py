from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class TaskAssign(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(default="")
    points: int = Field(gt=0)
    deadline: Optional[datetime] = None
    attachment_url: Optional[str] = None
    attachment_type: Optional[Literal["file", "link"]] = None


class ProofSubmit(BaseModel):
    proof_url: str = Field(min_length=1)
    proof_type: Literal["file", "link"]


class TaskVerify(BaseModel):
    decision: Literal["verified", "rejected"]
    rejection_message: Optional[str] = None


class TaskOut(BaseModel):
    id: UUID
    company_id: str
    owner_uid: str
    title: str
    description: str
    points: int
    status: str

    attachment_url: Optional[str] = None
    attachment_type: Optional[str] = None
    proof_url: Optional[str] = None
    proof_type: Optional[str] = None

    deadline: Optional[datetime] = None
    rejection_message: Optional[str] = None

    assigned_by: str
    created_at: datetime
    completed_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None
    verified_by: Optional[str] = None

    model_config = {"from_attributes": True}
