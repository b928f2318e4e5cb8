from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class TenantCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    # omit both to have them generated
    manager_code: Optional[str] = Field(default=None, max_length=64)
    employee_code: Optional[str] = Field(default=None, max_length=64)


class TenantOut(BaseModel):
    id: str
    name: str
    manager_code: str
    employee_code: str
    created_at: datetime

    model_config = {"from_attributes": True}


class TenantPublicOut(BaseModel):
    id: str
    name: str

    model_config = {"from_attributes": True}
