from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.api.deps.tenant import get_company_profile, require_roles
from taskboard.db.session import get_db
from taskboard.models.user_profile import UserProfile
from taskboard.schemas.profile import PresenceOut, ProfileOut
from taskboard.schemas.task import ProofSubmit, TaskAssign, TaskOut, TaskVerify
from taskboard.services import tasks as task_service

router = APIRouter(prefix="/companies/{company_id}", tags=["tasks"])


# =========================================================
# MANAGER SIDE
# =========================================================
@router.get("/employees", response_model=List[ProfileOut])
async def list_employees(
    company_id: str,
    db: AsyncSession = Depends(get_db),
    _manager: UserProfile = Depends(require_roles("manager", "admin")),
) -> List[ProfileOut]:
    """
    Non-manager roster, available first, then busy, then everyone else.
    """
    roster = await task_service.list_roster(db, company_id)
    return [ProfileOut.from_profile(p) for p in roster]


@router.post(
    "/employees/{employee_uid}/tasks",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
)
async def assign_task(
    company_id: str,
    employee_uid: str,
    payload: TaskAssign,
    db: AsyncSession = Depends(get_db),
    manager: UserProfile = Depends(require_roles("manager", "admin")),
):
    return await task_service.assign_task(
        db,
        actor=manager,
        company_id=company_id,
        employee_uid=employee_uid,
        title=payload.title,
        points=payload.points,
        description=payload.description,
        deadline=payload.deadline,
        attachment_url=payload.attachment_url,
        attachment_type=payload.attachment_type,
    )


@router.get("/employees/{employee_uid}/tasks", response_model=List[TaskOut])
async def list_employee_tasks(
    company_id: str,
    employee_uid: str,
    db: AsyncSession = Depends(get_db),
    _manager: UserProfile = Depends(require_roles("manager", "admin")),
):
    return await task_service.list_tasks(db, company_id, employee_uid)


@router.post("/employees/{employee_uid}/tasks/{task_id}/verify", response_model=TaskOut)
async def verify_task(
    company_id: str,
    employee_uid: str,
    task_id: uuid.UUID,
    payload: TaskVerify,
    db: AsyncSession = Depends(get_db),
    manager: UserProfile = Depends(require_roles("manager", "admin")),
):
    """
    Body: {"decision": "verified" | "rejected", "rejection_message": "..."}
    Points are awarded at most once per task.
    """
    return await task_service.verify_task(
        db,
        actor=manager,
        company_id=company_id,
        employee_uid=employee_uid,
        task_id=task_id,
        decision=payload.decision,
        rejection_message=payload.rejection_message,
    )


# =========================================================
# EMPLOYEE SIDE
# =========================================================
@router.get("/me/tasks", response_model=List[TaskOut])
async def list_my_tasks(
    db: AsyncSession = Depends(get_db),
    me: UserProfile = Depends(get_company_profile),
):
    return await task_service.list_tasks(db, me.company_id, me.uid)


@router.post("/me/tasks/{task_id}/proof", response_model=TaskOut)
async def submit_proof(
    task_id: uuid.UUID,
    payload: ProofSubmit,
    db: AsyncSession = Depends(get_db),
    me: UserProfile = Depends(get_company_profile),
):
    return await task_service.submit_proof(
        db,
        owner=me,
        task_id=task_id,
        proof_url=payload.proof_url,
        proof_type=payload.proof_type,
    )


@router.post("/me/work-request", response_model=PresenceOut)
async def toggle_work_request(
    db: AsyncSession = Depends(get_db),
    me: UserProfile = Depends(get_company_profile),
) -> PresenceOut:
    presence = await task_service.toggle_work_request(db, me)
    return PresenceOut(uid=me.uid, presence=presence)
