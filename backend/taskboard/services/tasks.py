from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import List, Optional

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.attachments import validate_attachment
from taskboard.core.config import settings
from taskboard.core.errors import (
    BackendError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from taskboard.core.ranking import sort_roster
from taskboard.core.roles import TASK_MANAGER_ROLES, Presence, Role
from taskboard.core.task_lifecycle import (
    ASSIGNED,
    REJECTED,
    SUBMITTABLE_STATES,
    VERIFICATION_OUTCOMES,
    VERIFICATION_PENDING,
    VERIFIED,
    ensure_transition,
)
from taskboard.crud.user_profile import get_company_profile, list_non_manager_profiles
from taskboard.db.session import commit_or_raise
from taskboard.models.task import Task
from taskboard.models.user_profile import UserProfile
from taskboard.services.leaderboard import leaderboard_cache
from taskboard.services.realtime import hub, roster_channel

log = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _ensure_task_manager(actor: UserProfile) -> None:
    if actor.role not in TASK_MANAGER_ROLES:
        raise PermissionDeniedError("Only managers can do this.", code="manager_required")


async def _require_member(db: AsyncSession, company_id: str, uid: str) -> UserProfile:
    profile = await get_company_profile(db, company_id, uid)
    if profile is None:
        raise NotFoundError("Employee not found", code="employee_not_found")
    return profile


async def _get_owned_task(db: AsyncSession, company_id: str, owner_uid: str, task_id: uuid.UUID) -> Task:
    task = await db.get(Task, task_id)
    if task is None or task.company_id != company_id or task.owner_uid != owner_uid:
        raise NotFoundError("Task not found", code="task_not_found")
    return task


async def _publish_presence(profile: UserProfile) -> None:
    await hub.publish(
        roster_channel(profile.company_id),
        "presence",
        {"uid": profile.uid, "presence": profile.presence},
    )


# ---------------------------------------------------------
# Reads
# ---------------------------------------------------------
async def list_tasks(db: AsyncSession, company_id: str, owner_uid: str) -> List[Task]:
    stmt = (
        select(Task)
        .where(Task.company_id == company_id, Task.owner_uid == owner_uid)
        .order_by(Task.created_at.desc())
    )
    return list((await db.execute(stmt)).scalars().all())


async def list_roster(db: AsyncSession, company_id: str) -> List[UserProfile]:
    return sort_roster(await list_non_manager_profiles(db, company_id))


# ---------------------------------------------------------
# Assign (manager)
# ---------------------------------------------------------
async def assign_task(
    db: AsyncSession,
    *,
    actor: UserProfile,
    company_id: Optional[str] = None,
    employee_uid: str,
    title: str,
    points: int,
    description: str = "",
    deadline: Optional[datetime] = None,
    attachment_url: Optional[str] = None,
    attachment_type: Optional[str] = None,
) -> Task:
    _ensure_task_manager(actor)
    company_id = company_id or actor.company_id
    target = await _require_member(db, company_id, employee_uid)

    # regardless of who is asking
    if target.role == Role.MANAGER.value:
        raise ValidationError("Tasks cannot be assigned to managers.", code="manager_target")

    title = (title or "").strip()
    if not title:
        raise ValidationError("title is required", code="title_required")
    if points is None or int(points) <= 0:
        raise ValidationError("points must be a positive number", code="invalid_points")

    stored_url, stored_type = validate_attachment(
        attachment_type,
        attachment_url,
        max_inline_bytes=settings.MAX_INLINE_ATTACHMENT_BYTES,
    )

    now = _utcnow()
    task = Task(
        company_id=company_id,
        owner_uid=target.uid,
        title=title,
        description=(description or "").strip(),
        points=int(points),
        status=ASSIGNED,
        attachment_url=stored_url,
        attachment_type=stored_type,
        deadline=deadline,
        assigned_by=actor.uid,
        created_at=now,
    )
    db.add(task)

    target.presence = Presence.BUSY.value
    target.last_assigned_at = now

    await commit_or_raise(db, action="assign task")
    log.info("task_assigned", task_id=str(task.id), owner_uid=target.uid, assigned_by=actor.uid, points=task.points)
    await _publish_presence(target)
    return task


# ---------------------------------------------------------
# Submit proof (owner)
# ---------------------------------------------------------
async def submit_proof(
    db: AsyncSession,
    *,
    owner: UserProfile,
    task_id: uuid.UUID,
    proof_url: str,
    proof_type: str,
) -> Task:
    task = await _get_owned_task(db, owner.company_id, owner.uid, task_id)
    ensure_transition(task.status, VERIFICATION_PENDING)

    stored_url, stored_type = validate_attachment(
        proof_type,
        proof_url,
        max_inline_bytes=settings.MAX_INLINE_ATTACHMENT_BYTES,
        field="proof",
    )
    if stored_url is None:
        raise ValidationError("Proof is required", code="proof_required")

    # conditional on the status we just checked; loses cleanly to a racing writer
    res = await db.execute(
        update(Task)
        .where(Task.id == task.id, Task.status.in_(sorted(SUBMITTABLE_STATES)))
        .values(
            status=VERIFICATION_PENDING,
            proof_url=stored_url,
            proof_type=stored_type,
            completed_at=_utcnow(),
            rejection_message=None,
        )
        .execution_options(synchronize_session=False)
    )
    if res.rowcount != 1:
        await db.rollback()
        raise InvalidTransitionError("Task was changed by someone else. Refresh and try again.")

    await db.execute(
        update(UserProfile)
        .where(UserProfile.id == owner.id)
        .values(pending_task_count=UserProfile.pending_task_count + 1)
        .execution_options(synchronize_session=False)
    )

    await commit_or_raise(db, action="submit proof")
    await db.refresh(task)
    await db.refresh(owner)
    log.info("task_proof_submitted", task_id=str(task.id), owner_uid=owner.uid, proof_type=stored_type)
    return task


# ---------------------------------------------------------
# Verify (manager)
# ---------------------------------------------------------
async def verify_task(
    db: AsyncSession,
    *,
    actor: UserProfile,
    company_id: Optional[str] = None,
    employee_uid: str,
    task_id: uuid.UUID,
    decision: str,
    rejection_message: Optional[str] = None,
) -> Task:
    """
    verification_pending -> verified | rejected.

    The status flip is a conditional UPDATE on status = verification_pending;
    only the caller whose UPDATE hits the row applies the points/counter
    changes, all inside one transaction. A duplicate verification finds no
    row and fails, so points are awarded at most once.
    """
    _ensure_task_manager(actor)

    decision = (decision or "").strip().lower()
    if decision not in VERIFICATION_OUTCOMES:
        raise ValidationError("decision must be 'verified' or 'rejected'", code="invalid_decision")

    message = (rejection_message or "").strip() or None
    if decision == REJECTED and message is None:
        raise ValidationError("A rejection message is required.", code="rejection_message_required")

    company_id = company_id or actor.company_id
    owner = await _require_member(db, company_id, employee_uid)
    task = await _get_owned_task(db, company_id, owner.uid, task_id)
    ensure_transition(task.status, decision)

    values = {
        "status": decision,
        "verified_at": _utcnow(),
        "verified_by": actor.uid,
    }
    if decision == REJECTED:
        values["rejection_message"] = message

    res = await db.execute(
        update(Task)
        .where(Task.id == task.id, Task.status == VERIFICATION_PENDING)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if res.rowcount != 1:
        await db.rollback()
        raise InvalidTransitionError("Task was already verified by someone else.", code="already_verified")

    profile_values = {"pending_task_count": UserProfile.pending_task_count - 1}
    if decision == VERIFIED:
        profile_values["points_total_earned"] = UserProfile.points_total_earned + task.points
        profile_values["points_current_balance"] = UserProfile.points_current_balance + task.points

    await db.execute(
        update(UserProfile)
        .where(UserProfile.id == owner.id)
        .values(**profile_values)
        .execution_options(synchronize_session=False)
    )

    await commit_or_raise(db, action="verify task")
    await db.refresh(task)
    await db.refresh(owner)

    if decision == VERIFIED:
        leaderboard_cache.invalidate(company_id)

    log.info(
        "task_verified",
        task_id=str(task.id),
        owner_uid=owner.uid,
        decision=decision,
        points=task.points if decision == VERIFIED else 0,
        verified_by=actor.uid,
    )
    return task


# ---------------------------------------------------------
# Request work (employee presence signal)
# ---------------------------------------------------------
class PresenceToggle:
    """
    Flip presence between available and requesting_task.

    The profile is updated immediately; if the write cannot be persisted the
    compensating step puts back the value the store last confirmed, so the
    caller always converges to server state.
    """

    def __init__(self, profile: UserProfile):
        self.profile = profile
        self.previous = profile.presence
        self.target = (
            Presence.AVAILABLE.value
            if profile.presence == Presence.REQUESTING_TASK.value
            else Presence.REQUESTING_TASK.value
        )

    def apply(self) -> None:
        self.profile.presence = self.target

    def compensate(self) -> None:
        self.profile.presence = self.previous

    async def run(self, db: AsyncSession) -> str:
        self.apply()
        try:
            await commit_or_raise(db, action="update status")
        except BackendError:
            self.compensate()
            raise
        log.info("presence_changed", uid=self.profile.uid, presence=self.target)
        await _publish_presence(self.profile)
        return self.target


async def toggle_work_request(db: AsyncSession, profile: UserProfile) -> str:
    return await PresenceToggle(profile).run(db)
