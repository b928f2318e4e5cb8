from __future__ import annotations

from typing import Any, Dict, List

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.errors import NotFoundError, PermissionDeniedError, ValidationError
from taskboard.core.roles import TASK_MANAGER_ROLES
from taskboard.crud.user_profile import get_company_profile
from taskboard.db.session import commit_or_raise
from taskboard.models.message import Message
from taskboard.models.user_profile import UserProfile
from taskboard.services.realtime import conversation_channel, hub

log = structlog.get_logger(__name__)


def message_payload(msg: Message) -> Dict[str, Any]:
    return {
        "id": str(msg.id),
        "text": msg.text,
        "sender_id": msg.sender_id,
        "read": msg.read,
        "created_at": msg.created_at.isoformat() if msg.created_at else None,
    }


def can_access_conversation(viewer: UserProfile, company_id: str, employee_uid: str) -> bool:
    """The employee themself, or any manager/admin of the same tenant."""
    if viewer.is_super_admin:
        return True
    if viewer.company_id != company_id:
        return False
    return viewer.uid == employee_uid or viewer.role in TASK_MANAGER_ROLES


async def ensure_conversation(db: AsyncSession, viewer: UserProfile, company_id: str, employee_uid: str) -> None:
    if not can_access_conversation(viewer, company_id, employee_uid):
        raise PermissionDeniedError("You cannot access this conversation.", code="conversation_forbidden")
    if await get_company_profile(db, company_id, employee_uid) is None:
        raise NotFoundError("Employee not found", code="employee_not_found")


async def list_messages(db: AsyncSession, viewer: UserProfile, company_id: str, employee_uid: str) -> List[Message]:
    await ensure_conversation(db, viewer, company_id, employee_uid)
    stmt = (
        select(Message)
        .where(Message.company_id == company_id, Message.employee_uid == employee_uid)
        .order_by(Message.created_at.asc())
    )
    return list((await db.execute(stmt)).scalars().all())


async def send_message(
    db: AsyncSession,
    *,
    sender: UserProfile,
    company_id: str,
    employee_uid: str,
    text: str,
) -> Message:
    body = (text or "").strip()
    if not body:
        raise ValidationError("Message cannot be empty.", code="empty_message")

    await ensure_conversation(db, sender, company_id, employee_uid)

    msg = Message(
        company_id=company_id,
        employee_uid=employee_uid,
        sender_id=sender.uid,
        text=body,
        read=False,
    )
    db.add(msg)
    await commit_or_raise(db, action="send message")
    await db.refresh(msg)

    log.info("message_sent", company_id=company_id, employee_uid=employee_uid, sender_id=sender.uid)
    await hub.publish(conversation_channel(company_id, employee_uid), "message", message_payload(msg))
    return msg
