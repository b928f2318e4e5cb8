from __future__ import annotations

from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.api.deps.auth import identity_from_token
from taskboard.api.deps.tenant import get_company_profile
from taskboard.core.errors import DomainError
from taskboard.core.roles import TASK_MANAGER_ROLES
from taskboard.crud.user_profile import get_profile_by_uid
from taskboard.db.session import get_db
from taskboard.models.user_profile import UserProfile
from taskboard.schemas.message import MessageCreate, MessageOut
from taskboard.services import messaging
from taskboard.services.realtime import conversation_channel, hub, roster_channel

log = structlog.get_logger(__name__)

router = APIRouter(tags=["messages"])

WS_UNAUTHORIZED = 4401
WS_FORBIDDEN = 4403


# =========================================================
# REST
# =========================================================
@router.get(
    "/companies/{company_id}/conversations/{employee_uid}/messages",
    response_model=List[MessageOut],
)
async def list_messages(
    company_id: str,
    employee_uid: str,
    db: AsyncSession = Depends(get_db),
    me: UserProfile = Depends(get_company_profile),
):
    """
    Oldest first.
    """
    return await messaging.list_messages(db, me, company_id, employee_uid)


@router.post(
    "/companies/{company_id}/conversations/{employee_uid}/messages",
    response_model=MessageOut,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    company_id: str,
    employee_uid: str,
    payload: MessageCreate,
    db: AsyncSession = Depends(get_db),
    me: UserProfile = Depends(get_company_profile),
):
    return await messaging.send_message(
        db, sender=me, company_id=company_id, employee_uid=employee_uid, text=payload.text
    )


# =========================================================
# LIVE (websocket; token in the query string)
# =========================================================
async def _ws_profile(websocket: WebSocket, db: AsyncSession, token: Optional[str]) -> Optional[UserProfile]:
    if not token:
        await websocket.close(code=WS_UNAUTHORIZED)
        return None
    try:
        identity = await identity_from_token(db, token)
    except DomainError:
        await websocket.close(code=WS_UNAUTHORIZED)
        return None
    profile = await get_profile_by_uid(db, identity.uid)
    if profile is None:
        await websocket.close(code=WS_FORBIDDEN)
        return None
    return profile


async def _pump(websocket: WebSocket, channel: str) -> None:
    try:
        while True:
            data = await websocket.receive_text()
            # keep-alives only; nothing else is read from the client
            if data and data.strip().lower() in {"ping", "keepalive"}:
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        pass
    finally:
        await hub.unsubscribe(channel, websocket)


@router.websocket("/ws/companies/{company_id}/conversations/{employee_uid}")
async def ws_conversation(
    websocket: WebSocket,
    company_id: str,
    employee_uid: str,
    token: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """
    Sends the history as one "history" event, then a "message" event for
    every new message in the conversation.

    The socket subscribes before the history is read, so a message sent in
    between can arrive both pushed and in the history. Clients dedupe by id.
    """
    me = await _ws_profile(websocket, db, token)
    if me is None:
        return
    try:
        await messaging.ensure_conversation(db, me, company_id, employee_uid)
    except DomainError as e:
        await websocket.close(code=WS_FORBIDDEN, reason=e.code)
        return

    channel = conversation_channel(company_id, employee_uid)
    await websocket.accept()
    await hub.subscribe(channel, websocket)
    try:
        history = await messaging.list_messages(db, me, company_id, employee_uid)
    except Exception:
        await hub.unsubscribe(channel, websocket)
        raise
    finally:
        # no pooled connection held for the life of the socket
        await db.close()
    await websocket.send_json({"event": "history", "data": [messaging.message_payload(m) for m in history]})
    log.info("conversation_subscribed", company_id=company_id, employee_uid=employee_uid, uid=me.uid)
    await _pump(websocket, channel)


@router.websocket("/ws/companies/{company_id}/roster")
async def ws_roster(
    websocket: WebSocket,
    company_id: str,
    token: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """
    Presence changes for the tenant, pushed as "presence" events. Managers only.
    """
    me = await _ws_profile(websocket, db, token)
    await db.close()
    if me is None:
        return
    same_tenant = me.company_id == company_id or me.is_super_admin
    if not same_tenant or me.role not in TASK_MANAGER_ROLES:
        await websocket.close(code=WS_FORBIDDEN)
        return

    channel = roster_channel(company_id)
    await websocket.accept()
    await hub.subscribe(channel, websocket)
    await _pump(websocket, channel)
