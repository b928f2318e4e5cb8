import asyncio
from typing import Any, Dict, Set

import structlog
from fastapi import WebSocket

log = structlog.get_logger(__name__)


def conversation_channel(company_id: str, employee_uid: str) -> str:
    return f"conversation:{company_id}:{employee_uid}"


def roster_channel(company_id: str) -> str:
    return f"roster:{company_id}"


class RealtimeHub:
    def __init__(self) -> None:
        # channel -> set of WebSocket connections
        self._channels: Dict[str, Set[WebSocket]] = {}
        self._lock = asyncio.Lock()

    async def subscribe(self, channel: str, ws: WebSocket) -> None:
        async with self._lock:
            self._channels.setdefault(channel, set()).add(ws)

    async def unsubscribe(self, channel: str, ws: WebSocket) -> None:
        async with self._lock:
            conns = self._channels.get(channel)
            if conns is not None:
                conns.discard(ws)
                if not conns:
                    self._channels.pop(channel, None)

    def subscriber_count(self, channel: str) -> int:
        return len(self._channels.get(channel, ()))

    async def publish(self, channel: str, event: str, payload: Any) -> None:
        data = {"event": event, "data": payload}
        async with self._lock:
            targets = list(self._channels.get(channel, set()))
        dead = []
        for ws in targets:
            try:
                await ws.send_json(data)
            except Exception as e:  # best-effort; drop on failure
                log.info("realtime_send_failed", channel=channel, error=str(e))
                dead.append(ws)
        for ws in dead:
            await self.unsubscribe(channel, ws)


# Global singleton hub
hub = RealtimeHub()
