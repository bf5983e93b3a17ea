"""Client side of the real-time room protocol.

Wraps an already-connected WebSocket. Anything exposing ``send_text(str)``
or ``send(str)``, sync or async, works: a ``websockets`` connection, an
httpx-ws session or Starlette's test WebSocket.
"""

from __future__ import annotations

import inspect
import json
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

ACTIVITY_CREATED = "activity:created"
MESSAGE_SENT = "message:sent"
ATTENDANCE_UPDATE = "attendance:update"

ACTIVITY_NEW = "activity:new"
MESSAGE_NEW = "message:new"
ATTENDANCE_CHANGED = "attendance:changed"


class RealtimeChannel:
    """Join rooms, emit events and dispatch incoming frames to handlers."""

    def __init__(self, websocket: Any):
        send = getattr(websocket, "send_text", None) or getattr(websocket, "send", None)
        if send is None:
            raise TypeError("websocket must provide send_text() or send()")
        self._send = send
        self._handlers: dict[str, list[Callable[[Any], Any]]] = {}

    async def emit(self, event: str, data: Any) -> None:
        """Send one {"event", "data"} frame."""
        result = self._send(json.dumps({"event": event, "data": data}, default=str))
        if inspect.isawaitable(result):
            await result

    # Rooms

    async def join_child(self, child_id: str) -> None:
        await self.emit("join:child", child_id)

    async def join_user(self, user_id: str) -> None:
        await self.emit("join:user", user_id)

    async def join_classroom(self, classroom_id: str) -> None:
        await self.emit("join:classroom", classroom_id)

    async def leave_child(self, child_id: str) -> None:
        await self.emit("leave:child", child_id)

    async def leave_user(self, user_id: str) -> None:
        await self.emit("leave:user", user_id)

    async def leave_classroom(self, classroom_id: str) -> None:
        await self.emit("leave:classroom", classroom_id)

    # Client-originated events (sent after the REST mutation succeeded)

    async def emit_activity_created(self, child_id: str, activity: dict[str, Any]) -> None:
        await self.emit(ACTIVITY_CREATED, {"childId": child_id, "activity": activity})

    async def emit_message_sent(self, recipient_id: str, message: dict[str, Any]) -> None:
        await self.emit(MESSAGE_SENT, {"recipientId": recipient_id, "message": message})

    async def emit_attendance_update(self, classroom_id: str, child_id: str, status: str) -> None:
        await self.emit(
            ATTENDANCE_UPDATE,
            {"classroomId": classroom_id, "childId": child_id, "status": status},
        )

    # Incoming frames

    def on(self, event: str, handler: Callable[[Any], Any]) -> None:
        self._handlers.setdefault(event, []).append(handler)

    def off(self, event: str) -> None:
        self._handlers.pop(event, None)

    async def dispatch(self, raw: str) -> bool:
        """
        Route one received frame to its handlers.

        Returns False for heartbeats, malformed frames and events nobody
        listens to.
        """
        if raw == "pong":
            return False
        try:
            frame = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring malformed realtime frame")
            return False
        if not isinstance(frame, dict):
            return False

        handlers = self._handlers.get(frame.get("event"), [])
        for handler in handlers:
            result = handler(frame.get("data"))
            if inspect.isawaitable(result):
                await result
        return bool(handlers)
