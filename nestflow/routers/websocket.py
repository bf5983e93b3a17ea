"""
WebSocket router for real-time room fan-out.

Provides a WebSocket endpoint that:
1. Authenticates users via JWT query parameter
2. Lets clients join/leave child, user and classroom rooms
3. Relays client-reported events to the interested room

The server never originates events; it only relays what a client reports
after its REST mutation succeeded.
"""

import json
import logging
from typing import Any

import jwt
from fastapi import APIRouter, Query, WebSocket

from nestflow.core.security import decode_access_token
from nestflow.core.websocket import ROOM_KINDS, manager, room_name

logger = logging.getLogger(__name__)

router = APIRouter(tags=["WebSocket"])

# client event -> (room kind, id key, outgoing event, payload key or None for whole data)
RELAY_EVENTS: dict[str, tuple[str, str, str, str | None]] = {
    "activity:created": ("child", "childId", "activity:new", "activity"),
    "message:sent": ("user", "recipientId", "message:new", "message"),
    "attendance:update": ("classroom", "classroomId", "attendance:changed", None),
}


def _room_id(value: Any) -> str | None:
    """Room ids arrive as strings or integers; anything else is rejected."""
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        return None
    return str(value) or None


def _parse_frame(raw: str) -> tuple[str, Any] | None:
    try:
        frame = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(frame, dict) or not isinstance(frame.get("event"), str):
        return None
    return frame["event"], frame.get("data")


async def handle_event(websocket: WebSocket, center_id: str, event: str, data: Any) -> None:
    """Apply one client frame: room membership change or relay."""
    action, _, kind = event.partition(":")
    if action in ("join", "leave") and kind in ROOM_KINDS:
        room_id = _room_id(data)
        if room_id is None:
            logger.warning("Ignoring %s without a room id", event)
            return
        if action == "join":
            manager.join(websocket, room_name(kind, room_id))
        else:
            manager.leave(websocket, room_name(kind, room_id))
        return

    relay = RELAY_EVENTS.get(event)
    if relay is None:
        logger.warning("Ignoring unknown socket event %s", event)
        return

    kind, id_key, out_event, payload_key = relay
    room_id = _room_id(data.get(id_key)) if isinstance(data, dict) else None
    if room_id is None:
        logger.warning("Ignoring %s without %s", event, id_key)
        return
    payload = data if payload_key is None else data.get(payload_key)
    await manager.emit(center_id, room_name(kind, room_id), out_event, payload)


@router.websocket("/ws")
async def websocket_rooms(
    websocket: WebSocket,
    token: str | None = Query(None),
):
    """
    WebSocket endpoint for room-based real-time updates.

    Frames are JSON text {"event": str, "data": any}; room ids may be strings
    or integers. The literal text "ping" is answered with "pong". Binary and
    malformed frames are logged and ignored.
    """
    if not token:
        await websocket.close(code=4001, reason="Authentication required")
        return
    try:
        payload = decode_access_token(token)
    except jwt.InvalidTokenError:
        await websocket.close(code=4001, reason="Invalid token")
        return

    center_id = payload.get("center_id")
    if not center_id:
        await websocket.close(code=4001, reason="Invalid token")
        return

    await manager.connect(websocket, center_id)
    logger.info("Socket connected", extra={"user_id": payload.get("sub"), "center_id": center_id})

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None:
                logger.warning("Ignoring binary socket frame")
                continue

            # Handle ping
            if raw == "ping":
                await websocket.send_text("pong")
                continue

            parsed = _parse_frame(raw)
            if parsed is None:
                logger.warning("Ignoring malformed socket frame")
                continue
            await handle_event(websocket, center_id, *parsed)
    finally:
        manager.disconnect(websocket)
        logger.info("Socket disconnected", extra={"center_id": center_id})
