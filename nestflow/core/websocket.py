"""
WebSocket room manager for real-time fan-out.

Connections join named rooms (child:<id>, user:<id>, classroom:<id>) and
receive every event emitted to those rooms. Room keys are namespaced by the
connection's center so tenants never share a room.
"""

import json
import logging
from typing import Any, Dict, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)

ROOM_KINDS = ("child", "user", "classroom")


def room_name(kind: str, entity_id: str) -> str:
    """Public room name as clients know it, e.g. "child:<id>"."""
    return f"{kind}:{entity_id}"


class RoomManager:
    """Tracks room membership of live WebSocket connections."""

    def __init__(self):
        # (center_id, room) -> set of sockets
        self._rooms: Dict[tuple[str, str], Set[WebSocket]] = {}
        # socket -> (center_id, rooms joined)
        self._memberships: Dict[WebSocket, tuple[str, Set[str]]] = {}

    async def connect(self, websocket: WebSocket, center_id: str):
        """Accept and register a new WebSocket connection."""
        await websocket.accept()
        self._memberships[websocket] = (center_id, set())

    def disconnect(self, websocket: WebSocket):
        """Remove a connection from every room it joined."""
        membership = self._memberships.pop(websocket, None)
        if not membership:
            return
        center_id, rooms = membership
        for room in rooms:
            self._discard(center_id, room, websocket)

    def join(self, websocket: WebSocket, room: str):
        membership = self._memberships.get(websocket)
        if not membership:
            return
        center_id, rooms = membership
        rooms.add(room)
        self._rooms.setdefault((center_id, room), set()).add(websocket)
        logger.info("Socket joined room %s", room, extra={"center_id": center_id})

    def leave(self, websocket: WebSocket, room: str):
        membership = self._memberships.get(websocket)
        if not membership:
            return
        center_id, rooms = membership
        rooms.discard(room)
        self._discard(center_id, room, websocket)

    def _discard(self, center_id: str, room: str, websocket: WebSocket):
        key = (center_id, room)
        members = self._rooms.get(key)
        if members is None:
            return
        members.discard(websocket)
        if not members:
            del self._rooms[key]

    async def emit(self, center_id: str, room: str, event: str, data: Any) -> int:
        """
        Send {"event", "data"} to every socket in a room, sender included.

        Best-effort: sockets that fail are dropped. Returns the number of
        sockets reached.
        """
        members = self._rooms.get((center_id, room), set()).copy()
        if not members:
            return 0

        frame = json.dumps({"event": event, "data": data})
        closed = []
        delivered = 0

        for ws in members:
            try:
                await ws.send_text(frame)
                delivered += 1
            except Exception:
                # Connection closed or errored
                closed.append(ws)

        # Clean up closed connections
        for ws in closed:
            self.disconnect(ws)

        logger.info("Relayed %s to %s (%d sockets)", event, room, delivered)
        return delivered

    def room_members(self, center_id: str, room: str) -> int:
        """Number of sockets currently in a room."""
        return len(self._rooms.get((center_id, room), set()))

    def get_total_connections(self) -> int:
        """Get total number of registered connections."""
        return len(self._memberships)


# Singleton instance
manager = RoomManager()
