"""
Best-effort real-time push channel.

WebSocket connections join a room named after the account id. Events are
pushed after the REST response has been produced; nothing here is read back
by the services, so a dropped frame never changes stored state.
"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, Optional, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)

# Event names understood by clients
RECEIVE_MESSAGE = "receiveMessage"
POST_LIKED = "postLiked"
POST_COMMENTED = "postCommented"
USER_FOLLOWED = "userFollowed"
NOTIFICATION = "notification"


class RoomHub:
    """WebSocket connections grouped into per-account rooms."""

    def __init__(self):
        self.rooms: Dict[int, Set[WebSocket]] = defaultdict(set)

    async def join(self, account_id: int, websocket: WebSocket) -> None:
        await websocket.accept()
        self.rooms[account_id].add(websocket)
        logger.info("Account %s joined room (%s connections)", account_id, len(self.rooms[account_id]))

    def leave(self, account_id: int, websocket: WebSocket) -> None:
        room = self.rooms.get(account_id)
        if room is None:
            return
        room.discard(websocket)
        if not room:
            del self.rooms[account_id]
        logger.info("Account %s left room", account_id)

    def connection_count(self, account_id: Optional[int] = None) -> int:
        """Open connections in one room, or across all rooms."""
        if account_id is None:
            return sum(len(room) for room in self.rooms.values())
        return len(self.rooms.get(account_id, ()))

    async def publish(self, account_id: int, event: str, data: Dict[str, Any]) -> int:
        """
        Push ``event`` to every connection in the account's room.

        Returns:
            Number of connections the frame reached
        """
        frame = {"event": event, "data": data, "sent_at": datetime.utcnow().isoformat()}
        delivered = 0
        for websocket in list(self.rooms.get(account_id, ())):
            try:
                await websocket.send_json(frame)
                delivered += 1
            except Exception as e:
                logger.warning("Dropping connection for account %s after send failure: %s", account_id, e)
                self.leave(account_id, websocket)
        logger.debug("Event %s for account %s reached %s connections", event, account_id, delivered)
        return delivered


hub = RoomHub()
