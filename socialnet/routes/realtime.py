# socialnet/routes/realtime.py
"""WebSocket endpoint that joins a client to its account room."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from socialnet import realtime
from socialnet.config import ACCOUNT_HEADER
from socialnet.db import get_db
from socialnet.models import Account

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


@router.websocket("/ws/{account_id}")
async def account_channel(
    websocket: WebSocket,
    account_id: int,
    x_account_id: Optional[str] = Header(None, alias=ACCOUNT_HEADER),
    db: Session = Depends(get_db),
):
    """
    Receive pushes addressed to ``account_id`` until the client disconnects.

    The caller must be authenticated as ``account_id`` through the same
    header as the REST routes. Clients may send ``ping`` to keep the
    connection alive; anything else, binary frames included, is ignored.
    """
    caller = x_account_id.strip() if x_account_id else ""
    allowed = caller.isdigit() and int(caller) == account_id
    if allowed:
        account = db.get(Account, account_id)
        allowed = account is not None and not account.blocked
    # release the connection; the socket may stay open for hours
    db.commit()
    if not allowed:
        logger.warning("Rejected websocket for account %s (caller %r)", account_id, x_account_id)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await realtime.hub.join(account_id, websocket)
    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break
            if frame.get("text") == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        pass
    finally:
        realtime.hub.leave(account_id, websocket)
