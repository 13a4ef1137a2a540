# socialnet/routes/chat.py
"""FastAPI routes for direct messages."""

from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Path, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from socialnet import realtime
from socialnet.config import MAX_PAGE_SIZE, MESSAGES_PAGE_SIZE
from socialnet.db import get_db
from socialnet.models import Account
from socialnet.routes.deps import get_current_account
from socialnet.routes.notifications import push_notification
from socialnet.schemas import AccountSummary, MessageOut, MessageResponse, Pagination
from socialnet.services import chat

router = APIRouter(prefix="/chat", tags=["chat"])


class MessageCreate(BaseModel):
    receiver_id: int = Field(..., ge=1)
    body: str = Field(..., max_length=1000)
    message_type: str = Field("text", description="text, image, video or file")
    media_url: str = Field("", max_length=500)


class MessagePage(BaseModel):
    messages: List[MessageOut]
    pagination: Pagination


class ConversationOut(BaseModel):
    account: AccountSummary
    last_message: MessageOut
    unread_count: int


class ConversationList(BaseModel):
    conversations: List[ConversationOut]


@router.post("/messages", response_model=MessageOut, status_code=201)
def send_message(
    payload: MessageCreate,
    background_tasks: BackgroundTasks,
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> MessageOut:
    """Send a direct message and push it to the receiver's room."""
    result = chat.send_message(
        db,
        current.id,
        payload.receiver_id,
        payload.body,
        message_type=payload.message_type,
        media_url=payload.media_url,
    )
    out = MessageOut.from_message(result.message)
    background_tasks.add_task(
        realtime.hub.publish,
        payload.receiver_id,
        realtime.RECEIVE_MESSAGE,
        out.model_dump(mode="json"),
    )
    push_notification(background_tasks, result.notification)
    return out


@router.get("/messages/{other_id}", response_model=MessagePage)
def get_messages(
    other_id: int = Path(..., ge=1),
    page: int = Query(1, ge=1),
    limit: int = Query(MESSAGES_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> MessagePage:
    result = chat.get_messages(db, current.id, other_id, page, limit)
    return MessagePage(
        messages=[MessageOut.from_message(m) for m in result.items],
        pagination=Pagination.from_page(result),
    )


@router.get("/conversations", response_model=ConversationList)
def list_conversations(
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> ConversationList:
    return ConversationList(
        conversations=[
            ConversationOut(
                account=AccountSummary.from_account(c.counterpart),
                last_message=MessageOut.from_message(c.last_message),
                unread_count=c.unread_count,
            )
            for c in chat.list_conversations(db, current.id)
        ]
    )


@router.delete("/messages/{message_id}", response_model=MessageResponse)
def delete_message(
    message_id: int = Path(..., ge=1),
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> MessageResponse:
    chat.delete_message(db, current.id, message_id)
    return MessageResponse(message="Message deleted successfully")
