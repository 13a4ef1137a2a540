# socialnet/services/chat.py
"""Direct messages between two accounts and the conversation list."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import and_, case, func, or_, select, update
from sqlalchemy.orm import Session

from socialnet.errors import InvalidArgument, InvalidOperation, NotFound
from socialnet.models import Account, DirectMessage, MessageType, Notification, NotificationCategory
from socialnet.services.accounts import get_account
from socialnet.services.notifications import notify
from socialnet.services.pagination import Page, paginate

logger = logging.getLogger(__name__)


@dataclass
class SentMessage:
    message: DirectMessage
    notification: Optional[Notification] = None


@dataclass
class Conversation:
    """Latest message exchanged with one counterpart."""
    counterpart: Account
    last_message: DirectMessage
    unread_count: int


def send_message(
    db: Session,
    sender_id: int,
    receiver_id: int,
    body: str,
    message_type: str = MessageType.text.value,
    media_url: str = "",
) -> SentMessage:
    """
    Store a direct message and notify the receiver.

    Raises:
        NotFound: receiver does not exist
        InvalidArgument: empty body
        InvalidOperation: unknown message type
    """
    sender = get_account(db, sender_id)
    try:
        receiver = get_account(db, receiver_id)
    except NotFound:
        raise NotFound(f"Receiver {receiver_id} not found") from None
    body = (body or "").strip()
    if not body:
        raise InvalidArgument("Message body is required")
    try:
        kind = MessageType(message_type or MessageType.text.value)
    except ValueError:
        raise InvalidOperation(f"Invalid message type: {message_type}") from None

    message = DirectMessage(
        sender_id=sender_id,
        receiver_id=receiver_id,
        body=body,
        message_type=kind,
        media_url=media_url or "",
    )
    db.add(message)
    db.flush()
    logger.info("Message %s sent by account %s to %s", message.id, sender.handle, receiver.handle)

    notification = notify(
        db,
        recipient_id=receiver_id,
        category=NotificationCategory.message,
        actor_id=sender_id,
        content=f"{sender.handle} sent you a message",
        message_id=message.id,
    )
    return SentMessage(message=message, notification=notification)


def _between(account_id: int, other_id: int):
    return or_(
        and_(DirectMessage.sender_id == account_id, DirectMessage.receiver_id == other_id),
        and_(DirectMessage.sender_id == other_id, DirectMessage.receiver_id == account_id),
    )


def get_messages(db: Session, account_id: int, other_id: int, page: int, page_size: int) -> Page:
    """
    Messages exchanged with ``other_id``, oldest first.

    Unread messages sent to ``account_id`` by ``other_id`` are marked read.
    """
    get_account(db, other_id)
    query = (
        db.query(DirectMessage)
        .filter(_between(account_id, other_id), DirectMessage.deleted.is_(False))
        .order_by(DirectMessage.created_at, DirectMessage.id)
    )
    result = paginate(query, page, page_size)

    db.execute(
        update(DirectMessage)
        .where(
            DirectMessage.sender_id == other_id,
            DirectMessage.receiver_id == account_id,
            DirectMessage.read.is_(False),
        )
        .values(read=True, read_at=datetime.utcnow())
        .execution_options(synchronize_session="fetch")
    )
    return result


def list_conversations(db: Session, account_id: int) -> List[Conversation]:
    """One entry per counterpart, most recently active conversation first."""
    pairs = (
        select(
            case(
                (DirectMessage.sender_id == account_id, DirectMessage.receiver_id),
                else_=DirectMessage.sender_id,
            ).label("counterpart_id"),
            DirectMessage.id.label("message_id"),
            case(
                (and_(DirectMessage.receiver_id == account_id, DirectMessage.read.is_(False)), 1),
                else_=0,
            ).label("unread"),
        )
        .where(
            or_(DirectMessage.sender_id == account_id, DirectMessage.receiver_id == account_id),
            DirectMessage.deleted.is_(False),
        )
        .subquery()
    )
    summary = select(
        pairs.c.counterpart_id,
        func.max(pairs.c.message_id).label("last_id"),
        func.sum(pairs.c.unread).label("unread_count"),
    ).group_by(pairs.c.counterpart_id)
    rows = db.execute(summary).all()
    if not rows:
        return []

    messages = {
        m.id: m
        for m in db.query(DirectMessage).filter(DirectMessage.id.in_([r.last_id for r in rows]))
    }
    accounts = {
        a.id: a
        for a in db.query(Account).filter(Account.id.in_([r.counterpart_id for r in rows]))
    }
    conversations = [
        Conversation(
            counterpart=accounts[r.counterpart_id],
            last_message=messages[r.last_id],
            unread_count=int(r.unread_count or 0),
        )
        for r in rows
    ]
    conversations.sort(key=lambda c: (c.last_message.created_at, c.last_message.id), reverse=True)
    return conversations


def delete_message(db: Session, actor_id: int, message_id: int) -> DirectMessage:
    """Soft delete; only the sender may delete."""
    message = (
        db.query(DirectMessage)
        .filter(
            DirectMessage.id == message_id,
            DirectMessage.sender_id == actor_id,
            DirectMessage.deleted.is_(False),
        )
        .first()
    )
    if not message:
        raise NotFound(f"Message {message_id} not found")
    message.deleted = True
    db.flush()
    logger.info("Message %s deleted by account %s", message_id, actor_id)
    return message
