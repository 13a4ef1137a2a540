# socialnet/services/notifications.py
"""Notification dispatcher and per-account notification inbox."""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from socialnet.errors import NotFound
from socialnet.models import Notification, NotificationCategory
from socialnet.services.pagination import Page, paginate

logger = logging.getLogger(__name__)


def notify(
    db: Session,
    recipient_id: int,
    category: NotificationCategory,
    actor_id: int,
    content: str,
    post_id: Optional[int] = None,
    comment_id: Optional[int] = None,
    message_id: Optional[int] = None,
) -> Optional[Notification]:
    """
    Persist a notification for ``recipient_id`` about something ``actor_id`` did.

    Self-notifications are never created. The insert runs in a SAVEPOINT;
    if it fails only the savepoint is rolled back, the failure is logged
    and None is returned, so the triggering action still completes.

    Returns:
        The new Notification, or None when nothing was created
    """
    if recipient_id == actor_id:
        return None

    notification = Notification(
        recipient_id=recipient_id,
        actor_id=actor_id,
        category=NotificationCategory(category),
        content=content,
        post_id=post_id,
        comment_id=comment_id,
        message_id=message_id,
    )
    try:
        with db.begin_nested():
            db.add(notification)
            db.flush()
    except SQLAlchemyError:
        logger.exception(
            "Create notification failed: %s for account %s from %s", category, recipient_id, actor_id
        )
        if notification in db:
            db.expunge(notification)
        return None

    logger.debug("Notification %s (%s) created for account %s", notification.id, category, recipient_id)
    return notification


def list_notifications(db: Session, account_id: int, page: int, page_size: int) -> Page:
    """Newest first; ``extra["unread_count"]`` carries the unread total."""
    query = (
        db.query(Notification)
        .filter(Notification.recipient_id == account_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    result = paginate(query, page, page_size)
    result.extra["unread_count"] = unread_count(db, account_id)
    return result


def unread_count(db: Session, account_id: int) -> int:
    return (
        db.query(Notification)
        .filter(Notification.recipient_id == account_id, Notification.read.is_(False))
        .count()
    )


def _owned(db: Session, account_id: int, notification_id: int) -> Notification:
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.recipient_id == account_id)
        .first()
    )
    if not notification:
        raise NotFound(f"Notification {notification_id} not found")
    return notification


def mark_read(db: Session, account_id: int, notification_id: int) -> Notification:
    notification = _owned(db, account_id, notification_id)
    if not notification.read:
        notification.read = True
        notification.read_at = datetime.utcnow()
        db.flush()
        logger.info("Notification %s marked as read for account %s", notification_id, account_id)
    return notification


def mark_all_read(db: Session, account_id: int) -> int:
    """Mark every unread notification read; returns how many changed."""
    result = db.execute(
        update(Notification)
        .where(Notification.recipient_id == account_id, Notification.read.is_(False))
        .values(read=True, read_at=datetime.utcnow())
        .execution_options(synchronize_session="fetch")
    )
    logger.info("All notifications marked as read for account %s (%s)", account_id, result.rowcount)
    return result.rowcount


def delete_notification(db: Session, account_id: int, notification_id: int) -> None:
    notification = _owned(db, account_id, notification_id)
    db.delete(notification)
    db.flush()
    logger.info("Notification %s deleted by account %s", notification_id, account_id)
