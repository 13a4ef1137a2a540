# socialnet/routes/notifications.py
"""FastAPI routes for the notification inbox."""

from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Path, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from socialnet import realtime
from socialnet.config import MAX_PAGE_SIZE, NOTIFICATIONS_PAGE_SIZE
from socialnet.db import get_db
from socialnet.models import Account, Notification
from socialnet.routes.deps import get_current_account
from socialnet.schemas import MessageResponse, NotificationOut, Pagination
from socialnet.services import notifications

router = APIRouter(prefix="/notifications", tags=["notifications"])


class NotificationPage(BaseModel):
    notifications: List[NotificationOut]
    unread_count: int = Field(..., description="Unread notifications across all pages")
    pagination: Pagination


def push_notification(background_tasks: BackgroundTasks, notification: Optional[Notification]) -> None:
    """Schedule a ``notification`` push to the recipient's room, if one was created."""
    if notification is None:
        return
    background_tasks.add_task(
        realtime.hub.publish,
        notification.recipient_id,
        realtime.NOTIFICATION,
        NotificationOut.from_notification(notification).model_dump(mode="json"),
    )


@router.get("", response_model=NotificationPage)
def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(NOTIFICATIONS_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> NotificationPage:
    result = notifications.list_notifications(db, current.id, page, limit)
    return NotificationPage(
        notifications=[NotificationOut.from_notification(n) for n in result.items],
        unread_count=result.extra["unread_count"],
        pagination=Pagination.from_page(result),
    )


@router.post("/read-all", response_model=MessageResponse)
def mark_all_read(
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> MessageResponse:
    changed = notifications.mark_all_read(db, current.id)
    return MessageResponse(message="All notifications marked as read", details={"updated": changed})


@router.post("/{notification_id}/read", response_model=NotificationOut)
def mark_read(
    notification_id: int = Path(..., ge=1),
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> NotificationOut:
    return NotificationOut.from_notification(notifications.mark_read(db, current.id, notification_id))


@router.delete("/{notification_id}", response_model=MessageResponse)
def delete_notification(
    notification_id: int = Path(..., ge=1),
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> MessageResponse:
    notifications.delete_notification(db, current.id, notification_id)
    return MessageResponse(message="Notification deleted successfully")
