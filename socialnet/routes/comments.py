# socialnet/routes/comments.py
"""FastAPI routes for comments, replies and comment engagement."""

from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Path, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from socialnet import realtime
from socialnet.config import COMMENTS_PAGE_SIZE, MAX_PAGE_SIZE
from socialnet.db import get_db
from socialnet.models import Account
from socialnet.routes.deps import get_current_account
from socialnet.routes.notifications import push_notification
from socialnet.routes.posts import LikeResponse, ReportResponse
from socialnet.schemas import CommentOut, MessageResponse, Pagination
from socialnet.services import comments

router = APIRouter(prefix="/comments", tags=["comments"])


class CommentCreate(BaseModel):
    post_id: int = Field(..., ge=1, description="Post being commented on")
    body: str = Field(..., max_length=2000)
    parent_comment_id: Optional[int] = Field(None, ge=1, description="Top-level comment being replied to")


class CommentUpdate(BaseModel):
    body: str = Field(..., max_length=2000)


class CommentThreadOut(CommentOut):
    reply_comments: List[CommentOut] = Field(default_factory=list)


class CommentPage(BaseModel):
    comments: List[CommentThreadOut]
    pagination: Pagination


@router.post("", response_model=CommentOut, status_code=201)
def add_comment(
    payload: CommentCreate,
    background_tasks: BackgroundTasks,
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> CommentOut:
    """
    Comment on a post, or reply to a top-level comment.

    The post author (or, for a reply, the parent comment's author) gets
    a notification unless they wrote the comment themselves.
    """
    result = comments.add_comment(db, current.id, payload.post_id, payload.body, payload.parent_comment_id)
    out = CommentOut.from_comment(result.comment)
    post_author_id = result.comment.post.author_id
    if post_author_id != current.id:
        background_tasks.add_task(
            realtime.hub.publish,
            post_author_id,
            realtime.POST_COMMENTED,
            {"post_id": payload.post_id, "account_id": current.id, "comment": out.model_dump(mode="json")},
        )
    push_notification(background_tasks, result.notification)
    return out


@router.get("/post/{post_id}", response_model=CommentPage)
def list_comments(
    post_id: int = Path(..., ge=1),
    page: int = Query(1, ge=1),
    limit: int = Query(COMMENTS_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> CommentPage:
    result = comments.list_comments(db, post_id, page, limit)
    threads = [
        CommentThreadOut(
            **CommentOut.from_comment(t.comment).model_dump(),
            reply_comments=[CommentOut.from_comment(r) for r in t.replies],
        )
        for t in result.items
    ]
    return CommentPage(comments=threads, pagination=Pagination.from_page(result))


@router.patch("/{comment_id}", response_model=CommentOut)
def update_comment(
    payload: CommentUpdate,
    comment_id: int = Path(..., ge=1),
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> CommentOut:
    return CommentOut.from_comment(comments.edit_comment(db, current.id, comment_id, payload.body))


@router.delete("/{comment_id}", response_model=MessageResponse)
def delete_comment(
    comment_id: int = Path(..., ge=1),
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> MessageResponse:
    comments.delete_comment(db, current.id, comment_id)
    return MessageResponse(message="Comment deleted successfully")


@router.post("/{comment_id}/like", response_model=LikeResponse)
def like_comment(
    comment_id: int = Path(..., ge=1),
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> LikeResponse:
    result = comments.toggle_like_comment(db, current.id, comment_id)
    return LikeResponse(
        message="Comment liked" if result.liked else "Comment unliked",
        liked=result.liked,
        likes=result.likes,
    )


@router.post("/{comment_id}/report", response_model=ReportResponse)
def report_comment(
    comment_id: int = Path(..., ge=1),
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> ReportResponse:
    result = comments.report_comment(db, current.id, comment_id)
    return ReportResponse(
        message="Comment reported successfully",
        reported=result.reported,
        report_count=result.report_count,
    )
