# socialnet/routes/posts.py
"""FastAPI routes for posts and post engagement."""

from typing import Dict, List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Path, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from socialnet import realtime
from socialnet.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from socialnet.db import get_db
from socialnet.models import Account
from socialnet.routes.deps import get_current_account
from socialnet.routes.notifications import push_notification
from socialnet.schemas import MessageResponse, PostOut, PostPage
from socialnet.services import engagement

router = APIRouter(prefix="/posts", tags=["posts"])


class MediaRef(BaseModel):
    kind: str = Field(..., description='"image" or "video"')
    url: str = Field(..., min_length=1)


class PostCreate(BaseModel):
    body: str = Field("", max_length=5000)
    media: List[MediaRef] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    location: Optional[str] = Field(None, max_length=200)


class PostUpdate(BaseModel):
    body: Optional[str] = Field(None, max_length=5000)
    media: Optional[List[MediaRef]] = None
    tags: Optional[List[str]] = None
    location: Optional[str] = Field(None, max_length=200)


class LikeResponse(BaseModel):
    message: str
    liked: bool
    likes: List[int]


class ShareResponse(BaseModel):
    message: str
    recorded: bool
    shares: List[int]


class ReportResponse(BaseModel):
    message: str
    reported: bool
    report_count: int


def _fields(payload: BaseModel) -> Dict:
    return payload.model_dump(exclude_unset=True)


@router.post("", response_model=PostOut, status_code=201)
def create_post(
    payload: PostCreate,
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> PostOut:
    post = engagement.create_post(
        db,
        current.id,
        body=payload.body,
        media=[m.model_dump() for m in payload.media],
        tags=payload.tags,
        location=payload.location,
    )
    return PostOut.from_post(post)


@router.get("", response_model=PostPage)
def list_posts(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> PostPage:
    return PostPage.from_page(engagement.list_posts(db, page, limit))


@router.get("/{post_id}", response_model=PostOut)
def get_post(
    post_id: int = Path(..., ge=1),
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> PostOut:
    return PostOut.from_post(engagement.get_post(db, post_id))


@router.patch("/{post_id}", response_model=PostOut)
def update_post(
    payload: PostUpdate,
    post_id: int = Path(..., ge=1),
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> PostOut:
    """Change only the supplied fields of one of your posts."""
    return PostOut.from_post(engagement.edit_post(db, current.id, post_id, _fields(payload)))


@router.delete("/{post_id}", response_model=MessageResponse)
def delete_post(
    post_id: int = Path(..., ge=1),
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> MessageResponse:
    engagement.delete_post(db, current.id, post_id)
    return MessageResponse(message="Post deleted successfully")


@router.post("/{post_id}/like", response_model=LikeResponse)
def like_post(
    background_tasks: BackgroundTasks,
    post_id: int = Path(..., ge=1),
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> LikeResponse:
    """Like the post, or unlike it when already liked."""
    result = engagement.toggle_like(db, current.id, post_id)
    if result.liked:
        post = engagement.get_post(db, post_id)
        background_tasks.add_task(
            realtime.hub.publish,
            post.author_id,
            realtime.POST_LIKED,
            {"post_id": post_id, "account_id": current.id, "likes": result.likes},
        )
    push_notification(background_tasks, result.notification)
    return LikeResponse(
        message="Post liked" if result.liked else "Post unliked",
        liked=result.liked,
        likes=result.likes,
    )


@router.post("/{post_id}/share", response_model=ShareResponse)
def share_post(
    background_tasks: BackgroundTasks,
    post_id: int = Path(..., ge=1),
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> ShareResponse:
    result = engagement.toggle_share(db, current.id, post_id)
    push_notification(background_tasks, result.notification)
    return ShareResponse(message="Post shared successfully", recorded=result.recorded, shares=result.shares)


@router.post("/{post_id}/report", response_model=ReportResponse)
def report_post(
    post_id: int = Path(..., ge=1),
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> ReportResponse:
    result = engagement.report_post(db, current.id, post_id)
    return ReportResponse(
        message="Post reported successfully",
        reported=result.reported,
        report_count=result.report_count,
    )
