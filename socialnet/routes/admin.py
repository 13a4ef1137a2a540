# socialnet/routes/admin.py
"""
Moderation and analytics endpoints. Every route requires an admin account.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from socialnet.config import ADMIN_PAGE_SIZE, MAX_PAGE_SIZE
from socialnet.db import get_db
from socialnet.models import Account, Post
from socialnet.routes.deps import get_admin_account
from socialnet.schemas import AccountOut, CommentOut, MessageResponse, Pagination, PostOut
from socialnet.services import moderation

router = APIRouter(prefix="/admin", tags=["admin"])


class DismissRequest(BaseModel):
    type: str = Field(..., description='"post" or "comment"')
    id: int = Field(..., ge=1)


class ReportedPage(BaseModel):
    kind: str
    posts: List[PostOut] = Field(default_factory=list)
    comments: List[CommentOut] = Field(default_factory=list)
    pagination: Pagination


class AccountPage(BaseModel):
    accounts: List[AccountOut]
    pagination: Pagination


class UserStats(BaseModel):
    total: int
    new: int
    blocked: int
    active: int


class PostStats(BaseModel):
    total: int
    new: int
    reported: int
    with_likes: int


class CommentStats(BaseModel):
    total: int
    new: int
    reported: int


class EngagementStats(BaseModel):
    total_likes: int
    average_likes_per_post: float


class AnalyticsResponse(BaseModel):
    period: str
    since: datetime
    users: UserStats
    posts: PostStats
    comments: CommentStats
    engagement: EngagementStats


@router.get("/reported/{kind}", response_model=ReportedPage)
def list_reported(
    kind: str = Path(..., description='"post" or "comment"'),
    page: int = Query(1, ge=1),
    limit: int = Query(ADMIN_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    admin: Account = Depends(get_admin_account),
    db: Session = Depends(get_db),
) -> ReportedPage:
    result = moderation.list_reported(db, kind, page, limit)
    pagination = Pagination.from_page(result)
    if kind == "post":
        return ReportedPage(kind=kind, posts=[PostOut.from_post(p) for p in result.items], pagination=pagination)
    return ReportedPage(kind=kind, comments=[CommentOut.from_comment(c) for c in result.items], pagination=pagination)


@router.delete("/{kind}/{entity_id}", response_model=MessageResponse)
def remove_content(
    kind: str = Path(..., description='"post" or "comment"'),
    entity_id: int = Path(..., ge=1),
    admin: Account = Depends(get_admin_account),
    db: Session = Depends(get_db),
) -> MessageResponse:
    moderation.remove(db, kind, entity_id, moderator_id=admin.id)
    return MessageResponse(message=f"{kind.capitalize()} removed successfully")


@router.post("/dismiss-report", response_model=MessageResponse)
def dismiss_report(
    payload: DismissRequest,
    admin: Account = Depends(get_admin_account),
    db: Session = Depends(get_db),
) -> MessageResponse:
    entity = moderation.dismiss_report(db, payload.type, payload.id, moderator_id=admin.id)
    kind = "post" if isinstance(entity, Post) else "comment"
    return MessageResponse(
        message="Report dismissed successfully",
        details={"type": kind, "id": entity.id, "report_count": entity.report_count},
    )


@router.post("/accounts/{account_id}/block", response_model=AccountOut)
def block_account(
    account_id: int = Path(..., ge=1),
    admin: Account = Depends(get_admin_account),
    db: Session = Depends(get_db),
) -> AccountOut:
    return AccountOut.from_account(moderation.block_account(db, account_id, moderator_id=admin.id))


@router.post("/accounts/{account_id}/unblock", response_model=AccountOut)
def unblock_account(
    account_id: int = Path(..., ge=1),
    admin: Account = Depends(get_admin_account),
    db: Session = Depends(get_db),
) -> AccountOut:
    return AccountOut.from_account(moderation.unblock_account(db, account_id, moderator_id=admin.id))


@router.get("/accounts", response_model=AccountPage)
def list_accounts(
    page: int = Query(1, ge=1),
    limit: int = Query(ADMIN_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    search: Optional[str] = Query(None, description="Substring of handle, email or display name"),
    blocked: Optional[bool] = Query(None),
    admin: Account = Depends(get_admin_account),
    db: Session = Depends(get_db),
) -> AccountPage:
    result = moderation.list_accounts(db, page, limit, search=search, blocked=blocked)
    return AccountPage(
        accounts=[AccountOut.from_account(a) for a in result.items],
        pagination=Pagination.from_page(result),
    )


@router.get("/analytics", response_model=AnalyticsResponse)
def get_analytics(
    period: str = Query(moderation.DEFAULT_ANALYTICS_PERIOD, description="1d, 7d, 30d or 90d"),
    admin: Account = Depends(get_admin_account),
    db: Session = Depends(get_db),
) -> AnalyticsResponse:
    """Platform counters; an unrecognised period falls back to 7d."""
    if period not in moderation.ANALYTICS_PERIODS:
        period = moderation.DEFAULT_ANALYTICS_PERIOD
    stats = moderation.compute_analytics(db, moderation.period_start(period))
    return AnalyticsResponse(period=period, **stats)
