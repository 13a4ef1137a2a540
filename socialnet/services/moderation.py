# socialnet/services/moderation.py
"""
Administrative moderation over posts, comments and accounts, plus
platform analytics for a time window.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from socialnet.errors import InvalidOperation, NotFound
from socialnet.models import Account, Comment, EntityKind, Post, post_likes
from socialnet.services.accounts import get_account
from socialnet.services.comments import soft_delete_comment
from socialnet.services.engagement import soft_delete_post
from socialnet.services.pagination import Page, paginate

logger = logging.getLogger(__name__)

ANALYTICS_PERIODS = {
    "1d": timedelta(days=1),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
    "90d": timedelta(days=90),
}
DEFAULT_ANALYTICS_PERIOD = "7d"

_MODELS = {EntityKind.post: Post, EntityKind.comment: Comment}


def _model_for(kind: str):
    try:
        return _MODELS[EntityKind(kind)]
    except ValueError:
        raise InvalidOperation(f'Invalid type "{kind}". Must be "post" or "comment"') from None


def _active(db: Session, kind: str, entity_id: int):
    model = _model_for(kind)
    entity = db.get(model, entity_id)
    if not entity or entity.deleted:
        raise NotFound(f"{model.__name__} {entity_id} not found")
    return entity


def list_reported(db: Session, kind: str, page: int, page_size: int) -> Page:
    """Reported, non-deleted posts or comments; highest report count first."""
    model = _model_for(kind)
    query = (
        db.query(model)
        .filter(model.reported.is_(True), model.deleted.is_(False))
        .order_by(model.report_count.desc(), model.created_at.desc(), model.id.desc())
    )
    return paginate(query, page, page_size)


def remove(db: Session, kind: str, entity_id: int, moderator_id: Optional[int] = None) -> None:
    """Soft delete a post or comment and detach it from its parent list."""
    entity = _active(db, kind, entity_id)
    if isinstance(entity, Post):
        soft_delete_post(db, entity)
    else:
        soft_delete_comment(db, entity)
    logger.info("%s %s removed by moderator %s", kind, entity_id, moderator_id)


def dismiss_report(db: Session, kind: str, entity_id: int, moderator_id: Optional[int] = None):
    """Clear the reported flag and reset the counter."""
    entity = _active(db, kind, entity_id)
    entity.reported = False
    entity.report_count = 0
    db.flush()
    logger.info("%s %s report dismissed by moderator %s", kind, entity_id, moderator_id)
    return entity


def _set_blocked(db: Session, account_id: int, blocked: bool, moderator_id: Optional[int]) -> Account:
    account = get_account(db, account_id)
    account.blocked = blocked
    db.flush()
    logger.info(
        "Account %s %s by moderator %s", account_id, "blocked" if blocked else "unblocked", moderator_id
    )
    return account


def block_account(db: Session, account_id: int, moderator_id: Optional[int] = None) -> Account:
    return _set_blocked(db, account_id, True, moderator_id)


def unblock_account(db: Session, account_id: int, moderator_id: Optional[int] = None) -> Account:
    return _set_blocked(db, account_id, False, moderator_id)


def list_accounts(
    db: Session,
    page: int,
    page_size: int,
    search: Optional[str] = None,
    blocked: Optional[bool] = None,
) -> Page:
    """Accounts newest first, optionally filtered by substring and blocked state."""
    query = db.query(Account)
    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.filter(
            or_(
                func.lower(Account.handle).like(pattern),
                func.lower(Account.email).like(pattern),
                func.lower(Account.display_name).like(pattern),
            )
        )
    if blocked is not None:
        query = query.filter(Account.blocked.is_(blocked))
    query = query.order_by(Account.created_at.desc(), Account.id.desc())
    return paginate(query, page, page_size)


def period_start(period: str, now: Optional[datetime] = None) -> datetime:
    """Start of the analytics window; unknown periods fall back to 7 days."""
    now = now or datetime.utcnow()
    return now - ANALYTICS_PERIODS.get(period, ANALYTICS_PERIODS[DEFAULT_ANALYTICS_PERIOD])


def compute_analytics(db: Session, since: datetime) -> Dict[str, Any]:
    """
    Platform counters over the window starting at ``since``.

    Args:
        db: Database session
        since: Start of the window (inclusive)

    Returns:
        Dict with users, posts, comments and engagement sections
    """
    visible_posts = db.query(Post).filter(Post.deleted.is_(False))
    visible_comments = db.query(Comment).filter(Comment.deleted.is_(False))

    total_posts = visible_posts.count()
    total_likes = (
        db.query(func.count())
        .select_from(post_likes)
        .join(Post, Post.id == post_likes.c.post_id)
        .filter(Post.deleted.is_(False))
        .scalar()
    )
    posts_with_likes = (
        db.query(func.count(func.distinct(post_likes.c.post_id)))
        .join(Post, Post.id == post_likes.c.post_id)
        .filter(Post.deleted.is_(False))
        .scalar()
    )
    active_users = (
        db.query(func.count(func.distinct(Post.author_id)))
        .filter(Post.deleted.is_(False), Post.created_at >= since)
        .scalar()
    )

    return {
        "since": since,
        "users": {
            "total": db.query(Account).count(),
            "new": db.query(Account).filter(Account.created_at >= since).count(),
            "blocked": db.query(Account).filter(Account.blocked.is_(True)).count(),
            "active": active_users,
        },
        "posts": {
            "total": total_posts,
            "new": visible_posts.filter(Post.created_at >= since).count(),
            "reported": visible_posts.filter(Post.reported.is_(True)).count(),
            "with_likes": posts_with_likes,
        },
        "comments": {
            "total": visible_comments.count(),
            "new": visible_comments.filter(Comment.created_at >= since).count(),
            "reported": visible_comments.filter(Comment.reported.is_(True)).count(),
        },
        "engagement": {
            "total_likes": total_likes,
            "average_likes_per_post": round(total_likes / total_posts, 2) if total_posts else 0.0,
        },
    }
