# socialnet/services/engagement.py
"""
Content-engagement service for posts.

Owns post creation, edits and soft deletion, plus the like/share/report
operations and the notifications they trigger.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from socialnet.errors import InvalidArgument, NotFound
from socialnet.models import Notification, NotificationCategory, Post
from socialnet.services.accounts import get_account
from socialnet.services.links import ACCOUNT_POSTS, POST_LIKES, POST_SHARES
from socialnet.services.notifications import notify
from socialnet.services.pagination import Page, paginate

logger = logging.getLogger(__name__)

MEDIA_KINDS = ("image", "video")
EDITABLE_POST_FIELDS = ("body", "media", "tags", "location")


@dataclass
class LikeResult:
    """Like set after a toggle and which branch was taken."""
    liked: bool
    likes: List[int]
    notification: Optional[Notification] = None


@dataclass
class ShareResult:
    """Share set after a share call; ``recorded`` is False for repeat shares."""
    recorded: bool
    shares: List[int]
    notification: Optional[Notification] = None


@dataclass
class ReportResult:
    """Report state after a report call; ``counted`` is False once already reported."""
    counted: bool
    reported: bool
    report_count: int


def _clean_media(media: Optional[List[Dict[str, Any]]]) -> List[Dict[str, str]]:
    cleaned = []
    for item in media or []:
        kind = (item or {}).get("kind")
        url = ((item or {}).get("url") or "").strip()
        if kind not in MEDIA_KINDS or not url:
            raise InvalidArgument(f"Media entries need kind in {MEDIA_KINDS} and a url")
        cleaned.append({"kind": kind, "url": url})
    return cleaned


def _clean_tags(tags: Optional[List[str]]) -> List[str]:
    return [t.strip().lstrip("#") for t in tags or [] if t and t.strip().lstrip("#")]


def _active_post(db: Session, post_id: int) -> Post:
    post = db.get(Post, post_id)
    if not post or post.deleted:
        raise NotFound(f"Post {post_id} not found")
    return post


def _owned_post(db: Session, actor_id: int, post_id: int) -> Post:
    post = _active_post(db, post_id)
    if post.author_id != actor_id:
        raise NotFound(f"Post {post_id} not found")
    return post


def create_post(
    db: Session,
    author_id: int,
    body: str,
    media: Optional[List[Dict[str, Any]]] = None,
    tags: Optional[List[str]] = None,
    location: Optional[str] = None,
) -> Post:
    """
    Persist a post and append it to the author's post list.

    Raises:
        NotFound: author does not exist
        InvalidArgument: neither body text nor media supplied
    """
    author = get_account(db, author_id)
    body = (body or "").strip()
    media = _clean_media(media)
    if not body and not media:
        raise InvalidArgument("A post needs text or at least one media item")

    post = Post(
        author_id=author_id,
        body=body,
        media=media,
        tags=_clean_tags(tags),
        location=location or None,
    )
    db.add(post)
    db.flush()
    ACCOUNT_POSTS.add(db, author_id, post.id)

    logger.info("Post created: %s by account %s", post.id, author.handle)
    return post


def get_post(db: Session, post_id: int) -> Post:
    return _active_post(db, post_id)


def list_posts(db: Session, page: int, page_size: int) -> Page:
    """All visible posts, newest first."""
    query = (
        db.query(Post)
        .filter(Post.deleted.is_(False))
        .order_by(Post.created_at.desc(), Post.id.desc())
    )
    return paginate(query, page, page_size)


def edit_post(db: Session, actor_id: int, post_id: int, fields: Dict[str, Any]) -> Post:
    """
    Partial update of a post by its author.

    Only the keys present in ``fields`` change.

    Raises:
        NotFound: post missing, deleted, or not written by ``actor_id``
        InvalidArgument: unknown field, or the edit would leave the post empty
    """
    unknown = set(fields) - set(EDITABLE_POST_FIELDS)
    if unknown:
        raise InvalidArgument(f"Unknown post fields: {', '.join(sorted(unknown))}")

    post = _owned_post(db, actor_id, post_id)
    if "body" in fields:
        post.body = (fields["body"] or "").strip()
    if "media" in fields:
        post.media = _clean_media(fields["media"])
    if "tags" in fields:
        post.tags = _clean_tags(fields["tags"])
    if "location" in fields:
        post.location = fields["location"] or None
    if not post.body and not post.media:
        raise InvalidArgument("A post needs text or at least one media item")

    db.flush()
    logger.info("Post updated: %s fields=%s", post_id, sorted(fields))
    return post


def delete_post(db: Session, actor_id: int, post_id: int) -> Post:
    """Soft delete by the author; the post leaves the author's post list."""
    post = _owned_post(db, actor_id, post_id)
    soft_delete_post(db, post)
    logger.info("Post deleted: %s by account %s", post_id, actor_id)
    return post


def soft_delete_post(db: Session, post: Post) -> None:
    post.deleted = True
    db.flush()
    ACCOUNT_POSTS.remove(db, post.author_id, post.id)


def toggle_like(db: Session, actor_id: int, post_id: int) -> LikeResult:
    """
    Like the post, or unlike it when the actor already likes it.

    A ``like`` notification goes to the author on the like branch unless
    the actor is the author.
    """
    post = _active_post(db, post_id)
    actor = get_account(db, actor_id)

    liked = POST_LIKES.toggle(db, post_id, actor_id)
    notification = None
    if liked:
        logger.info("Post liked: %s by account %s", post_id, actor.handle)
        notification = notify(
            db,
            recipient_id=post.author_id,
            category=NotificationCategory.like,
            actor_id=actor_id,
            content=f"{actor.handle} liked your post",
            post_id=post_id,
        )
    else:
        logger.info("Post unliked: %s by account %s", post_id, actor.handle)

    return LikeResult(liked=liked, likes=POST_LIKES.members(db, post_id), notification=notification)


def toggle_share(db: Session, actor_id: int, post_id: int) -> ShareResult:
    """
    Record a share. Unlike likes, shares are never withdrawn: repeat calls
    by the same actor leave the share set untouched.
    """
    post = _active_post(db, post_id)
    actor = get_account(db, actor_id)

    recorded = POST_SHARES.add(db, post_id, actor_id)
    notification = None
    if recorded:
        logger.info("Post shared: %s by account %s", post_id, actor.handle)
        notification = notify(
            db,
            recipient_id=post.author_id,
            category=NotificationCategory.share,
            actor_id=actor_id,
            content=f"{actor.handle} shared your post",
            post_id=post_id,
        )

    return ShareResult(recorded=recorded, shares=POST_SHARES.members(db, post_id), notification=notification)


def report_entity(db: Session, entity) -> ReportResult:
    """
    Flag a post or comment as reported.

    Only the transition from not-reported to reported increments the
    counter; later reports leave it as is until a moderator dismisses.
    """
    model = type(entity)
    result = db.execute(
        update(model)
        .where(model.id == entity.id, model.reported.is_(False), model.deleted.is_(False))
        .values(reported=True, report_count=model.report_count + 1)
        .execution_options(synchronize_session=False)
    )
    db.refresh(entity, ["reported", "report_count"])
    return ReportResult(
        counted=bool(result.rowcount),
        reported=entity.reported,
        report_count=entity.report_count,
    )


def report_post(db: Session, actor_id: int, post_id: int) -> ReportResult:
    post = _active_post(db, post_id)
    result = report_entity(db, post)
    if result.counted:
        logger.info("Post %s reported by account %s", post_id, actor_id)
    return result
