# socialnet/services/comments.py
"""
Comment side of the content-engagement service.

Comments nest one level: a reply hangs off a top-level comment of the same
post. Top-level comment ids are kept on the post, reply ids on the parent.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.orm import Session

from socialnet.errors import InvalidArgument, InvalidOperation, NotFound
from socialnet.models import Comment, Notification, NotificationCategory
from socialnet.services.accounts import get_account
from socialnet.services.engagement import LikeResult, ReportResult, get_post, report_entity
from socialnet.services.links import COMMENT_LIKES, COMMENT_REPLIES, POST_COMMENTS
from socialnet.services.notifications import notify
from socialnet.services.pagination import Page, paginate

logger = logging.getLogger(__name__)


@dataclass
class CommentResult:
    """A new comment and the notification it produced, if any."""
    comment: Comment
    notification: Optional[Notification] = None


@dataclass
class CommentThread:
    """A top-level comment with its visible replies, oldest reply first."""
    comment: Comment
    replies: List[Comment] = field(default_factory=list)


def _active_comment(db: Session, comment_id: int) -> Comment:
    comment = db.get(Comment, comment_id)
    if not comment or comment.deleted:
        raise NotFound(f"Comment {comment_id} not found")
    return comment


def _owned_comment(db: Session, actor_id: int, comment_id: int) -> Comment:
    comment = _active_comment(db, comment_id)
    if comment.author_id != actor_id:
        raise NotFound(f"Comment {comment_id} not found")
    return comment


def _clean_body(body: str) -> str:
    body = (body or "").strip()
    if not body:
        raise InvalidArgument("Comment body is required")
    return body


def add_comment(
    db: Session,
    author_id: int,
    post_id: int,
    body: str,
    parent_comment_id: Optional[int] = None,
) -> CommentResult:
    """
    Comment on a post, or reply to one of its top-level comments.

    Exactly one ``comment`` notification is attempted: to the parent
    comment's author for a reply, to the post author otherwise. It is
    skipped when that person is the commenter.

    Raises:
        NotFound: post missing/deleted, or parent not a visible comment of this post
        InvalidOperation: parent is itself a reply
        InvalidArgument: empty body
    """
    post = get_post(db, post_id)
    author = get_account(db, author_id)
    body = _clean_body(body)

    parent = None
    if parent_comment_id is not None:
        parent = db.get(Comment, parent_comment_id)
        if not parent or parent.deleted or parent.post_id != post_id:
            raise NotFound(f"Comment {parent_comment_id} not found on post {post_id}")
        if parent.parent_id is not None:
            raise InvalidOperation("Replies can only be added to top-level comments")

    comment = Comment(post_id=post_id, author_id=author_id, parent_id=parent_comment_id, body=body)
    db.add(comment)
    db.flush()

    if parent is not None:
        COMMENT_REPLIES.add(db, parent.id, comment.id)
        notification = notify(
            db,
            recipient_id=parent.author_id,
            category=NotificationCategory.comment,
            actor_id=author_id,
            content=f"{author.handle} replied to your comment",
            post_id=post_id,
            comment_id=comment.id,
        )
    else:
        POST_COMMENTS.add(db, post_id, comment.id)
        notification = notify(
            db,
            recipient_id=post.author_id,
            category=NotificationCategory.comment,
            actor_id=author_id,
            content=f"{author.handle} commented on your post",
            post_id=post_id,
            comment_id=comment.id,
        )

    logger.info("Comment added: %s on post %s by account %s", comment.id, post_id, author.handle)
    return CommentResult(comment=comment, notification=notification)


def list_comments(db: Session, post_id: int, page: int, page_size: int) -> Page:
    """Visible top-level comments newest first, as CommentThread items."""
    get_post(db, post_id)
    query = (
        db.query(Comment)
        .filter(Comment.post_id == post_id, Comment.parent_id.is_(None), Comment.deleted.is_(False))
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    )
    result = paginate(query, page, page_size)
    result.items = [
        CommentThread(comment=c, replies=[r for r in c.replies if not r.deleted])
        for c in result.items
    ]
    return result


def edit_comment(db: Session, actor_id: int, comment_id: int, body: str) -> Comment:
    comment = _owned_comment(db, actor_id, comment_id)
    comment.body = _clean_body(body)
    db.flush()
    logger.info("Comment updated: %s", comment_id)
    return comment


def delete_comment(db: Session, actor_id: int, comment_id: int) -> Comment:
    """Soft delete by the author and detach from the post or parent list."""
    comment = _owned_comment(db, actor_id, comment_id)
    soft_delete_comment(db, comment)
    logger.info("Comment deleted: %s by account %s", comment_id, actor_id)
    return comment


def soft_delete_comment(db: Session, comment: Comment) -> None:
    comment.deleted = True
    db.flush()
    if comment.parent_id is not None:
        COMMENT_REPLIES.remove(db, comment.parent_id, comment.id)
    else:
        POST_COMMENTS.remove(db, comment.post_id, comment.id)


def toggle_like_comment(db: Session, actor_id: int, comment_id: int) -> LikeResult:
    """Like or unlike a comment. Comment likes never notify."""
    _active_comment(db, comment_id)
    get_account(db, actor_id)
    liked = COMMENT_LIKES.toggle(db, comment_id, actor_id)
    logger.info("Comment %s: %s by account %s", "liked" if liked else "unliked", comment_id, actor_id)
    return LikeResult(liked=liked, likes=COMMENT_LIKES.members(db, comment_id))


def report_comment(db: Session, actor_id: int, comment_id: int) -> ReportResult:
    comment = _active_comment(db, comment_id)
    result = report_entity(db, comment)
    if result.counted:
        logger.info("Comment %s reported by account %s", comment_id, actor_id)
    return result
