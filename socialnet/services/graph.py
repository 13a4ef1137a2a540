# socialnet/services/graph.py
"""Social-graph service: follow relation, personalized feed, account search."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from socialnet.config import SEARCH_RESULT_LIMIT
from socialnet.errors import InvalidArgument, InvalidOperation
from socialnet.models import Account, Notification, NotificationCategory, Post, follows
from socialnet.services.accounts import get_account
from socialnet.services.links import FOLLOWS
from socialnet.services.notifications import notify
from socialnet.services.pagination import Page, paginate

logger = logging.getLogger(__name__)


class FollowState(str, Enum):
    followed = "followed"
    unfollowed = "unfollowed"


@dataclass
class FollowResult:
    """Outcome of a follow toggle."""
    state: FollowState
    follower_id: int
    target_id: int
    notification: Optional[Notification] = None

    @property
    def is_following(self) -> bool:
        return self.state is FollowState.followed


def follow(db: Session, actor_id: int, target_id: int) -> FollowResult:
    """
    Toggle ``actor_id`` following ``target_id``.

    The relation is a single ``follows`` row, so the follower list of the
    target and the following list of the actor change together.

    Raises:
        InvalidOperation: actor and target are the same account
        NotFound: target account does not exist
    """
    if actor_id == target_id:
        raise InvalidOperation("Cannot follow yourself")
    actor = get_account(db, actor_id)
    target = get_account(db, target_id)

    if FOLLOWS.remove(db, target_id, actor_id):
        logger.info("Account unfollowed: %s unfollowed %s", actor.handle, target.handle)
        return FollowResult(FollowState.unfollowed, actor_id, target_id)

    if not FOLLOWS.add(db, target_id, actor_id):
        # inserted by a concurrent request that already notified
        return FollowResult(FollowState.followed, actor_id, target_id)
    logger.info("Account followed: %s followed %s", actor.handle, target.handle)
    notification = notify(
        db,
        recipient_id=target_id,
        category=NotificationCategory.follow,
        actor_id=actor_id,
        content=f"{actor.handle} started following you",
    )
    return FollowResult(FollowState.followed, actor_id, target_id, notification)


def get_followers(db: Session, account_id: int) -> List[Account]:
    return list(get_account(db, account_id).followers)


def get_following(db: Session, account_id: int) -> List[Account]:
    return list(get_account(db, account_id).following)


def _feed_query(db: Session, account_id: int):
    followed = select(follows.c.followed_id).where(follows.c.follower_id == account_id)
    return (
        db.query(Post)
        .filter(
            or_(Post.author_id == account_id, Post.author_id.in_(followed)),
            Post.deleted.is_(False),
        )
        .order_by(Post.created_at.desc(), Post.id.desc())
    )


def compute_feed(db: Session, account_id: int, page: int, page_size: int) -> Page:
    """
    One page of the account's feed.

    The feed is every non-deleted post written by the account or by an
    account it follows, newest first with ties broken by id (descending).

    Raises:
        NotFound: account does not exist
        InvalidArgument: page or page_size out of range
    """
    get_account(db, account_id)
    return paginate(_feed_query(db, account_id), page, page_size)


def iter_feed_pages(db: Session, account_id: int, page_size: int, start: int = 1) -> Iterator[Page]:
    """Walk the feed lazily, one page per iteration, until the last page."""
    page = start
    while True:
        current = compute_feed(db, account_id, page, page_size)
        yield current
        if not current.has_next:
            return
        page += 1


def search_accounts(db: Session, query_text: str) -> List[Account]:
    """
    Case-insensitive substring search on handle or display name.

    Blocked accounts are excluded and at most SEARCH_RESULT_LIMIT accounts
    are returned.
    """
    needle = (query_text or "").strip()
    if not needle:
        raise InvalidArgument("Search query is required")

    escaped = needle.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    pattern = f"%{escaped}%"
    return (
        db.query(Account)
        .filter(
            or_(
                func.lower(Account.handle).like(pattern, escape="\\"),
                func.lower(Account.display_name).like(pattern, escape="\\"),
            ),
            Account.blocked.is_(False),
        )
        .order_by(Account.handle)
        .limit(SEARCH_RESULT_LIMIT)
        .all()
    )
