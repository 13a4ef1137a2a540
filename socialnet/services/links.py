# socialnet/services/links.py
"""
Set-valued relations stored as link tables.

Every membership change is a single-row INSERT or DELETE, so concurrent
changes by different members commute and never overwrite each other.
The denormalized back-references (account -> posts, post -> comments,
comment -> replies) go through the same helpers on every create/delete path.
"""

from datetime import datetime
from typing import List, Optional, Type

from sqlalchemy import Table, and_, delete, exists, func, insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.util import identity_key

from socialnet.models import (
    Account,
    Comment,
    Post,
    account_posts,
    comment_likes,
    comment_replies,
    follows,
    post_comments,
    post_likes,
    post_shares,
)


class LinkSet:
    """
    Ordered set of member ids attached to an owner row.

    Args:
        table: Link table with ``owner_col``, ``member_col`` and ``created_at``
        owner_col: Column naming the owning entity
        member_col: Column naming the member entity
        owner_model: Mapped class of the owner, used to expire cached collections
        owner_attr: Relationship on the owner that reads this table
        member_model: Mapped class of the member, when it exposes a mirror collection
        member_attr: Mirror relationship on the member
    """

    def __init__(
        self,
        table: Table,
        owner_col: str,
        member_col: str,
        owner_model: Type,
        owner_attr: str,
        member_model: Optional[Type] = None,
        member_attr: Optional[str] = None,
    ):
        self.table = table
        self.owner_col = table.c[owner_col]
        self.member_col = table.c[member_col]
        self.owner_model = owner_model
        self.owner_attr = owner_attr
        self.member_model = member_model
        self.member_attr = member_attr

    def _match(self, owner_id: int, member_id: int):
        return and_(self.owner_col == owner_id, self.member_col == member_id)

    def _expire(self, db: Session, owner_id: int, member_id: int) -> None:
        targets = [(self.owner_model, owner_id, self.owner_attr)]
        if self.member_model is not None:
            targets.append((self.member_model, member_id, self.member_attr))
        for model, pk, attr in targets:
            instance = db.identity_map.get(identity_key(model, pk))
            if instance is not None:
                db.expire(instance, [attr])

    def contains(self, db: Session, owner_id: int, member_id: int) -> bool:
        return db.execute(select(exists().where(self._match(owner_id, member_id)))).scalar()

    def add(self, db: Session, owner_id: int, member_id: int) -> bool:
        """Insert the membership; returns False when it was already present."""
        try:
            with db.begin_nested():
                db.execute(
                    insert(self.table).values(
                        {
                            self.owner_col.name: owner_id,
                            self.member_col.name: member_id,
                            "created_at": datetime.utcnow(),
                        }
                    )
                )
        except IntegrityError:
            if not self.contains(db, owner_id, member_id):
                raise
            return False
        self._expire(db, owner_id, member_id)
        return True

    def remove(self, db: Session, owner_id: int, member_id: int) -> bool:
        """Delete the membership; returns False when there was nothing to delete."""
        result = db.execute(delete(self.table).where(self._match(owner_id, member_id)))
        if result.rowcount:
            self._expire(db, owner_id, member_id)
            return True
        return False

    def toggle(self, db: Session, owner_id: int, member_id: int) -> bool:
        """
        Flip membership; returns True only when this call inserted the member.

        A concurrent toggle that already inserted the same row makes the
        add a no-op, which is reported as False.
        """
        if self.remove(db, owner_id, member_id):
            return False
        return self.add(db, owner_id, member_id)

    def members(self, db: Session, owner_id: int) -> List[int]:
        rows = db.execute(
            select(self.member_col)
            .where(self.owner_col == owner_id)
            .order_by(self.table.c.created_at, self.member_col)
        )
        return [row[0] for row in rows]

    def count(self, db: Session, owner_id: int) -> int:
        return db.execute(
            select(func.count()).select_from(self.table).where(self.owner_col == owner_id)
        ).scalar()


FOLLOWS = LinkSet(follows, "followed_id", "follower_id", Account, "followers", Account, "following")
POST_LIKES = LinkSet(post_likes, "post_id", "account_id", Post, "likes")
POST_SHARES = LinkSet(post_shares, "post_id", "account_id", Post, "shares")
COMMENT_LIKES = LinkSet(comment_likes, "comment_id", "account_id", Comment, "likes")
ACCOUNT_POSTS = LinkSet(account_posts, "account_id", "post_id", Account, "posts")
POST_COMMENTS = LinkSet(post_comments, "post_id", "comment_id", Post, "comments")
COMMENT_REPLIES = LinkSet(comment_replies, "comment_id", "reply_id", Comment, "replies")
