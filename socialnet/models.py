from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class NotificationCategory(str, PyEnum):
    like = "like"
    comment = "comment"
    follow = "follow"
    mention = "mention"
    share = "share"
    message = "message"


class MessageType(str, PyEnum):
    text = "text"
    image = "image"
    video = "video"
    file = "file"


class EntityKind(str, PyEnum):
    post = "post"
    comment = "comment"


def _link_table(name: str, owner: str, owner_fk: str, member: str, member_fk: str, *extra) -> Table:
    return Table(
        name,
        Base.metadata,
        Column(owner, Integer, ForeignKey(owner_fk, ondelete="CASCADE"), primary_key=True),
        Column(member, Integer, ForeignKey(member_fk, ondelete="CASCADE"), primary_key=True),
        Column("created_at", DateTime, default=datetime.utcnow, nullable=False),
        *extra,
    )


# One row per edge: both sides of the relation come from the same row.
follows = _link_table(
    "follows", "followed_id", "accounts.id", "follower_id", "accounts.id",
    CheckConstraint("follower_id <> followed_id", name="ck_follows_not_self"),
)
post_likes = _link_table("post_likes", "post_id", "posts.id", "account_id", "accounts.id")
post_shares = _link_table("post_shares", "post_id", "posts.id", "account_id", "accounts.id")
comment_likes = _link_table("comment_likes", "comment_id", "comments.id", "account_id", "accounts.id")

# Denormalized back-references, maintained by socialnet.services.links
account_posts = _link_table("account_posts", "account_id", "accounts.id", "post_id", "posts.id")
post_comments = _link_table("post_comments", "post_id", "posts.id", "comment_id", "comments.id")
comment_replies = _link_table("comment_replies", "comment_id", "comments.id", "reply_id", "comments.id")

Index("idx_follows_follower", follows.c.follower_id, follows.c.created_at)


class Account(Base):
    __tablename__ = "accounts"
    id = Column(Integer, primary_key=True)
    handle = Column(String(30), unique=True, nullable=False, index=True)
    email = Column(String(254), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=True)
    display_name = Column(String(100), nullable=False, default="")
    bio = Column(String(500), nullable=False, default="")
    avatar_url = Column(String(500), nullable=False, default="")
    cover_url = Column(String(500), nullable=False, default="")
    is_admin = Column(Boolean, nullable=False, default=False)
    blocked = Column(Boolean, nullable=False, default=False, index=True)
    last_active = Column(DateTime, default=datetime.utcnow, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    followers = relationship(
        "Account",
        secondary=follows,
        primaryjoin=lambda: Account.id == follows.c.followed_id,
        secondaryjoin=lambda: Account.id == follows.c.follower_id,
        order_by=lambda: (follows.c.created_at, follows.c.follower_id),
        viewonly=True,
    )
    following = relationship(
        "Account",
        secondary=follows,
        primaryjoin=lambda: Account.id == follows.c.follower_id,
        secondaryjoin=lambda: Account.id == follows.c.followed_id,
        order_by=lambda: (follows.c.created_at, follows.c.followed_id),
        viewonly=True,
    )
    posts = relationship(
        "Post",
        secondary=account_posts,
        order_by=lambda: (account_posts.c.created_at, account_posts.c.post_id),
        viewonly=True,
    )

    @property
    def follower_ids(self):
        return [a.id for a in self.followers]

    @property
    def following_ids(self):
        return [a.id for a in self.following]

    @property
    def post_ids(self):
        return [p.id for p in self.posts]


class Post(Base):
    __tablename__ = "posts"
    id = Column(Integer, primary_key=True)
    author_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    body = Column(Text, nullable=False, default="")
    media = Column(JSON, nullable=False, default=list)
    tags = Column(JSON, nullable=False, default=list)
    location = Column(String(200), nullable=True)
    reported = Column(Boolean, nullable=False, default=False)
    report_count = Column(Integer, nullable=False, default=0)
    deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    author = relationship("Account")
    likes = relationship(
        "Account",
        secondary=post_likes,
        order_by=lambda: (post_likes.c.created_at, post_likes.c.account_id),
        viewonly=True,
    )
    shares = relationship(
        "Account",
        secondary=post_shares,
        order_by=lambda: (post_shares.c.created_at, post_shares.c.account_id),
        viewonly=True,
    )
    comments = relationship(
        "Comment",
        secondary=post_comments,
        order_by=lambda: (post_comments.c.created_at, post_comments.c.comment_id),
        viewonly=True,
    )

    @property
    def like_ids(self):
        return [a.id for a in self.likes]

    @property
    def share_ids(self):
        return [a.id for a in self.shares]

    @property
    def comment_ids(self):
        return [c.id for c in self.comments]


Index("idx_posts_feed", Post.author_id, Post.deleted, Post.created_at.desc(), Post.id.desc())
Index("idx_posts_reported", Post.reported, Post.deleted, Post.report_count)


class Comment(Base):
    __tablename__ = "comments"
    id = Column(Integer, primary_key=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    parent_id = Column(Integer, ForeignKey("comments.id", ondelete="CASCADE"), nullable=True, index=True)
    body = Column(Text, nullable=False)
    reported = Column(Boolean, nullable=False, default=False)
    report_count = Column(Integer, nullable=False, default=0)
    deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    post = relationship("Post")
    author = relationship("Account")
    likes = relationship(
        "Account",
        secondary=comment_likes,
        order_by=lambda: (comment_likes.c.created_at, comment_likes.c.account_id),
        viewonly=True,
    )
    replies = relationship(
        "Comment",
        secondary=comment_replies,
        primaryjoin=lambda: Comment.id == comment_replies.c.comment_id,
        secondaryjoin=lambda: Comment.id == comment_replies.c.reply_id,
        order_by=lambda: (comment_replies.c.created_at, comment_replies.c.reply_id),
        viewonly=True,
    )

    @property
    def like_ids(self):
        return [a.id for a in self.likes]

    @property
    def reply_ids(self):
        return [c.id for c in self.replies]


Index("idx_comments_post_parent", Comment.post_id, Comment.parent_id, Comment.deleted)


class DirectMessage(Base):
    __tablename__ = "direct_messages"
    id = Column(Integer, primary_key=True)
    sender_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False)
    receiver_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False)
    body = Column(String(1000), nullable=False)
    message_type = Column(Enum(MessageType, name="message_type"), nullable=False, default=MessageType.text)
    media_url = Column(String(500), nullable=False, default="")
    read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime, nullable=True)
    deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    sender = relationship("Account", foreign_keys=[sender_id])
    receiver = relationship("Account", foreign_keys=[receiver_id])


Index("idx_messages_pair", DirectMessage.sender_id, DirectMessage.receiver_id, DirectMessage.created_at)
Index("idx_messages_unread", DirectMessage.receiver_id, DirectMessage.read)


class Notification(Base):
    __tablename__ = "notifications"
    id = Column(Integer, primary_key=True)
    recipient_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False)
    actor_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False)
    category = Column(Enum(NotificationCategory, name="notification_category"), nullable=False)
    content = Column(Text, nullable=False)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=True)
    comment_id = Column(Integer, ForeignKey("comments.id", ondelete="CASCADE"), nullable=True)
    message_id = Column(Integer, ForeignKey("direct_messages.id", ondelete="CASCADE"), nullable=True)
    read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    actor = relationship("Account", foreign_keys=[actor_id])

    __table_args__ = (
        CheckConstraint("recipient_id <> actor_id", name="ck_notifications_not_self"),
    )


Index("idx_notifications_recipient", Notification.recipient_id, Notification.created_at)
Index("idx_notifications_unread", Notification.recipient_id, Notification.read)
