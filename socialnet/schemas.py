"""
Response models shared by several routers.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from socialnet.models import Account, Comment, DirectMessage, Notification, Post
from socialnet.services.pagination import Page


class Pagination(BaseModel):
    """Page metadata for offset-based listings."""

    current_page: int = Field(..., description="1-based page number")
    page_size: int = Field(..., description="Items per page")
    total: int = Field(..., description="Total items across all pages")
    total_pages: int = Field(..., description="Number of pages")
    has_next: bool = Field(..., description="Whether a later page exists")
    has_prev: bool = Field(..., description="Whether an earlier page exists")

    @classmethod
    def from_page(cls, page: Page) -> "Pagination":
        return cls(**page.meta())


class AccountSummary(BaseModel):
    id: int
    handle: str
    display_name: str
    avatar_url: str = ""
    bio: str = ""

    @classmethod
    def from_account(cls, account: Account) -> "AccountSummary":
        return cls(
            id=account.id,
            handle=account.handle,
            display_name=account.display_name,
            avatar_url=account.avatar_url,
            bio=account.bio,
        )


class AccountOut(AccountSummary):
    email: str
    cover_url: str = ""
    blocked: bool
    is_admin: bool
    followers: List[int] = Field(default_factory=list, description="Follower account ids")
    following: List[int] = Field(default_factory=list, description="Followed account ids")
    posts: List[int] = Field(default_factory=list, description="Visible post ids")
    last_active: datetime
    created_at: datetime

    @classmethod
    def from_account(cls, account: Account) -> "AccountOut":
        return cls(
            id=account.id,
            handle=account.handle,
            display_name=account.display_name,
            avatar_url=account.avatar_url,
            bio=account.bio,
            email=account.email,
            cover_url=account.cover_url,
            blocked=account.blocked,
            is_admin=account.is_admin,
            followers=account.follower_ids,
            following=account.following_ids,
            posts=account.post_ids,
            last_active=account.last_active,
            created_at=account.created_at,
        )


class PostOut(BaseModel):
    id: int
    author: AccountSummary
    body: str
    media: List[Dict[str, str]]
    tags: List[str]
    location: Optional[str] = None
    likes: List[int]
    shares: List[int]
    comments: List[int]
    reported: bool
    report_count: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_post(cls, post: Post) -> "PostOut":
        return cls(
            id=post.id,
            author=AccountSummary.from_account(post.author),
            body=post.body,
            media=post.media or [],
            tags=post.tags or [],
            location=post.location,
            likes=post.like_ids,
            shares=post.share_ids,
            comments=post.comment_ids,
            reported=post.reported,
            report_count=post.report_count,
            created_at=post.created_at,
            updated_at=post.updated_at,
        )


class PostPage(BaseModel):
    posts: List[PostOut]
    pagination: Pagination

    @classmethod
    def from_page(cls, page: Page) -> "PostPage":
        return cls(posts=[PostOut.from_post(p) for p in page.items], pagination=Pagination.from_page(page))


class CommentOut(BaseModel):
    id: int
    post_id: int
    parent_id: Optional[int] = None
    author: AccountSummary
    body: str
    likes: List[int]
    replies: List[int]
    reported: bool
    report_count: int
    created_at: datetime

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentOut":
        return cls(
            id=comment.id,
            post_id=comment.post_id,
            parent_id=comment.parent_id,
            author=AccountSummary.from_account(comment.author),
            body=comment.body,
            likes=comment.like_ids,
            replies=comment.reply_ids,
            reported=comment.reported,
            report_count=comment.report_count,
            created_at=comment.created_at,
        )


class MessageOut(BaseModel):
    id: int
    sender_id: int
    receiver_id: int
    body: str
    message_type: str
    media_url: str
    read: bool
    read_at: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_message(cls, message: DirectMessage) -> "MessageOut":
        return cls(
            id=message.id,
            sender_id=message.sender_id,
            receiver_id=message.receiver_id,
            body=message.body,
            message_type=message.message_type.value,
            media_url=message.media_url,
            read=message.read,
            read_at=message.read_at,
            created_at=message.created_at,
        )


class NotificationOut(BaseModel):
    id: int
    category: str
    actor: AccountSummary
    content: str
    post_id: Optional[int] = None
    comment_id: Optional[int] = None
    message_id: Optional[int] = None
    read: bool
    created_at: datetime

    @classmethod
    def from_notification(cls, notification: Notification) -> "NotificationOut":
        return cls(
            id=notification.id,
            category=notification.category.value,
            actor=AccountSummary.from_account(notification.actor),
            content=notification.content,
            post_id=notification.post_id,
            comment_id=notification.comment_id,
            message_id=notification.message_id,
            read=notification.read,
            created_at=notification.created_at,
        )


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str
    details: Optional[Dict[str, Any]] = None
