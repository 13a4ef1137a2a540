# socialnet/services/accounts.py
"""Account records: creation, lookup, profile edits and activity stamps."""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from socialnet.errors import InvalidArgument, InvalidOperation, NotFound
from socialnet.models import Account, Post

logger = logging.getLogger(__name__)

HANDLE_RE = re.compile(r"^[a-zA-Z0-9_]{3,30}$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

PROFILE_FIELDS = ("display_name", "bio", "avatar_url", "cover_url")


@dataclass
class Profile:
    """An account with its visible posts and relation counters."""
    account: Account
    posts: List[Post]
    posts_count: int
    followers_count: int
    following_count: int


def create_account(
    db: Session,
    handle: str,
    email: str,
    display_name: str = "",
    bio: str = "",
    password_hash: Optional[str] = None,
    is_admin: bool = False,
) -> Account:
    """
    Register an account.

    Raises:
        InvalidArgument: handle or email missing or malformed
        InvalidOperation: handle or email already taken
    """
    handle = (handle or "").strip()
    email = (email or "").strip().lower()
    if not HANDLE_RE.match(handle):
        raise InvalidArgument("Handle must be 3-30 letters, digits or underscores")
    if not EMAIL_RE.match(email):
        raise InvalidArgument("A valid email is required")

    taken = (
        db.query(Account)
        .filter(or_(Account.handle == handle, Account.email == email))
        .first()
    )
    if taken:
        raise InvalidOperation("Handle or email already registered")

    account = Account(
        handle=handle,
        email=email,
        display_name=display_name or handle,
        bio=bio,
        password_hash=password_hash,
        is_admin=is_admin,
    )
    db.add(account)
    db.flush()
    logger.info("Account created: %s (%s)", account.handle, account.id)
    return account


def get_account(db: Session, account_id: int) -> Account:
    account = db.get(Account, account_id)
    if not account:
        raise NotFound(f"Account {account_id} not found")
    return account


def get_profile(db: Session, account_id: int) -> Profile:
    account = get_account(db, account_id)
    posts = (
        db.query(Post)
        .filter(Post.author_id == account_id, Post.deleted.is_(False))
        .order_by(Post.created_at.desc(), Post.id.desc())
        .all()
    )
    return Profile(
        account=account,
        posts=posts,
        posts_count=len(posts),
        followers_count=len(account.followers),
        following_count=len(account.following),
    )


def update_profile(db: Session, account_id: int, fields: Dict[str, str]) -> Account:
    """Partial update; only the supplied profile fields change."""
    unknown = set(fields) - set(PROFILE_FIELDS)
    if unknown:
        raise InvalidArgument(f"Unknown profile fields: {', '.join(sorted(unknown))}")

    account = get_account(db, account_id)
    for name, value in fields.items():
        if value is None:
            continue
        setattr(account, name, value)
    db.flush()
    logger.info("Profile updated for account %s: %s", account_id, sorted(fields))
    return account


def touch_last_active(db: Session, account: Account) -> None:
    account.last_active = datetime.utcnow()
    db.flush()
