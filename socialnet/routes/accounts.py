# socialnet/routes/accounts.py
"""FastAPI routes for profiles, the follow graph, search and the feed."""

from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Path, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from socialnet import realtime
from socialnet.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from socialnet.db import get_db
from socialnet.models import Account
from socialnet.routes.deps import get_current_account
from socialnet.routes.notifications import push_notification
from socialnet.schemas import AccountOut, AccountSummary, PostOut, PostPage
from socialnet.services import accounts, graph

router = APIRouter(prefix="/accounts", tags=["accounts"])


class ProfileUpdate(BaseModel):
    display_name: Optional[str] = Field(None, max_length=100)
    bio: Optional[str] = Field(None, max_length=500)
    avatar_url: Optional[str] = Field(None, max_length=500)
    cover_url: Optional[str] = Field(None, max_length=500)


class ProfileStats(BaseModel):
    posts_count: int
    followers_count: int
    following_count: int


class ProfileResponse(BaseModel):
    account: AccountOut
    posts: List[PostOut]
    stats: ProfileStats


class FollowResponse(BaseModel):
    message: str = Field(..., description="Human readable outcome")
    state: str = Field(..., description='"followed" or "unfollowed"')
    is_following: bool


class AccountListResponse(BaseModel):
    accounts: List[AccountSummary]


@router.get("/search", response_model=AccountListResponse)
def search_accounts(
    q: str = Query("", description="Substring of handle or display name"),
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> AccountListResponse:
    """Search visible accounts; at most 20 results."""
    found = graph.search_accounts(db, q)
    return AccountListResponse(accounts=[AccountSummary.from_account(a) for a in found])


@router.get("/feed", response_model=PostPage)
def get_feed(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> PostPage:
    """Own and followed accounts' posts, newest first."""
    return PostPage.from_page(graph.compute_feed(db, current.id, page, limit))


@router.patch("/me", response_model=AccountOut)
def update_me(
    payload: ProfileUpdate,
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> AccountOut:
    account = accounts.update_profile(db, current.id, payload.model_dump(exclude_unset=True))
    return AccountOut.from_account(account)


@router.get("/{account_id}", response_model=ProfileResponse)
def get_profile(
    account_id: int = Path(..., ge=1),
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> ProfileResponse:
    profile = accounts.get_profile(db, account_id)
    return ProfileResponse(
        account=AccountOut.from_account(profile.account),
        posts=[PostOut.from_post(p) for p in profile.posts],
        stats=ProfileStats(
            posts_count=profile.posts_count,
            followers_count=profile.followers_count,
            following_count=profile.following_count,
        ),
    )


@router.post("/{account_id}/follow", response_model=FollowResponse)
def follow_account(
    background_tasks: BackgroundTasks,
    account_id: int = Path(..., ge=1),
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> FollowResponse:
    """Follow the account, or unfollow it when already following."""
    result = graph.follow(db, current.id, account_id)
    if result.is_following:
        background_tasks.add_task(
            realtime.hub.publish,
            account_id,
            realtime.USER_FOLLOWED,
            {"follower_id": current.id, "followed_id": account_id},
        )
    push_notification(background_tasks, result.notification)
    return FollowResponse(
        message="Account followed" if result.is_following else "Account unfollowed",
        state=result.state.value,
        is_following=result.is_following,
    )


@router.get("/{account_id}/followers", response_model=AccountListResponse)
def list_followers(
    account_id: int = Path(..., ge=1),
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> AccountListResponse:
    return AccountListResponse(
        accounts=[AccountSummary.from_account(a) for a in graph.get_followers(db, account_id)]
    )


@router.get("/{account_id}/following", response_model=AccountListResponse)
def list_following(
    account_id: int = Path(..., ge=1),
    current: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
) -> AccountListResponse:
    return AccountListResponse(
        accounts=[AccountSummary.from_account(a) for a in graph.get_following(db, account_id)]
    )
