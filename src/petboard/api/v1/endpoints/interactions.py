# src/petboard/api/v1/endpoints/interactions.py
"""Like, comment and follow endpoints for the Petboard API."""

from __future__ import annotations

from fastapi import APIRouter, status

from petboard.api.v1.dependencies import CurrentIdentityDep, LedgerDep
from petboard.schemas.interaction import (
    CommentCreate,
    CommentView,
    FollowCounts,
    FollowToggle,
    FollowUser,
    LikesCount,
    LikeToggle,
)

router = APIRouter(tags=["interactions"])


@router.post("/posts/{post_id}/like", response_model=LikeToggle)
async def toggle_like(post_id: int, ledger: LedgerDep, identity: CurrentIdentityDep) -> LikeToggle:
    """Like a post, or remove the caller's like if it is already there."""
    return ledger.toggle_like(identity.user_id, post_id)


@router.get("/posts/{post_id}/likes", response_model=LikesCount)
async def get_likes_count(post_id: int, ledger: LedgerDep) -> LikesCount:
    return LikesCount(count=ledger.likes_count(post_id))


@router.get("/posts/{post_id}/comments", response_model=list[CommentView])
async def list_comments(post_id: int, ledger: LedgerDep) -> list[CommentView]:
    """Return comments on a post in the order they were written."""
    return ledger.comments_for_post(post_id)


@router.post(
    "/posts/{post_id}/comments",
    response_model=CommentView,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    post_id: int,
    payload: CommentCreate,
    ledger: LedgerDep,
    identity: CurrentIdentityDep,
) -> CommentView:
    """Add a comment to a post."""
    return ledger.add_comment(identity.user_id, post_id, payload.content)


@router.post("/users/{user_id}/follow", response_model=FollowToggle)
async def toggle_follow(
    user_id: int,
    ledger: LedgerDep,
    identity: CurrentIdentityDep,
) -> FollowToggle:
    """Follow a user, or unfollow if the caller already follows them."""
    return ledger.toggle_follow(identity.user_id, user_id)


@router.get("/users/{user_id}/followers", response_model=list[FollowUser])
async def list_followers(user_id: int, ledger: LedgerDep) -> list[FollowUser]:
    return ledger.followers(user_id)


@router.get("/users/{user_id}/following", response_model=list[FollowUser])
async def list_following(user_id: int, ledger: LedgerDep) -> list[FollowUser]:
    return ledger.following(user_id)


@router.get("/users/{user_id}/follow-counts", response_model=FollowCounts)
async def get_follow_counts(user_id: int, ledger: LedgerDep) -> FollowCounts:
    return ledger.follow_counts(user_id)
