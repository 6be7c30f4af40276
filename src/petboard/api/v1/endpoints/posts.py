# src/petboard/api/v1/endpoints/posts.py
"""Post-related endpoints for the Petboard API."""

from __future__ import annotations

from fastapi import APIRouter, Query, Response, status

from petboard.api.v1.dependencies import (
    AdminDep,
    CurrentIdentityDep,
    FeedDep,
    OptionalIdentityDep,
    PostStoreDep,
)
from petboard.core.security import Identity
from petboard.core.settings import settings
from petboard.models.post import Category
from petboard.schemas.post import FeaturedUpdate, PostCreate, PostUpdate, PostView
from petboard.services.moderation import ensure_can_modify, visible_to

router = APIRouter(prefix="/posts", tags=["posts"])


def _viewer_id(identity: Identity | None) -> int | None:
    return identity.user_id if identity is not None else None


@router.get("/", response_model=list[PostView])
async def list_posts(
    feed: FeedDep,
    identity: OptionalIdentityDep,
    category: Category | None = Query(None),
    tag: str | None = Query(None),
    limit: int | None = Query(None, ge=0),
    offset: int | None = Query(None, ge=0),
) -> list[PostView]:
    """List approved posts, newest first, optionally filtered."""
    posts = feed.list_posts(
        category=category,
        tag=tag,
        limit=limit,
        offset=offset,
        viewer_id=_viewer_id(identity),
    )
    return [visible_to(view, identity) for view in posts]


@router.get("/featured", response_model=PostView | None)
async def get_featured_post(feed: FeedDep, identity: OptionalIdentityDep) -> PostView | None:
    """Return the featured post, or ``null`` when nothing is featured."""
    view = feed.featured(_viewer_id(identity))
    return visible_to(view, identity) if view is not None else None


@router.get("/recent", response_model=list[PostView])
async def get_recent_posts(
    feed: FeedDep,
    identity: OptionalIdentityDep,
    limit: int = Query(settings.recent_default_limit, ge=0),
) -> list[PostView]:
    """Return the newest approved posts, excluding the featured one."""
    posts = feed.recent(limit, _viewer_id(identity))
    return [visible_to(view, identity) for view in posts]


@router.get("/most-liked", response_model=list[PostView])
async def get_most_liked_posts(
    feed: FeedDep,
    identity: OptionalIdentityDep,
    limit: int = Query(settings.most_liked_default_limit, ge=0),
) -> list[PostView]:
    """Return approved posts ranked by like count."""
    posts = feed.most_liked(limit, _viewer_id(identity))
    return [visible_to(view, identity) for view in posts]


@router.get("/search", response_model=list[PostView])
async def search_posts(
    feed: FeedDep,
    identity: OptionalIdentityDep,
    q: str = Query("", description="Text matched against title, content and tags"),
    limit: int = Query(settings.search_default_limit, ge=0),
) -> list[PostView]:
    """Search approved posts; a blank query returns an empty list."""
    posts = feed.search(q, _viewer_id(identity), limit=limit)
    return [visible_to(view, identity) for view in posts]


@router.get("/my-posts", response_model=list[PostView])
async def get_my_posts(feed: FeedDep, identity: CurrentIdentityDep) -> list[PostView]:
    """Return every post written by the caller, whatever its status."""
    return feed.by_author(identity.user_id, identity.user_id)


@router.get("/{post_id}", response_model=PostView)
async def get_post(post_id: int, feed: FeedDep, identity: OptionalIdentityDep) -> PostView:
    """Return one post.

    Reviewer attribution and rejection reasons are only shown to the
    author and to admins.
    """
    return visible_to(feed.by_id(post_id, _viewer_id(identity)), identity)


@router.post("/", response_model=PostView, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    store: PostStoreDep,
    identity: CurrentIdentityDep,
) -> PostView:
    """Create a post; it stays pending until a moderator reviews it."""
    return store.create(
        author_id=identity.user_id,
        title=post_data.title,
        content=post_data.content,
        category=post_data.category,
        image_url=post_data.image_url,
        tags=post_data.tags,
    )


@router.put("/{post_id}", response_model=PostView)
async def update_post(
    post_id: int,
    changes: PostUpdate,
    store: PostStoreDep,
    identity: CurrentIdentityDep,
) -> PostView:
    """Update a post owned by the caller (admins may update any post)."""
    ensure_can_modify(store.by_id(post_id), identity, "update")
    return store.update(post_id, changes)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post_id: int,
    store: PostStoreDep,
    identity: CurrentIdentityDep,
) -> Response:
    """Delete a post owned by the caller (admins may delete any post)."""
    ensure_can_modify(store.by_id(post_id), identity, "delete")
    store.delete(post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{post_id}/featured", response_model=PostView)
async def set_featured(
    post_id: int,
    payload: FeaturedUpdate,
    store: PostStoreDep,
    _admin: AdminDep,
) -> PostView:
    """Feature or un-feature a post; at most one post is featured at a time."""
    return store.set_featured(post_id, payload.is_featured)
