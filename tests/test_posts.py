# mypy: ignore-errors
# tests/test_posts.py
"""Tests for the post store: creation, updates, deletion and featuring."""

import pytest
from sqlalchemy import func, select

from petboard.core.errors import NotFound, ValidationError
from petboard.models import Comment, Post, PostLike, PostStatus, PostTag
from petboard.schemas.post import PostUpdate
from petboard.services import events


def _count(db_session, model) -> int:
    return db_session.execute(select(func.count()).select_from(model)).scalar_one()


def test_create_starts_pending(store, test_user, bus) -> None:
    """New posts are pending with no moderation metadata."""
    view = store.create(
        author_id=test_user.id,
        title="  Meu gato  ",
        content="Ele gosta de caixas",
        category="Gatos",
        image_url="   ",
        tags=["Caixa"],
    )

    assert view.status == PostStatus.PENDING
    assert view.title == "Meu gato"
    assert view.image_url is None
    assert view.reviewed_by is None
    assert view.reviewed_at is None
    assert view.rejection_reason is None
    assert view.is_featured is False
    assert view.author_name == "Ana"
    assert view.likes_count == 0
    assert view.comments_count == 0
    assert [tag.name for tag in view.tags] == ["caixa"]
    assert bus.names() == [events.POST_CREATED]


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("title", ""),
        ("title", "   "),
        ("title", "x" * 256),
        ("content", ""),
        ("content", " \n "),
        ("category", "Peixes"),
    ],
)
def test_create_rejects_invalid_input(db_session, store, test_user, field, value) -> None:
    """Invalid fields fail before anything is written."""
    payload = {"title": "Titulo", "content": "Texto", "category": "Gatos"}
    payload[field] = value

    with pytest.raises(ValidationError):
        store.create(author_id=test_user.id, tags=["nova"], **payload)

    assert _count(db_session, Post) == 0
    assert _count(db_session, PostTag) == 0


def test_title_at_limit_is_accepted(store, test_user) -> None:
    """Exactly 255 characters is still a valid title."""
    view = store.create(author_id=test_user.id, title="t" * 255, content="c", category="Gatos")
    assert len(view.title) == 255


def test_create_for_unknown_author(db_session, store) -> None:
    """A missing author is reported and leaves no rows behind."""
    with pytest.raises(NotFound):
        store.create(author_id=9999, title="T", content="C", category="Gatos", tags=["x"])
    assert _count(db_session, Post) == 0


def test_failed_tag_attach_rolls_back_post(db_session, store, test_user) -> None:
    """Post insert and tag attach share one transaction."""
    with pytest.raises(ValidationError):
        store.create(
            author_id=test_user.id,
            title="T",
            content="C",
            category="Gatos",
            tags=["ok", "y" * 200],
        )
    assert _count(db_session, Post) == 0


def test_update_changes_only_supplied_fields(store, test_post) -> None:
    """Omitted fields and moderation status are left alone."""
    updated = store.update(test_post.id, PostUpdate(title="Novo titulo"))

    assert updated.title == "Novo titulo"
    assert updated.content == test_post.content
    assert updated.status == PostStatus.APPROVED
    assert [tag.name for tag in updated.tags] == ["fofura"]


def test_update_replaces_tags(store, test_post) -> None:
    """A supplied tag list replaces every tag, and an empty list clears them."""
    retagged = store.update(test_post.id, PostUpdate(tags=["Brincadeira", "sono"]))
    assert [tag.name for tag in retagged.tags] == ["brincadeira", "sono"]

    cleared = store.update(test_post.id, PostUpdate(tags=[]))
    assert cleared.tags == []


def test_update_validates_before_writing(store, test_post) -> None:
    """A blank title is refused and the post is unchanged."""
    with pytest.raises(ValidationError):
        store.update(test_post.id, PostUpdate(title="   ", tags=["outra"]))

    current = store.by_id(test_post.id)
    assert current.title == test_post.title
    assert [tag.name for tag in current.tags] == ["fofura"]


def test_update_missing_post(store) -> None:
    """Updating an unknown post raises NotFound."""
    with pytest.raises(NotFound):
        store.update(4242, PostUpdate(title="x"))


def test_delete_cascades(db_session, store, ledger, test_post, other_user, bus) -> None:
    """Deleting a post removes its tags, likes and comments."""
    ledger.toggle_like(other_user.id, test_post.id)
    ledger.add_comment(other_user.id, test_post.id, "Que lindo!")

    store.delete(test_post.id)

    assert _count(db_session, Post) == 0
    assert _count(db_session, PostTag) == 0
    assert _count(db_session, PostLike) == 0
    assert _count(db_session, Comment) == 0
    assert events.POST_DELETED in bus.names()
    with pytest.raises(NotFound):
        store.by_id(test_post.id)


def test_delete_missing_post(store) -> None:
    """Deleting an unknown post raises NotFound."""
    with pytest.raises(NotFound):
        store.delete(4242)


def test_featured_is_a_singleton(db_session, store, make_post, test_user) -> None:
    """Featuring a post un-features the previous one."""
    first = make_post(test_user, "Primeiro")
    second = make_post(test_user, "Segundo")

    assert store.set_featured(first.id, True).is_featured is True
    featured = store.set_featured(second.id, True)

    assert featured.is_featured is True
    assert featured.featured_at is not None
    assert store.by_id(first.id).is_featured is False
    assert store.by_id(first.id).featured_at is None
    featured_rows = db_session.execute(
        select(func.count()).select_from(Post).where(Post.is_featured.is_(True))
    ).scalar_one()
    assert featured_rows == 1


def test_unfeature_clears_timestamp(store, test_post) -> None:
    """Un-featuring drops both the flag and the timestamp."""
    store.set_featured(test_post.id, True)
    view = store.set_featured(test_post.id, False)

    assert view.is_featured is False
    assert view.featured_at is None


def test_refeaturing_same_post(store, test_post) -> None:
    """Featuring the already featured post keeps exactly one featured post."""
    store.set_featured(test_post.id, True)
    view = store.set_featured(test_post.id, True)
    assert view.is_featured is True


def test_set_featured_missing_post(store, test_post) -> None:
    """A missing post is reported and the current featured post survives."""
    store.set_featured(test_post.id, True)
    with pytest.raises(NotFound):
        store.set_featured(4242, True)
    assert store.by_id(test_post.id).is_featured is True


def test_by_author_includes_every_status(store, make_post, test_user, other_user) -> None:
    """Authors see their own pending posts."""
    make_post(test_user, "Aprovado")
    make_post(test_user, "Pendente", approve=False)
    make_post(other_user, "Outro")

    titles = {view.title for view in store.by_author(test_user.id)}
    assert titles == {"Aprovado", "Pendente"}
