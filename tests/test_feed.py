# mypy: ignore-errors
# tests/test_feed.py
"""Tests for feed listings, rankings and search."""

import pytest

from petboard.core.errors import NotFound, ValidationError
from petboard.models import Category, PostStatus


@pytest.fixture()
def catalog(make_post, test_user, other_user):
    """Three approved posts (oldest first) and one pending post."""
    return {
        "nap": make_post(test_user, "Soneca da tarde", tags=["Sono"]),
        "walk": make_post(
            other_user,
            "Passeio no parque",
            content="Cachorro feliz na grama",
            category=Category.CACHORROS,
            tags=["passeio", "sol"],
        ),
        "box": make_post(test_user, "Caixa nova", content="100% diversão", tags=["brinquedo"]),
        "pending": make_post(test_user, "Rascunho de soneca", approve=False),
    }


def _titles(views) -> list[str]:
    return [view.title for view in views]


def test_list_posts_returns_approved_newest_first(feed, catalog) -> None:
    """Pending posts never reach the public listing."""
    assert _titles(feed.list_posts()) == ["Caixa nova", "Passeio no parque", "Soneca da tarde"]


def test_list_posts_filters(feed, catalog) -> None:
    """Category and tag filters narrow the listing; tags are normalized."""
    assert _titles(feed.list_posts(category="Cachorros")) == ["Passeio no parque"]
    assert _titles(feed.list_posts(tag="  SONO ")) == ["Soneca da tarde"]
    assert feed.list_posts(tag="inexistente") == []


def test_list_posts_pagination(feed, catalog) -> None:
    """Limit and offset page through the newest-first order."""
    assert _titles(feed.list_posts(limit=1, offset=1)) == ["Passeio no parque"]
    assert _titles(feed.list_posts(offset=2)) == ["Soneca da tarde"]
    assert feed.list_posts(limit=0) == []


@pytest.mark.parametrize("kwargs", [{"limit": -1}, {"offset": -1}, {"category": "Peixes"}, {"status": "draft"}])
def test_list_posts_rejects_bad_arguments(feed, kwargs) -> None:
    """Invalid pagination or filters are validation errors."""
    with pytest.raises(ValidationError):
        feed.list_posts(**kwargs)


def test_list_posts_by_other_status(feed, catalog) -> None:
    """Callers may ask for a specific moderation status."""
    assert _titles(feed.list_posts(status=PostStatus.PENDING)) == ["Rascunho de soneca"]


def test_counts_and_viewer_state(feed, ledger, catalog, test_user, other_user) -> None:
    """Counts are derived from rows and like state is viewer-relative."""
    nap = catalog["nap"]
    ledger.toggle_like(other_user.id, nap.id)
    ledger.add_comment(test_user.id, nap.id, "Zzz")
    ledger.add_comment(other_user.id, nap.id, "Que fofo")

    as_liker = feed.by_id(nap.id, viewer_id=other_user.id)
    as_author = feed.by_id(nap.id, viewer_id=test_user.id)
    anonymous = feed.by_id(nap.id)

    assert as_liker.likes_count == 1
    assert as_liker.comments_count == 2
    assert as_liker.is_liked_by_me is True
    assert as_author.is_liked_by_me is False
    assert anonymous.is_liked_by_me is False
    assert anonymous.likes_count == 1


def test_every_read_path_has_the_same_shape(feed, ledger, store, catalog, other_user) -> None:
    """Listings, rankings and search agree on derived fields."""
    box = catalog["box"]
    ledger.toggle_like(other_user.id, box.id)
    store.set_featured(catalog["walk"].id, True)

    single = feed.by_id(box.id, other_user.id)
    paths = [
        feed.list_posts(viewer_id=other_user.id),
        feed.most_liked(5, other_user.id),
        feed.recent(5, other_user.id),
        feed.search("caixa", other_user.id),
    ]
    for views in paths:
        match = next(view for view in views if view.id == box.id)
        assert match == single


def test_by_id_missing(feed) -> None:
    """An unknown id raises NotFound."""
    with pytest.raises(NotFound):
        feed.by_id(31337)


def test_most_liked_orders_by_likes(feed, ledger, catalog, test_user, other_user, make_user) -> None:
    """Only liked, approved posts are ranked, most likes first."""
    third = make_user("Carla")
    for user in (test_user, other_user, third):
        ledger.toggle_like(user.id, catalog["walk"].id)
    ledger.toggle_like(third.id, catalog["nap"].id)
    ledger.toggle_like(third.id, catalog["pending"].id)

    ranked = feed.most_liked(5)

    assert _titles(ranked) == ["Passeio no parque", "Soneca da tarde"]
    assert [view.likes_count for view in ranked] == [3, 1]
    assert _titles(feed.most_liked(1)) == ["Passeio no parque"]
    assert feed.most_liked(0) == []


def test_featured_and_recent_are_exclusive(feed, store, catalog) -> None:
    """The featured post never shows up among the recent posts."""
    assert feed.featured() is None

    store.set_featured(catalog["box"].id, True)

    featured = feed.featured()
    recent = feed.recent(3)
    assert featured.title == "Caixa nova"
    assert featured.id not in {view.id for view in recent}
    assert _titles(recent) == ["Passeio no parque", "Soneca da tarde"]


def test_recent_respects_limit(feed, catalog) -> None:
    """Recent returns at most ``limit`` approved posts."""
    assert _titles(feed.recent(2)) == ["Caixa nova", "Passeio no parque"]
    assert feed.recent(0) == []
    with pytest.raises(ValidationError):
        feed.recent(-1)


@pytest.mark.parametrize("term", ["", "   ", None])
def test_search_blank_term_is_empty(feed, catalog, term) -> None:
    """Blank searches return nothing instead of failing."""
    assert feed.search(term) == []


def test_search_matches_title_content_and_tags(feed, catalog) -> None:
    """Search is case-insensitive and skips unapproved posts."""
    assert _titles(feed.search("SONECA")) == ["Soneca da tarde"]
    assert _titles(feed.search("grama")) == ["Passeio no parque"]
    assert _titles(feed.search("brinquedo")) == ["Caixa nova"]


def test_search_escapes_wildcards(feed, catalog) -> None:
    """LIKE wildcards in the term are matched literally."""
    assert _titles(feed.search("100%")) == ["Caixa nova"]
    assert feed.search("_") == []
    assert feed.search("%") != []


def test_search_limit(feed, catalog) -> None:
    """Search honours its limit."""
    assert len(feed.search("a", limit=2)) == 2


@pytest.mark.parametrize("tag", ["", "   "])
def test_blank_tag_filter_is_ignored(feed, catalog, tag) -> None:
    """A blank tag means no tag filter, not a filter on the empty name."""
    assert _titles(feed.list_posts(tag=tag)) == _titles(feed.list_posts())


def test_by_author_status_filter(feed, catalog, test_user) -> None:
    """Author listings can be narrowed to one moderation status."""
    assert _titles(feed.by_author(test_user.id)) == ["Rascunho de soneca", "Caixa nova", "Soneca da tarde"]
    assert _titles(feed.by_author(test_user.id, status=PostStatus.APPROVED)) == ["Caixa nova", "Soneca da tarde"]
    with pytest.raises(ValidationError):
        feed.by_author(test_user.id, status="draft")
