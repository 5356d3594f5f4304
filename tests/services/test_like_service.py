"""Tests for the like coordinator."""

import pytest
from sqlalchemy.exc import OperationalError

from bloggy.core.errors import NotFoundError, PartialWriteError
from bloggy.services.like_service import (
    reconcile_all_like_counts,
    reconcile_like_count,
    set_liked,
)


def test_like_increments_count_once(users, posts, other_user, test_post) -> None:
    """Repeating a like leaves the counter at one."""
    first = set_liked(users, posts, acting_user_id=other_user.id, post_id=test_post.id, liked=True)
    second = set_liked(users, posts, acting_user_id=other_user.id, post_id=test_post.id, liked=True)

    assert first == 1
    assert second == 1
    assert users.liked_post_ids(other_user.id) == {test_post.id}
    assert posts.like_count(test_post.id) == 1


def test_like_then_unlike_restores_count(users, posts, author, other_user, test_post) -> None:
    """A like followed by an unlike returns the counter to its start value."""
    set_liked(users, posts, acting_user_id=author.id, post_id=test_post.id, liked=True)
    before = posts.like_count(test_post.id)

    set_liked(users, posts, acting_user_id=other_user.id, post_id=test_post.id, liked=True)
    after = set_liked(users, posts, acting_user_id=other_user.id, post_id=test_post.id, liked=False)

    assert after == before == 1
    assert not users.has_liked(other_user.id, test_post.id)
    assert users.has_liked(author.id, test_post.id)


def test_unlike_without_like_is_noop(users, posts, other_user, test_post) -> None:
    """Unliking a post that was never liked changes nothing."""
    count = set_liked(users, posts, acting_user_id=other_user.id, post_id=test_post.id, liked=False)
    assert count == 0
    assert posts.like_count(test_post.id) == 0


def test_counter_never_goes_negative(users, posts, other_user, test_post) -> None:
    """A stale liked-set entry cannot push the counter below zero."""
    users.add_liked_post(other_user.id, test_post.id)

    count = set_liked(users, posts, acting_user_id=other_user.id, post_id=test_post.id, liked=False)

    assert count == 0
    assert posts.like_count(test_post.id) == 0


def test_like_missing_post_raises_not_found(users, posts, other_user) -> None:
    """Likes against unknown posts are rejected before touching the liked set."""
    with pytest.raises(NotFoundError):
        set_liked(users, posts, acting_user_id=other_user.id, post_id=4242, liked=True)
    assert users.liked_post_ids(other_user.id) == set()


def test_counter_failure_reports_partial_write_and_reconciles(
    monkeypatch, users, posts, other_user, test_post
) -> None:
    """A failed counter update is surfaced and later repaired from liked sets."""

    def broken_adjust(post_id: int, delta: int) -> int:
        raise OperationalError("UPDATE post", {}, Exception("database is locked"))

    monkeypatch.setattr(posts, "adjust_likes", broken_adjust)

    with pytest.raises(PartialWriteError):
        set_liked(users, posts, acting_user_id=other_user.id, post_id=test_post.id, liked=True)

    assert users.has_liked(other_user.id, test_post.id)
    assert posts.like_count(test_post.id) == 0

    monkeypatch.undo()
    assert reconcile_like_count(users, posts, test_post.id) == 1
    assert posts.like_count(test_post.id) == 1


def test_reconcile_all_reports_only_changed_posts(
    users, posts, author, other_user, make_post
) -> None:
    """Bulk reconciliation returns the posts whose counter moved."""
    drifted = make_post(author, title="Drifted")
    healthy = make_post(author, title="Healthy")
    set_liked(users, posts, acting_user_id=other_user.id, post_id=healthy.id, liked=True)
    users.add_liked_post(other_user.id, drifted.id)
    users.add_liked_post(author.id, drifted.id)

    changed = reconcile_all_like_counts(users, posts)

    assert changed == {drifted.id: 2}
    assert posts.like_count(drifted.id) == 2
    assert posts.like_count(healthy.id) == 1
